import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import Field

import config
import orders
from database import get_db, now, serialize_doc
from errors import NotFoundError, ValidationError
from permissions import authorize
from schemas import ROLE_ADMIN, CamelModel, Order as OrderSchema, OrderItem, ShippingInfo
from security import Identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


class OrderCreateRequest(CamelModel):
    items: List[OrderItem] = Field(default_factory=list)
    shipping_info: Optional[ShippingInfo] = Field(None, alias="shippingInfo")
    total_amount: Optional[float] = Field(None, alias="totalAmount")


class OrderUpdateRequest(CamelModel):
    order_id: Optional[str] = Field(None, alias="orderId")
    status: Optional[str] = None
    admin_notes: Optional[str] = Field(None, alias="adminNotes")
    action: Optional[str] = None


@router.get("/orders")
def list_orders(identity: Identity = Depends(authorize)):
    query = {} if identity.role == ROLE_ADMIN else {"user_id": identity.user_id}
    docs = get_db()["order"].find(query).sort("created_at", -1)
    return {"orders": [serialize_doc(d) for d in docs]}


@router.post("/orders", status_code=201)
def create_order(req: OrderCreateRequest, identity: Identity = Depends(authorize)):
    if not req.items:
        raise ValidationError("Order must contain items")
    if req.shipping_info is None or not req.total_amount:
        raise ValidationError("Shipping info and total amount are required")
    if req.total_amount < 0:
        raise ValidationError("Total amount must not be negative")

    stamp = now()
    order = OrderSchema(
        order_id=orders.new_order_id(),
        user_id=identity.user_id,
        user_name=identity.name,
        user_email=identity.email,
        items=req.items,
        shipping_info=req.shipping_info,
        total_amount=float(req.total_amount),
        status=orders.INITIAL_STATUS.value,
        admin_notes="",
    )
    doc = {**order.model_dump(), "created_at": stamp, "updated_at": stamp}
    get_db()["order"].insert_one(doc)
    logger.info("Order %s placed by %s (%.2f)", order.order_id, identity.email, order.total_amount)
    return {"success": True, "message": "Order placed successfully", "order": serialize_doc(doc)}


@router.patch("/orders")
def update_order(req: OrderUpdateRequest, identity: Identity = Depends(authorize)):
    if not req.order_id:
        raise ValidationError("Order ID is required")

    db = get_db()
    order = db["order"].find_one({"order_id": req.order_id})
    if not order:
        raise NotFoundError("Order not found")

    if identity.role == ROLE_ADMIN:
        updates = orders.admin_update(order, status=req.status, admin_notes=req.admin_notes,
                                      policy=config.ORDER_STATUS_POLICY)
        message = "Order updated successfully"
    else:
        updates = orders.customer_update(order, identity.user_id, req.action)
        message = "Order cancelled successfully"

    db["order"].update_one({"order_id": req.order_id}, {"$set": updates})
    logger.info("Order %s updated by %s: %s", req.order_id, identity.email, updates.get("status", "notes"))
    return {"success": True, "message": message}
