import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import Field

import config
import qr
from auth_routes import generate_temp_password, public_user
from database import create_document, ensure_indexes, get_db, get_documents, now, oid, serialize_doc
from errors import NotFoundError, ValidationError
from orders import OrderStatus
from permissions import authorize
from schemas import ROLES, USER_BLOCKED, USER_STATUSES, CamelModel, Product as ProductSchema, QRCode
from security import Identity, hash_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin")


# Request models
class UserUpdateRequest(CamelModel):
    user_id: Optional[str] = Field(None, alias="userId")
    status: Optional[str] = None
    role: Optional[str] = None
    reset_password: bool = Field(False, alias="resetPassword")


class ProductCreateRequest(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    image: Optional[str] = None
    category: Optional[str] = None
    stock: int = 0
    metadata: Optional[Dict[str, Any]] = None


class ProductUpdateRequest(ProductCreateRequest):
    product_id: Optional[str] = Field(None, alias="productId")
    stock: Optional[int] = None


class ProductDeleteRequest(CamelModel):
    product_id: Optional[str] = Field(None, alias="productId")


class QRGenerateRequest(CamelModel):
    custom_code: Optional[str] = Field(None, alias="customCode")
    product_name: Optional[str] = Field(None, alias="productName")
    product_description: Optional[str] = Field(None, alias="productDescription")
    creation_date: Optional[datetime] = Field(None, alias="creationDate")


def default_metadata() -> Dict[str, Any]:
    return {
        "production_date": now().date().isoformat(),
        "manufacturer": "TechQuality",
        "warranty": "1 year",
        "purpose": "General use",
    }


# Users
@router.get("/users")
def list_users(identity: Identity = Depends(authorize)):
    return {"users": [public_user(u) for u in get_documents("user", sort=[("created_at", -1)])]}


@router.patch("/users")
def update_user(req: UserUpdateRequest, identity: Identity = Depends(authorize)):
    if not req.user_id:
        raise ValidationError("User ID is required")

    updates: Dict[str, Any] = {"updated_at": now()}
    if req.status:
        if req.status not in USER_STATUSES:
            raise ValidationError("Invalid status. Must be active or blocked")
        updates["status"] = req.status
    if req.role:
        if req.role not in ROLES:
            raise ValidationError("Invalid role. Must be customer or admin")
        updates["role"] = req.role

    temp_password = None
    if req.reset_password:
        temp_password = generate_temp_password()
        updates["password_hash"] = hash_password(temp_password)
        updates["password_reset_required"] = True

    result = get_db()["user"].update_one({"_id": oid(req.user_id)}, {"$set": updates})
    if result.matched_count == 0:
        raise NotFoundError("User not found")

    logger.info("User %s updated by %s: %s", req.user_id, identity.email,
                sorted(k for k in updates if k not in ("updated_at", "password_hash")))

    if temp_password is not None:
        logger.warning("Temporary password issued by admin for user %s", req.user_id)
        body = {"success": True, "message": "Password reset successfully"}
        if config.EXPOSE_TEMP_PASSWORDS:
            body["temp_password"] = temp_password
        return body

    message = "User updated successfully"
    if req.status:
        message = f"User {'blocked' if req.status == USER_BLOCKED else 'unblocked'} successfully"
    if req.role:
        message = "User role updated successfully"
    return {"success": True, "message": message}


# Stats
@router.get("/stats")
def admin_stats(identity: Identity = Depends(authorize)):
    db = get_db()
    orders = db["order"]
    stats = {
        "total_products": db["product"].count_documents({}),
        "total_users": db["user"].count_documents({}),
        "total_orders": orders.count_documents({}),
        "pending_orders": orders.count_documents({"status": OrderStatus.PENDING.value}),
        "received_orders": orders.count_documents({"status": OrderStatus.RECEIVED.value}),
        "completed_orders": orders.count_documents({"status": OrderStatus.COMPLETED.value}),
    }
    return {"success": True, "stats": stats}


# Products
@router.post("/products", status_code=201)
def create_product(req: ProductCreateRequest, identity: Identity = Depends(authorize)):
    if not req.name or not req.description or not req.price or not req.image:
        raise ValidationError("Name, description, price, and image are required")

    product = ProductSchema(
        name=req.name,
        description=req.description,
        price=req.price,
        image=req.image,
        category=req.category or "General",
        stock=req.stock,
        metadata=req.metadata or default_metadata(),
    )
    product_id = create_document("product", product)
    logger.info("Product %s created by %s", product_id, identity.email)
    created = get_db()["product"].find_one({"_id": oid(product_id)})
    return {"success": True, "message": "Product added successfully", "product": serialize_doc(created)}


@router.put("/products")
def update_product(req: ProductUpdateRequest, identity: Identity = Depends(authorize)):
    if not req.product_id:
        raise ValidationError("Product ID is required")

    updates = {k: v for k, v in req.model_dump(exclude={"product_id"}).items() if v is not None}
    if "price" in updates and updates["price"] < 0:
        raise ValidationError("Price must not be negative")
    updates["updated_at"] = now()

    result = get_db()["product"].update_one({"_id": oid(req.product_id)}, {"$set": updates})
    if result.matched_count == 0:
        raise NotFoundError("Product not found")
    return {"success": True, "message": "Product updated successfully"}


@router.delete("/products")
def delete_product(req: ProductDeleteRequest, identity: Identity = Depends(authorize)):
    if not req.product_id:
        raise ValidationError("Product ID is required")
    result = get_db()["product"].delete_one({"_id": oid(req.product_id)})
    if result.deleted_count == 0:
        raise NotFoundError("Product not found")
    logger.info("Product %s deleted by %s", req.product_id, identity.email)
    return {"success": True, "message": "Product deleted successfully"}


# QR codes
@router.post("/qr-generate")
def generate_qr(req: QRGenerateRequest, identity: Identity = Depends(authorize)):
    if not (req.custom_code and req.product_name and req.product_description and req.creation_date):
        raise ValidationError("All fields are required")
    try:
        value = qr.new_qr_value(req.custom_code)
    except ValueError as e:
        raise ValidationError(str(e))

    record = QRCode(
        qr_code=value,
        custom_code=qr.normalize_custom_code(req.custom_code),
        product_name=req.product_name,
        product_description=req.product_description,
        created_at=req.creation_date,
        created_by=identity.email or "Admin",
    )
    record_id = create_document("qr_code", record)
    return {
        "success": True,
        "message": "QR code generated successfully",
        "qrCode": value,
        "qrImage": qr.qr_data_url(value),
        "data": {
            "id": record_id,
            "qr_code": value,
            "product_name": record.product_name,
            "created_at": record.created_at.isoformat(),
        },
    }


# Maintenance
@router.post("/setup-indexes")
def setup_indexes(identity: Identity = Depends(authorize)):
    return {"success": True, "message": "Database indexes created successfully", "results": ensure_indexes()}
