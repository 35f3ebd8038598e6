import logging
import re
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import EmailStr, Field

import config
import qr
from database import create_document, get_db, get_documents, now, oid, serialize_doc
from errors import AuthorizationError, NotFoundError, ValidationError
from orders import OrderStatus
from permissions import authorize
from schemas import ROLE_ADMIN, CamelModel, ContactMessage, Review as ReviewSchema
from security import Identity
from seed import DEFAULT_GOALS, DEFAULT_TEAM

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

# Orders in these states count as a purchase for reviews
PURCHASED_STATUSES = [OrderStatus.RECEIVED.value, OrderStatus.COMPLETED.value]


class ReviewCreateRequest(CamelModel):
    product_id: Optional[str] = Field(None, alias="productId")
    rating: Optional[int] = None
    comment: Optional[str] = None


class ReviewDeleteRequest(CamelModel):
    review_id: Optional[str] = Field(None, alias="reviewId")


class ContactRequest(CamelModel):
    name: str
    email: EmailStr
    subject: Optional[str] = None
    message: str


def find_product(product_id: str, projection: Optional[Dict[str, Any]] = None) -> dict:
    product = get_db()["product"].find_one({"_id": oid(product_id)}, projection)
    if not product:
        raise NotFoundError("Product not found")
    return product


# Products
@router.get("/products")
def list_products(response: Response, search: Optional[str] = None, includeImages: bool = False):
    # Catalog edits must show up immediately
    response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, proxy-revalidate"

    query: Dict[str, Any] = {}
    if search:
        pattern = re.escape(search)
        query["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
        ]
    projection = None if includeImages else {"image": 0}
    products = get_documents("product", query, projection=projection)
    return {"success": True, "products": [serialize_doc(p) for p in products]}


@router.get("/products/{product_id}")
def get_product(product_id: str):
    return serialize_doc(find_product(product_id))


@router.get("/products/{product_id}/image")
def get_product_image(product_id: str, response: Response):
    product = find_product(product_id, {"image": 1, "name": 1})
    if not product.get("image"):
        raise NotFoundError("Image not found")
    response.headers["Cache-Control"] = "public, max-age=31536000, immutable"
    return {"image": product["image"]}


# Reviews
@router.get("/reviews")
def list_reviews(productId: Optional[str] = None):
    if not productId:
        raise ValidationError("Product ID is required")
    reviews = get_documents("review", {"product_id": productId}, sort=[("created_at", -1)])
    return {"reviews": [serialize_doc(r) for r in reviews]}


@router.post("/reviews", status_code=201)
def create_review(req: ReviewCreateRequest, identity: Identity = Depends(authorize)):
    if not req.product_id or req.rating is None or not (req.comment or "").strip():
        raise ValidationError("Missing required fields")
    if req.rating < 1 or req.rating > 5:
        raise ValidationError("Rating must be between 1 and 5")

    db = get_db()
    if db["review"].find_one({"product_id": req.product_id, "user_id": identity.user_id}):
        raise ValidationError("You have already reviewed this product")

    review = ReviewSchema(
        product_id=req.product_id,
        user_id=identity.user_id,
        user_name=identity.name,
        rating=req.rating,
        comment=req.comment.strip(),
    )
    review_id = create_document("review", review)
    created = db["review"].find_one({"_id": oid(review_id)})
    return {"message": "Review created successfully", "review": serialize_doc(created)}


@router.delete("/reviews")
def delete_review(req: ReviewDeleteRequest, identity: Identity = Depends(authorize)):
    if not req.review_id:
        raise ValidationError("Review ID is required")

    db = get_db()
    review = db["review"].find_one({"_id": oid(req.review_id)})
    if not review:
        raise NotFoundError("Review not found")
    if review["user_id"] != identity.user_id and identity.role != ROLE_ADMIN:
        raise AuthorizationError("You do not have permission to delete this review")

    db["review"].delete_one({"_id": review["_id"]})
    return {"success": True, "message": "Review deleted successfully"}


@router.get("/reviews/check-purchase")
def check_purchase(productId: Optional[str] = None, identity: Identity = Depends(authorize)):
    if not productId:
        raise ValidationError("Product ID is required")
    found = get_db()["order"].find_one({
        "user_id": identity.user_id,
        "status": {"$in": PURCHASED_STATUSES},
        "items.product_id": productId,
    })
    return {"hasPurchased": found is not None}


# QR codes
@router.get("/qr/search")
def search_qr(code: Optional[str] = None):
    if not code:
        raise ValidationError("QR code value is required")
    item = get_db()["qr_code"].find_one({"qr_code": code})
    if not item:
        raise NotFoundError("QR code not found")
    return {"success": True, "data": serialize_doc(item)}


@router.get("/qr/generate")
def product_qr(productId: Optional[str] = None):
    if not productId:
        raise ValidationError("Product ID is required")
    product = find_product(productId, {"name": 1, "qr_code": 1})
    product_url = f"{config.SITE_URL}/products/{productId}"
    return {
        "qrCode": qr.qr_data_url(product_url),
        "qrCodeValue": product.get("qr_code"),
        "productUrl": product_url,
    }


# Team
@router.get("/team")
def get_team():
    db = get_db()
    members = [serialize_doc(m) for m in db["team"].find({})]
    goals = db["team_goals"].find_one({}, {"_id": 0, "created_at": 0, "updated_at": 0})
    if not members:
        members = [dict(m, id=i + 1) for i, m in enumerate(DEFAULT_TEAM)]
    return {"members": members, "goals": goals or DEFAULT_GOALS}


@router.post("/team/reset")
def reset_team(identity: Identity = Depends(authorize)):
    get_db()["team"].delete_many({})
    logger.info("Team members cleared by %s", identity.email)
    return {"success": True, "message": "Team data cleared. The default roster is served until members are added."}


# Contact
@router.post("/contact")
def contact(req: ContactRequest):
    if not req.name.strip() or not req.message.strip():
        raise ValidationError("Name, email, and message are required")
    submission = ContactMessage(
        name=req.name.strip(),
        email=req.email,
        subject=req.subject or "No subject",
        message=req.message,
        submitted_at=now(),
    )
    create_document("contact", submission)
    return {"success": True, "message": "Thank you for contacting us! We will get back to you soon."}
