"""
Database Schemas for the storefront

Each Pydantic model maps to a MongoDB collection (lowercased class name,
snake_case for multi-word names).

Collections:
- user
- product
- order
- review
- qr_code
- team / team_goals
- contact
- cart
"""
from datetime import datetime
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, EmailStr

ROLE_CUSTOMER = "customer"
ROLE_ADMIN = "admin"
ROLES = (ROLE_CUSTOMER, ROLE_ADMIN)

USER_ACTIVE = "active"
USER_BLOCKED = "blocked"
USER_STATUSES = (USER_ACTIVE, USER_BLOCKED)


class CamelModel(BaseModel):
    """Accepts both snake_case field names and their camelCase aliases."""
    model_config = ConfigDict(populate_by_name=True)


class User(BaseModel):
    """
    Users collection schema
    Collection name: "user"
    """
    name: str = Field(..., description="Full name")
    email: EmailStr = Field(..., description="Lower-cased email address, unique")
    password_hash: str = Field(..., description="BCrypt password hash")
    phone: str = Field("", description="Contact phone")
    address: str = Field("", description="Shipping address")
    role: str = Field(ROLE_CUSTOMER, description="customer | admin")
    status: str = Field(USER_ACTIVE, description="active | blocked")
    password_reset_required: bool = Field(False, description="Set after a temporary password is issued")


class ProductMetadata(CamelModel):
    production_date: Optional[str] = Field(None, alias="productionDate")
    manufacturer: Optional[str] = None
    warranty: Optional[str] = None
    purpose: Optional[str] = None


class Product(BaseModel):
    """
    Products collection schema
    Collection name: "product"
    """
    name: str = Field(..., description="Product name")
    description: str = Field(..., description="Product description")
    price: float = Field(..., ge=0, description="Unit price")
    image: str = Field(..., description="Image URL or base64 data URL")
    category: str = Field("General", description="Catalog category")
    stock: int = Field(0, ge=0, description="Units in stock")
    qr_code: Optional[str] = Field(None, description="Printed QR code value")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Production details")


class OrderItem(CamelModel):
    product_id: str = Field(..., alias="productId")
    name: str
    price: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)
    image: Optional[str] = None


class ShippingInfo(CamelModel):
    name: str
    email: Optional[str] = None
    phone: str
    address: str
    city: Optional[str] = None
    payment_method: str = Field("cod", alias="paymentMethod")
    notes: Optional[str] = None


class Order(BaseModel):
    """
    Orders collection schema
    Collection name: "order"
    """
    order_id: str = Field(..., description="ORD-<epoch ms>-<6 hex>, unique")
    user_id: str
    user_name: str
    user_email: str
    items: List[OrderItem]
    shipping_info: ShippingInfo
    total_amount: float = Field(..., ge=0)
    status: str = Field("pending", description="pending | received | completed | rejected | cancelled")
    admin_notes: str = ""


class Review(BaseModel):
    """
    Reviews collection schema
    Collection name: "review"
    """
    product_id: str
    user_id: str
    user_name: str
    rating: int = Field(..., ge=1, le=5)
    comment: str


class QRCode(BaseModel):
    """
    QR codes collection schema, independent from products
    Collection name: "qr_code"
    """
    qr_code: str = Field(..., description="ViDa-<D|N|T>-<suffix>")
    custom_code: str
    product_name: str
    product_description: str
    created_at: datetime
    created_by: str


class TeamMember(BaseModel):
    name: str
    role: str
    bio: str
    email: Optional[str] = None
    image: Optional[str] = None


class TeamGoals(BaseModel):
    mission: str
    vision: str
    values: List[str] = Field(default_factory=list)


class ContactMessage(BaseModel):
    name: str
    email: EmailStr
    subject: str = "No subject"
    message: str
    submitted_at: datetime


class CartItem(CamelModel):
    product_id: str = Field(..., alias="productId")
    name: str
    price: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)
    image: Optional[str] = None


class Cart(BaseModel):
    """
    Carts collection schema
    Collection name: "cart"
    """
    key: str = Field(..., description="user:<id> or guest:<token>")
    items: List[CartItem] = Field(default_factory=list)
