"""
Database Schemas

Pydantic models for the storefront records and request bodies.
Each stored record lives in a MongoDB collection named after the
lowercased model (Profile -> "profile", Address -> "address", ...).
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

RoleName = Literal["user", "pending_admin", "admin"]
OrderStatus = Literal["Processing", "Shipped", "Delivered", "Cancelled"]


# ------------ Identity & Profile ------------
class SignUpInput(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: str = ""
    last_name: str = ""
    request_admin: bool = Field(False, description="Ask for admin access (role pending_admin)")


class SignInInput(BaseModel):
    email: EmailStr
    password: str


class Identity(BaseModel):
    email: EmailStr
    password_hash: str
    metadata: dict = Field(default_factory=dict, description="first_name / last_name given at sign-up")


class Profile(BaseModel):
    first_name: str = ""
    last_name: str = ""
    role: RoleName = "user"


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None


# ------------ Catalog ------------
class Product(BaseModel):
    name: str
    price: float = Field(..., ge=0)
    old_price: Optional[float] = Field(None, ge=0)
    category: str
    image_url: Optional[str] = None
    image_url2: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    long_description: Optional[str] = None
    in_stock: bool = True
    is_sale: bool = False
    is_new: bool = False
    brand: Optional[str] = None
    color: List[str] = Field(default_factory=list)
    size: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    rating: float = Field(0, ge=0, le=5)
    review_count: int = Field(0, ge=0)


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    old_price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    image_url: Optional[str] = None
    image_url2: Optional[str] = None
    images: Optional[List[str]] = None
    description: Optional[str] = None
    long_description: Optional[str] = None
    in_stock: Optional[bool] = None
    is_sale: Optional[bool] = None
    is_new: Optional[bool] = None
    brand: Optional[str] = None
    color: Optional[List[str]] = None
    size: Optional[List[str]] = None
    tags: Optional[List[str]] = None


# ------------ Cart & Wishlist rows ------------
class CartLine(BaseModel):
    """A product snapshot plus quantity; extra product fields are kept."""
    model_config = ConfigDict(extra="allow")

    id: str
    quantity: int = Field(1, ge=1)


class WishlistLine(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str


class CartReplace(BaseModel):
    items: List[CartLine] = Field(default_factory=list)


class WishlistReplace(BaseModel):
    items: List[WishlistLine] = Field(default_factory=list)


# ------------ Addresses ------------
class Address(BaseModel):
    first_name: str
    last_name: str
    address: str
    apartment: Optional[str] = None
    city: str
    state: Optional[str] = None
    zip: str
    country: str
    phone: Optional[str] = None
    is_default: bool = False


class ShippingAddress(BaseModel):
    first_name: str
    last_name: str
    address: str
    apartment: Optional[str] = None
    city: str
    state: Optional[str] = None
    zip: str
    country: str
    phone: Optional[str] = None


# ------------ Orders ------------
class OrderLine(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)


class OrderCreate(BaseModel):
    items: List[OrderLine] = Field(..., min_length=1)
    shipping_address: ShippingAddress


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class Order(BaseModel):
    order_number: str
    user_id: str
    items: List[dict]
    shipping_address: dict
    total: float = Field(..., ge=0)
    status: OrderStatus = "Processing"
    created_at: Optional[datetime] = None


# ------------ Reviews ------------
class ReviewCreate(BaseModel):
    product_id: str
    rating: int = Field(..., ge=1, le=5)
    text: str = Field(..., min_length=1)


class ReviewApproval(BaseModel):
    is_approved: bool


class Review(BaseModel):
    product_id: str
    user_id: str
    author_name: str
    rating: int = Field(..., ge=1, le=5)
    text: str
    is_approved: bool = False


# ------------ Visitors ------------
class Visitor(BaseModel):
    ip_address: str = "N/A"
    user_agent: Optional[str] = None
    referrer: str = "Direct"
    device_type: str = "Unknown"
    browser: str = "Unknown"
    os: str = "Unknown"


# ------------ Settings ------------
class GlobalSettings(BaseModel):
    visitor_limit: int = Field(1000, ge=1)
