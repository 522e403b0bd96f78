import logging
import os
import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Depends, Header, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from bson import ObjectId
from jose import JWTError, jwt
from pymongo.errors import PyMongoError
from passlib.context import CryptContext

import roles
from database import db, create_document, get_documents
from schemas import (
    SignUpInput, SignInInput, Identity as IdentitySchema,
    Profile as ProfileSchema, ProfileUpdate,
    Product as ProductSchema, ProductUpdate,
    CartReplace, WishlistReplace,
    Address as AddressSchema,
    OrderCreate, OrderStatusUpdate, Order as OrderSchema,
    ReviewCreate, ReviewApproval, Review as ReviewSchema,
    Visitor as VisitorSchema,
    GlobalSettings as GlobalSettingsSchema,
)
from visitors import visitor_from_headers

logger = logging.getLogger(__name__)

# JWT Config
SECRET_KEY = os.getenv("JWT_SECRET", "dev-secret-change")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7))  # 7 days
BOOTSTRAP_ADMIN_EMAIL = os.getenv("BOOTSTRAP_ADMIN_EMAIL", "").strip().lower()

STORE_COLLECTIONS = (
    "identity", "profile", "product", "cart_item", "wishlist_item",
    "address", "order", "review", "visitor", "settings",
)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

app = FastAPI(title="Mobixo Storefront API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Utilities

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")


def to_obj_id(id_str: str, what: str = "id") -> ObjectId:
    if not id_str or not ObjectId.is_valid(id_str):
        raise HTTPException(status_code=400, detail=f"Invalid {what}")
    return ObjectId(id_str)


def serialize_doc(doc: Dict[str, Any]) -> Dict[str, Any]:
    if not doc:
        return doc
    doc = dict(doc)
    _id = doc.get("_id")
    if isinstance(_id, ObjectId):
        doc["id"] = str(_id)
        del doc["_id"]
    for k, v in list(doc.items()):
        if isinstance(v, ObjectId):
            doc[k] = str(v)
        elif isinstance(v, datetime):
            doc[k] = v.isoformat()
    return doc


def public_identity(identity: dict) -> Dict[str, Any]:
    return {"id": str(identity["_id"]), "email": identity["email"], "metadata": identity.get("metadata", {})}


# Auth models
class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Dict[str, Any]


# Dependencies

def get_token_claims(authorization: Optional[str] = Header(default=None)) -> dict:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")
    payload = decode_token(authorization.split(" ", 1)[1])
    if not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token")
    if db["revoked_token"].find_one({"jti": payload.get("jti")}):
        raise HTTPException(status_code=401, detail="Session has been signed out")
    return payload


def get_current_user(claims: dict = Depends(get_token_claims)) -> dict:
    user_id = claims["sub"]
    identity = db["identity"].find_one({"_id": ObjectId(user_id)}) if ObjectId.is_valid(user_id) else None
    if not identity:
        raise HTTPException(status_code=401, detail="User not found")
    return public_identity(identity)


def get_current_admin(current_user: dict = Depends(get_current_user)) -> dict:
    # Role checked against the stored profile, never the token
    profile = db["profile"].find_one({"_id": ObjectId(current_user["id"])})
    if not profile or profile.get("role") != roles.ADMIN:
        raise HTTPException(status_code=403, detail="Admins only")
    return current_user


def require_self_or_admin(user_id: str, current_user: dict):
    if user_id == current_user["id"]:
        return
    profile = db["profile"].find_one({"_id": ObjectId(current_user["id"])})
    if not profile or profile.get("role") != roles.ADMIN:
        raise HTTPException(status_code=403, detail="Forbidden")


# Routes
@app.get("/")
def read_root():
    return {"message": "Mobixo Storefront API"}


@app.get("/health")
def health():
    """Report database reachability and the size of each storefront collection."""
    try:
        counts = {name: db[name].estimated_document_count() for name in STORE_COLLECTIONS}
    except PyMongoError as e:
        logger.error("Health check failed: %s", e)
        raise HTTPException(status_code=503, detail="Database unavailable")
    return {"status": "ok", "database": db.name, "collections": counts}


# Auth
@app.post("/auth/signup", response_model=TokenResponse)
def signup(payload: SignUpInput):
    email = payload.email.lower()
    if db["identity"].find_one({"email": email}):
        raise HTTPException(status_code=400, detail="Email already registered")
    identity = IdentitySchema(
        email=email,
        password_hash=hash_password(payload.password),
        metadata={"first_name": payload.first_name, "last_name": payload.last_name},
    )
    user_id = create_document("identity", identity)

    role = None
    if email == BOOTSTRAP_ADMIN_EMAIL:
        role = roles.ADMIN
    elif payload.request_admin:
        role = roles.transition(roles.USER, roles.REQUEST_ADMIN)
    if role:
        profile = ProfileSchema(first_name=payload.first_name, last_name=payload.last_name, role=role)
        create_document("profile", {"_id": ObjectId(user_id), **profile.model_dump()})
        logger.info("Sign-up %s created with role %s", email, role)

    token = create_access_token({"sub": user_id, "email": email})
    user = db["identity"].find_one({"_id": ObjectId(user_id)})
    return TokenResponse(access_token=token, user=public_identity(user))


@app.post("/auth/signin", response_model=TokenResponse)
def signin(payload: SignInInput):
    identity = db["identity"].find_one({"email": payload.email.lower()})
    if not identity or not verify_password(payload.password, identity.get("password_hash", "")):
        raise HTTPException(status_code=400, detail="Invalid email or password")
    token = create_access_token({"sub": str(identity["_id"]), "email": identity["email"]})
    return TokenResponse(access_token=token, user=public_identity(identity))


@app.post("/auth/signout")
def signout(claims: dict = Depends(get_token_claims)):
    db["revoked_token"].insert_one({
        "jti": claims.get("jti"),
        "user_id": claims["sub"],
        "revoked_at": datetime.now(timezone.utc),
    })
    return {"ok": True}


@app.get("/auth/session")
def current_session(current_user: dict = Depends(get_current_user)):
    return current_user


# Profiles
def profile_out(doc: dict, identity: Optional[dict] = None) -> Dict[str, Any]:
    profile = serialize_doc(doc)
    if identity is None:
        identity = db["identity"].find_one({"_id": doc["_id"]})
    profile["email"] = identity["email"] if identity else None
    return profile


@app.get("/profiles/{user_id}")
def get_profile(user_id: str, current_user: dict = Depends(get_current_user)):
    require_self_or_admin(user_id, current_user)
    doc = db["profile"].find_one({"_id": to_obj_id(user_id, "user id")})
    if not doc:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile_out(doc)


@app.post("/profiles")
def create_profile(current_user: dict = Depends(get_current_user)):
    oid = ObjectId(current_user["id"])
    if db["profile"].find_one({"_id": oid}):
        raise HTTPException(status_code=409, detail="Profile already exists")
    metadata = current_user.get("metadata") or {}
    profile = ProfileSchema(
        first_name=metadata.get("first_name") or "",
        last_name=metadata.get("last_name") or "",
    )
    create_document("profile", {"_id": oid, **profile.model_dump()})
    return profile_out(db["profile"].find_one({"_id": oid}))


@app.patch("/profiles/{user_id}")
def update_profile(user_id: str, data: ProfileUpdate, current_user: dict = Depends(get_current_user)):
    if user_id != current_user["id"]:
        raise HTTPException(status_code=403, detail="Forbidden")
    update_dict = data.model_dump(exclude_unset=True)
    if not update_dict:
        raise HTTPException(status_code=400, detail="No fields to update")
    update_dict["updated_at"] = datetime.now(timezone.utc)
    oid = to_obj_id(user_id, "user id")
    res = db["profile"].update_one({"_id": oid}, {"$set": update_dict})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile_out(db["profile"].find_one({"_id": oid}))


def apply_role_event(user_id: str, event: str) -> Dict[str, Any]:
    oid = to_obj_id(user_id, "user id")
    doc = db["profile"].find_one({"_id": oid})
    if not doc:
        raise HTTPException(status_code=404, detail="Profile not found")
    try:
        new_role = roles.transition(doc.get("role", roles.USER), event)
    except roles.RoleTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    db["profile"].update_one({"_id": oid}, {"$set": {"role": new_role, "updated_at": datetime.now(timezone.utc)}})
    logger.info("Profile %s: %s -> %s (%s)", user_id, doc.get("role"), new_role, event)
    return profile_out(db["profile"].find_one({"_id": oid}))


@app.post("/profiles/{user_id}/request-admin")
def request_admin(user_id: str, current_user: dict = Depends(get_current_user)):
    if user_id != current_user["id"]:
        raise HTTPException(status_code=403, detail="Forbidden")
    return apply_role_event(user_id, roles.REQUEST_ADMIN)


# Products
@app.get("/products")
def list_products(category: Optional[str] = None):
    query: Dict[str, Any] = {}
    if category:
        query["category"] = category
    return [serialize_doc(d) for d in get_documents("product", query, sort=[("created_at", -1)])]


@app.get("/products/{product_id}")
def get_product(product_id: str):
    product = db["product"].find_one({"_id": to_obj_id(product_id, "product id")})
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return serialize_doc(product)


@app.post("/products")
def create_product(data: ProductSchema, _: dict = Depends(get_current_admin)):
    product_id = create_document("product", data)
    return serialize_doc(db["product"].find_one({"_id": ObjectId(product_id)}))


@app.put("/products/{product_id}")
def update_product(product_id: str, data: ProductUpdate, _: dict = Depends(get_current_admin)):
    obj_id = to_obj_id(product_id, "product id")
    update_dict = {k: v for k, v in data.model_dump(exclude_unset=True).items()}
    if not update_dict:
        raise HTTPException(status_code=400, detail="No fields to update")
    update_dict["updated_at"] = datetime.now(timezone.utc)
    res = db["product"].update_one({"_id": obj_id}, {"$set": update_dict})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    return serialize_doc(db["product"].find_one({"_id": obj_id}))


@app.delete("/products/{product_id}")
def delete_product(product_id: str, _: dict = Depends(get_current_admin)):
    res = db["product"].delete_one({"_id": to_obj_id(product_id, "product id")})
    if res.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"ok": True}


# Cart & wishlist rows

def read_rows(collection: str, user_id: str) -> List[Dict[str, Any]]:
    rows = db[collection].find({"user_id": user_id}).sort("position", 1)
    items = []
    for row in rows:
        item = dict(row.get("product", {}))
        item["id"] = row["product_id"]
        if "quantity" in row:
            item["quantity"] = row["quantity"]
        items.append(item)
    return items


def replace_rows(collection: str, user_id: str, items: List[dict], with_quantity: bool) -> List[Dict[str, Any]]:
    merged: Dict[str, dict] = {}
    for item in items:
        existing = merged.get(item["id"])
        if existing is None:
            merged[item["id"]] = dict(item)
        elif with_quantity:
            existing["quantity"] += item["quantity"]
    # Delete-then-insert; not atomic
    db[collection].delete_many({"user_id": user_id})
    rows = []
    now = datetime.now(timezone.utc)
    for position, item in enumerate(merged.values()):
        product = {k: v for k, v in item.items() if k not in ("id", "quantity")}
        row = {"user_id": user_id, "product_id": item["id"], "product": product, "position": position, "updated_at": now}
        if with_quantity:
            row["quantity"] = item["quantity"]
        rows.append(row)
    if rows:
        db[collection].insert_many(rows)
    return read_rows(collection, user_id)


@app.get("/cart")
def get_cart(current_user: dict = Depends(get_current_user)):
    return read_rows("cart_item", current_user["id"])


@app.put("/cart")
def replace_cart(payload: CartReplace, current_user: dict = Depends(get_current_user)):
    return replace_rows("cart_item", current_user["id"], [i.model_dump() for i in payload.items], with_quantity=True)


@app.delete("/cart/{product_id}")
def remove_cart_item(product_id: str, current_user: dict = Depends(get_current_user)):
    db["cart_item"].delete_one({"user_id": current_user["id"], "product_id": product_id})
    return {"ok": True}


@app.get("/wishlist")
def get_wishlist(current_user: dict = Depends(get_current_user)):
    return read_rows("wishlist_item", current_user["id"])


@app.put("/wishlist")
def replace_wishlist(payload: WishlistReplace, current_user: dict = Depends(get_current_user)):
    return replace_rows("wishlist_item", current_user["id"], [i.model_dump() for i in payload.items], with_quantity=False)


@app.delete("/wishlist/{product_id}")
def remove_wishlist_item(product_id: str, current_user: dict = Depends(get_current_user)):
    db["wishlist_item"].delete_one({"user_id": current_user["id"], "product_id": product_id})
    return {"ok": True}


# Addresses

def clear_default_addresses(user_id: str):
    db["address"].update_many({"user_id": user_id}, {"$set": {"is_default": False}})


def owned_address(address_id: str, user_id: str) -> dict:
    doc = db["address"].find_one({"_id": to_obj_id(address_id, "address id"), "user_id": user_id})
    if not doc:
        raise HTTPException(status_code=404, detail="Address not found")
    return doc


@app.get("/addresses")
def list_addresses(current_user: dict = Depends(get_current_user)):
    docs = db["address"].find({"user_id": current_user["id"]}).sort([("is_default", -1), ("created_at", 1)])
    return [serialize_doc(d) for d in docs]


@app.post("/addresses")
def create_address(data: AddressSchema, current_user: dict = Depends(get_current_user)):
    if data.is_default:
        clear_default_addresses(current_user["id"])
    address_id = create_document("address", {**data.model_dump(), "user_id": current_user["id"]})
    return serialize_doc(db["address"].find_one({"_id": ObjectId(address_id)}))


@app.put("/addresses/{address_id}")
def update_address(address_id: str, data: AddressSchema, current_user: dict = Depends(get_current_user)):
    doc = owned_address(address_id, current_user["id"])
    if data.is_default:
        clear_default_addresses(current_user["id"])
    update_dict = data.model_dump()
    update_dict["updated_at"] = datetime.now(timezone.utc)
    db["address"].update_one({"_id": doc["_id"]}, {"$set": update_dict})
    return serialize_doc(db["address"].find_one({"_id": doc["_id"]}))


@app.delete("/addresses/{address_id}")
def delete_address(address_id: str, current_user: dict = Depends(get_current_user)):
    doc = owned_address(address_id, current_user["id"])
    db["address"].delete_one({"_id": doc["_id"]})
    return {"ok": True}


@app.post("/addresses/{address_id}/default")
def set_default_address(address_id: str, current_user: dict = Depends(get_current_user)):
    doc = owned_address(address_id, current_user["id"])
    clear_default_addresses(current_user["id"])
    db["address"].update_one({"_id": doc["_id"]}, {"$set": {"is_default": True, "updated_at": datetime.now(timezone.utc)}})
    return serialize_doc(db["address"].find_one({"_id": doc["_id"]}))


# Orders

ORDER_NUMBER_ATTEMPTS = 20


def generate_order_number() -> str:
    """Pick an MX-prefixed number not already used by a stored order."""
    for _ in range(ORDER_NUMBER_ATTEMPTS):
        number = f"MX{random.randint(10000, 99999)}"
        if db["order"].find_one({"order_number": number}, {"_id": 1}) is None:
            return number
    logger.error("No free order number after %d attempts", ORDER_NUMBER_ATTEMPTS)
    raise HTTPException(status_code=503, detail="Could not allocate an order number")


def price_order_lines(lines) -> List[Dict[str, Any]]:
    """Snapshot order lines with the catalog's current name and price."""
    items = []
    for line in lines:
        item = line.model_dump()
        product = None
        if ObjectId.is_valid(item["id"]):
            product = db["product"].find_one({"_id": ObjectId(item["id"])})
        if not product:
            raise HTTPException(status_code=400, detail=f"Product {item['id']} is no longer available")
        item["name"] = product["name"]
        item["price"] = float(product["price"])
        items.append(item)
    return items


@app.post("/orders")
def create_order(payload: OrderCreate, current_user: dict = Depends(get_current_user)):
    items = price_order_lines(payload.items)
    total = sum(item["price"] * item["quantity"] for item in items)
    order = OrderSchema(
        order_number=generate_order_number(),
        user_id=current_user["id"],
        items=items,
        shipping_address=payload.shipping_address.model_dump(),
        total=round(total, 2),
    )
    order_id = create_document("order", order.model_dump(exclude={"created_at"}))
    logger.info("Order %s placed by %s for %.2f", order.order_number, current_user["id"], order.total)
    return serialize_doc(db["order"].find_one({"_id": ObjectId(order_id)}))


@app.get("/orders")
def list_my_orders(current_user: dict = Depends(get_current_user)):
    docs = db["order"].find({"user_id": current_user["id"]}).sort("created_at", -1)
    return [serialize_doc(d) for d in docs]


@app.get("/orders/{order_id}")
def get_order(order_id: str, current_user: dict = Depends(get_current_user)):
    order = db["order"].find_one({"_id": to_obj_id(order_id, "order id")})
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    require_self_or_admin(order["user_id"], current_user)
    return serialize_doc(order)


@app.get("/admin/orders")
def list_all_orders(status: Optional[str] = None, _: dict = Depends(get_current_admin)):
    query = {"status": status} if status else {}
    return [serialize_doc(d) for d in get_documents("order", query, sort=[("created_at", -1)])]


@app.patch("/admin/orders/{order_id}/status")
def update_order_status(order_id: str, payload: OrderStatusUpdate, _: dict = Depends(get_current_admin)):
    obj_id = to_obj_id(order_id, "order id")
    res = db["order"].update_one({"_id": obj_id}, {"$set": {"status": payload.status, "updated_at": datetime.now(timezone.utc)}})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Order not found")
    return serialize_doc(db["order"].find_one({"_id": obj_id}))


# Reviews

def refresh_product_rating(product_id: str):
    if not ObjectId.is_valid(product_id):
        return
    ratings = [r["rating"] for r in db["review"].find({"product_id": product_id, "is_approved": True})]
    rating = round(sum(ratings) / len(ratings), 1) if ratings else 0
    db["product"].update_one({"_id": ObjectId(product_id)}, {"$set": {"rating": rating, "review_count": len(ratings)}})


def with_product_names(reviews: List[dict]) -> List[Dict[str, Any]]:
    out = []
    for review in reviews:
        product = db["product"].find_one({"_id": ObjectId(review["product_id"])}) if ObjectId.is_valid(review["product_id"]) else None
        item = serialize_doc(review)
        item["product_name"] = product["name"] if product else "Product Not Found"
        out.append(item)
    return out


@app.post("/reviews")
def create_review(payload: ReviewCreate, current_user: dict = Depends(get_current_user)):
    if not db["product"].find_one({"_id": to_obj_id(payload.product_id, "product id")}):
        raise HTTPException(status_code=404, detail="Product not found")
    profile = db["profile"].find_one({"_id": ObjectId(current_user["id"])}) or {}
    author = f"{profile.get('first_name', '')} {profile.get('last_name', '')}".strip() or current_user["email"].split("@")[0]
    review = ReviewSchema(user_id=current_user["id"], author_name=author, **payload.model_dump())
    review_id = create_document("review", review)
    return serialize_doc(db["review"].find_one({"_id": ObjectId(review_id)}))


@app.get("/products/{product_id}/reviews")
def list_product_reviews(product_id: str):
    docs = db["review"].find({"product_id": product_id, "is_approved": True}).sort("created_at", -1)
    return [serialize_doc(d) for d in docs]


@app.get("/reviews/mine")
def list_my_reviews(current_user: dict = Depends(get_current_user)):
    return with_product_names(list(db["review"].find({"user_id": current_user["id"]}).sort("created_at", -1)))


@app.get("/admin/reviews")
def list_all_reviews(_: dict = Depends(get_current_admin)):
    return with_product_names(list(db["review"].find({}).sort("created_at", -1)))


@app.patch("/admin/reviews/{review_id}")
def set_review_approval(review_id: str, payload: ReviewApproval, _: dict = Depends(get_current_admin)):
    obj_id = to_obj_id(review_id, "review id")
    res = db["review"].update_one({"_id": obj_id}, {"$set": {"is_approved": payload.is_approved, "updated_at": datetime.now(timezone.utc)}})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Review not found")
    review = db["review"].find_one({"_id": obj_id})
    refresh_product_rating(review["product_id"])
    return serialize_doc(review)


@app.delete("/admin/reviews/{review_id}")
def delete_review(review_id: str, _: dict = Depends(get_current_admin)):
    obj_id = to_obj_id(review_id, "review id")
    review = db["review"].find_one({"_id": obj_id})
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")
    db["review"].delete_one({"_id": obj_id})
    refresh_product_rating(review["product_id"])
    return {"ok": True}


# Admin: users

@app.get("/admin/users")
def list_users(role: Optional[str] = None, _: dict = Depends(get_current_admin)):
    if role and role not in roles.ROLES:
        raise HTTPException(status_code=400, detail="Unknown role")
    query = {"role": role} if role else {}
    return [profile_out(d) for d in db["profile"].find(query).sort("created_at", -1)]


@app.get("/admin/users/{user_id}")
def get_user_detail(user_id: str, _: dict = Depends(get_current_admin)):
    doc = db["profile"].find_one({"_id": to_obj_id(user_id, "user id")})
    if not doc:
        raise HTTPException(status_code=404, detail="Profile not found")
    detail = profile_out(doc)
    detail["orders"] = [serialize_doc(o) for o in db["order"].find({"user_id": user_id}).sort("created_at", -1)]
    return detail


@app.post("/admin/users/{user_id}/approve")
def approve_admin(user_id: str, _: dict = Depends(get_current_admin)):
    return apply_role_event(user_id, roles.APPROVE)


@app.post("/admin/users/{user_id}/reject")
def reject_admin(user_id: str, _: dict = Depends(get_current_admin)):
    return apply_role_event(user_id, roles.REJECT)


# Settings

SETTINGS_ID = 1


def load_settings() -> GlobalSettingsSchema:
    # a missing record means defaults
    return GlobalSettingsSchema(**(db["settings"].find_one({"_id": SETTINGS_ID}) or {}))


@app.get("/admin/settings")
def get_settings(_: dict = Depends(get_current_admin)):
    return load_settings().model_dump()


@app.put("/admin/settings")
def update_settings(payload: GlobalSettingsSchema, current_admin: dict = Depends(get_current_admin)):
    db["settings"].update_one(
        {"_id": SETTINGS_ID},
        {"$set": {**payload.model_dump(), "updated_at": datetime.now(timezone.utc)}},
        upsert=True,
    )
    logger.info("Settings updated by %s: %s", current_admin["id"], payload.model_dump())
    return load_settings().model_dump()


# Visitors

@app.post("/track-visitor")
def track_visitor(request: Request):
    visitor = VisitorSchema(**visitor_from_headers(request.headers))
    create_document("visitor", visitor)
    return {"message": "Visitor tracked successfully"}


@app.get("/admin/visitors")
def list_visitors(limit: Optional[int] = Query(None, ge=1), _: dict = Depends(get_current_admin)):
    limit = limit or load_settings().visitor_limit
    return [serialize_doc(d) for d in get_documents("visitor", limit=limit, sort=[("created_at", -1)])]


@app.delete("/admin/visitors")
def clear_visitors(_: dict = Depends(get_current_admin)):
    res = db["visitor"].delete_many({})
    return {"ok": True, "deleted": res.deleted_count}


@app.get("/admin/stats")
def admin_stats(_: dict = Depends(get_current_admin)):
    revenue = sum(float(o.get("total", 0)) for o in db["order"].find({"status": {"$ne": "Cancelled"}}))
    return {
        "products": db["product"].count_documents({}),
        "orders": db["order"].count_documents({}),
        "users": db["profile"].count_documents({}),
        "pending_admins": db["profile"].count_documents({"role": roles.PENDING_ADMIN}),
        "visitors": db["visitor"].count_documents({}),
        "revenue": round(revenue, 2),
    }


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
