"""HTTP access to the storefront API.

ApiClient owns the base URL and the bearer token; the small service
classes below map the API's routes onto methods. RemoteListStore is the
remote backing store used by the cart and wishlist synchronizers.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import requests

from errors import ApiError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8000"


class ApiClient:
    def __init__(self, base_url: Optional[str] = None, http=None):
        self.base_url = (base_url or os.getenv("STOREFRONT_API_URL", DEFAULT_API_URL)).rstrip("/")
        # anything with requests.Session.request's signature will do
        self.http = http if http is not None else requests.Session()
        self.token: Optional[str] = None

    def request(self, method: str, path: str, json=None, params=None) -> Any:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        try:
            response = self.http.request(method, self.base_url + path, json=json, params=params, headers=headers)
        except requests.RequestException as e:
            raise ApiError(0, str(e)) from e
        if response.status_code >= 400:
            try:
                detail = response.json().get("detail")
            except ValueError:
                detail = response.text
            raise ApiError(response.status_code, detail)
        if not response.content:
            return None
        return response.json()

    def get(self, path: str, params=None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json=None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json=None) -> Any:
        return self.request("PUT", path, json=json)

    def patch(self, path: str, json=None) -> Any:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)


class RemoteListStore:
    """Cart or wishlist rows of the signed-in user."""

    def __init__(self, api: ApiClient, kind: str):
        if kind not in ("cart", "wishlist"):
            raise ValueError(f"Unknown list kind: {kind}")
        self.api = api
        self.kind = kind

    def load(self) -> List[Dict[str, Any]]:
        return self.api.get(f"/{self.kind}")

    def save(self, items: List[Dict[str, Any]]):
        self.api.put(f"/{self.kind}", json={"items": items})

    def discard(self, product_id: str, items: List[Dict[str, Any]]):
        self.api.delete(f"/{self.kind}/{product_id}")


class ProfileService:
    def __init__(self, api: ApiClient):
        self.api = api

    def get(self, user_id: str) -> Dict[str, Any]:
        return self.api.get(f"/profiles/{user_id}")

    def create(self) -> Dict[str, Any]:
        return self.api.post("/profiles")

    def update(self, user_id: str, first_name: Optional[str] = None, last_name: Optional[str] = None) -> Dict[str, Any]:
        updates = {k: v for k, v in (("first_name", first_name), ("last_name", last_name)) if v is not None}
        return self.api.patch(f"/profiles/{user_id}", json=updates)

    def request_admin(self, user_id: str) -> Dict[str, Any]:
        return self.api.post(f"/profiles/{user_id}/request-admin")


class ProductService:
    def __init__(self, api: ApiClient):
        self.api = api

    def list(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.api.get("/products", params={"category": category} if category else None)

    def get(self, product_id: str) -> Dict[str, Any]:
        return self.api.get(f"/products/{product_id}")

    def create(self, product: Dict[str, Any]) -> Dict[str, Any]:
        return self.api.post("/products", json=product)

    def update(self, product_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        return self.api.put(f"/products/{product_id}", json=updates)

    def delete(self, product_id: str):
        self.api.delete(f"/products/{product_id}")


class AddressBook:
    def __init__(self, api: ApiClient):
        self.api = api

    def list(self) -> List[Dict[str, Any]]:
        return self.api.get("/addresses")

    def save(self, address: Dict[str, Any], address_id: Optional[str] = None) -> Dict[str, Any]:
        fields = {k: v for k, v in address.items() if k not in ("id", "user_id", "created_at", "updated_at")}
        if address_id:
            return self.api.put(f"/addresses/{address_id}", json=fields)
        return self.api.post("/addresses", json=fields)

    def delete(self, address_id: str):
        self.api.delete(f"/addresses/{address_id}")

    def set_default(self, address_id: str) -> Dict[str, Any]:
        return self.api.post(f"/addresses/{address_id}/default")


class OrderService:
    def __init__(self, api: ApiClient):
        self.api = api

    def list(self) -> List[Dict[str, Any]]:
        return self.api.get("/orders")

    def get(self, order_id: str) -> Dict[str, Any]:
        return self.api.get(f"/orders/{order_id}")

    def create(self, items: List[Dict[str, Any]], shipping_address: Dict[str, Any]) -> Dict[str, Any]:
        return self.api.post("/orders", json={"items": items, "shipping_address": shipping_address})


class ReviewService:
    def __init__(self, api: ApiClient):
        self.api = api

    def submit(self, product_id: str, rating: int, text: str) -> Dict[str, Any]:
        return self.api.post("/reviews", json={"product_id": product_id, "rating": rating, "text": text})

    def for_product(self, product_id: str) -> List[Dict[str, Any]]:
        return self.api.get(f"/products/{product_id}/reviews")

    def mine(self) -> List[Dict[str, Any]]:
        return self.api.get("/reviews/mine")


class AdminService:
    def __init__(self, api: ApiClient):
        self.api = api

    def users(self, role: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.api.get("/admin/users", params={"role": role} if role else None)

    def user(self, user_id: str) -> Dict[str, Any]:
        return self.api.get(f"/admin/users/{user_id}")

    def pending_admins(self) -> List[Dict[str, Any]]:
        return self.users(role="pending_admin")

    def approve(self, user_id: str) -> Dict[str, Any]:
        return self.api.post(f"/admin/users/{user_id}/approve")

    def reject(self, user_id: str) -> Dict[str, Any]:
        return self.api.post(f"/admin/users/{user_id}/reject")

    def orders(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.api.get("/admin/orders", params={"status": status} if status else None)

    def set_order_status(self, order_id: str, status: str) -> Dict[str, Any]:
        return self.api.patch(f"/admin/orders/{order_id}/status", json={"status": status})

    def reviews(self) -> List[Dict[str, Any]]:
        return self.api.get("/admin/reviews")

    def set_review_approval(self, review_id: str, is_approved: bool) -> Dict[str, Any]:
        return self.api.patch(f"/admin/reviews/{review_id}", json={"is_approved": is_approved})

    def delete_review(self, review_id: str):
        self.api.delete(f"/admin/reviews/{review_id}")

    def visitors(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        return self.api.get("/admin/visitors", params={"limit": limit} if limit else None)

    def clear_visitors(self):
        self.api.delete("/admin/visitors")

    def settings(self) -> Dict[str, Any]:
        return self.api.get("/admin/settings")

    def update_settings(self, visitor_limit: int) -> Dict[str, Any]:
        return self.api.put("/admin/settings", json={"visitor_limit": visitor_limit})

    def stats(self) -> Dict[str, Any]:
        return self.api.get("/admin/stats")


def track_visit(api: ApiClient) -> bool:
    """Record a visit. Failures are logged, never raised."""
    try:
        api.post("/track-visitor")
    except ApiError as e:
        logger.warning("Visitor tracking failed: %s", e)
        return False
    return True
