"""Application context for a storefront client.

Create one Storefront at start-up and pass it (or its parts) to whatever
needs them; nothing here is global.
"""

import logging
import os
from typing import Any, Dict, Optional

from api import (
    AddressBook, AdminService, ApiClient, OrderService, ProductService,
    ProfileService, ReviewService, track_visit,
)
from catalog import CatalogProvider
from checkout import place_order
from currency import DEFAULT_CURRENCY, SUPPORTED_CURRENCIES, format_price
from gate import CUSTOMER_AREA, Decision, RoleGate
from profiles import ProfileResolver
from session import SIGNED_IN, SIGNED_OUT, SessionHolder
from storage import LocalStorage
from sync import CartSync, WishlistSync

logger = logging.getLogger(__name__)


class Storefront:
    def __init__(self, api: Optional[ApiClient] = None, storage: Optional[LocalStorage] = None,
                 gate: Optional[RoleGate] = None, currency: Optional[str] = None,
                 load_catalog: bool = True):
        self.api = api or ApiClient()
        self.storage = storage or LocalStorage(os.getenv("STOREFRONT_LOCAL_STORAGE"))
        self.session = SessionHolder(self.api)
        self.resolver = ProfileResolver(ProfileService(self.api))
        self.gate = gate or RoleGate()
        self.cart = CartSync(self.session, self.storage, self.api)
        self.wishlist = WishlistSync(self.session, self.storage, self.api)
        self.catalog = CatalogProvider(ProductService(self.api), autoload=load_catalog)
        self.addresses = AddressBook(self.api)
        self.orders = OrderService(self.api)
        self.reviews = ReviewService(self.api)
        self.admin = AdminService(self.api)
        self.profile: Optional[Dict[str, Any]] = None
        self.profile_status: Optional[str] = None
        self.currency = currency or os.getenv("STOREFRONT_CURRENCY", DEFAULT_CURRENCY)
        self._unsubscribe = self.session.subscribe(self._on_session_change)

    def _on_session_change(self, event: str, identity: Optional[Dict[str, Any]]):
        # a delayed sign-out never outlives the session it was scheduled for
        self.gate.cancel_pending()
        if event == SIGNED_IN and identity:
            resolution = self.resolver.resolve(identity)
            self.profile, self.profile_status = resolution.profile, resolution.status
        elif event == SIGNED_OUT:
            self.profile, self.profile_status = None, None

    def set_currency(self, currency: str):
        if currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {currency}")
        self.currency = currency

    def format_price(self, amount: float) -> str:
        return format_price(amount, self.currency)

    def visit(self) -> bool:
        return track_visit(self.api)

    def login(self, email: str, password: str, surface: str = CUSTOMER_AREA) -> Decision:
        """Sign in through a login surface and apply the role gate's verdict."""
        self.session.sign_in(email, password)
        return self._admit(surface)

    def signup(self, email: str, password: str, confirm_password: str, first_name: str = "",
               last_name: str = "", request_admin: bool = False,
               surface: str = CUSTOMER_AREA) -> Decision:
        """Create an account, then gate it like a sign-in through `surface`.

        The resolved profile is left on `profile`/`profile_status` unless
        the gate signs the new account straight back out.
        """
        self.session.sign_up(email, password, confirm_password, first_name, last_name, request_admin)
        return self._admit(surface)

    def _admit(self, surface: str) -> Decision:
        decision = self.gate.check_login(self.profile, surface)
        self.gate.enforce(decision, self.session)
        return decision

    def logout(self):
        self.gate.cancel_pending()
        self.session.sign_out()

    def can_enter(self, area: str) -> Decision:
        return self.gate.check_area(self.profile, area)

    def checkout(self, shipping_address: Dict[str, Any]) -> Dict[str, Any]:
        return place_order(self.orders, self.cart, shipping_address)

    def close(self):
        self.logout()
        self._unsubscribe()
        self.cart.close()
        self.wishlist.close()
