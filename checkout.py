import logging
from typing import Any, Dict

from api import OrderService
from errors import ValidationError
from sync import CartSync

logger = logging.getLogger(__name__)

REQUIRED_ADDRESS_FIELDS = ("first_name", "last_name", "address", "city", "zip", "country")
ADDRESS_FIELDS = REQUIRED_ADDRESS_FIELDS + ("apartment", "state", "phone")


def place_order(orders: OrderService, cart: CartSync, shipping_address: Dict[str, Any]) -> Dict[str, Any]:
    """Create an order from the cart as it is now, then empty the cart.

    Raises ValidationError before any request when the cart is empty or
    the address is incomplete; ApiError from the API propagates and the
    cart is left untouched.
    """
    if not len(cart):
        raise ValidationError("Your cart is empty.")
    missing = [f for f in REQUIRED_ADDRESS_FIELDS if not str(shipping_address.get(f) or "").strip()]
    if missing:
        raise ValidationError(f"Missing shipping details: {', '.join(missing)}")

    address = {f: shipping_address[f] for f in ADDRESS_FIELDS if shipping_address.get(f) is not None}
    order = orders.create(cart.items, address)
    logger.info("Placed order %s", order.get("order_number"))
    cart.clear()
    return order
