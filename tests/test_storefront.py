import pytest

from checkout import place_order
from errors import ValidationError
from gate import ADMIN_AREA, ALLOW, CUSTOMER_AREA, LOGOUT
from profiles import CREATED, FOUND
from storage import LocalStorage

ADDRESS = {
    "first_name": "Jane",
    "last_name": "Doe",
    "address": "1 Mall Road",
    "city": "Lahore",
    "zip": "54000",
    "country": "Pakistan",
}


def test_customer_login_resolves_profile(make_storefront, signup):
    signup("jane@example.com", first_name="Jane", last_name="Doe")
    shop = make_storefront()
    decision = shop.login("jane@example.com", "secret123")
    assert decision.action == ALLOW
    assert shop.profile_status == CREATED
    assert shop.profile["display_name"] == "Jane Doe"
    assert shop.can_enter(CUSTOMER_AREA).allowed
    assert not shop.can_enter(ADMIN_AREA).allowed

    shop.logout()
    shop.login("jane@example.com", "secret123")
    assert shop.profile_status == FOUND


def test_admin_on_customer_login_is_logged_out(make_storefront, admin):
    shop = make_storefront()
    decision = shop.login("admin@example.com", "secret123", surface=CUSTOMER_AREA)
    assert decision.action == LOGOUT
    assert decision.message == "Admin accounts must use the admin panel to sign in."
    assert not shop.session.is_authenticated
    assert shop.profile is None


def test_pending_admin_logged_out_after_delay(make_storefront, signup, timers):
    signup("want@example.com", request_admin=True)
    shop = make_storefront()
    decision = shop.login("want@example.com", "secret123", surface=ADMIN_AREA)
    assert decision.action == LOGOUT
    assert decision.delay == 3.0
    # still signed in during the grace period
    assert shop.session.is_authenticated
    assert not shop.can_enter(ADMIN_AREA).allowed

    [timer] = timers.created
    timer.fire()
    assert not shop.session.is_authenticated


def test_pending_logout_does_not_touch_the_next_user(make_storefront, signup, timers):
    signup("want@example.com", request_admin=True)
    signup("jane@example.com")
    shop = make_storefront()
    shop.login("want@example.com", "secret123", surface=ADMIN_AREA)
    [timer] = timers.created
    shop.logout()
    assert timer.cancelled

    shop.login("jane@example.com", "secret123")
    timer.fire()
    assert shop.session.is_authenticated
    assert shop.profile["email"] == "jane@example.com"


def test_close_cancels_pending_logout(make_storefront, signup, timers):
    signup("want@example.com", request_admin=True)
    shop = make_storefront()
    shop.login("want@example.com", "secret123", surface=ADMIN_AREA)
    shop.close()
    [timer] = timers.created
    assert timer.cancelled
    assert shop.gate.pending is None
    assert not shop.session.is_authenticated


def test_pending_admin_signup_is_gated(make_storefront, admin, timers):
    shop = make_storefront()
    decision = shop.signup("want@example.com", "secret123", "secret123", request_admin=True)
    assert decision.action == LOGOUT
    assert decision.message == "Your admin access request is pending approval."
    assert not shop.session.is_authenticated
    assert not shop.can_enter(CUSTOMER_AREA).allowed

    boss = make_storefront()
    boss.login("admin@example.com", "secret123", surface=ADMIN_AREA)
    assert [p["email"] for p in boss.admin.pending_admins()] == ["want@example.com"]


def test_pending_admin_signup_on_admin_surface_gets_grace_period(make_storefront, timers):
    shop = make_storefront()
    decision = shop.signup("want@example.com", "secret123", "secret123", request_admin=True, surface=ADMIN_AREA)
    assert (decision.action, decision.delay) == (LOGOUT, 3.0)
    assert shop.session.is_authenticated
    timers.created[-1].fire()
    assert not shop.session.is_authenticated


def test_corrupt_local_storage_file_starts_empty(make_storefront, tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{not json", encoding="utf-8")
    shop = make_storefront(storage=LocalStorage(str(path)))
    assert shop.cart.items == []
    shop.cart.add({"id": "p1", "name": "Mouse", "price": 40.0})
    assert LocalStorage(str(path)).get_item("cart") is not None


def test_approved_admin_reaches_dashboard(make_storefront, signup, admin):
    user_id, _ = signup("want@example.com", request_admin=True)
    boss = make_storefront()
    assert boss.login("admin@example.com", "secret123", surface=ADMIN_AREA).action == ALLOW
    assert [p["id"] for p in boss.admin.pending_admins()] == [user_id]
    boss.admin.approve(user_id)

    shop = make_storefront()
    decision = shop.login("want@example.com", "secret123", surface=ADMIN_AREA)
    assert decision.action == ALLOW
    assert decision.redirect_to == "/adminpanel/dashboard"
    assert shop.can_enter(ADMIN_AREA).allowed


def test_signup_then_checkout(make_storefront, product):
    storage = LocalStorage()
    shop = make_storefront(storage=storage, load_catalog=True)
    assert shop.visit() is True
    assert shop.catalog.products[0]["id"] == product["id"]

    decision = shop.signup("jane@example.com", "secret123", "secret123", first_name="Jane")
    assert decision.allowed
    assert shop.profile_status == CREATED
    assert shop.profile["role"] == "user"

    shop.cart.add(shop.catalog.get(product["id"]), 2)
    assert shop.format_price(shop.cart.subtotal) == "Rs 140,000"
    shop.set_currency("USD")
    assert shop.format_price(shop.cart.subtotal) == "$500.00"

    order = shop.checkout(ADDRESS)
    assert order["total"] == 500.0
    assert order["status"] == "Processing"
    assert order["items"][0]["name"] == "Classic Leather Watch"
    assert shop.cart.items == []
    assert shop.orders.list()[0]["order_number"] == order["order_number"]

    shop.close()
    assert not shop.session.is_authenticated


def test_checkout_validation(make_storefront, signup):
    signup("jane@example.com")
    shop = make_storefront()
    shop.login("jane@example.com", "secret123")
    with pytest.raises(ValidationError, match="empty"):
        place_order(shop.orders, shop.cart, ADDRESS)
    shop.cart.add({"id": "p1", "name": "Mouse", "price": 40.0})
    with pytest.raises(ValidationError, match="city"):
        shop.checkout(dict(ADDRESS, city=" "))
    assert shop.cart.count == 1


def test_address_book_default_switch(make_storefront, signup):
    signup("jane@example.com")
    shop = make_storefront()
    shop.login("jane@example.com", "secret123")
    home = shop.addresses.save(dict(ADDRESS, is_default=True))
    work = shop.addresses.save(dict(ADDRESS, city="Karachi"))
    shop.addresses.set_default(work["id"])
    defaults = [a["id"] for a in shop.addresses.list() if a["is_default"]]
    assert defaults == [work["id"]]
    renamed = shop.addresses.save(dict(home, city="Multan", is_default=False), address_id=home["id"])
    assert renamed["city"] == "Multan"
    assert renamed["is_default"] is False


def test_profile_service_update(make_storefront, signup):
    signup("jane@example.com")
    shop = make_storefront()
    shop.login("jane@example.com", "secret123")
    updated = shop.resolver.profiles.update(shop.profile["id"], last_name="Doe")
    assert updated["last_name"] == "Doe"


def test_reviews_through_services(make_storefront, signup, admin, product):
    signup("jane@example.com")
    shop = make_storefront()
    shop.login("jane@example.com", "secret123")
    review = shop.reviews.submit(product["id"], 5, "Keeps perfect time")
    assert shop.reviews.for_product(product["id"]) == []
    assert shop.reviews.mine()[0]["id"] == review["id"]

    boss = make_storefront()
    boss.login("admin@example.com", "secret123", surface=ADMIN_AREA)
    boss.admin.set_review_approval(review["id"], True)
    assert [r["id"] for r in shop.reviews.for_product(product["id"])] == [review["id"]]
    assert boss.admin.stats()["products"] == 1


def test_unsupported_currency(make_storefront):
    with pytest.raises(ValueError):
        make_storefront().set_currency("EUR")


def test_admin_settings_through_services(make_storefront, admin):
    boss = make_storefront()
    boss.login("admin@example.com", "secret123", surface=ADMIN_AREA)
    assert boss.admin.settings() == {"visitor_limit": 1000}
    assert boss.admin.update_settings(250) == {"visitor_limit": 250}
    boss.visit()
    boss.visit()
    assert len(boss.admin.visitors()) == 2
    assert len(boss.admin.visitors(limit=1)) == 1
