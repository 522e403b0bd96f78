"""Route and login-surface decisions based on a resolved profile's role.

This is navigation convenience only; the API enforces admin-only
operations on its own (see main.get_current_admin).
"""

import logging
import threading
from typing import Any, Callable, Dict, NamedTuple, Optional

import roles

logger = logging.getLogger(__name__)

CUSTOMER_AREA = "customer"
ADMIN_AREA = "admin"

ALLOW = "allow"
REDIRECT = "redirect"
LOGOUT = "logout"

HOME_PATH = "/"
ADMIN_LOGIN_PATH = "/adminpanel"
ADMIN_DASHBOARD_PATH = "/adminpanel/dashboard"
CUSTOMER_DASHBOARD_PATH = "/dashboard"

PENDING_LOGOUT_DELAY = 3.0

PENDING_ADMIN_MESSAGE = "Your admin access request is pending approval."
ADMIN_ONLY_MESSAGE = "Access denied. Admin privileges required."
USE_ADMIN_PANEL_MESSAGE = "Admin accounts must use the admin panel to sign in."


class Decision(NamedTuple):
    action: str
    redirect_to: Optional[str] = None
    message: Optional[str] = None
    delay: float = 0.0

    @property
    def allowed(self) -> bool:
        return self.action == ALLOW


def role_of(profile: Optional[Dict[str, Any]]) -> Optional[str]:
    return profile.get("role") if profile else None


class RoleGate:
    def __init__(self, timer_factory: Callable[..., Any] = threading.Timer,
                 pending_delay: float = PENDING_LOGOUT_DELAY):
        self.timer_factory = timer_factory
        self.pending_delay = pending_delay
        self.pending = None

    def check_area(self, profile: Optional[Dict[str, Any]], area: str) -> Decision:
        if area == CUSTOMER_AREA:
            if profile:
                return Decision(ALLOW)
            return Decision(REDIRECT, redirect_to=HOME_PATH)
        if area == ADMIN_AREA:
            if role_of(profile) == roles.ADMIN:
                return Decision(ALLOW)
            return Decision(REDIRECT, redirect_to=ADMIN_LOGIN_PATH)
        raise ValueError(f"Unknown area: {area}")

    def check_login(self, profile: Dict[str, Any], surface: str) -> Decision:
        """Decide what happens right after signing in through `surface`."""
        role = role_of(profile)
        if surface == ADMIN_AREA:
            if role == roles.ADMIN:
                return Decision(ALLOW, redirect_to=ADMIN_DASHBOARD_PATH)
            if role == roles.PENDING_ADMIN:
                return Decision(LOGOUT, redirect_to=ADMIN_LOGIN_PATH,
                                message=PENDING_ADMIN_MESSAGE, delay=self.pending_delay)
            return Decision(LOGOUT, redirect_to=ADMIN_LOGIN_PATH, message=ADMIN_ONLY_MESSAGE)
        if surface == CUSTOMER_AREA:
            if role == roles.ADMIN:
                return Decision(LOGOUT, redirect_to=HOME_PATH, message=USE_ADMIN_PANEL_MESSAGE)
            if role == roles.PENDING_ADMIN:
                return Decision(LOGOUT, redirect_to=HOME_PATH, message=PENDING_ADMIN_MESSAGE)
            return Decision(ALLOW, redirect_to=CUSTOMER_DASHBOARD_PATH)
        raise ValueError(f"Unknown login surface: {surface}")

    def cancel_pending(self):
        """Drop a delayed sign-out that has not fired yet."""
        if self.pending is not None:
            self.pending.cancel()
            self.pending = None

    def enforce(self, decision: Decision, session):
        """Sign out now, or start a timer for a delayed sign-out.

        A delayed sign-out only applies to the identity that was signed in
        when it was scheduled; any earlier pending one is cancelled first.
        Returns the started timer for a delayed sign-out, else None.
        """
        self.cancel_pending()
        if decision.action != LOGOUT:
            return None
        if decision.delay <= 0:
            logger.info("Signing out: %s", decision.message)
            session.sign_out()
            return None

        user_id = session.user_id

        def sign_out_if_unchanged():
            if self.pending is timer:
                self.pending = None
            if session.user_id != user_id:
                logger.info("Skipping delayed sign-out, session changed")
                return
            session.sign_out()

        timer = self.timer_factory(decision.delay, sign_out_if_unchanged)
        timer.daemon = True
        timer.start()
        self.pending = timer
        logger.info("Signing out in %.1fs: %s", decision.delay, decision.message)
        return timer
