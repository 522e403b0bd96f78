"""Who is signed in, and who wants to know when that changes."""

import logging
from typing import Any, Callable, Dict, List, Optional

from api import ApiClient
from errors import ApiError, ValidationError

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

MIN_PASSWORD_LENGTH = 6

Listener = Callable[[str, Optional[Dict[str, Any]]], None]


class SessionHolder:
    """Holds the bearer token and the raw identity ({id, email, metadata}).

    Listeners registered with subscribe() are called as
    listener(event, identity) after every sign-in and sign-out.
    """

    def __init__(self, api: ApiClient):
        self.api = api
        self.identity: Optional[Dict[str, Any]] = None
        self._listeners: List[Listener] = []

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def user_id(self) -> Optional[str]:
        return self.identity["id"] if self.identity else None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str):
        for listener in list(self._listeners):
            listener(event, self.identity)

    def _start(self, token: str, identity: Dict[str, Any]):
        self.api.token = token
        self.identity = identity
        self._notify(SIGNED_IN)

    def sign_up(self, email: str, password: str, confirm_password: str,
                first_name: str = "", last_name: str = "", request_admin: bool = False) -> Dict[str, Any]:
        if not email or not password:
            raise ValidationError("Email and password are required.")
        if password != confirm_password:
            raise ValidationError("Passwords do not match.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
        data = self.api.post("/auth/signup", json={
            "email": email,
            "password": password,
            "first_name": first_name.strip(),
            "last_name": last_name.strip(),
            "request_admin": request_admin,
        })
        self._start(data["access_token"], data["user"])
        return self.identity

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        if not email or not password:
            raise ValidationError("Email and password are required.")
        data = self.api.post("/auth/signin", json={"email": email, "password": password})
        self._start(data["access_token"], data["user"])
        return self.identity

    def restore(self, token: str) -> Optional[Dict[str, Any]]:
        """Resume a stored token; returns None if the API rejects it."""
        self.api.token = token
        try:
            identity = self.api.get("/auth/session")
        except ApiError as e:
            logger.warning("Could not restore session: %s", e)
            self.api.token = None
            return None
        self.identity = identity
        self._notify(SIGNED_IN)
        return identity

    def sign_out(self):
        if not self.is_authenticated:
            return
        try:
            self.api.post("/auth/signout")
        except ApiError as e:
            logger.warning("Remote sign-out failed, clearing local session anyway: %s", e)
        self.api.token = None
        self.identity = None
        self._notify(SIGNED_OUT)
