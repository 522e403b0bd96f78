"""Turn a raw identity into the business profile the rest of the app uses."""

import logging
from typing import Any, Dict, NamedTuple, Optional

import roles
from api import ProfileService
from errors import ApiError

logger = logging.getLogger(__name__)

FOUND = "found"
CREATED = "created"
UNAVAILABLE = "unavailable"


class Resolution(NamedTuple):
    status: str
    profile: Dict[str, Any]


def display_name(first_name: str, last_name: str) -> str:
    return f"{first_name or ''} {last_name or ''}".strip()


def merge_profile(identity: Dict[str, Any], record: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    record = record or {}
    fallback = (identity.get("email") or "").split("@")[0] or "Guest"
    first_name = record.get("first_name") or fallback
    last_name = record.get("last_name") or ""
    return {
        "id": identity["id"],
        "email": identity.get("email", ""),
        "first_name": first_name,
        "last_name": last_name,
        "display_name": display_name(first_name, last_name),
        "role": record.get("role") or roles.USER,
    }


class ProfileResolver:
    def __init__(self, profiles: ProfileService):
        self.profiles = profiles

    def resolve(self, identity: Dict[str, Any]) -> Resolution:
        """Never raises; status tells found / created / unavailable apart.

        An unavailable resolution carries a synthesized plain-user
        profile that was not persisted.
        """
        try:
            return Resolution(FOUND, merge_profile(identity, self.profiles.get(identity["id"])))
        except ApiError as e:
            if not e.not_found:
                logger.warning("Profile lookup failed for %s: %s", identity.get("id"), e)
                return Resolution(UNAVAILABLE, merge_profile(identity, None))

        try:
            record = self.profiles.create()
        except ApiError as e:
            if e.status_code == 409:
                # created concurrently since the lookup
                return self._retry_lookup(identity)
            logger.warning("Profile creation failed for %s: %s", identity.get("id"), e)
            return Resolution(UNAVAILABLE, merge_profile(identity, None))
        return Resolution(CREATED, merge_profile(identity, record))

    def _retry_lookup(self, identity: Dict[str, Any]) -> Resolution:
        try:
            return Resolution(FOUND, merge_profile(identity, self.profiles.get(identity["id"])))
        except ApiError as e:
            logger.warning("Profile lookup failed for %s: %s", identity.get("id"), e)
            return Resolution(UNAVAILABLE, merge_profile(identity, None))
