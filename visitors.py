import re
from typing import Dict, Mapping, Optional

MOBILE_RE = re.compile(r"Mobile|Android|iPhone|iPad|iPod|Windows Phone", re.I)
TABLET_RE = re.compile(r"Tablet|iPad", re.I)


def parse_user_agent(user_agent: Optional[str]) -> Dict[str, str]:
    """Rough device/browser/OS classification of a User-Agent header."""
    if not user_agent:
        return {"device_type": "Unknown", "browser": "Unknown", "os": "Unknown"}

    device_type = "Desktop"
    if MOBILE_RE.search(user_agent):
        device_type = "Mobile"
    elif TABLET_RE.search(user_agent):
        device_type = "Tablet"

    def has(pattern: str) -> bool:
        return re.search(pattern, user_agent, re.I) is not None

    browser = "Unknown"
    if has("Chrome") and not has("Edg"):
        browser = "Chrome"
    elif has("Firefox"):
        browser = "Firefox"
    elif has("Safari") and not has("Chrome"):
        browser = "Safari"
    elif has("Edg"):
        browser = "Edge"
    elif has("MSIE|Trident"):
        browser = "IE"

    # Android and iOS UAs also mention Linux / Mac OS X, so check them first
    os_name = "Unknown"
    if has("Windows"):
        os_name = "Windows"
    elif has("Android"):
        os_name = "Android"
    elif has("iPhone|iPad|iPod"):
        os_name = "iOS"
    elif has("Macintosh|Mac OS X"):
        os_name = "macOS"
    elif has("Linux"):
        os_name = "Linux"

    return {"device_type": device_type, "browser": browser, "os": os_name}


def visitor_from_headers(headers: Mapping[str, str]) -> Dict[str, Optional[str]]:
    user_agent = headers.get("user-agent")
    record = {
        "ip_address": headers.get("x-forwarded-for") or headers.get("x-real-ip") or "N/A",
        "user_agent": user_agent,
        "referrer": headers.get("referer") or "Direct",
    }
    record.update(parse_user_agent(user_agent))
    return record
