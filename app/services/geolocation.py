"""IP geolocation lookup used to tag comments for moderators.

Best effort: any failure returns None and the comment is stored untagged.
"""

import ipaddress
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeoLocation:
    country: str | None
    region: str | None
    city: str | None


def is_public_ip(ip: str | None) -> bool:
    """True for a routable address worth looking up (not private, loopback, reserved)."""
    if not ip:
        return False
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        return False
    return addr.is_global


async def lookup_ip(ip: str | None, settings: "Settings") -> GeoLocation | None:
    """Resolve ip to country/region/city. Returns None when disabled, not public, or on any error."""
    if not settings.GEOLOCATION_ENABLED or not is_public_ip(ip):
        return None

    url = f"{settings.GEOLOCATION_BASE_URL}/{ip}"
    timeout = httpx.Timeout(settings.GEOLOCATION_TIMEOUT_SEC)
    start = time.perf_counter()
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(url)
    except httpx.HTTPError as e:
        logger.warning(
            "Geolocation lookup failed",
            extra={
                "latency_seconds": time.perf_counter() - start,
                "reason": type(e).__name__,
            },
        )
        return None

    if response.status_code != 200:
        logger.warning(
            "Geolocation lookup returned status %s", response.status_code
        )
        return None
    try:
        body = response.json()
    except ValueError:
        logger.warning("Geolocation response body is not valid JSON")
        return None
    if not isinstance(body, dict) or body.get("status") != "success":
        return None

    return GeoLocation(
        country=body.get("country"),
        region=body.get("regionName"),
        city=body.get("city"),
    )
