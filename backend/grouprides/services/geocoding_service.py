"""
Geocoding proxy for a Nominatim-compatible service.
"""
import logging
from typing import Any
import httpx
from grouprides.core.config import settings
from grouprides.core.exceptions import ValidationError, UnexpectedError

logger = logging.getLogger(__name__)


def _get(path: str, params: dict) -> Any:
    """GET a geocoder endpoint and return the decoded JSON body."""
    url = f"{settings.GEOCODER_URL.rstrip('/')}/{path}"
    headers = {"User-Agent": settings.GEOCODER_USER_AGENT}

    try:
        response = httpx.get(url, params=params, headers=headers, timeout=settings.GEOCODER_TIMEOUT)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        logger.error(f"Geocoder HTTP error: {e.response.status_code} for {path}")
        raise UnexpectedError("Geocoding failed")
    except httpx.HTTPError as e:
        # Network errors, timeouts
        logger.error(f"Geocoder request failed: {e}")
        raise UnexpectedError("Geocoding failed")
    except ValueError:
        logger.error(f"Geocoder returned a non-JSON body for {path}")
        raise UnexpectedError("Geocoding failed")

    if settings.DEBUG:
        logger.debug(f"Geocoder response for {path}: {data}")
    return data


def search(query: str) -> Any:
    """Forward an address search and return the raw result list."""
    if not query or not query.strip():
        raise ValidationError.for_field("q", "Query parameter 'q' is required")
    return _get("search", {
        "format": "json",
        "q": query.strip(),
        "limit": settings.GEOCODER_RESULT_LIMIT,
    })


def reverse(lat: float, lon: float) -> Any:
    """Look up the address nearest to a coordinate pair."""
    errors = []
    if not -90 <= lat <= 90:
        errors.append({"field": "lat", "message": "lat must be between -90 and 90"})
    if not -180 <= lon <= 180:
        errors.append({"field": "lon", "message": "lon must be between -180 and 180"})
    if errors:
        raise ValidationError("Invalid coordinates", errors=errors)
    return _get("reverse", {"format": "json", "lat": lat, "lon": lon})
