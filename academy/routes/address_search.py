"""
Nominatim (OpenStreetMap) address lookup for the enrolment form.

No API key is needed, only a descriptive user agent.
"""

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from .. import config
from ..exceptions import ApiError
from ..rate_limiter import create_rate_limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Address"])

# Nominatim allows about one request per second
rate_limit_address_search = create_rate_limiter(
    limit=60, window_seconds=60, key_prefix="address-search"
)

# Swapped for an httpx.MockTransport in tests
transport: Optional[httpx.AsyncBaseTransport] = None


@router.get("/address-search")
async def address_search(
    q: str = Query(default=""),
    _: None = Depends(rate_limit_address_search),
):
    """Australian address suggestions; the Nominatim JSON is passed through unchanged"""
    query = (q or "").strip()
    if len(query) < 3:
        raise ApiError(400, "Query too short")

    params = {
        "q": query,
        "format": "json",
        "addressdetails": "1",
        "countrycodes": config.NOMINATIM_COUNTRY_CODES,
        "limit": str(config.NOMINATIM_MAX_RESULTS),
    }
    headers = {
        "Accept-Language": "en-AU",
        "User-Agent": config.NOMINATIM_USER_AGENT,
    }

    try:
        async with httpx.AsyncClient(transport=transport) as client:
            resp = await client.get(
                f"{config.NOMINATIM_BASE_URL}/search", params=params, headers=headers, timeout=10.0
            )
    except httpx.HTTPError as e:
        logger.error(f"Address search error: {e}")
        raise ApiError(500, "Lookup error") from e

    if resp.status_code >= 400:
        logger.warning(f"Nominatim API error {resp.status_code}: {resp.text[:200]}")
        raise ApiError(resp.status_code, "Lookup failed")

    try:
        data = resp.json()
    except ValueError as e:
        logger.error(f"Address search returned invalid JSON: {e}")
        raise ApiError(500, "Lookup error") from e

    return JSONResponse(content=data)
