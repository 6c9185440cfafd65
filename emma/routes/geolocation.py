import json
from typing import Optional
from urllib.parse import quote, unquote

from fastapi import APIRouter, Request

from emma.core.responses import success_response

router = APIRouter(prefix="/api/geolocation", tags=["Geolocation"])

LOCATION_COOKIE = "emma_location"
LOCATION_COOKIE_MAX_AGE = 24 * 60 * 60


def _header(request: Request, name: str) -> Optional[str]:
    value = request.headers.get(name)
    return unquote(value) if value else None


@router.get("")
async def get_geolocation(request: Request):
    """Approximate client location from the hosting platform's IP headers."""
    location = {
        "latitude": _header(request, "x-vercel-ip-latitude"),
        "longitude": _header(request, "x-vercel-ip-longitude"),
        "city": _header(request, "x-vercel-ip-city"),
        "state": _header(request, "x-vercel-ip-country-region"),
        "accuracy": "ip",
    }
    response = success_response(location)
    response.set_cookie(
        LOCATION_COOKIE,
        quote(json.dumps(location)),
        max_age=LOCATION_COOKIE_MAX_AGE,
        path="/",
        samesite="lax",
    )
    return response
