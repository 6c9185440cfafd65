"""Distance helpers for the location-aware list and stats endpoints."""

import math
from typing import Iterable, List, Optional

from fastapi import HTTPException

EARTH_RADIUS_METERS = 6371000.0
METERS_PER_MILE = 1609.344
DEFAULT_RADIUS_MILES = 50.0


def haversine_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points, in meters."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(math.sqrt(a))


def parse_radius_miles(raw: Optional[str]) -> float:
    """Read a radius such as ``"25"`` or ``"25mi"``."""
    if raw is None or raw.strip() == "":
        return DEFAULT_RADIUS_MILES
    value = raw.strip().lower()
    if value.endswith("mi"):
        value = value[:-2].strip()
    try:
        miles = float(value)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid radius")
    if miles < 0 or math.isnan(miles):
        raise HTTPException(status_code=400, detail="Invalid radius")
    return miles


def pick_origin(primary: Optional[float], alias: Optional[float]) -> Optional[float]:
    return primary if primary is not None else alias


def within_radius(records: Iterable[dict], lat: float, lng: float, radius_miles: float) -> List[dict]:
    """Records inside the radius, nearest first, with their distance attached.

    Records without coordinates are skipped.
    """
    limit = radius_miles * METERS_PER_MILE
    nearby = []
    for record in records:
        if record.get("latitude") is None or record.get("longitude") is None:
            continue
        distance = haversine_meters(lat, lng, record["latitude"], record["longitude"])
        if distance <= limit:
            nearby.append({**record, "distance": distance, "distance_units": "meters"})
    nearby.sort(key=lambda record: record["distance"])
    return nearby
