"""Geofence validation: great-circle distance and the inside-radius verdict.

Pure functions; no I/O and no exceptions on bad input. A missing or
non-finite fix is reported as ``GeoStatus.unknown`` and is never permitted.
"""

from __future__ import annotations

import math
from typing import Optional

from liveops.attendance.schemas import GeoCheck, GeofenceConfig
from liveops.common.constants import EARTH_RADIUS_METERS, GeoStatus


def haversine_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> int:
    """Great-circle distance in metres, rounded to the nearest metre."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Guard against a drifting slightly past 1.0 for antipodal points.
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return int(math.floor(EARTH_RADIUS_METERS * c + 0.5))


def distance_verdict(
    user_lat: float,
    user_lon: float,
    office_lat: float,
    office_lon: float,
    radius_meters: float,
) -> tuple[int, bool]:
    """Return ``(distance_meters, inside_radius)``; the boundary is inclusive."""
    distance = haversine_distance(user_lat, user_lon, office_lat, office_lon)
    return distance, distance <= radius_meters


def _usable(value: Optional[float]) -> bool:
    return value is not None and isinstance(value, (int, float)) and math.isfinite(value)


def check_geofence(
    latitude: Optional[float],
    longitude: Optional[float],
    geofence: GeofenceConfig,
    *,
    employee_remote_allowed: bool = False,
) -> GeoCheck:
    """Decide whether an attendance write is permitted from this fix.

    Remote permission (company-wide or per employee) allows the write
    regardless of distance, but a distance is still reported when both the
    fix and the office location are known.
    """
    remote = geofence.allow_remote or employee_remote_allowed
    base = dict(location_name=geofence.location_name, radius_meters=geofence.radius)

    have_fix = _usable(latitude) and _usable(longitude)
    if not have_fix or not geofence.is_configured:
        if remote:
            return GeoCheck(status=GeoStatus.remote_allowed, permitted=True, **base)
        return GeoCheck(status=GeoStatus.unknown, permitted=False, **base)

    distance, inside = distance_verdict(
        latitude, longitude, geofence.latitude, geofence.longitude, geofence.radius,
    )
    if inside:
        status = GeoStatus.inside
    elif remote:
        status = GeoStatus.remote_allowed
    else:
        status = GeoStatus.out_of_range
    return GeoCheck(
        status=status,
        permitted=inside or remote,
        distance_meters=distance,
        inside_radius=inside,
        **base,
    )
