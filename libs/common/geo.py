"""
Geographic helpers: great-circle distance and geofence zone checks.

Zones are either circles (``center_latitude``/``center_longitude`` plus
``radius_meters``) or polygons (``polygon_coordinates`` as a list of
``{"lat": .., "lng": ..}`` points).
"""

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence

EARTH_RADIUS_METERS = 6371000
EARTH_RADIUS_MILES = 3959


@dataclass
class ZoneCheck:
    within: bool
    distance_meters: Optional[int] = None
    message: Optional[str] = None


@dataclass
class GeofenceResult:
    within: bool
    message: str
    matched_zone: Optional[Mapping[str, Any]] = None
    distance_meters: Optional[int] = None


def _haversine(lat1: float, lon1: float, lat2: float, lon2: float, radius: float) -> float:
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return radius * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    return _haversine(lat1, lon1, lat2, lon2, EARTH_RADIUS_METERS)


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    return _haversine(lat1, lon1, lat2, lon2, EARTH_RADIUS_MILES)


def is_valid_coordinates(latitude: Any, longitude: Any) -> bool:
    if isinstance(latitude, bool) or isinstance(longitude, bool):
        return False
    if not isinstance(latitude, (int, float)) or not isinstance(longitude, (int, float)):
        return False
    if math.isnan(latitude) or math.isnan(longitude):
        return False
    return -90 <= latitude <= 90 and -180 <= longitude <= 180


def check_circular_zone(
    latitude: float, longitude: float, zone: Mapping[str, Any]
) -> ZoneCheck:
    center_lat = zone.get("center_latitude")
    center_lng = zone.get("center_longitude")
    radius = zone.get("radius_meters")
    if center_lat is None or center_lng is None or not radius:
        return ZoneCheck(within=False, message="Invalid zone configuration")

    distance = haversine_meters(latitude, longitude, center_lat, center_lng)
    return ZoneCheck(within=distance <= radius, distance_meters=round(distance))


def point_in_polygon(
    latitude: float, longitude: float, polygon: Sequence[Mapping[str, float]]
) -> bool:
    """Ray casting; latitude is treated as x and longitude as y."""
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i]["lat"], polygon[i]["lng"]
        xj, yj = polygon[j]["lat"], polygon[j]["lng"]
        if (yi > longitude) != (yj > longitude) and latitude < (xj - xi) * (
            longitude - yi
        ) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def check_polygon_zone(
    latitude: float, longitude: float, zone: Mapping[str, Any]
) -> ZoneCheck:
    polygon = zone.get("polygon_coordinates") or []
    if len(polygon) < 3:
        return ZoneCheck(
            within=False,
            message="Invalid polygon configuration (need at least 3 points)",
        )
    return ZoneCheck(within=point_in_polygon(latitude, longitude, polygon))


def check_zone(latitude: float, longitude: float, zone: Mapping[str, Any]) -> ZoneCheck:
    if zone.get("zone_type") == "polygon":
        return check_polygon_zone(latitude, longitude, zone)
    return check_circular_zone(latitude, longitude, zone)


def format_distance(meters: float) -> str:
    if meters < 1000:
        return f"{round(meters)}m"
    return f"{meters / 1000:.1f}km"


def validate_geofence(
    latitude: float,
    longitude: float,
    zones: Iterable[Mapping[str, Any]],
    role: str,
) -> GeofenceResult:
    applicable = [
        zone
        for zone in zones
        if zone.get("is_active", True) and role in (zone.get("applies_to_roles") or [])
    ]
    if not applicable:
        return GeofenceResult(within=True, message="No geofence restrictions apply")

    nearest_distance: Optional[int] = None
    nearest_zone: Optional[Mapping[str, Any]] = None
    for zone in applicable:
        check = check_zone(latitude, longitude, zone)
        if check.within:
            return GeofenceResult(
                within=True,
                message=f"Within {zone.get('name')}",
                matched_zone=zone,
                distance_meters=check.distance_meters,
            )
        if check.distance_meters is not None and (
            nearest_distance is None or check.distance_meters < nearest_distance
        ):
            nearest_distance = check.distance_meters
            nearest_zone = zone

    if nearest_zone is not None:
        message = (
            f"You are {format_distance(nearest_distance)} away from "
            f"{nearest_zone.get('name')}. Please move closer to an authorized location."
        )
    else:
        message = "You are not within an authorized location."
    return GeofenceResult(within=False, message=message, distance_meters=nearest_distance)
