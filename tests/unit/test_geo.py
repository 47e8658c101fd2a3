"""Unit tests for distance and geofence helpers."""

import pytest
from libs.common.geo import (
    format_distance,
    haversine_meters,
    haversine_miles,
    is_valid_coordinates,
    point_in_polygon,
    validate_geofence,
)

OFFICE = {
    "id": "zone-1",
    "name": "Main Office",
    "zone_type": "circle",
    "center_latitude": 34.0522,
    "center_longitude": -118.2437,
    "radius_meters": 200,
    "applies_to_roles": ["vendor"],
    "is_active": True,
}

SQUARE = [
    {"lat": 0.0, "lng": 0.0},
    {"lat": 0.0, "lng": 1.0},
    {"lat": 1.0, "lng": 1.0},
    {"lat": 1.0, "lng": 0.0},
]


@pytest.mark.unit
def test_haversine_same_point_is_zero():
    assert haversine_meters(34.0, -118.0, 34.0, -118.0) == 0


@pytest.mark.unit
def test_haversine_los_angeles_to_san_francisco():
    miles = haversine_miles(34.0522, -118.2437, 37.7749, -122.4194)
    assert 345 < miles < 350


@pytest.mark.unit
@pytest.mark.parametrize(
    "lat,lng,valid",
    [(34.0, -118.0, True), (91, 0, False), (0, 181, False), ("34", "-118", False), (None, 0, False)],
)
def test_coordinate_validation(lat, lng, valid):
    assert is_valid_coordinates(lat, lng) is valid


@pytest.mark.unit
def test_point_in_polygon():
    assert point_in_polygon(0.5, 0.5, SQUARE)
    assert not point_in_polygon(1.5, 0.5, SQUARE)


@pytest.mark.unit
def test_format_distance():
    assert format_distance(250.4) == "250m"
    assert format_distance(1534) == "1.5km"


@pytest.mark.unit
def test_geofence_allows_when_no_zone_applies_to_role():
    result = validate_geofence(40.0, -74.0, [OFFICE], "hr")
    assert result.within
    assert result.message == "No geofence restrictions apply"


@pytest.mark.unit
def test_geofence_inside_circle():
    result = validate_geofence(34.0523, -118.2437, [OFFICE], "vendor")
    assert result.within
    assert result.matched_zone["name"] == "Main Office"


@pytest.mark.unit
def test_geofence_outside_reports_nearest_distance():
    result = validate_geofence(34.0622, -118.2437, [OFFICE], "vendor")
    assert not result.within
    assert result.distance_meters > 200
    assert "away from Main Office" in result.message


@pytest.mark.unit
def test_inactive_zone_is_ignored():
    result = validate_geofence(40.0, -74.0, [{**OFFICE, "is_active": False}], "vendor")
    assert result.within
