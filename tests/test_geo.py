"""Geofence tests — haversine distance, inclusive radius, permit verdicts."""

from __future__ import annotations

import math

import pytest

from liveops.attendance.geo import check_geofence, distance_verdict, haversine_distance
from liveops.attendance.schemas import GeofenceConfig
from liveops.common.constants import GeoStatus

OFFICE = (-6.2, 106.816666)


def _geofence(**overrides) -> GeofenceConfig:
    data = {
        "locationName": "Kantor Visibel",
        "latitude": OFFICE[0],
        "longitude": OFFICE[1],
        "radius": 100,
    }
    data.update(overrides)
    return GeofenceConfig.model_validate(data)


# ═════════════════════════════════════════════════════════════════════
# DISTANCE
# ═════════════════════════════════════════════════════════════════════


class TestHaversine:

    def test_same_point_is_zero(self):
        assert haversine_distance(*OFFICE, *OFFICE) == 0

    @pytest.mark.parametrize("radius", [1, 50, 100, 5000])
    def test_office_coordinates_inside_any_positive_radius(self, radius):
        distance, inside = distance_verdict(*OFFICE, *OFFICE, radius)
        assert distance == 0
        assert inside is True

    def test_symmetric(self):
        a = (-6.175392, 106.827153)
        b = (-6.914744, 107.609810)
        assert haversine_distance(*a, *b) == haversine_distance(*b, *a)

    def test_one_degree_of_latitude(self):
        # 2 * pi * 6_371_000 / 360 = 111_194.93 m
        assert haversine_distance(0.0, 0.0, 1.0, 0.0) == 111_195

    def test_antipodal_points_do_not_fail(self):
        distance = haversine_distance(0.0, 0.0, 0.0, 180.0)
        assert distance == round(math.pi * 6_371_000)

    def test_boundary_is_inclusive(self):
        user = (-6.2009, 106.816666)
        distance = haversine_distance(*user, *OFFICE)
        assert distance > 0

        _, inside_at_edge = distance_verdict(*user, *OFFICE, distance)
        _, inside_short = distance_verdict(*user, *OFFICE, distance - 1)
        assert inside_at_edge is True
        assert inside_short is False


# ═════════════════════════════════════════════════════════════════════
# VERDICT
# ═════════════════════════════════════════════════════════════════════


class TestCheckGeofence:

    def test_inside_radius_is_permitted(self):
        check = check_geofence(*OFFICE, _geofence())
        assert check.status == GeoStatus.inside
        assert check.permitted is True
        assert check.inside_radius is True
        assert check.distance_meters == 0
        assert check.location_name == "Kantor Visibel"

    def test_out_of_range_is_blocked_with_distance(self):
        check = check_geofence(-6.21, 106.816666, _geofence())
        assert check.status == GeoStatus.out_of_range
        assert check.permitted is False
        assert check.inside_radius is False
        assert check.distance_meters == pytest.approx(1112, abs=1)

    def test_missing_fix_is_unknown_and_blocked(self):
        check = check_geofence(None, None, _geofence())
        assert check.status == GeoStatus.unknown
        assert check.permitted is False
        assert check.distance_meters is None

    @pytest.mark.parametrize(
        "lat,lon",
        [(float("nan"), 106.8), (-6.2, float("inf")), (None, 106.8), (-6.2, None)],
    )
    def test_unusable_fix_never_fails_open(self, lat, lon):
        check = check_geofence(lat, lon, _geofence())
        assert check.status == GeoStatus.unknown
        assert check.permitted is False

    def test_unconfigured_office_blocks(self):
        check = check_geofence(*OFFICE, GeofenceConfig())
        assert check.status == GeoStatus.unknown
        assert check.permitted is False

    def test_company_remote_flag_permits_out_of_range(self):
        check = check_geofence(-6.3, 106.9, _geofence(allowRemote=True))
        assert check.status == GeoStatus.remote_allowed
        assert check.permitted is True
        assert check.inside_radius is False
        assert check.distance_meters is not None

    def test_employee_override_permits_out_of_range(self):
        check = check_geofence(
            -6.3, 106.9, _geofence(), employee_remote_allowed=True,
        )
        assert check.status == GeoStatus.remote_allowed
        assert check.permitted is True

    def test_remote_employee_without_fix_is_permitted(self):
        check = check_geofence(None, None, _geofence(), employee_remote_allowed=True)
        assert check.status == GeoStatus.remote_allowed
        assert check.permitted is True
        assert check.distance_meters is None

    def test_inside_reported_as_inside_even_when_remote(self):
        check = check_geofence(*OFFICE, _geofence(allowRemote=True))
        assert check.status == GeoStatus.inside
