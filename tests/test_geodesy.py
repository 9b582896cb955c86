from __future__ import annotations

import math

import pytest

from helmlink.geodesy import WGS84, GeodeticReferenceFrame, ecef_to_geodetic, geodetic_to_ecef, to_local
from helmlink.models.geo import GeodeticPoint, LocalOffset


def _pt(lat: float, lon: float, alt: float = 0.0) -> GeodeticPoint:
    return GeodeticPoint(latitude=lat, longitude=lon, altitude=alt)


@pytest.mark.parametrize(
    "origin",
    [
        _pt(0.0, 0.0),
        _pt(10.0, 20.0),
        _pt(43.07, -70.71, 12.5),
        _pt(-33.9, 151.2),
        _pt(89.9, 179.9),
        _pt(-89.9, -179.9, -30.0),
    ],
)
def test_origin_maps_to_zero_offset(origin: GeodeticPoint) -> None:
    offset = to_local(origin, origin)
    assert math.hypot(offset.east, offset.north) < 1e-6


def test_ecef_on_axes() -> None:
    equator = geodetic_to_ecef(_pt(0.0, 0.0))
    assert equator.x == pytest.approx(WGS84.semimajor_axis)
    assert equator.y == pytest.approx(0.0, abs=1e-6)
    assert equator.z == pytest.approx(0.0, abs=1e-6)

    pole = geodetic_to_ecef(_pt(90.0, 0.0))
    assert pole.z == pytest.approx(WGS84.semiminor_axis)
    assert math.hypot(pole.x, pole.y) == pytest.approx(0.0, abs=1e-6)


def test_ecef_roundtrip() -> None:
    point = _pt(43.07, -70.71, 25.0)
    back = ecef_to_geodetic(geodetic_to_ecef(point))
    assert back.latitude == pytest.approx(point.latitude, abs=1e-8)
    assert back.longitude == pytest.approx(point.longitude, abs=1e-8)
    assert back.altitude == pytest.approx(point.altitude, abs=1e-3)


def test_point_north_of_origin_has_positive_north() -> None:
    origin = _pt(10.0, 20.0)
    offset = to_local(origin, _pt(10.001, 20.0))
    # One millidegree of latitude is roughly 110.6 m at 10 degrees north.
    assert 105.0 < offset.north < 115.0
    assert abs(offset.east) < 1e-6


def test_point_east_of_origin_has_positive_east() -> None:
    origin = _pt(10.0, 20.0)
    offset = to_local(origin, _pt(10.0, 20.001))
    assert 105.0 < offset.east < 112.0
    # Tangent plane curvature drops the point very slightly south.
    assert abs(offset.north) < 0.01


def test_frame_inverse_recovers_point() -> None:
    frame = GeodeticReferenceFrame(_pt(43.07, -70.71))
    target = _pt(43.0712, -70.7055)
    east, north, up = frame.to_enu(target)
    back = frame.to_geodetic(LocalOffset(east=east, north=north), up=up)
    assert back.latitude == pytest.approx(target.latitude, abs=1e-8)
    assert back.longitude == pytest.approx(target.longitude, abs=1e-8)
    assert back.altitude == pytest.approx(0.0, abs=1e-3)


def test_frame_matches_module_function() -> None:
    origin = _pt(-33.9, 151.2, 4.0)
    target = _pt(-33.91, 151.23)
    assert GeodeticReferenceFrame(origin).to_local(target) == to_local(origin, target)


def test_ecef_and_geodetic_paths_agree() -> None:
    frame = GeodeticReferenceFrame(_pt(43.07, -70.71, 3.0))
    target = _pt(43.075, -70.70, 10.0)
    via_ecef = frame.ecef_to_enu(geodetic_to_ecef(target))
    direct = frame.to_enu(target)
    assert via_ecef == pytest.approx(direct, abs=1e-6)
