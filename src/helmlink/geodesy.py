"""WGS84 geodetic, ECEF and local east-north-up conversions.

A :class:`GeodeticReferenceFrame` is anchored at an origin and maps
geodetic points into the tangent plane at that origin:

    geodetic (lat, lon, alt) -> ECEF (x, y, z) -> ENU (east, north, up)

The conversions themselves are done by :mod:`pymap3d` on the WGS84
ellipsoid.  Frames hold no mutable state; a new frame is built whenever
the origin changes.
"""

from __future__ import annotations

import pymap3d as pm

from helmlink.models.geo import EcefPoint, GeodeticPoint, LocalOffset

WGS84 = pm.Ellipsoid.from_name("wgs84")


def geodetic_to_ecef(point: GeodeticPoint) -> EcefPoint:
    """WGS84 geodetic to ECEF (x, y, z) meters."""
    x, y, z = pm.geodetic2ecef(point.latitude, point.longitude, point.altitude, ell=WGS84)
    return EcefPoint(x=float(x), y=float(y), z=float(z))


def ecef_to_geodetic(ecef: EcefPoint) -> GeodeticPoint:
    """ECEF to WGS84 geodetic."""
    lat, lon, alt = pm.ecef2geodetic(ecef.x, ecef.y, ecef.z, ell=WGS84)
    return GeodeticPoint(latitude=float(lat), longitude=float(lon), altitude=float(alt))


class GeodeticReferenceFrame:
    """Local east-north-up frame tangent to the ellipsoid at *origin*."""

    def __init__(self, origin: GeodeticPoint) -> None:
        self._origin = origin
        self._anchor = (origin.latitude, origin.longitude, origin.altitude)

    @property
    def origin(self) -> GeodeticPoint:
        return self._origin

    def ecef_to_enu(self, ecef: EcefPoint) -> tuple[float, float, float]:
        east, north, up = pm.ecef2enu(ecef.x, ecef.y, ecef.z, *self._anchor, ell=WGS84)
        return float(east), float(north), float(up)

    def to_enu(self, target: GeodeticPoint) -> tuple[float, float, float]:
        """East, north and up offsets of *target* from the origin, in meters."""
        east, north, up = pm.geodetic2enu(
            target.latitude, target.longitude, target.altitude, *self._anchor, ell=WGS84
        )
        return float(east), float(north), float(up)

    def to_local(self, target: GeodeticPoint) -> LocalOffset:
        """Planar east/north offset of *target* from the origin."""
        east, north, _up = self.to_enu(target)
        return LocalOffset(east=east, north=north)

    def to_geodetic(self, offset: LocalOffset, up: float = 0.0) -> GeodeticPoint:
        """Inverse of :meth:`to_enu` for a local offset and height."""
        lat, lon, alt = pm.enu2geodetic(offset.east, offset.north, up, *self._anchor, ell=WGS84)
        return GeodeticPoint(latitude=float(lat), longitude=float(lon), altitude=float(alt))


def to_local(origin: GeodeticPoint, target: GeodeticPoint) -> LocalOffset:
    """East/north offset of *target* relative to *origin*."""
    return GeodeticReferenceFrame(origin).to_local(target)
