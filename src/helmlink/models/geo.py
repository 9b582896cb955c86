"""Coordinate value types."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from helmlink.models._base import Degrees, Meters


class GeodeticPoint(BaseModel):
    """A position on the WGS84 ellipsoid.

    Parameters
    ----------
    latitude : float
        Latitude in degrees, ``-90..90``.
    longitude : float
        Longitude in degrees, ``-180..180``.
    altitude : float
        Height above the ellipsoid in meters.  Waypoints and contacts do
        not carry an altitude; it defaults to ``0``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    latitude: Degrees = Field(..., ge=-90.0, le=90.0)
    longitude: Degrees = Field(..., ge=-180.0, le=180.0)
    altitude: Meters = 0.0

    def at_sea_level(self) -> GeodeticPoint:
        """Copy of this point with altitude forced to zero."""
        if self.altitude == 0.0:
            return self
        return GeodeticPoint(latitude=self.latitude, longitude=self.longitude)


class LocalOffset(BaseModel):
    """East/north offset in meters within a local tangent plane."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    east: Meters = 0.0
    north: Meters = 0.0

    def __add__(self, other: LocalOffset) -> LocalOffset:
        return LocalOffset(east=self.east + other.east, north=self.north + other.north)

    def __sub__(self, other: LocalOffset) -> LocalOffset:
        return LocalOffset(east=self.east - other.east, north=self.north - other.north)

    def as_tuple(self) -> tuple[float, float]:
        return (self.east, self.north)


class EcefPoint(BaseModel):
    """Earth-centered, earth-fixed rectangular coordinates in meters."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    x: Meters
    y: Meters
    z: Meters
