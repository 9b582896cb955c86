"""Inbound wire message models.

The platform publishes JSON renditions of its navigation messages.  The
models below mirror their field layout; all angles arrive in radians.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from helmlink.models._base import Degrees, HelmLinkBaseModel, Meters, Radians
from helmlink.models.geo import GeodeticPoint


class Header(HelmLinkBaseModel):
    """Message header.

    ``stamp`` is normalised to epoch seconds.  Both a plain number and the
    ``{"secs": ..., "nsecs": ...}`` form are accepted.
    """

    stamp: float | None = None
    frame_id: str = Field(default="", validation_alias=AliasChoices("frame_id", "frameId"))

    @field_validator("stamp", mode="before")
    @classmethod
    def _coerce_stamp(cls, value: Any) -> float | None:
        if isinstance(value, dict):
            secs = value.get("secs", value.get("sec", 0))
            nsecs = value.get("nsecs", value.get("nanosec", 0))
            return float(secs) + float(nsecs) * 1e-9
        return value


class GeoPointMessage(HelmLinkBaseModel):
    latitude: Degrees = Field(..., validation_alias=AliasChoices("latitude", "lat"))
    longitude: Degrees = Field(..., validation_alias=AliasChoices("longitude", "lon", "lng"))
    altitude: Meters = Field(default=0.0, validation_alias=AliasChoices("altitude", "alt"))

    def to_point(self) -> GeodeticPoint:
        return GeodeticPoint(latitude=self.latitude, longitude=self.longitude, altitude=self.altitude)


class GeoPointStampedMessage(HelmLinkBaseModel):
    """Ownship position report."""

    header: Header = Field(default_factory=Header)
    position: GeoPointMessage


class Orientation(HelmLinkBaseModel):
    heading: Radians
    pitch: Radians = 0.0
    roll: Radians = 0.0


class NavEulerStampedMessage(HelmLinkBaseModel):
    """Ownship attitude report; only the heading is used."""

    header: Header = Field(default_factory=Header)
    orientation: Orientation


class AisContactMessage(HelmLinkBaseModel):
    """Contact report for an externally tracked vessel.

    Parameters
    ----------
    mmsi : int
        Maritime Mobile Service Identity, the contact's stable identifier.
    name : str
        Reported vessel name; may be empty.
    position : GeoPointMessage
        Reported position.
    cog : float
        Course over ground in radians.
    heading : float
        True heading in radians.
    sog : float or None
        Speed over ground in m/s, when reported.
    """

    header: Header = Field(default_factory=Header)
    mmsi: int = Field(..., ge=0)
    name: str = ""
    position: GeoPointMessage
    cog: Radians = 0.0
    heading: Radians = 0.0
    sog: float | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().rstrip("@").strip()
        return value
