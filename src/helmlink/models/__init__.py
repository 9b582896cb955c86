"""Data models for helmlink."""

from helmlink.models._base import Degrees, HelmLinkBaseModel, Meters, Radians, degrees_from_radians
from helmlink.models.geo import EcefPoint, GeodeticPoint, LocalOffset
from helmlink.models.messages import (
    AisContactMessage,
    GeoPointMessage,
    GeoPointStampedMessage,
    Header,
    NavEulerStampedMessage,
    Orientation,
)
from helmlink.models.track import ConnectionState, ContactSnapshot, HelmState, Origin

__all__ = [
    "AisContactMessage",
    "ConnectionState",
    "ContactSnapshot",
    "Degrees",
    "EcefPoint",
    "GeoPointMessage",
    "GeoPointStampedMessage",
    "GeodeticPoint",
    "Header",
    "HelmLinkBaseModel",
    "HelmState",
    "LocalOffset",
    "Meters",
    "NavEulerStampedMessage",
    "Orientation",
    "Origin",
    "Radians",
    "degrees_from_radians",
]
