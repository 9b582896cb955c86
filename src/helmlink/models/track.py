"""Track, contact and helm state models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from helmlink._constants import DEFAULT_HELM_MODE
from helmlink.models._base import Degrees
from helmlink.models.geo import GeodeticPoint, LocalOffset


class ConnectionState(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class Origin(BaseModel):
    """Anchor of the platform's local frame.

    Local-frame data is meaningless until the platform has reported an
    origin; ``valid`` is ``False`` until then.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    point: GeodeticPoint | None = None

    @property
    def valid(self) -> bool:
        return self.point is not None


class ContactSnapshot(BaseModel):
    """One report of an externally tracked contact.

    Parameters
    ----------
    mmsi : int
        Contact identifier.
    name : str
        Display name.
    location : GeodeticPoint
        Reported position.
    location_local : LocalOffset or None
        Position in the local frame; ``None`` when no origin was known at
        ingestion time.
    heading : float
        Heading in degrees.
    stamp : float or None
        Report timestamp in epoch seconds, when the platform supplied one.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mmsi: int
    name: str = ""
    location: GeodeticPoint
    location_local: LocalOffset | None = None
    heading: Degrees = 0.0
    stamp: float | None = None


class HelmState(BaseModel):
    """Operator-controlled helm settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    active: bool = False
    helm_mode: str = Field(default=DEFAULT_HELM_MODE, min_length=1)
