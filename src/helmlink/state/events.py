"""Bridge change notifications.

The bridge emits one of these events after each applied update so a
display collaborator can refresh.  Events are immutable values; they are
created and delivered on the update context.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from helmlink.models.geo import GeodeticPoint, LocalOffset
from helmlink.models.track import ContactSnapshot


class EventKind(StrEnum):
    CONNECTIVITY_CHANGED = "connectivity_changed"
    ORIGIN_UPDATED = "origin_updated"
    LOCATION_UPDATED = "location_updated"
    HEADING_UPDATED = "heading_updated"
    CONTACT_ADDED = "contact_added"


class BridgeEvent(BaseModel):
    """Base for all bridge notifications."""

    model_config = ConfigDict(frozen=True)

    kind: EventKind
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ConnectivityChanged(BridgeEvent):
    kind: Literal[EventKind.CONNECTIVITY_CHANGED] = EventKind.CONNECTIVITY_CHANGED
    connected: bool


class OriginUpdated(BridgeEvent):
    kind: Literal[EventKind.ORIGIN_UPDATED] = EventKind.ORIGIN_UPDATED
    origin: GeodeticPoint


class LocationUpdated(BridgeEvent):
    kind: Literal[EventKind.LOCATION_UPDATED] = EventKind.LOCATION_UPDATED
    location: GeodeticPoint
    location_local: LocalOffset | None = None


class HeadingUpdated(BridgeEvent):
    kind: Literal[EventKind.HEADING_UPDATED] = EventKind.HEADING_UPDATED
    heading: float = Field(..., description="Heading in degrees")


class ContactAdded(BridgeEvent):
    kind: Literal[EventKind.CONTACT_ADDED] = EventKind.CONTACT_ADDED
    contact: ContactSnapshot

    @property
    def mmsi(self) -> int:
        return self.contact.mmsi
