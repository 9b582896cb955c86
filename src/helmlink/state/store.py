"""In-memory track store.

This is the only component allowed to mutate ownship and contact history.
It is not thread-safe: every call must happen on the bridge's update
context (see :mod:`helmlink.dispatch`).  Readers on other contexts should
use the copying accessors.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterable

from helmlink.geodesy import GeodeticReferenceFrame
from helmlink.models._base import degrees_from_radians
from helmlink.models.geo import GeodeticPoint, LocalOffset
from helmlink.models.messages import AisContactMessage
from helmlink.models.track import ContactSnapshot, Origin

_logger = logging.getLogger(__name__)

Projector = Callable[[GeodeticPoint], LocalOffset]
"""Maps a geodetic point into raw local (render) coordinates."""


class TrackStore:
    """Ownship and contact history plus their local-frame projections.

    Local points are ``projector(point) - reference_position`` where
    ``reference_position`` is the projection of the origin.  With the
    default projector (the origin's own ENU frame) the reference position
    is ``(0, 0)``; a display collaborator may install its own projector
    with :meth:`reanchor`.

    Parameters
    ----------
    history_limit : int or None
        Maximum entries kept per track.  Oldest entries are evicted first.
        ``None`` keeps everything.
    """

    def __init__(self, *, history_limit: int | None = None) -> None:
        self._history_limit = history_limit
        self._origin = Origin()
        self._frame: GeodeticReferenceFrame | None = None
        self._anchor: Projector | None = None
        self._reference_position = LocalOffset()

        self._location: GeodeticPoint | None = None
        self._location_history: deque[GeodeticPoint] = self._new_history()
        self._local_location_history: deque[LocalOffset] = self._new_history()
        self._heading = 0.0

        self._contacts: dict[int, deque[ContactSnapshot]] = {}

    def _new_history(self, items: Iterable = ()) -> deque:
        return deque(items, maxlen=self._history_limit)

    # ------------------------------------------------------------------
    # Origin / projection
    # ------------------------------------------------------------------

    @property
    def origin(self) -> Origin:
        return self._origin

    @property
    def reference_position(self) -> LocalOffset:
        return self._reference_position

    def _project(self, point: GeodeticPoint) -> LocalOffset | None:
        # No local frame exists until an origin is known, anchor or not.
        if self._origin.point is None or self._frame is None:
            return None
        if self._anchor is not None:
            raw = self._anchor(point)
        else:
            raw = self._frame.to_local(point)
        return raw - self._reference_position

    def set_origin(self, point: GeodeticPoint) -> bool:
        """Record a reported origin.

        Returns ``True`` when the origin changed, in which case every local
        point has been rebuilt.
        """
        if self._origin.point == point:
            return False
        self.rebuild_all_local(point)
        return True

    def rebuild_all_local(self, origin: GeodeticPoint | None = None) -> None:
        """Recompute every local point from geodetic history.

        When *origin* is given it becomes the new origin first.  Without an
        origin there is no local frame and the call is a no-op.
        """
        if origin is not None:
            self._origin = Origin(point=origin)
            self._frame = GeodeticReferenceFrame(origin)
        if self._origin.point is None:
            return

        self._reference_position = LocalOffset()
        reference = self._project(self._origin.point)
        if reference is not None:
            self._reference_position = reference

        self._local_location_history = self._new_history(
            self._require_local(point) for point in self._location_history
        )
        for mmsi, history in self._contacts.items():
            self._contacts[mmsi] = self._new_history(
                snapshot.model_copy(update={"location_local": self._project(snapshot.location)})
                for snapshot in history
            )
        _logger.debug(
            "Rebuilt local frame origin=%s ownship=%d contacts=%d",
            self._origin.point,
            len(self._local_location_history),
            len(self._contacts),
        )

    def reanchor(self, projector: Projector | None) -> None:
        """Install a display projector (``None`` restores the ENU frame)."""
        self._anchor = projector
        self.rebuild_all_local()

    def _require_local(self, point: GeodeticPoint) -> LocalOffset:
        local = self._project(point)
        if local is None:  # pragma: no cover - only called with a valid origin
            raise RuntimeError("local frame requested without an origin")
        return local

    # ------------------------------------------------------------------
    # Ownship
    # ------------------------------------------------------------------

    @property
    def location(self) -> GeodeticPoint | None:
        """Most recent ownship position."""
        return self._location

    @property
    def heading(self) -> float:
        """Most recent ownship heading in degrees."""
        return self._heading

    @property
    def location_history(self) -> tuple[GeodeticPoint, ...]:
        return tuple(self._location_history)

    @property
    def local_location_history(self) -> tuple[LocalOffset, ...]:
        return tuple(self._local_location_history)

    def append_ownship(self, point: GeodeticPoint) -> LocalOffset | None:
        """Append an ownship position.

        The geodetic point is always recorded.  Its local projection is
        recorded only when an origin is known, and is returned.
        """
        self._location_history.append(point)
        self._location = point
        local = self._project(point)
        if local is not None:
            self._local_location_history.append(local)
        return local

    def set_heading(self, degrees: float) -> None:
        self._heading = degrees

    # ------------------------------------------------------------------
    # Contacts
    # ------------------------------------------------------------------

    def append_contact(self, mmsi: int, snapshot: ContactSnapshot) -> ContactSnapshot:
        """Append a contact snapshot, projecting it when an origin is known."""
        local = self._project(snapshot.location)
        if local is not None or snapshot.location_local is not None:
            snapshot = snapshot.model_copy(update={"location_local": local})
        history = self._contacts.get(mmsi)
        if history is None:
            history = self._new_history()
            self._contacts[mmsi] = history
        history.append(snapshot)
        return snapshot

    def ingest_contact_report(self, report: AisContactMessage, *, stamp: float | None = None) -> ContactSnapshot:
        """Build a snapshot from a contact report and append it.

        Heading selection: the reported heading is used only once this
        contact already has a recorded heading.  A first sighting takes
        course over ground instead.
        """
        if self._contacts.get(report.mmsi):
            heading = degrees_from_radians(report.heading)
        else:
            heading = degrees_from_radians(report.cog)

        snapshot = ContactSnapshot(
            mmsi=report.mmsi,
            name=report.name,
            location=GeodeticPoint(latitude=report.position.latitude, longitude=report.position.longitude),
            heading=heading,
            stamp=stamp if stamp is not None else report.header.stamp,
        )
        return self.append_contact(report.mmsi, snapshot)

    def contact_history(self, mmsi: int) -> tuple[ContactSnapshot, ...]:
        history = self._contacts.get(mmsi)
        return tuple(history) if history is not None else ()

    def contacts(self) -> dict[int, tuple[ContactSnapshot, ...]]:
        """Copy of every contact's history keyed by identifier."""
        return {mmsi: tuple(history) for mmsi, history in self._contacts.items()}

    def latest_contacts(self) -> dict[int, ContactSnapshot]:
        """Most recent snapshot per contact."""
        return {mmsi: history[-1] for mmsi, history in self._contacts.items() if history}
