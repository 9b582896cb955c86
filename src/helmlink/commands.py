"""Outbound command payload encoding.

The platform expects waypoint and loiter updates as text in its local
east-north frame, one ``"<east>, <north>:"`` pair per point:

    points = 12.5, 110.6:-40.2, 3.25:
    center_assign = 12.5, 110.6:

Numbers are written with six significant digits (``%g``), matching the
platform's own formatting.
"""

from __future__ import annotations

from collections.abc import Iterable

from helmlink.exceptions import OriginNotSetError
from helmlink.geodesy import GeodeticReferenceFrame
from helmlink.models.geo import GeodeticPoint, LocalOffset
from helmlink.models.track import Origin

WAYPOINTS_PREFIX = "points = "
LOITER_PREFIX = "center_assign = "


def _require_frame(origin: Origin | GeodeticPoint | None) -> GeodeticReferenceFrame:
    point = origin.point if isinstance(origin, Origin) else origin
    if point is None:
        raise OriginNotSetError("No origin received from the platform yet")
    return GeodeticReferenceFrame(point)


def format_pair(offset: LocalOffset) -> str:
    return f"{offset.east:g}, {offset.north:g}:"


def encode_waypoints(origin: Origin | GeodeticPoint | None, waypoints: Iterable[GeodeticPoint]) -> str:
    """Encode waypoints as a ``points = ...`` update.

    Waypoints carry no altitude; each one is projected at altitude zero.

    Raises
    ------
    OriginNotSetError
        When *origin* is missing or not yet valid.
    """
    frame = _require_frame(origin)
    pairs = "".join(format_pair(frame.to_local(wp.at_sea_level())) for wp in waypoints)
    return f"{WAYPOINTS_PREFIX}{pairs}"


def encode_loiter(origin: Origin | GeodeticPoint | None, point: GeodeticPoint) -> str:
    """Encode a loiter centre as a ``center_assign = ...`` update.

    Raises
    ------
    OriginNotSetError
        When *origin* is missing or not yet valid.
    """
    frame = _require_frame(origin)
    return f"{LOITER_PREFIX}{format_pair(frame.to_local(point.at_sea_level()))}"


def decode_points(text: str) -> list[LocalOffset]:
    """Parse a waypoint or loiter update back into local offsets.

    Raises :class:`ValueError` for text that is not a command update.
    """
    _prefix, sep, body = text.partition("=")
    if not sep:
        raise ValueError(f"not a command update: {text!r}")
    offsets: list[LocalOffset] = []
    for segment in body.split(":"):
        segment = segment.strip()
        if not segment:
            continue
        east_text, comma, north_text = segment.partition(",")
        if not comma:
            raise ValueError(f"malformed coordinate pair: {segment!r}")
        offsets.append(LocalOffset(east=float(east_text), north=float(north_text)))
    return offsets
