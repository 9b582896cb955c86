"""helmlink - Async telemetry bridge for autonomous surface vehicles."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("helmlink")
except PackageNotFoundError:
    __version__ = "0+local"

from helmlink.bridge import TelemetryBridge
from helmlink.commands import decode_points, encode_loiter, encode_waypoints
from helmlink.config import BridgeConfig
from helmlink.dispatch import Dispatcher
from helmlink.exceptions import (
    HelmLinkConfigError,
    HelmLinkError,
    LinkError,
    OriginNotSetError,
    PayloadError,
)
from helmlink.geodesy import GeodeticReferenceFrame, to_local
from helmlink.models import (
    AisContactMessage,
    ConnectionState,
    ContactSnapshot,
    GeodeticPoint,
    HelmState,
    LocalOffset,
    Origin,
)
from helmlink.state.events import (
    BridgeEvent,
    ConnectivityChanged,
    ContactAdded,
    EventKind,
    HeadingUpdated,
    LocationUpdated,
    OriginUpdated,
)
from helmlink.state.store import TrackStore
from helmlink.supervisor import ConnectionSupervisor

__all__ = [
    "__version__",
    "AisContactMessage",
    "BridgeConfig",
    "BridgeEvent",
    "ConnectionState",
    "ConnectionSupervisor",
    "ConnectivityChanged",
    "ContactAdded",
    "ContactSnapshot",
    "Dispatcher",
    "EventKind",
    "GeodeticPoint",
    "GeodeticReferenceFrame",
    "HeadingUpdated",
    "HelmLinkConfigError",
    "HelmLinkError",
    "HelmState",
    "LinkError",
    "LocalOffset",
    "LocationUpdated",
    "Origin",
    "OriginNotSetError",
    "OriginUpdated",
    "PayloadError",
    "TelemetryBridge",
    "TrackStore",
    "decode_points",
    "encode_loiter",
    "encode_waypoints",
    "to_local",
]
