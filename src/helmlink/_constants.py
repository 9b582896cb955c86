"""Internal constants shared across the library."""

DEFAULT_NAMESPACE = "udp"
DEFAULT_HELM_MODE = "standby"
DEFAULT_POLL_INTERVAL: float = 1.0

# ------------------------------------------------------------------
# Topic names (relative to the configured namespace)
# ------------------------------------------------------------------

TOPIC_POSITION = "position"
TOPIC_ORIGIN = "origin"
TOPIC_HEADING = "heading"
TOPIC_AIS = "ais"

TOPIC_ACTIVE = "active"
TOPIC_HELM_MODE = "helm_mode"
TOPIC_WPT_UPDATES = "wpt_updates"
TOPIC_LOITER_UPDATES = "loiter_updates"

INBOUND_TOPICS: tuple[str, ...] = (TOPIC_POSITION, TOPIC_ORIGIN, TOPIC_HEADING, TOPIC_AIS)
OUTBOUND_TOPICS: tuple[str, ...] = (TOPIC_ACTIVE, TOPIC_HELM_MODE, TOPIC_WPT_UPDATES, TOPIC_LOITER_UPDATES)
