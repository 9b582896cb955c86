"""Custom exception hierarchy for helmlink."""

from __future__ import annotations


class HelmLinkError(Exception):
    """Base exception for all helmlink errors."""


class HelmLinkConfigError(HelmLinkError):
    """Invalid or missing configuration."""


class OriginNotSetError(HelmLinkError):
    """A local-frame operation was requested before an origin was received.

    Waypoint and loiter commands are expressed in the platform's local
    east-north frame, so they cannot be encoded until the platform has
    reported its origin.
    """


class PayloadError(HelmLinkError):
    """An inbound payload could not be decoded into its message model."""

    def __init__(self, message: str, *, topic: str = "") -> None:
        self.topic = topic
        super().__init__(message)


class LinkError(HelmLinkError):
    """The messaging substrate link could not be opened or used."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)
