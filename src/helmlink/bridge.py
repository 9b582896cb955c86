"""High-level telemetry bridge between an operator console and the vehicle."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Callable, Iterable
from typing import Any

from helmlink import _constants as const
from helmlink._mqtt import MqttLink, Publication, probe_broker
from helmlink.commands import encode_loiter, encode_waypoints
from helmlink.config import BridgeConfig
from helmlink.dispatch import Dispatcher
from helmlink.exceptions import HelmLinkError
from helmlink.models._base import degrees_from_radians
from helmlink.models.geo import GeodeticPoint
from helmlink.models.messages import (
    AisContactMessage,
    GeoPointMessage,
    GeoPointStampedMessage,
    NavEulerStampedMessage,
)
from helmlink.models.track import ConnectionState, HelmState
from helmlink.state.events import (
    BridgeEvent,
    ConnectivityChanged,
    ContactAdded,
    HeadingUpdated,
    LocationUpdated,
    OriginUpdated,
)
from helmlink.state.store import Projector, TrackStore
from helmlink.supervisor import ConnectionSupervisor, Link, Scheduler

_logger = logging.getLogger(__name__)

_HELM_MODE_RE = re.compile(r"^\S+$")

EventListener = Callable[[BridgeEvent], None]
LinkFactory = Callable[[Dispatcher], Link]


class TelemetryBridge:
    """Async telemetry bridge.

    Usage::

        async with TelemetryBridge(BridgeConfig.from_env()) as bridge:
            bridge.add_listener(print)
            ...
            bridge.set_helm_mode("survey")

    All track state is mutated on the event loop that entered the bridge.
    Inbound messages arrive on the MQTT network thread and are handed to
    that loop by a :class:`~helmlink.dispatch.Dispatcher`.

    Parameters
    ----------
    config
        Bridge configuration.  Defaults to :meth:`BridgeConfig.from_env`.
    probe
        Reachability check; defaults to a TCP probe of the broker.
    connect
        Factory opening a link for a dispatcher; defaults to
        :class:`~helmlink._mqtt.MqttLink`.
    schedule
        Scheduler for connectivity polls; defaults to ``loop.call_later``.
    on_event
        Optional listener registered at construction time.
    """

    def __init__(
        self,
        config: BridgeConfig | None = None,
        *,
        probe: Callable[[], bool] | None = None,
        connect: LinkFactory | None = None,
        schedule: Scheduler | None = None,
        on_event: EventListener | None = None,
    ) -> None:
        self._config = config if config is not None else BridgeConfig.from_env()
        self._probe = probe
        self._connect = connect
        self._schedule = schedule
        self._store = TrackStore(history_limit=self._config.history_limit)
        self._helm = HelmState(helm_mode=self._config.default_helm_mode)
        self._listeners: list[EventListener] = []
        if on_event is not None:
            self._listeners.append(on_event)

        self._loop: asyncio.AbstractEventLoop | None = None
        self._dispatcher: Dispatcher | None = None
        self._supervisor: ConnectionSupervisor | None = None
        self._publications: dict[str, Publication] = {}
        self._staged_publications: dict[str, Publication] = {}

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TelemetryBridge:
        self._loop = asyncio.get_running_loop()
        dispatcher = Dispatcher(self._loop)
        dispatcher.register(const.TOPIC_POSITION, self._handle_position)
        dispatcher.register(const.TOPIC_ORIGIN, self._handle_origin)
        dispatcher.register(const.TOPIC_HEADING, self._handle_heading)
        dispatcher.register(const.TOPIC_AIS, self._handle_contact)
        self._dispatcher = dispatcher

        self._supervisor = ConnectionSupervisor(
            probe=self._probe or self._probe_broker,
            connect=self._open_link,
            on_attach=self._attach,
            on_connectivity=self._on_connectivity,
            interval=self._config.poll_interval,
            schedule=self._schedule,
        )
        if self._config.autoconnect:
            await self._supervisor.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._supervisor is not None:
            await self._supervisor.stop()
            self._supervisor = None
        if self._dispatcher is not None:
            self._dispatcher.close()
            await self._dispatcher.flush()
            self._dispatcher = None
        self._staged_publications.clear()
        self._publications.clear()
        self._loop = None

    # ------------------------------------------------------------------
    # Public state
    # ------------------------------------------------------------------

    @property
    def config(self) -> BridgeConfig:
        return self._config

    @property
    def store(self) -> TrackStore:
        return self._store

    @property
    def helm_state(self) -> HelmState:
        return self._helm

    @property
    def active(self) -> bool:
        return self._helm.active

    @property
    def helm_mode(self) -> str:
        return self._helm.helm_mode

    @property
    def connection_state(self) -> ConnectionState:
        if self._supervisor is None:
            return ConnectionState.DISCONNECTED
        return self._supervisor.state

    @property
    def connected(self) -> bool:
        return self.connection_state is ConnectionState.CONNECTED

    @property
    def supervisor(self) -> ConnectionSupervisor | None:
        return self._supervisor

    def add_listener(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: EventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def flush(self) -> None:
        """Wait for every inbound update handed off so far to be applied."""
        if self._dispatcher is not None:
            await self._dispatcher.flush()

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Start connectivity polling (when ``autoconnect`` is off)."""
        if self._supervisor is None:
            raise HelmLinkError("Bridge not started. Use 'async with TelemetryBridge(...) as bridge:'")
        await self._supervisor.start()

    def _probe_broker(self) -> bool:
        return probe_broker(self._config.broker_host, self._config.broker_port, self._config.probe_timeout)

    def _open_link(self) -> Link:
        dispatcher = self._dispatcher
        if dispatcher is None:
            raise HelmLinkError("Bridge not started")
        if self._connect is not None:
            return self._connect(dispatcher)
        return MqttLink(self._config, dispatcher=dispatcher, logger=_logger)

    def _attach(self, link: Link) -> None:
        topic = self._config.topic
        link.subscribe(topic(const.TOPIC_POSITION), const.TOPIC_POSITION, GeoPointStampedMessage)
        link.subscribe(topic(const.TOPIC_ORIGIN), const.TOPIC_ORIGIN, GeoPointMessage)
        link.subscribe(topic(const.TOPIC_HEADING), const.TOPIC_HEADING, NavEulerStampedMessage)
        link.subscribe(topic(const.TOPIC_AIS), const.TOPIC_AIS, AisContactMessage)
        # Installed by _on_connectivity once the link has started.
        self._staged_publications = {name: link.advertise(topic(name)) for name in const.OUTBOUND_TOPICS}

    def _on_connectivity(self, connected: bool) -> None:
        if connected:
            self._publications = self._staged_publications
        else:
            self._publications = {}
        self._staged_publications = {}
        self._emit(ConnectivityChanged(connected=connected))

    # ------------------------------------------------------------------
    # Inbound handlers (run on the loop)
    # ------------------------------------------------------------------

    def _handle_position(self, message: GeoPointStampedMessage) -> None:
        point = message.position.to_point()
        local = self._store.append_ownship(point)
        self._emit(LocationUpdated(location=point, location_local=local))

    def _handle_origin(self, message: GeoPointMessage) -> None:
        point = message.to_point()
        if self._store.set_origin(point):
            _logger.info("Origin updated to %s", point)
            self._emit(OriginUpdated(origin=point))

    def _handle_heading(self, message: NavEulerStampedMessage) -> None:
        heading = degrees_from_radians(message.orientation.heading)
        self._store.set_heading(heading)
        self._emit(HeadingUpdated(heading=heading))

    def _handle_contact(self, message: AisContactMessage) -> None:
        _logger.debug("Contact report mmsi=%s name=%s", message.mmsi, message.name)
        snapshot = self._store.ingest_contact_report(message)
        self._emit(ContactAdded(contact=snapshot))

    def _emit(self, event: BridgeEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                _logger.debug("Event listener failed for %s", event.kind, exc_info=True)

    # ------------------------------------------------------------------
    # Display anchor
    # ------------------------------------------------------------------

    def reanchor(self, projector: Projector | None) -> None:
        """Re-project all history against a new display projector."""
        self._store.reanchor(projector)
        origin = self._store.origin.point
        if origin is not None:
            self._emit(OriginUpdated(origin=origin))

    # ------------------------------------------------------------------
    # Outbound commands
    # ------------------------------------------------------------------

    def _publish(self, name: str, value: bool | str) -> bool:
        publication = self._publications.get(name)
        if publication is None:
            _logger.debug("Not connected; %s update not sent", name)
            return False
        return publication.publish(value)

    def set_active(self, active: bool) -> bool:
        """Set the platform's active flag and publish it.

        Returns whether the update was handed to the substrate.
        """
        self._helm = self._helm.model_copy(update={"active": bool(active)})
        return self._publish(const.TOPIC_ACTIVE, bool(active))

    def set_helm_mode(self, helm_mode: str) -> bool:
        """Select a helm mode and publish it.

        Raises :class:`ValueError` for an empty token or one containing
        whitespace.
        """
        mode = helm_mode.strip()
        if not _HELM_MODE_RE.match(mode):
            raise ValueError(f"helm mode must be a single non-empty token, got {helm_mode!r}")
        self._helm = self._helm.model_copy(update={"helm_mode": mode})
        return self._publish(const.TOPIC_HELM_MODE, mode)

    def send_waypoints(self, waypoints: Iterable[GeodeticPoint]) -> str:
        """Encode and publish a waypoint update; returns the payload.

        Raises :class:`~helmlink.exceptions.OriginNotSetError` before an
        origin has been received.
        """
        payload = encode_waypoints(self._store.origin, waypoints)
        self._publish(const.TOPIC_WPT_UPDATES, payload)
        return payload

    def send_loiter(self, point: GeodeticPoint) -> str:
        """Encode and publish a loiter update; returns the payload.

        Raises :class:`~helmlink.exceptions.OriginNotSetError` before an
        origin has been received.
        """
        payload = encode_loiter(self._store.origin, point)
        self._publish(const.TOPIC_LOITER_UPDATES, payload)
        return payload
