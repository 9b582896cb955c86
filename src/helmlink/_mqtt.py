"""Internal MQTT substrate: reachability probe, link, subscription and publication handles."""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass
from typing import Any, cast

import paho.mqtt.client as mqtt
from pydantic import BaseModel, ValidationError

from helmlink.config import BridgeConfig
from helmlink.dispatch import Dispatcher
from helmlink.exceptions import LinkError, PayloadError

_logger = logging.getLogger(__name__)


def probe_broker(host: str, port: int, timeout: float) -> bool:
    """Return whether a TCP connection to the broker can be opened."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def decode_payload(topic: str, payload: bytes, model: type[BaseModel]) -> BaseModel:
    """Decode a JSON payload into *model*.

    Raises :class:`PayloadError` for anything that does not validate.
    """
    try:
        return model.model_validate_json(payload)
    except (ValidationError, ValueError) as exc:
        raise PayloadError(f"Invalid {model.__name__} payload on {topic}: {exc}", topic=topic) from exc


def encode_outbound(value: bool | str) -> bytes:
    """Encode an outbound value: booleans as JSON, text as raw UTF-8."""
    if isinstance(value, bool):
        return b"true" if value else b"false"
    return value.encode("utf-8")


@dataclass(frozen=True)
class Subscription:
    """Inbound channel bound to a topic."""

    topic: str
    channel: str
    model: type[BaseModel]


class Publication:
    """Outbound channel bound to a topic on an open link."""

    def __init__(self, link: MqttLink, topic: str) -> None:
        self._link = link
        self._topic = topic

    @property
    def topic(self) -> str:
        return self._topic

    def publish(self, value: bool | str) -> bool:
        """Publish *value*; fire-and-forget.  Returns ``False`` if not sent."""
        return self._link.publish(self._topic, encode_outbound(value))


class MqttLink:
    """Threaded paho-mqtt link that hands decoded messages to a dispatcher.

    Messages are decoded on the paho network thread and submitted to the
    dispatcher; nothing else runs on that thread.
    """

    def __init__(
        self,
        config: BridgeConfig,
        *,
        dispatcher: Dispatcher,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._dispatcher = dispatcher
        self._logger = logger or _logger
        self._client: mqtt.Client | None = None
        self._subscriptions: dict[str, Subscription] = {}
        self._publications: dict[str, Publication] = {}
        self._running = False

    @property
    def is_running(self) -> bool:
        """Whether the network loop is active."""
        return self._running

    @property
    def subscriptions(self) -> tuple[Subscription, ...]:
        return tuple(self._subscriptions.values())

    @property
    def publications(self) -> tuple[Publication, ...]:
        return tuple(self._publications.values())

    def subscribe(self, topic: str, channel: str, model: type[BaseModel]) -> Subscription:
        """Register an inbound subscription.  Takes effect on (re)connect."""
        subscription = Subscription(topic=topic, channel=channel, model=model)
        self._subscriptions[topic] = subscription
        client = self._client
        if client is not None and client.is_connected():
            client.subscribe(topic, qos=0)
        return subscription

    def advertise(self, topic: str) -> Publication:
        """Create an outbound publication handle."""
        publication = Publication(self, topic)
        self._publications[topic] = publication
        return publication

    def start(self) -> None:
        """Connect to the broker and start asynchronous delivery."""
        if self._running:
            return
        config = self._config
        endpoint = f"{config.broker_host}:{config.broker_port}"
        self._logger.debug("MQTT link start requested broker=%s client_id=%s", endpoint, config.client_id)

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=config.client_id,
            protocol=mqtt.MQTTv311,
        )
        client.enable_logger(self._logger)
        if config.username:
            client.username_pw_set(config.username, config.password)
        if config.tls:
            client.tls_set()

        def on_connect(
            c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.value != 0:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.debug("MQTT connected reason=%s", reason_code)
            for topic in list(self._subscriptions):
                self._logger.debug("MQTT subscribing topic=%s", topic)
                c.subscribe(topic, qos=0)

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            subscription = self._subscriptions.get(msg.topic)
            if subscription is None:
                return
            try:
                value = decode_payload(msg.topic, msg.payload, subscription.model)
            except PayloadError:
                self._logger.debug("MQTT payload decode failure topic=%s", msg.topic, exc_info=True)
                return
            self._dispatcher.submit(subscription.channel, value)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if self._running:
                self._logger.debug("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        try:
            client.connect(config.broker_host, config.broker_port, keepalive=config.keepalive)
        except (OSError, ValueError) as exc:
            raise LinkError(f"Could not connect to broker: {exc}", endpoint=endpoint) from exc
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started")

    def publish(self, topic: str, payload: bytes) -> bool:
        client = self._client
        if client is None or not self._running:
            self._logger.debug("MQTT publish skipped topic=%s (link closed)", topic)
            return False
        info = client.publish(topic, payload, qos=0)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            self._logger.warning("MQTT publish failed topic=%s rc=%s", topic, info.rc)
            return False
        self._logger.debug("MQTT published topic=%s bytes=%d", topic, len(payload))
        return True

    def close(self) -> None:
        """Release all handles and stop delivery."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False
        self._subscriptions.clear()
        self._publications.clear()

        if client is None:
            return
        try:
            if was_running:
                self._logger.debug("MQTT disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")
