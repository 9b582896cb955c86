"""Bridge configuration for helmlink."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from helmlink._constants import DEFAULT_HELM_MODE, DEFAULT_NAMESPACE, DEFAULT_POLL_INTERVAL
from helmlink.exceptions import HelmLinkConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_optional_int(value: str | None) -> int | None:
    if value is None:
        return None
    stripped = value.strip()
    if not stripped or stripped.lower() in {"none", "unbounded"}:
        return None
    return int(stripped)


@dataclasses.dataclass(frozen=True)
class BridgeConfig:
    """Bridge configuration.

    Parameters
    ----------
    broker_host : str
        Hostname of the MQTT broker that carries vehicle traffic.
    broker_port : int
        Broker TCP port.
    namespace : str
        Topic prefix shared by every channel (``<namespace>/position``...).
        Defaults to ``"udp"``, the namespace used by the platform's
        UDP bridge.
    client_id : str
        MQTT client identifier.
    username : str or None
        Broker username, if the broker requires authentication.
    password : str or None
        Broker password.
    tls : bool
        Wrap the broker connection in TLS.
    keepalive : int
        MQTT keepalive in seconds.
    poll_interval : float
        Seconds between connectivity polls.  The interval is constant;
        there is no backoff.
    probe_timeout : float
        Timeout in seconds for a single reachability probe.
    history_limit : int or None
        Maximum number of entries kept per track (ownship and each
        contact).  ``None`` keeps the full history.
    autoconnect : bool
        Start the connection supervisor when the bridge is entered.
    default_helm_mode : str
        Helm mode assumed before the operator selects one.
    """

    broker_host: str = "localhost"
    broker_port: int = 1883
    namespace: str = DEFAULT_NAMESPACE
    client_id: str = "helmlink"
    username: str | None = None
    password: str | None = None
    tls: bool = False
    keepalive: int = 60
    poll_interval: float = DEFAULT_POLL_INTERVAL
    probe_timeout: float = 0.5
    history_limit: int | None = None
    autoconnect: bool = True
    default_helm_mode: str = DEFAULT_HELM_MODE

    def __post_init__(self) -> None:
        if not 0 < self.broker_port < 65536:
            raise HelmLinkConfigError(f"broker_port must be in 1..65535, got {self.broker_port}")
        if self.poll_interval <= 0:
            raise HelmLinkConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.probe_timeout <= 0:
            raise HelmLinkConfigError(f"probe_timeout must be positive, got {self.probe_timeout}")
        if self.history_limit is not None and self.history_limit < 1:
            raise HelmLinkConfigError(f"history_limit must be >= 1 or None, got {self.history_limit}")
        if not self.namespace.strip("/"):
            raise HelmLinkConfigError("namespace must be non-empty")

    def topic(self, name: str) -> str:
        """Full topic name for a channel under the configured namespace."""
        return f"{self.namespace.strip('/')}/{name}"

    @classmethod
    def from_env(cls, **overrides: Any) -> BridgeConfig:
        """Create configuration from environment variables.

        Reads optional ``HELMLINK_*`` variables.  Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        BridgeConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "HELMLINK_BROKER_HOST": "broker_host",
            "HELMLINK_NAMESPACE": "namespace",
            "HELMLINK_CLIENT_ID": "client_id",
            "HELMLINK_USERNAME": "username",
            "HELMLINK_PASSWORD": "password",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # Numeric fields, handled separately
        port_env = env.get("HELMLINK_BROKER_PORT")
        if port_env is not None and "broker_port" not in overrides:
            config_kwargs["broker_port"] = int(port_env)

        keepalive_env = env.get("HELMLINK_KEEPALIVE")
        if keepalive_env is not None and "keepalive" not in overrides:
            config_kwargs["keepalive"] = int(keepalive_env)

        interval_env = env.get("HELMLINK_POLL_INTERVAL")
        if interval_env is not None and "poll_interval" not in overrides:
            config_kwargs["poll_interval"] = float(interval_env)

        probe_env = env.get("HELMLINK_PROBE_TIMEOUT")
        if probe_env is not None and "probe_timeout" not in overrides:
            config_kwargs["probe_timeout"] = float(probe_env)

        if "history_limit" not in overrides:
            config_kwargs["history_limit"] = _env_optional_int(env.get("HELMLINK_HISTORY_LIMIT"))

        if "tls" not in overrides:
            config_kwargs["tls"] = _env_bool(env.get("HELMLINK_TLS"), False)

        if "autoconnect" not in overrides:
            config_kwargs["autoconnect"] = _env_bool(env.get("HELMLINK_AUTOCONNECT"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
