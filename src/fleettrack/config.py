"""Client configuration for fleettrack."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from fleettrack.exceptions import FleetTrackConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class TrackingConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Base URL of the data API (e.g. ``"https://example.supabase.co"``).
    api_key : str
        API key sent as ``apikey`` and bearer token on every request.
    rest_path : str
        Path prefix of the row API under ``base_url``.
    request_timeout : float
        Total timeout in seconds for a single row query.
    strict_fleet_sets : bool
        Raise :class:`~fleettrack.exceptions.FleetSetConflictError` when two
        active fleet sets reference the same tractor or trailer.  When
        ``False`` (default) the last one wins and a warning is logged.
    mqtt_enabled : bool
        Enable the MQTT change feed used by ``FleetTrackClient.watch``.
    mqtt_host : str or None
        Broker host for the change feed.
    mqtt_port : int
        Broker port.
    mqtt_username : str or None
        Broker username.
    mqtt_password : str or None
        Broker password.
    mqtt_tls : bool
        Use TLS for the broker connection.
    mqtt_keepalive : int
        MQTT keepalive in seconds.
    mqtt_topic_prefix : str
        Topic prefix; change signals arrive on ``{prefix}/{org_id}/{table}``.
    """

    base_url: str
    api_key: str
    rest_path: str = "/rest/v1"
    request_timeout: float = 15.0
    strict_fleet_sets: bool = False
    mqtt_enabled: bool = False
    mqtt_host: str | None = None
    mqtt_port: int = 8883
    mqtt_username: str | None = None
    mqtt_password: str | None = None
    mqtt_tls: bool = True
    mqtt_keepalive: int = 120
    mqtt_topic_prefix: str = "fleettrack/changes"

    def __post_init__(self) -> None:
        if not self.base_url or not self.base_url.strip():
            raise FleetTrackConfigError("base_url must be non-empty")
        if not self.api_key or not self.api_key.strip():
            raise FleetTrackConfigError("api_key must be non-empty")
        if self.request_timeout <= 0:
            raise FleetTrackConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.mqtt_enabled and not self.mqtt_host:
            raise FleetTrackConfigError("mqtt_host is required when mqtt_enabled is set")

    @property
    def rest_url(self) -> str:
        """Base URL of the row API without a trailing slash."""
        return f"{self.base_url.rstrip('/')}/{self.rest_path.strip('/')}"

    @classmethod
    def from_env(cls, **overrides: Any) -> TrackingConfig:
        """Create configuration from environment variables.

        Reads ``FLEETTRACK_BASE_URL``, ``FLEETTRACK_API_KEY`` and optional
        ``FLEETTRACK_*`` variables. Explicit keyword arguments override
        environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "FLEETTRACK_BASE_URL": "base_url",
            "FLEETTRACK_API_KEY": "api_key",
            "FLEETTRACK_REST_PATH": "rest_path",
            "FLEETTRACK_MQTT_HOST": "mqtt_host",
            "FLEETTRACK_MQTT_USERNAME": "mqtt_username",
            "FLEETTRACK_MQTT_PASSWORD": "mqtt_password",
            "FLEETTRACK_MQTT_TOPIC_PREFIX": "mqtt_topic_prefix",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        timeout_env = env.get("FLEETTRACK_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = float(timeout_env)

        port_env = env.get("FLEETTRACK_MQTT_PORT")
        if port_env is not None and "mqtt_port" not in overrides:
            config_kwargs["mqtt_port"] = int(port_env)

        keepalive_env = env.get("FLEETTRACK_MQTT_KEEPALIVE")
        if keepalive_env is not None and "mqtt_keepalive" not in overrides:
            config_kwargs["mqtt_keepalive"] = int(keepalive_env)

        if "strict_fleet_sets" not in overrides:
            config_kwargs["strict_fleet_sets"] = _env_bool(env.get("FLEETTRACK_STRICT_FLEET_SETS"), False)
        if "mqtt_enabled" not in overrides:
            config_kwargs["mqtt_enabled"] = _env_bool(env.get("FLEETTRACK_MQTT_ENABLED"), False)
        if "mqtt_tls" not in overrides:
            config_kwargs["mqtt_tls"] = _env_bool(env.get("FLEETTRACK_MQTT_TLS"), True)

        config_kwargs.update(overrides)

        if "base_url" not in config_kwargs or "api_key" not in config_kwargs:
            raise FleetTrackConfigError("FLEETTRACK_BASE_URL and FLEETTRACK_API_KEY must be set")

        return cls(**config_kwargs)
