"""Threaded paho-mqtt feed of table change signals.

The broker publishes an (ignored) payload on ``{prefix}/{org_id}/{table}``
whenever a watched table changes. Each message becomes a
:class:`~fleettrack.notifier.ChangeEvent` handed to the asyncio loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, cast

import paho.mqtt.client as mqtt

from fleettrack.config import TrackingConfig
from fleettrack.exceptions import FleetTrackConfigError
from fleettrack.notifier import ChangeEvent, ChangeSource


def change_topics(prefix: str, org_id: str) -> list[str]:
    return [f"{prefix}/{org_id}/{source}" for source in ChangeSource]


def parse_change_topic(topic: str, prefix: str) -> ChangeEvent | None:
    """Map ``{prefix}/{org_id}/{table}`` to an event; ``None`` for anything else."""
    head = f"{prefix}/"
    if not topic.startswith(head):
        return None
    parts = topic[len(head) :].split("/")
    if len(parts) != 2 or not parts[0]:
        return None
    org_id, table = parts
    try:
        source = ChangeSource(table)
    except ValueError:
        return None
    return ChangeEvent(org_id=org_id, source=source)


class MqttChangeFeed:
    """Threaded paho-mqtt runtime that emits change events onto an asyncio loop."""

    def __init__(
        self,
        config: TrackingConfig,
        *,
        loop: asyncio.AbstractEventLoop,
        on_event: Callable[[ChangeEvent], None],
        logger: logging.Logger | None = None,
    ) -> None:
        if not config.mqtt_host:
            raise FleetTrackConfigError("mqtt_host is required to watch for changes")
        self._host: str = config.mqtt_host
        self._config = config
        self._loop = loop
        self._on_event = on_event
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._running = False
        self._topics: list[str] = []

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self, org_id: str) -> None:
        """Connect and subscribe to the change topics of *org_id*."""
        self.stop()
        config = self._config
        prefix = config.mqtt_topic_prefix
        self._topics = change_topics(prefix, org_id)
        self._logger.debug(
            "MQTT feed start requested host=%s port=%s org=%s",
            config.mqtt_host,
            config.mqtt_port,
            org_id,
        )

        client = mqtt.Client(callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2)
        client.enable_logger(self._logger)
        if config.mqtt_username:
            client.username_pw_set(config.mqtt_username, config.mqtt_password)
        if config.mqtt_tls:
            client.tls_set()

        def on_connect(
            c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.is_failure:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.debug("MQTT connected reason=%s", reason_code)
            # Runs again after every automatic reconnect.
            for topic in self._topics:
                c.subscribe(topic, qos=0)

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            event = parse_change_topic(msg.topic, prefix)
            if event is None:
                self._logger.debug("Ignoring MQTT message on unexpected topic=%s", msg.topic)
                return
            try:
                self._loop.call_soon_threadsafe(self._on_event, event)
            except RuntimeError:
                self._logger.debug("Event loop closed; dropping change event topic=%s", msg.topic)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if self._running:
                self._logger.warning("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        client.connect(self._host, config.mqtt_port, keepalive=config.mqtt_keepalive)
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started topics=%s", self._topics)

    def stop(self) -> None:
        """Stop and disconnect the current client if running."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False
        self._topics = []

        if client is None:
            return
        try:
            if was_running:
                self._logger.debug("MQTT disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")
