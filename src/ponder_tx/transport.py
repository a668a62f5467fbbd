#!/usr/bin/env python3
"""Ponder - the MQTT transports to the appliances' broker & to the hub's broker.

Operates at the msg layer of: app - msg - mqtt

Both transports use paho-mqtt's own network thread (loop_start); received messages
are handed over to the event loop via call_soon_threadsafe(), and publishes are
awaited (for QoS > 0, until the broker has acknowledged them).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import Any, Final

from paho.mqtt import MQTTException, client as mqtt

from . import exceptions as exc
from .const import CLIP_TOPIC_ROOT, SZ_AVAILABILITY, SZ_OFFLINE, SZ_ONLINE
from .schemas import DEFAULT_PUBLISH_TIMEOUT, MqttConfigT

_DEFAULT_TIMEOUT_CONNECT: Final[float] = 9
_KEEP_ALIVE: Final[int] = 60

_LOGGER = logging.getLogger(__name__)


MsgHandlerT = Callable[[str, bytes], None]


class MqttTransport:
    """Send/receive MQTT messages to/from a broker."""

    _SUBSCRIPTIONS: tuple[str, ...] = ()

    def __init__(
        self,
        config: MqttConfigT,
        msg_handler: MsgHandlerT,
        *,
        publish_timeout: float = DEFAULT_PUBLISH_TIMEOUT,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._config = config
        self._msg_handler = msg_handler
        self._publish_timeout = publish_timeout
        self._loop = loop or asyncio.get_running_loop()

        self._qos: int = config.get("qos", 0)
        self._connected = asyncio.Event()

        self.client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2, client_id=config.get("client_id") or ""
        )

        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect
        self.client.on_message = self._on_message

        if config.get("username"):
            self.client.username_pw_set(config["username"], config.get("password"))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._config['host']}:{self._config['port']})"

    @property
    def subscriptions(self) -> Iterable[str]:
        return self._SUBSCRIPTIONS

    @property
    def is_connected(self) -> bool:
        return self._connected.is_set()

    async def start(self, timeout: float = _DEFAULT_TIMEOUT_CONNECT) -> None:
        """Connect to the broker and wait until the connection is established."""

        try:
            self.client.connect_async(
                self._config["host"], self._config["port"], _KEEP_ALIVE
            )
        except (OSError, ValueError) as err:
            raise exc.TransportConfigInvalid(f"{self}: unable to connect: {err}") from err

        self.client.loop_start()

        try:
            await asyncio.wait_for(self._connected.wait(), timeout)
        except TimeoutError as err:
            self.client.loop_stop()
            raise exc.TransportError(f"{self}: timed out connecting") from err

    async def stop(self) -> None:
        """Disconnect from the broker and stop its network thread."""

        if self.is_connected:
            self.client.disconnect()
        await asyncio.to_thread(self.client.loop_stop)
        self._connected.clear()

    def _on_connect(
        self,
        client: mqtt.Client,
        userdata: Any | None,
        flags: mqtt.ConnectFlags,
        reason_code: mqtt.ReasonCode,
        properties: mqtt.Properties | None,
    ) -> None:
        if reason_code.is_failure:
            _LOGGER.error("%s: connection refused: %s", self, reason_code)
            return

        _LOGGER.info("%s: connected", self)

        for topic in self.subscriptions:
            self.client.subscribe(topic, qos=self._qos)

        self._loop.call_soon_threadsafe(self._connected.set)

    def _on_disconnect(
        self,
        client: mqtt.Client,
        userdata: Any | None,
        flags: mqtt.DisconnectFlags,
        reason_code: mqtt.ReasonCode,
        properties: mqtt.Properties | None,
    ) -> None:
        _LOGGER.warning("%s: disconnected: %s", self, reason_code)

        self._loop.call_soon_threadsafe(self._connected.clear)

    def _on_message(
        self, client: mqtt.Client, userdata: Any | None, msg: mqtt.MQTTMessage
    ) -> None:
        """Pass the message to the handler (in the event loop's thread)."""

        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug("Rx: %s %s", msg.topic, msg.payload)

        self._loop.call_soon_threadsafe(self._msg_handler, msg.topic, msg.payload)

    async def publish(self, topic: str, payload: str, retain: bool = False) -> None:
        """Publish a message, and wait until it has been sent.

        Raise PublishFailed if the message could not be published.
        """

        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug("Tx: %s %s%s", topic, payload, " (retained)" if retain else "")

        try:
            info = self.client.publish(topic, payload=payload, qos=self._qos, retain=retain)
        except (MQTTException, ValueError) as err:
            raise exc.PublishFailed(f"{self}: unable to publish to {topic}: {err}") from err

        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise exc.PublishFailed(
                f"{self}: unable to publish to {topic}: {mqtt.error_string(info.rc)}"
            )

        if not self._qos:
            return

        try:
            await asyncio.to_thread(info.wait_for_publish, self._publish_timeout)
        except (RuntimeError, ValueError) as err:
            raise exc.PublishFailed(f"{self}: unable to publish to {topic}: {err}") from err

        if not info.is_published():
            raise exc.PublishFailed(f"{self}: timed out publishing to {topic}")


class BrokerTransport(MqttTransport):
    """The transport to the broker used by the appliances.

    Subscribes to everything the appliances publish (clip/#).
    """

    _SUBSCRIPTIONS = (f"{CLIP_TOPIC_ROOT}/#",)


class HubTransport(MqttTransport):
    """The transport to the hub's (Home Assistant's) broker.

    Subscribes to the hub's status (for rediscovery) and to property set requests.
    """

    def __init__(
        self,
        config: MqttConfigT,
        msg_handler: MsgHandlerT,
        *,
        ponder_prefix: str,
        discovery_prefix: str,
        **kwargs: Any,
    ) -> None:
        super().__init__(config, msg_handler, **kwargs)

        self._ponder_prefix = ponder_prefix
        self._discovery_prefix = discovery_prefix

        self._availability_topic = f"{ponder_prefix}/{SZ_AVAILABILITY}"
        self.client.will_set(self._availability_topic, SZ_OFFLINE, qos=0, retain=True)

    @property
    def subscriptions(self) -> Iterable[str]:
        return (f"{self._discovery_prefix}/status", f"{self._ponder_prefix}/+/+/set")

    def _on_connect(
        self,
        client: mqtt.Client,
        userdata: Any | None,
        flags: mqtt.ConnectFlags,
        reason_code: mqtt.ReasonCode,
        properties: mqtt.Properties | None,
    ) -> None:
        if not reason_code.is_failure:
            self.client.publish(self._availability_topic, SZ_ONLINE, qos=0, retain=True)
        super()._on_connect(client, userdata, flags, reason_code, properties)
