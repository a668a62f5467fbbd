#!/usr/bin/env python3
"""Ponder - the gateway between the appliances' broker and the hub's broker.

Every message received from either broker is queued, and processed to completion
(including any publishes it causes) before the next one is started, so that each
appliance's register cache is only ever mutated by one message at a time.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any, Final

from ponder_tx import BrokerTransport, HubTransport

from . import exceptions as exc
from .const import SZ_CONFIG, SZ_ONLINE, SZ_SET, SZ_STATUS
from .manager import DeviceManager
from .schemas import (
    SCH_GLOBAL_CONFIG,
    SZ_BROKER,
    SZ_DISCOVERY_PREFIX,
    SZ_HOME_ASSISTANT,
    SZ_PONDER_PREFIX,
    SZ_PUBLISH_TIMEOUT,
)

if TYPE_CHECKING:
    from ponder_tx.typing import PublisherT


_LOGGER = logging.getLogger(__name__)

_SRC_BROKER: Final = "broker"
_SRC_HUB: Final = "hub"


class Gateway:
    """The gateway: its transports, its device manager, and its dispatcher."""

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        *,
        broker: PublisherT | None = None,
        hub: PublisherT | None = None,
    ) -> None:
        config = SCH_GLOBAL_CONFIG(config or {})

        self._broker_config = config[SZ_BROKER]
        self._hass_config = config[SZ_HOME_ASSISTANT]
        self.config = SimpleNamespace(**config[SZ_CONFIG])

        self.ponder_prefix: str = self._hass_config[SZ_PONDER_PREFIX]
        self.discovery_prefix: str = self._hass_config[SZ_DISCOVERY_PREFIX]

        self._broker = broker  # if None, will create transports when started
        self._hub = hub
        self._transports: list[BrokerTransport | HubTransport] = []

        self._queue: asyncio.Queue[tuple[str, str, bytes]] = asyncio.Queue()
        self._dispatcher_task: asyncio.Task[None] | None = None

        self.device_manager: DeviceManager = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Gateway({self.ponder_prefix})"

    async def start(self) -> None:
        """Connect to both brokers (unless given publishers), and start dispatching."""

        if self._broker is None:
            broker_mqtt = BrokerTransport(
                self._broker_config,
                self._broker_msg_received,
                publish_timeout=getattr(self.config, SZ_PUBLISH_TIMEOUT),
            )
            self._transports.append(broker_mqtt)
            self._broker = broker_mqtt

        if self._hub is None:
            hub_mqtt = HubTransport(
                self._hass_config,  # type: ignore[arg-type]
                self._hub_msg_received,
                ponder_prefix=self.ponder_prefix,
                discovery_prefix=self.discovery_prefix,
                publish_timeout=getattr(self.config, SZ_PUBLISH_TIMEOUT),
            )
            self._transports.append(hub_mqtt)
            self._hub = hub_mqtt

        self.device_manager = DeviceManager(
            self._broker,
            self._hub,
            ponder_prefix=self.ponder_prefix,
            discovery_prefix=self.discovery_prefix,
        )

        self._dispatcher_task = asyncio.create_task(self._dispatcher())

        for transport in self._transports:
            await transport.start()

    async def stop(self) -> None:
        """Stop dispatching, and disconnect from both brokers."""

        if self._dispatcher_task:
            self._dispatcher_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._dispatcher_task
            self._dispatcher_task = None

        for transport in self._transports:
            await transport.stop()

    async def wait_until_idle(self) -> None:
        """Wait until every message received so far has been processed."""
        await self._queue.join()

    def _broker_msg_received(self, topic: str, payload: bytes) -> None:
        self._queue.put_nowait((_SRC_BROKER, topic, payload))

    def _hub_msg_received(self, topic: str, payload: bytes) -> None:
        self._queue.put_nowait((_SRC_HUB, topic, payload))

    async def _dispatcher(self) -> None:
        """Process the queued messages, one at a time."""

        while True:
            source, topic, payload = await self._queue.get()
            try:
                if source == _SRC_BROKER:
                    await self.device_manager.on_publish(topic, payload)
                else:
                    await self._on_hub_message(topic, payload)

            except exc.AttachStateMissing as err:
                _LOGGER.warning("%s < Write failed: %s", topic, err)
            except exc.PonderException as err:
                _LOGGER.error("%s < Processing failed: %s", topic, err)
            except Exception:  # the dispatcher must outlive any one message
                _LOGGER.exception("%s < Processing failed unexpectedly", topic)

            finally:
                self._queue.task_done()

    async def _on_hub_message(self, topic: str, payload: bytes) -> None:
        """Process a message from the hub: its status, or a property set request."""

        if topic == f"{self.discovery_prefix}/{SZ_STATUS}":
            if payload == SZ_ONLINE.encode():
                _LOGGER.info("The hub is online, starting discovery")
                await self.device_manager.on_discovery()
            return

        if not topic.startswith(f"{self.ponder_prefix}/"):
            return

        path = topic[len(self.ponder_prefix) + 1 :].split("/")
        if len(path) != 3 or path[2] != SZ_SET:
            return

        try:
            value = payload.decode()
        except UnicodeDecodeError:
            _LOGGER.warning("%s < Value is not UTF-8 (ignoring)", topic)
            return

        await self.device_manager.on_set_property(path[0], path[1], value)
