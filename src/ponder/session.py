#!/usr/bin/env python3
"""Ponder - a provisioned appliance: its register cache and its model's fields.

Register updates (from the appliance) are translated into retained property values
(to the hub), and property set requests (from the hub) into write packets (to the
appliance). The register cache is only ever accessed via these two flows.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from ponder_tx import (
    CMD_QUERY,
    CMD_WRITE,
    DEVICE_TOPIC,
    QUERY_ALL,
    TAG_QUERY,
    Tlv,
    build_frame,
    packet_envelope,
)

from . import exceptions as exc
from .const import (
    MAX_REDIRECT_HOPS,
    SZ_AVAILABILITY,
    SZ_DEVICE,
    SZ_IDENTIFIERS,
    SZ_MANUFACTURER,
    SZ_MODEL,
    SZ_OBJECT_ID,
    SZ_ONLINE,
    SZ_OPTIMISTIC,
    SZ_SW_VERSION,
    SZ_TOPIC,
    SZ_UNIQUE_ID,
)
from .device import DeviceModel, DeviceState

if TYPE_CHECKING:
    from ponder_tx import CommandHeaderT, DeviceIdT, TagT
    from ponder_tx.typing import PublisherT


_LOGGER = logging.getLogger(__name__)


class DeviceSession:
    """A provisioned appliance."""

    def __init__(
        self,
        device_id: DeviceIdT,
        model: DeviceModel,
        *,
        broker: PublisherT,
        hub: PublisherT,
        ponder_prefix: str,
        discovery_prefix: str,
        topic: str | None = None,
    ) -> None:
        self.id = device_id
        self.model = model
        self.topic = topic or DEVICE_TOPIC.format(device_id)

        self._broker = broker
        self._hub = hub
        self._ponder_prefix = ponder_prefix
        self._discovery_prefix = discovery_prefix

        self._state = DeviceState()

    def __repr__(self) -> str:
        return f"DeviceSession({self.id}, {self.model.model})"

    def __str__(self) -> str:
        return f"{self.id} ({self.model.model})"

    def raw_value(self, tag: TagT) -> int | None:
        """Return the last known raw value of a register."""
        return self._state.get(tag)

    async def start(self) -> None:
        """Announce the appliance to the hub, and ask it for its state."""

        await self.publish_discovery_descriptor()
        await self.query()

    # Appliance -> hub

    async def apply_inbound_packet(self, records: list[Tlv]) -> None:
        """Process the records of a register update, in order."""

        for rec in records:
            await self._process_register(rec.tag, rec.value)

    async def _process_register(self, tag: TagT, value: int) -> None:
        self._state.set(tag, value)

        for _ in range(MAX_REDIRECT_HOPS):
            try:
                fld = self.model.fields.by_tag(tag)
            except exc.UnknownField:
                _LOGGER.debug("%s: 0x%03X = %s (no field)", self, tag, value)
                return

            display = fld.read_xform(value, self._state.snapshot())
            if display is None:
                display = str(value)

            if (redirect := fld.read_callback(display)) is not None:
                _LOGGER.debug("%s: %r redirected to 0x%03X", self, fld, redirect)
                tag = redirect
                continue

            if fld.readable:
                await self._publish_property(fld.name, display, retain=True)
            return

        _LOGGER.warning(
            "%s: redirects of 0x%03X exceeded %s hops (ignoring)",
            self,
            tag,
            MAX_REDIRECT_HOPS,
        )

    async def _publish_property(
        self, prop: str, value: str, retain: bool = False
    ) -> None:
        topic = f"{self._ponder_prefix}/{self.id}/{prop}"
        await self._hub.publish(topic, value, retain=retain)

    # Hub -> appliance

    async def set_property(self, name: str, value: str) -> None:
        """Write a property to the appliance.

        Raise AttachStateMissing if the write needs registers that are not yet known.
        """
        await self._set_property(name, value, hops=0)

    async def _set_property(self, name: str, value: str, hops: int) -> None:
        if hops >= MAX_REDIRECT_HOPS:
            _LOGGER.warning(
                "%s: pre-writes of %s exceeded %s hops (ignoring)",
                self,
                name,
                MAX_REDIRECT_HOPS,
            )
            return

        try:
            fld = self.model.fields.by_name(name)
        except exc.UnknownField as err:
            _LOGGER.warning("%s: %s (ignoring)", self, err)
            return

        if not fld.writable:
            _LOGGER.warning("%s: %s is not writable (ignoring)", self, name)
            return

        if (pre_write := fld.pre_write_xform(value)) is not None:
            await self._set_property(*pre_write, hops=hops + 1)

        if (raw := fld.write_xform(value)) is None:
            _LOGGER.info("%s: %s = %r is not supported (ignoring)", self, name, value)
            return

        if fld.write_callback(value) is not None:
            return

        records = [Tlv(fld.tag, raw)] + self._state.require(fld.write_attach(raw))
        await self.send(CMD_WRITE, records)

        self._state.set(fld.tag, raw)

    async def send(self, header: CommandHeaderT, records: list[Tlv]) -> None:
        """Send a packet to the appliance."""

        frame = build_frame(header, records)
        _LOGGER.info("%s: Tx %s", self, records)

        await self._broker.publish(self.topic, packet_envelope(self.id, frame))

    async def query(self) -> None:
        """Ask the appliance to report all of its registers."""
        await self.send(CMD_QUERY, [Tlv(TAG_QUERY, QUERY_ALL)])

    # Discovery

    def discovery_descriptor(self) -> dict[str, Any]:
        """Return the hub's discovery config for this appliance."""

        config: dict[str, Any] = {
            SZ_AVAILABILITY: [
                {SZ_TOPIC: f"{self._ponder_prefix}/{self.id}/{SZ_AVAILABILITY}"},
                {SZ_TOPIC: f"{self._ponder_prefix}/{SZ_AVAILABILITY}"},
            ],
            SZ_OPTIMISTIC: False,
            SZ_OBJECT_ID: self.id,
            SZ_UNIQUE_ID: self.id,
            SZ_DEVICE: {
                SZ_IDENTIFIERS: self.id,
                SZ_MANUFACTURER: self.model.manufacturer,
                SZ_MODEL: self.model.model,
                SZ_SW_VERSION: self.model.sw_version,
            },
        }
        config.update(self.model.capabilities(self.id, self._ponder_prefix))
        return config

    async def publish_discovery_descriptor(self) -> None:
        """Publish the discovery config, and mark the appliance as available."""

        topic = (
            f"{self._discovery_prefix}/{self.model.ha_class}"
            f"/{self._ponder_prefix}/{self.id}/config"
        )
        await self._hub.publish(topic, json.dumps(self.discovery_descriptor()))
        await self._publish_property(SZ_AVAILABILITY, SZ_ONLINE)
