#!/usr/bin/env python3
"""Ponder - provision appliances, and dispatch their messages to their sessions.

Provisioning, per appliance:

    unprovisioned --(preDeploy/deploy)--> awaiting_ack --(completeProvisioning_ack)-->
    provisioned

The ack is accepted only if a (pre)deploy was seen for that appliance, and only once.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ponder_tx import ClipMessage, deploy_response, parse_frame

from . import exceptions as exc
from .const import (
    CLIP_MESSAGE_TOPIC,
    CLIP_PROVISIONING_TOPIC,
    DEVICE_TOPIC,
    ClipCmd,
    ProvisioningState,
)
from .device import get_model
from .session import DeviceSession

if TYPE_CHECKING:
    from ponder_tx import DeviceIdT
    from ponder_tx.typing import PublisherT


_LOGGER = logging.getLogger(__name__)


class DeviceManager:
    """The appliances: those being provisioned, and those with a session."""

    def __init__(
        self,
        broker: PublisherT,
        hub: PublisherT,
        *,
        ponder_prefix: str,
        discovery_prefix: str,
    ) -> None:
        self._broker = broker
        self._hub = hub
        self._ponder_prefix = ponder_prefix
        self._discovery_prefix = discovery_prefix

        self._sessions: dict[DeviceIdT, DeviceSession] = {}
        self._deploys: dict[DeviceIdT, str] = {}  # the pending (pre)deploy payloads

    def __repr__(self) -> str:
        return f"DeviceManager({len(self._sessions)} provisioned)"

    @property
    def device_ids(self) -> tuple[DeviceIdT, ...]:
        return tuple(self._sessions)

    def session(self, device_id: DeviceIdT) -> DeviceSession | None:
        return self._sessions.get(device_id)

    def is_provisioned(self, device_id: DeviceIdT) -> bool:
        return device_id in self._sessions

    def provisioning_state(self, device_id: DeviceIdT) -> ProvisioningState:
        if device_id in self._sessions:
            return ProvisioningState.PROVISIONED
        if device_id in self._deploys:
            return ProvisioningState.AWAITING_ACK
        return ProvisioningState.UNPROVISIONED

    async def on_publish(self, topic: str, payload: bytes | str) -> None:
        """Process a message published by an appliance.

        Malformed messages and protocol violations are logged, and otherwise ignored.
        """

        if not topic.startswith("clip/"):
            return

        try:
            msg = ClipMessage.from_payload(payload)
        except exc.EnvelopeInvalid as err:
            _LOGGER.warning("%s < %s (ignoring)", topic, err)
            return

        try:
            if topic == CLIP_MESSAGE_TOPIC.format(msg.did):
                if msg.cmd == ClipCmd.COMPLETE_PROVISIONING_ACK:
                    await self.complete_provisioning(msg.did, msg.kind)
                elif msg.cmd == ClipCmd.DEVICE_PACKET:
                    await self._on_device_packet(msg)

            elif topic == CLIP_PROVISIONING_TOPIC.format(msg.did):
                if msg.cmd in (ClipCmd.PRE_DEPLOY, ClipCmd.DEPLOY):
                    await self._on_deploy(msg)

            else:
                _LOGGER.debug("%s < %s (ignoring)", topic, msg)

        except (exc.EnvelopeInvalid, exc.ProvisioningError) as err:
            _LOGGER.warning("%s < %s (ignoring)", topic, err)

    async def _on_deploy(self, msg: ClipMessage) -> None:
        """Record the (pre)deploy, and respond with the topics to use from now on."""

        _LOGGER.info("%s: %s received, awaiting its ack", msg.did, msg.cmd)

        self._deploys[msg.did] = msg.raw  # a later (pre)deploy re-arms provisioning
        await self._broker.publish(DEVICE_TOPIC.format(msg.did), deploy_response(msg))

    async def complete_provisioning(self, device_id: DeviceIdT, kind: str) -> None:
        """Create the session of a newly provisioned appliance.

        Raise ProvisioningViolation if there was no (pre)deploy, or if the appliance is
        already provisioned, and UnknownDeviceModel if its kind is not supported.
        """

        if device_id not in self._deploys:
            raise exc.ProvisioningViolation(
                f"{device_id}: {ClipCmd.COMPLETE_PROVISIONING_ACK} "
                "received without deploy/preDeploy"
            )

        if device_id in self._sessions:
            raise exc.ProvisioningViolation(
                f"{device_id}: {ClipCmd.COMPLETE_PROVISIONING_ACK} received twice"
            )

        session = DeviceSession(
            device_id,
            get_model(kind),
            broker=self._broker,
            hub=self._hub,
            ponder_prefix=self._ponder_prefix,
            discovery_prefix=self._discovery_prefix,
        )
        await session.start()  # if this fails, a later ack can retry

        self._sessions[device_id] = session
        _LOGGER.info("Device %s started", session)

    async def _on_device_packet(self, msg: ClipMessage) -> None:
        if (session := self._sessions.get(msg.did)) is None:
            _LOGGER.debug("%s: packet from an unprovisioned device (ignoring)", msg.did)
            return

        if (records := parse_frame(msg.frame)) is None:
            return

        _LOGGER.info("%s: Rx %s", session, records)
        await session.apply_inbound_packet(records)

    async def on_discovery(self) -> None:
        """Republish the discovery config of every appliance (e.g. the hub restarted)."""

        for session in self._sessions.values():
            await session.publish_discovery_descriptor()

    async def on_set_property(self, device_id: DeviceIdT, prop: str, value: str) -> None:
        """Write a property of an appliance, as requested by the hub.

        Raise AttachStateMissing if the write needs registers that are not yet known.
        """

        if (session := self._sessions.get(device_id)) is None:
            _LOGGER.warning("%s: not a provisioned device (ignoring)", device_id)
            return

        await session.set_property(prop, value)
