#!/usr/bin/env python3
"""Ponder - Test the device manager (provisioning, and dispatch to sessions)."""

import json
import logging

import pytest

from ponder import DeviceManager
from ponder.const import ProvisioningState
from ponder_tx import CMD_QUERY, Tlv, build_frame

from .helpers import (
    DEVICE_ID,
    DISCOVERY_PREFIX,
    PONDER_PREFIX,
    FakePublisher,
    broker,  # noqa: F401
    clip_payload,
    hub,  # noqa: F401
    sent_frames,
)

pytestmark = pytest.mark.asyncio()

MESSAGE_TOPIC = f"clip/message/devices/{DEVICE_ID}"
PROVISIONING_TOPIC = f"clip/provisioning/devices/{DEVICE_ID}"

HDR_UPDATE = (0x01, 0x01, 0x02, 0x04, 0x01)


@pytest.fixture
def manager(broker: FakePublisher, hub: FakePublisher) -> DeviceManager:  # noqa: F811
    return DeviceManager(
        broker, hub, ponder_prefix=PONDER_PREFIX, discovery_prefix=DISCOVERY_PREFIX
    )


async def _provision(manager: DeviceManager, did: str = DEVICE_ID) -> None:
    await manager.on_publish(
        f"clip/provisioning/devices/{did}", clip_payload("deploy", did=did)
    )
    await manager.on_publish(
        f"clip/message/devices/{did}", clip_payload("completeProvisioning_ack", did=did)
    )


def _device_packet(records: list[Tlv], marker: int = 0x87) -> bytes:
    frame = build_frame(HDR_UPDATE, records, marker=marker)
    return clip_payload("device_packet", data=frame.hex())


@pytest.mark.parametrize("cmd", ["deploy", "preDeploy"])
async def test_deploy(
    manager: DeviceManager,
    broker: FakePublisher,  # noqa: F811
    hub: FakePublisher,  # noqa: F811
    cmd: str,
) -> None:
    await manager.on_publish(PROVISIONING_TOPIC, clip_payload(cmd))

    ((topic, payload, _),) = broker.published
    assert topic == f"lime/devices/{DEVICE_ID}"

    msg = json.loads(payload)
    assert msg["cmd"] == "completeProvisioning"
    assert msg["did"] == DEVICE_ID
    assert msg["data"]["provisioningType"] == cmd
    assert msg["data"]["appInfo"]["publication"]["message"] == MESSAGE_TOPIC

    assert hub.published == []
    assert manager.provisioning_state(DEVICE_ID) == ProvisioningState.AWAITING_ACK
    assert not manager.is_provisioned(DEVICE_ID)


async def test_provisioning(
    manager: DeviceManager,
    broker: FakePublisher,  # noqa: F811
    hub: FakePublisher,  # noqa: F811
) -> None:
    await _provision(manager)

    assert manager.is_provisioned(DEVICE_ID)
    assert manager.provisioning_state(DEVICE_ID) == ProvisioningState.PROVISIONED
    assert manager.device_ids == (DEVICE_ID,)
    assert manager.session(DEVICE_ID).model.model == "RAC_056905_WW"

    assert hub.topics() == [
        f"homeassistant/climate/ponder/{DEVICE_ID}/config",
        f"ponder/{DEVICE_ID}/availability",
    ]

    (frame,) = sent_frames(broker)  # the query, after the deploy response
    assert frame.header == CMD_QUERY
    assert frame.records == [Tlv(0x1F5, 2)]


async def test_provisioning_ack_twice(
    manager: DeviceManager,
    hub: FakePublisher,  # noqa: F811
) -> None:
    await _provision(manager)
    session = manager.session(DEVICE_ID)
    hub.clear()

    await manager.on_publish(MESSAGE_TOPIC, clip_payload("completeProvisioning_ack"))

    assert manager.session(DEVICE_ID) is session
    assert manager.device_ids == (DEVICE_ID,)
    assert hub.published == []


async def test_provisioning_ack_without_deploy(
    manager: DeviceManager,
    broker: FakePublisher,  # noqa: F811
    hub: FakePublisher,  # noqa: F811
) -> None:
    await manager.on_publish(MESSAGE_TOPIC, clip_payload("completeProvisioning_ack"))

    assert not manager.is_provisioned(DEVICE_ID)
    assert manager.provisioning_state(DEVICE_ID) == ProvisioningState.UNPROVISIONED
    assert broker.published == hub.published == []


async def test_provisioning_unknown_model(
    manager: DeviceManager,
    hub: FakePublisher,  # noqa: F811
) -> None:
    await manager.on_publish(PROVISIONING_TOPIC, clip_payload("deploy", kind="XYZ"))
    await manager.on_publish(
        MESSAGE_TOPIC, clip_payload("completeProvisioning_ack", kind="XYZ")
    )

    assert not manager.is_provisioned(DEVICE_ID)
    assert manager.provisioning_state(DEVICE_ID) == ProvisioningState.AWAITING_ACK
    assert hub.published == []


async def test_provisioning_is_per_device(manager: DeviceManager) -> None:
    await _provision(manager, did="device-1")
    await _provision(manager, did="device-2")

    assert manager.device_ids == ("device-1", "device-2")


async def test_register_update_end_to_end(
    manager: DeviceManager,
    hub: FakePublisher,  # noqa: F811
) -> None:
    await _provision(manager)
    hub.clear()

    await manager.on_publish(MESSAGE_TOPIC, _device_packet([Tlv(0x1FD, 20)], marker=0x65))

    assert hub.published == [(f"ponder/{DEVICE_ID}/current_temperature", "10", True)]


async def test_register_update_markers(
    manager: DeviceManager,
    hub: FakePublisher,  # noqa: F811
) -> None:
    await _provision(manager)
    hub.clear()

    await manager.on_publish(MESSAGE_TOPIC, _device_packet([Tlv(0x1FE, 45)], 0x87))
    await manager.on_publish(MESSAGE_TOPIC, _device_packet([Tlv(0x1FA, 8)], 0xA7))

    assert hub.published == [
        (f"ponder/{DEVICE_ID}/temperature", "22.5", True),
        (f"ponder/{DEVICE_ID}/fan_mode", "auto", True),
    ]


async def test_register_update_ignored(
    manager: DeviceManager,
    hub: FakePublisher,  # noqa: F811
) -> None:
    await manager.on_publish(MESSAGE_TOPIC, _device_packet([Tlv(0x1FD, 20)]))
    assert hub.published == []  # not (yet) provisioned

    await _provision(manager)
    hub.clear()

    await manager.on_publish(MESSAGE_TOPIC, clip_payload("device_packet", data="0102"))
    await manager.on_publish(MESSAGE_TOPIC, clip_payload("device_packet", data="xyz"))
    await manager.on_publish(MESSAGE_TOPIC, b"not json")
    await manager.on_publish(
        PROVISIONING_TOPIC, _device_packet([Tlv(0x1FD, 20)])
    )  # wrong topic for a packet
    await manager.on_publish("lime/devices/other", _device_packet([Tlv(0x1FD, 20)]))

    assert hub.published == []


async def test_set_property(
    manager: DeviceManager,
    broker: FakePublisher,  # noqa: F811
) -> None:
    await manager.on_set_property(DEVICE_ID, "mode", "off")
    assert broker.published == []  # not provisioned

    await _provision(manager)
    broker.clear()

    await manager.on_set_property(DEVICE_ID, "mode", "off")
    (frame,) = sent_frames(broker)
    assert frame.records == [Tlv(0x1F7, 0)]


async def test_discovery(
    manager: DeviceManager,
    hub: FakePublisher,  # noqa: F811
) -> None:
    await manager.on_discovery()
    assert hub.published == []

    await _provision(manager, did="device-1")
    await _provision(manager, did="device-2")
    hub.clear()

    await manager.on_discovery()

    assert hub.topics() == [
        "homeassistant/climate/ponder/device-1/config",
        "ponder/device-1/availability",
        "homeassistant/climate/ponder/device-2/config",
        "ponder/device-2/availability",
    ]


async def test_provisioning_is_logged_at_info(
    manager: DeviceManager,
    caplog: pytest.LogCaptureFixture,
) -> None:
    logging.disable(logging.NOTSET)
    try:
        with caplog.at_level(logging.INFO, logger="ponder.manager"):
            await _provision(manager)
    finally:
        logging.disable(logging.WARNING)

    started = [r for r in caplog.records if r.getMessage().endswith("started")]
    assert [r.levelno for r in started] == [logging.INFO]
