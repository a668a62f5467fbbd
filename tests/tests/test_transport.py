#!/usr/bin/env python3
"""Ponder - Test the MQTT transports (without a broker)."""

import pytest

from ponder_tx import BrokerTransport, HubTransport
from ponder_tx.exceptions import PublishFailed
from ponder_tx.schemas import SCH_MQTT_CONFIG

pytestmark = pytest.mark.asyncio()


def _msg_handler(topic: str, payload: bytes) -> None:
    pass


async def test_subscriptions() -> None:
    config = SCH_MQTT_CONFIG({})

    broker = BrokerTransport(config, _msg_handler)
    hub = HubTransport(
        config, _msg_handler, ponder_prefix="lg", discovery_prefix="homeassistant"
    )

    assert tuple(broker.subscriptions) == ("clip/#",)
    assert tuple(hub.subscriptions) == ("homeassistant/status", "lg/+/+/set")
    assert repr(broker) == "BrokerTransport(localhost:1883)"


async def test_publish_when_not_connected() -> None:
    transport = BrokerTransport(SCH_MQTT_CONFIG({}), _msg_handler)

    with pytest.raises(PublishFailed):
        await transport.publish("lime/devices/abc", "{}")


async def test_stop_when_not_connected() -> None:
    transport = BrokerTransport(SCH_MQTT_CONFIG({}), _msg_handler)

    assert not transport.is_connected
    await transport.stop()  # doesn't disconnect what was never connected
    assert not transport.is_connected
