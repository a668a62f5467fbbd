#!/usr/bin/env python3
"""Ponder - a bridge from the clip register protocol to Home Assistant."""

import json
import logging
from typing import Any

import pytest

from ponder import DeviceSession
from ponder.device import RAC_056905_WW
from ponder_tx import Frame

logging.disable(logging.WARNING)  # usu. WARNING


DEVICE_ID = "5d0f9a0e-0000-0000-0000-0123456789ab"
KIND = RAC_056905_WW.model

PONDER_PREFIX = "ponder"
DISCOVERY_PREFIX = "homeassistant"


class FakePublisher:
    """A publisher that records what would have been published."""

    def __init__(self) -> None:
        self.published: list[tuple[str, str, bool]] = []
        self.fail_with: Exception | None = None  # if set, publishes raise it

    async def publish(self, topic: str, payload: str, retain: bool = False) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.published.append((topic, payload, retain))

    def topics(self) -> list[str]:
        return [p[0] for p in self.published]

    def clear(self) -> None:
        self.published.clear()


def sent_frames(broker: FakePublisher) -> list[Frame]:
    """Return the frames of the packet envelopes published to the appliances."""

    result = []
    for _, payload, _ in broker.published:
        msg = json.loads(payload)
        if msg["cmd"] == "packet":
            result.append(Frame.from_hex(msg["data"]))
    return result


def clip_payload(cmd: str, did: str = DEVICE_ID, kind: str = KIND, **kwargs: Any) -> bytes:
    """Return the payload of a message, as published by an appliance."""
    return json.dumps({"cmd": cmd, "did": did, "kind": kind} | kwargs).encode()


@pytest.fixture
def broker() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def hub() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def session(broker: FakePublisher, hub: FakePublisher) -> DeviceSession:
    """Return a session of an air conditioner, with an empty register cache."""
    return DeviceSession(
        DEVICE_ID,
        RAC_056905_WW,
        broker=broker,
        hub=hub,
        ponder_prefix=PONDER_PREFIX,
        discovery_prefix=DISCOVERY_PREFIX,
    )
