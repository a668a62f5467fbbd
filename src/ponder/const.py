#!/usr/bin/env python3
"""Ponder - a bridge from the clip register protocol to Home Assistant."""

from __future__ import annotations

from enum import StrEnum
from typing import Final

from ponder_tx.const import (  # noqa: F401
    CLIP_MESSAGE_TOPIC,
    CLIP_PROVISIONING_TOPIC,
    DEVICE_TOPIC,
    SZ_AVAILABILITY,
    SZ_ONLINE,
    ClipCmd,
)

MAX_REDIRECT_HOPS: Final[int] = 8  # for both read redirects & pre-writes

DEFAULT_PONDER_PREFIX: Final = "ponder"
DEFAULT_DISCOVERY_PREFIX: Final = "homeassistant"

SZ_CONFIG: Final = "config"
SZ_DEVICE: Final = "device"
SZ_IDENTIFIERS: Final = "identifiers"
SZ_MANUFACTURER: Final = "manufacturer"
SZ_MODEL: Final = "model"
SZ_OBJECT_ID: Final = "object_id"
SZ_OPTIMISTIC: Final = "optimistic"
SZ_SET: Final = "set"
SZ_STATUS: Final = "status"
SZ_SW_VERSION: Final = "sw_version"
SZ_TOPIC: Final = "topic"
SZ_UNIQUE_ID: Final = "unique_id"


class ProvisioningState(StrEnum):
    """The provisioning state of an appliance."""

    UNPROVISIONED = "unprovisioned"
    AWAITING_ACK = "awaiting_ack"
    PROVISIONED = "provisioned"
