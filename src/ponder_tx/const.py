#!/usr/bin/env python3
"""Ponder - a bridge from the clip register protocol to Home Assistant.

Constants of the clip wire protocol and of its JSON envelopes.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final, TypeAlias

from .version import VERSION  # noqa: F401

CommandHeaderT: TypeAlias = tuple[int, int, int, int, int]
DeviceIdT: TypeAlias = str
TagT: TypeAlias = int


#
# TLV records
TAG_BITS: Final[int] = 10
TAG_MAX: Final[int] = (1 << TAG_BITS) - 1  # 0x3FF
VALUE_MAX: Final[int] = (1 << 24) - 1  # at most 3 value bytes on the wire

INLINE_VALUE_MAX: Final[int] = 0x0F


#
# Frames: [b0, b1, 04 00 00 00 65, b2, b3, b4, len, tlv..., crc_hi, crc_lo]
FRAME_PREAMBLE: Final[bytes] = bytes([0x04, 0x00, 0x00, 0x00])
FRAME_MARKER_OUT: Final[int] = 0x65
FRAME_MARKERS_IN: Final[frozenset[int]] = frozenset((0x65, 0x87, 0xA7))  # RAC: 87, CST: A7
FRAME_UPDATE_CLASS: Final[bytes] = bytes([0x02, 0x04])  # device register update

FRAME_HEADER_LEN: Final[int] = 11  # b0, b1, preamble(4), marker, b2..b4, len
FRAME_OVERHEAD: Final[int] = 13  # header + crc
MAX_TLV_LEN: Final[int] = 0xFF

CMD_WRITE: Final[CommandHeaderT] = (1, 1, 2, 1, 1)
CMD_QUERY: Final[CommandHeaderT] = (1, 1, 2, 2, 1)

TAG_QUERY: Final[TagT] = 0x1F5
QUERY_ALL: Final[int] = 2


#
# JSON envelopes, as exchanged with the appliances
SZ_APP_INFO: Final = "appInfo"
SZ_CMD: Final = "cmd"
SZ_DATA: Final = "data"
SZ_DEPLOY_INTERVAL: Final = "deployInterval"
SZ_DID: Final = "did"
SZ_HOST: Final = "host"
SZ_KIND: Final = "kind"
SZ_MESSAGE: Final = "message"
SZ_MID: Final = "mid"
SZ_PROVISIONING: Final = "provisioning"
SZ_PROVISIONING_TYPE: Final = "provisioningType"
SZ_PUBLICATION: Final = "publication"
SZ_RESULT: Final = "result"
SZ_TYPE: Final = "type"

DEPLOY_INTERVAL: Final[int] = 600  # seconds


class ClipCmd(StrEnum):
    """The values of the 'cmd' attr of a clip envelope."""

    COMPLETE_PROVISIONING = "completeProvisioning"
    COMPLETE_PROVISIONING_ACK = "completeProvisioning_ack"
    DEPLOY = "deploy"
    DEVICE_PACKET = "device_packet"
    PACKET = "packet"
    PRE_DEPLOY = "preDeploy"


#
# MQTT topics
CLIP_TOPIC_ROOT: Final = "clip"
CLIP_MESSAGE_TOPIC: Final = "clip/message/devices/{}"
CLIP_PROVISIONING_TOPIC: Final = "clip/provisioning/devices/{}"
DEVICE_TOPIC: Final = "lime/devices/{}"

SZ_AVAILABILITY: Final = "availability"
SZ_OFFLINE: Final = "offline"
SZ_ONLINE: Final = "online"
