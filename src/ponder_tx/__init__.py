#!/usr/bin/env python3
"""Ponder - the clip wire protocol: TLV codec, framer, envelopes & MQTT transports."""

from __future__ import annotations

from .const import (
    CMD_QUERY,
    CMD_WRITE,
    DEVICE_TOPIC,
    QUERY_ALL,
    TAG_QUERY,
    ClipCmd,
    CommandHeaderT,
    DeviceIdT,
    TagT,
)
from .crc import crc16
from .frame import Frame, build_frame, parse_frame
from .logger import set_logging
from .packet import ClipMessage, deploy_response, epoch_ms, packet_envelope
from .tlv import Tlv, build_tlv, parse_tlv
from .transport import BrokerTransport, HubTransport, MqttTransport
from .typing import PublisherT
from .version import VERSION

__all__ = [
    "VERSION",
    #
    "CMD_QUERY",
    "CMD_WRITE",
    "DEVICE_TOPIC",
    "QUERY_ALL",
    "TAG_QUERY",
    "ClipCmd",
    "CommandHeaderT",
    "DeviceIdT",
    "TagT",
    #
    "Tlv",
    "build_tlv",
    "parse_tlv",
    "crc16",
    "Frame",
    "build_frame",
    "parse_frame",
    "ClipMessage",
    "deploy_response",
    "epoch_ms",
    "packet_envelope",
    #
    "BrokerTransport",
    "HubTransport",
    "MqttTransport",
    "PublisherT",
    "set_logging",
]
