#!/usr/bin/env python3
"""Ponder - the JSON envelopes exchanged with the appliances.

Appliances publish to clip/message/devices/{id} & clip/provisioning/devices/{id}:

    {"cmd": "device_packet", "did": "...", "kind": "RAC_056905_WW", "data": "<hex>"}

Ponder publishes to lime/devices/{id}:

    {"did": "...", "mid": <epoch ms>, "cmd": "packet", "type": 1, "data": "<hex>"}
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any

from . import exceptions as exc
from .const import (
    CLIP_MESSAGE_TOPIC,
    CLIP_PROVISIONING_TOPIC,
    DEPLOY_INTERVAL,
    SZ_APP_INFO,
    SZ_CMD,
    SZ_DATA,
    SZ_DEPLOY_INTERVAL,
    SZ_DID,
    SZ_HOST,
    SZ_KIND,
    SZ_MESSAGE,
    SZ_MID,
    SZ_PROVISIONING,
    SZ_PROVISIONING_TYPE,
    SZ_PUBLICATION,
    SZ_RESULT,
    SZ_TYPE,
    ClipCmd,
    DeviceIdT,
)

_LOGGER = logging.getLogger(__name__)


def epoch_ms() -> int:
    """Return the current time as milliseconds since the epoch (a message id)."""
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class ClipMessage:
    """A message published by an appliance."""

    cmd: str
    did: DeviceIdT
    kind: str
    data: Any
    raw: str

    @classmethod
    def from_payload(cls, payload: bytes | str) -> ClipMessage:
        """Create a message from an MQTT payload.

        Raise EnvelopeInvalid if the payload is not a valid envelope.
        """

        if isinstance(payload, bytes):
            try:
                payload = payload.decode()
            except UnicodeDecodeError as err:
                raise exc.EnvelopeInvalid("Bad envelope: not UTF-8") from err

        raw = payload.rstrip("\0")  # some firmwares NUL-terminate the payload

        try:
            obj = json.loads(raw)
        except (json.JSONDecodeError, RecursionError) as err:  # e.g. deeply nested
            raise exc.EnvelopeInvalid(f"Bad envelope: not JSON: >>>{raw[:64]}<<<") from err

        if not isinstance(obj, dict):
            raise exc.EnvelopeInvalid(f"Bad envelope: not an object: >>>{raw}<<<")

        try:
            return cls(
                cmd=str(obj[SZ_CMD]),
                did=str(obj[SZ_DID]),
                kind=str(obj.get(SZ_KIND, "")),
                data=obj.get(SZ_DATA),
                raw=raw,
            )
        except KeyError as err:
            raise exc.EnvelopeInvalid(f"Bad envelope: missing {err}: >>>{raw}<<<") from err

    @property
    def frame(self) -> bytes:
        """Return the wire frame carried by a device_packet message."""

        if not isinstance(self.data, str):
            raise exc.EnvelopeInvalid(f"Bad envelope: data is not a hex string: {self}")
        try:
            return bytes.fromhex(self.data)
        except ValueError as err:
            raise exc.EnvelopeInvalid(
                f"Bad envelope: data is not a hex string: {self}"
            ) from err

    def __str__(self) -> str:
        return f"{self.did}: {self.cmd} ({self.kind or '-'})"


def packet_envelope(did: DeviceIdT, frame: bytes, mid: int | None = None) -> str:
    """Return the envelope that carries a frame to an appliance."""

    return json.dumps(
        {
            SZ_DID: did,
            SZ_MID: epoch_ms() if mid is None else mid,
            SZ_CMD: ClipCmd.PACKET,
            SZ_TYPE: 1,
            SZ_DATA: frame.hex(),
        }
    )


def deploy_response(msg: ClipMessage, mid: int | None = None) -> str:
    """Return the completeProvisioning response to a (pre)deploy message."""

    return json.dumps(
        {
            SZ_DID: msg.did,
            SZ_MID: epoch_ms() if mid is None else mid,
            SZ_CMD: ClipCmd.COMPLETE_PROVISIONING,
            SZ_TYPE: 0,
            SZ_DATA: {
                SZ_RESULT: 0,
                SZ_HOST: SZ_MESSAGE,
                SZ_APP_INFO: {
                    SZ_HOST: SZ_MESSAGE,
                    SZ_PUBLICATION: {
                        SZ_MESSAGE: CLIP_MESSAGE_TOPIC.format(msg.did),
                        SZ_PROVISIONING: CLIP_PROVISIONING_TOPIC.format(msg.did),
                    },
                },
                SZ_PROVISIONING_TYPE: msg.cmd,
                SZ_DEPLOY_INTERVAL: DEPLOY_INTERVAL,
            },
        }
    )
