#!/usr/bin/env python3
"""Ponder - the checksum framer for clip packets.

Frame layout::

    +--------+---------------+--------+------------+-------+-----------+----------+
    | b0 b1  | 04 00 00 00   | marker | b2 b3 b4   |  len  | TLV bytes | CRC-16   |
    | 2 bytes| 4 bytes       | 1 byte | 3 bytes    | 1 byte| len bytes | 2 bytes  |
    +--------+---------------+--------+------------+-------+-----------+----------+

- (b0, b1, b2, b3, b4): the command header, opaque to the framer
- marker: 0x65 for frames sent to an appliance, 0x87/0xA7 for frames from one
- CRC-16: big-endian, over everything from the preamble to the end of the TLV bytes
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from . import exceptions as exc
from .const import (
    FRAME_HEADER_LEN,
    FRAME_MARKER_OUT,
    FRAME_MARKERS_IN,
    FRAME_OVERHEAD,
    FRAME_PREAMBLE,
    FRAME_UPDATE_CLASS,
    MAX_TLV_LEN,
    CommandHeaderT,
)
from .crc import crc16
from .tlv import Tlv, build_tlv, parse_tlv

_LOGGER = logging.getLogger(__name__)


@dataclass
class Frame:
    """A clip packet: its command header and its TLV records."""

    header: CommandHeaderT
    records: list[Tlv] = field(default_factory=list)
    marker: int = FRAME_MARKER_OUT
    crc_ok: bool = True

    def __repr__(self) -> str:
        hdr = " ".join(f"{b:02X}" for b in self.header)
        return f"Frame(header={hdr}, marker=0x{self.marker:02X}, records={self.records})"

    @property
    def is_register_update(self) -> bool:
        """Return True if this frame is an appliance's register update."""
        return (
            self.marker in FRAME_MARKERS_IN
            and bytes(self.header[2:4]) == FRAME_UPDATE_CLASS
        )

    @classmethod
    def from_bytes(cls, frame: bytes) -> Frame:
        """Create a frame from its bytes.

        Raise FrameInvalid if the structure (preamble, length byte) is inconsistent.
        """

        if len(frame) < FRAME_OVERHEAD:
            raise exc.FrameInvalid(f"Bad frame: too short: >>>{frame.hex()}<<<")

        if frame[2:6] != FRAME_PREAMBLE:
            raise exc.FrameInvalid(f"Bad frame: invalid preamble: >>>{frame.hex()}<<<")

        if frame[10] != len(frame) - FRAME_OVERHEAD:
            raise exc.FrameInvalid(
                f"Bad frame: length byte is {frame[10]}, "
                f"expected {len(frame) - FRAME_OVERHEAD}: >>>{frame.hex()}<<<"
            )

        header = (frame[0], frame[1], frame[7], frame[8], frame[9])
        payload = frame[FRAME_HEADER_LEN:-2]

        crc_ok = int.from_bytes(frame[-2:], "big") == crc16(frame[2:-2])
        if not crc_ok:
            _LOGGER.debug("Frame has an unexpected checksum: %s", frame.hex())

        return cls(header, parse_tlv(payload), marker=frame[6], crc_ok=crc_ok)  # type: ignore[arg-type]

    @classmethod
    def from_hex(cls, data: str) -> Frame:
        """Create a frame from a hex string (whitespace is ignored)."""

        try:
            frame = bytes.fromhex("".join(data.split()))
        except ValueError as err:
            raise exc.FrameInvalid(f"Bad frame: not a hex string: >>>{data}<<<") from err
        return cls.from_bytes(frame)

    def to_bytes(self) -> bytes:
        """Return the frame as bytes, complete with its checksum.

        Raise PayloadTooLarge if the TLV payload exceeds 255 bytes.
        """
        return build_frame(self.header, self.records, marker=self.marker)

    def to_hex(self) -> str:
        return self.to_bytes().hex()


def build_frame(
    header: CommandHeaderT, records: list[Tlv], *, marker: int = FRAME_MARKER_OUT
) -> bytes:
    """Return a framed packet for a command header and some TLV records."""

    b0, b1, b2, b3, b4 = header

    payload = build_tlv(records)
    if len(payload) > MAX_TLV_LEN:
        raise exc.PayloadTooLarge(
            f"TLV payload is {len(payload)} bytes, max is {MAX_TLV_LEN}"
        )

    body = FRAME_PREAMBLE + bytes([marker, b2, b3, b4, len(payload)]) + payload
    return bytes([b0, b1]) + body + crc16(body).to_bytes(2, "big")


def parse_frame(frame: bytes) -> list[Tlv] | None:
    """Return the TLV records of an appliance's register update, else None.

    Frames that are malformed, or are not register updates, are ignored (not errors).
    """

    try:
        pkt = Frame.from_bytes(frame)
    except exc.FrameInvalid as err:
        _LOGGER.debug("%s (ignoring)", err)
        return None

    if not pkt.is_register_update:
        _LOGGER.debug("%r < Not a register update (ignoring)", pkt)
        return None

    return pkt.records
