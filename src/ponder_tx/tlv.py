#!/usr/bin/env python3
"""Ponder - the clip TLV (tag-length-value) codec.

Each record is a 2-byte header, optionally followed by 1-3 value bytes:

    b0:  tttttttt     tag, bits 9..2
    b1:  ttllvvvv     tag, bits 1..0; ll = number of value bytes; vvvv = inline value

If ll == 0, the value is the low nibble of b1 (0-15), otherwise it is the big-endian
integer of the next ll bytes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from . import exceptions as exc
from .const import INLINE_VALUE_MAX, TAG_MAX, VALUE_MAX

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tlv:
    """A single register: its tag and its raw value."""

    tag: int
    value: int

    def __repr__(self) -> str:
        return f"Tlv(tag=0x{self.tag:03X}, value={self.value})"


def parse_tlv(buf: bytes) -> list[Tlv]:
    """Return the records of a TLV buffer.

    A truncated trailing record (either its header or its value bytes) is dropped.
    """

    result: list[Tlv] = []
    idx = 0

    while idx + 2 <= len(buf):
        b0, b1 = buf[idx], buf[idx + 1]

        tag = (b0 << 2) | (b1 >> 6)
        num_bytes = (b1 >> 4) & 0x03

        if idx + 2 + num_bytes > len(buf):
            break

        if num_bytes == 0:
            value = b1 & 0x0F
        else:
            value = int.from_bytes(buf[idx + 2 : idx + 2 + num_bytes], "big")

        result.append(Tlv(tag, value))
        idx += 2 + num_bytes

    if idx != len(buf):
        _LOGGER.debug("Dropped a truncated TLV record: %s", buf[idx:].hex())

    return result


def _value_width(value: int) -> int:
    if value <= INLINE_VALUE_MAX:
        return 0
    if value < 0x100:
        return 1
    if value < 0x10000:
        return 2
    return 3


def build_tlv(records: Iterable[Tlv]) -> bytes:
    """Return the TLV buffer for a sequence of records.

    The value width is chosen by magnitude. Raise TagOutOfRange/ValueOutOfRange if a
    record doesn't fit the wire format.
    """

    buf = bytearray()

    for rec in records:
        if not 0 <= rec.tag <= TAG_MAX:
            raise exc.TagOutOfRange(f"Invalid tag: 0x{rec.tag:X} (max 0x{TAG_MAX:X})")
        if not 0 <= rec.value <= VALUE_MAX:
            raise exc.ValueOutOfRange(
                f"Invalid value for tag 0x{rec.tag:03X}: {rec.value}"
            )

        width = _value_width(rec.value)

        buf.append((rec.tag >> 2) & 0xFF)
        tag_lo = (rec.tag & 0x03) << 6

        if width == 0:
            buf.append(tag_lo | rec.value)
        else:
            buf.append(tag_lo | width << 4)
            buf += rec.value.to_bytes(width, "big")

    return bytes(buf)
