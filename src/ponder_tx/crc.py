#!/usr/bin/env python3
"""Ponder - the CRC-16 used to checksum clip frames.

CRC-16/XMODEM: poly 0x1021, init 0x0000, not reflected, no final xor.
"""

from __future__ import annotations

from typing import Final

_POLY: Final[int] = 0x1021


def _make_table() -> tuple[int, ...]:
    table = []
    for byte in range(256):
        crc = byte << 8
        for _ in range(8):
            crc = ((crc << 1) ^ _POLY) if crc & 0x8000 else (crc << 1)
        table.append(crc & 0xFFFF)
    return tuple(table)


CRC_TABLE: Final[tuple[int, ...]] = _make_table()


def crc16(data: bytes) -> int:
    """Return the CRC-16 of some bytes."""

    crc = 0
    for byte in data:
        crc = ((crc << 8) & 0xFFFF) ^ CRC_TABLE[(crc >> 8) ^ byte]
    return crc
