#!/usr/bin/env python3
"""Ponder - exceptions within the codec/frame/transport layer."""

from __future__ import annotations


class _PonderBaseException(Exception):
    """Base class for all ponder_tx exceptions."""

    pass


class PonderException(_PonderBaseException):
    """Base class for all ponder_tx exceptions."""

    HINT: None | str = None

    def __init__(self, *args: object):
        super().__init__(*args)
        self.message: str | None = args[0] if args else None  # type: ignore[assignment]

    def __str__(self) -> str:
        if self.message and self.HINT:
            return f"{self.message} (hint: {self.HINT})"
        if self.message:
            return self.message
        if self.HINT:
            return f"Hint: {self.HINT}"
        return ""


class _PonderLowerError(PonderException):
    """A failure in the lower layer (codec, framer, transport)."""


########################################################################################
# Errors in the TLV codec


class TlvError(_PonderLowerError):
    """A TLV record cannot be encoded."""


class TagOutOfRange(TlvError):
    """The record's tag does not fit in 10 bits."""


class ValueOutOfRange(TlvError):
    """The record's value does not fit in 24 bits (or is negative)."""

    HINT = "the wire format reserves at most 3 bytes for a value"


########################################################################################
# Errors in the checksum framer


class FrameError(_PonderLowerError):
    """The frame cannot be built or parsed."""


class FrameInvalid(FrameError):
    """The frame is corrupt/not internally consistent."""


class EnvelopeInvalid(FrameError):
    """The JSON envelope of a message is corrupt/incomplete."""


class PayloadTooLarge(FrameError):
    """The encoded TLV payload does not fit the frame's one-byte length field."""

    HINT = "split the records over several packets"


########################################################################################
# Errors at the transport layer (MQTT)


class TransportError(_PonderLowerError):
    """An error when publishing or receiving messages."""


class TransportConfigInvalid(TransportError):
    """The transport's configuration is not valid."""


class PublishFailed(TransportError):
    """A publish to one of the MQTT brokers failed."""
