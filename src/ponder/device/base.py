#!/usr/bin/env python3
"""Ponder - a bridge from the clip register protocol to Home Assistant.

Base for all device models: fields, field registries and the device state cache.

A field is the bidirectional mapping between one raw register (a tag) and one named
property. Fields are data: their transforms are plain callables, with defaults that do
nothing, so a model's field table reads as a table.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, TypeAlias

from ponder_tx import TagT, Tlv

from .. import exceptions as exc

_LOGGER = logging.getLogger(__name__)


StateT: TypeAlias = Mapping[TagT, int]

ReadXformT: TypeAlias = Callable[[int, StateT], "str | None"]
ReadCallbackT: TypeAlias = Callable[[str], "TagT | None"]
PreWriteXformT: TypeAlias = Callable[[str], "tuple[str, str] | None"]
WriteXformT: TypeAlias = Callable[[str], "int | None"]
WriteCallbackT: TypeAlias = Callable[[str], "object | None"]
WriteAttachT: TypeAlias = Callable[[int], "tuple[TagT, ...]"]


def _no_read_xform(raw: int, state: StateT) -> str | None:
    return None


def _no_read_callback(value: str) -> TagT | None:
    return None


def _no_pre_write_xform(value: str) -> tuple[str, str] | None:
    return None


def _no_write_xform(value: str) -> int | None:
    return None


def _no_write_callback(value: str) -> object | None:
    return None


def _no_write_attach(raw: int) -> tuple[TagT, ...]:
    return ()


@dataclass(frozen=True)
class Field:
    """A register of a device model, and how to translate it to/from a property.

    - read_xform(raw, state):  the property's value, or None if raw is unrecognised
    - read_callback(value):    a tag to re-dispatch the raw value to, instead of
                               publishing this property
    - pre_write_xform(value):  a (property, value) to write before this one
    - write_xform(value):      the raw value, or None if value is unsupported
    - write_callback(value):   not None if the write is handled elsewhere
    - write_attach(raw):       other tags to send (with their cached values) alongside
    """

    tag: TagT
    name: str
    readable: bool = True
    writable: bool = True

    read_xform: ReadXformT = _no_read_xform
    read_callback: ReadCallbackT = _no_read_callback
    pre_write_xform: PreWriteXformT = _no_pre_write_xform
    write_xform: WriteXformT = _no_write_xform
    write_callback: WriteCallbackT = _no_write_callback
    write_attach: WriteAttachT = _no_write_attach

    def __repr__(self) -> str:
        mode = ("R" if self.readable else "-") + ("W" if self.writable else "-")
        return f"Field(0x{self.tag:03X}, {self.name}, {mode})"


class FieldRegistry:
    """The fields of a device model, by tag and by name."""

    def __init__(self, fields: Iterable[Field]) -> None:
        self._by_tag: dict[TagT, Field] = {}
        self._by_name: dict[str, Field] = {}

        for fld in fields:
            if fld.tag in self._by_tag:
                raise exc.RegistryInconsistent(f"Duplicate tag: 0x{fld.tag:03X}")
            if fld.name in self._by_name:
                raise exc.RegistryInconsistent(f"Duplicate name: {fld.name}")
            self._by_tag[fld.tag] = fld
            self._by_name[fld.name] = fld

    def __iter__(self) -> Iterator[Field]:
        return iter(self._by_tag.values())

    def __len__(self) -> int:
        return len(self._by_tag)

    def by_tag(self, tag: TagT) -> Field:
        """Return the field of a tag, or raise UnknownField."""
        try:
            return self._by_tag[tag]
        except KeyError:
            raise exc.UnknownField(f"No field for tag: 0x{tag:03X}") from None

    def by_name(self, name: str) -> Field:
        """Return the field of a property, or raise UnknownField."""
        try:
            return self._by_name[name]
        except KeyError:
            raise exc.UnknownField(f"No field for property: {name}") from None


def read_map(table: Mapping[int, str]) -> ReadXformT:
    """Return a read_xform that looks up the raw value in a table."""

    def read_xform(raw: int, state: StateT) -> str | None:
        return table.get(raw)

    return read_xform


def write_map(table: Mapping[int, str]) -> WriteXformT:
    """Return a write_xform that is the inverse of a read_map() table."""

    inverse = {v: k for k, v in table.items()}

    def write_xform(value: str) -> int | None:
        return inverse.get(value)

    return write_xform


def attach(*tags: TagT) -> WriteAttachT:
    """Return a write_attach that always attaches the same tags."""

    def write_attach(raw: int) -> tuple[TagT, ...]:
        return tags

    return write_attach


ConfigFactoryT: TypeAlias = Callable[[str, str], dict[str, Any]]


@dataclass(frozen=True)
class DeviceModel:
    """A device model: its field registry and its discovery metadata."""

    model: str  # as per the 'kind' of the appliance's messages
    ha_class: str  # the hub's platform, e.g. climate
    fields: FieldRegistry
    capabilities: ConfigFactoryT  # (device_id, ponder_prefix) -> discovery config
    manufacturer: str = "LG"
    sw_version: str = "885612"

    def __repr__(self) -> str:
        return f"DeviceModel({self.model}, {self.ha_class}, {len(self.fields)} fields)"


_MODELS: dict[str, DeviceModel] = {}


def register_model(model: DeviceModel) -> DeviceModel:
    """Add a device model to the registry of known models."""

    if model.model in _MODELS and _MODELS[model.model] is not model:
        _LOGGER.warning("Replacing the device model: %s", model.model)
    _MODELS[model.model] = model
    return model


def get_model(kind: str) -> DeviceModel:
    """Return a known device model, or raise UnknownDeviceModel."""
    try:
        return _MODELS[kind]
    except KeyError:
        raise exc.UnknownDeviceModel(f"Unknown device model: {kind}") from None


def known_models() -> tuple[str, ...]:
    return tuple(_MODELS)


@dataclass
class DeviceState:
    """The last known raw value of each register of a device."""

    _regs: dict[TagT, int] = field(default_factory=dict)

    def __repr__(self) -> str:
        regs = ", ".join(f"0x{t:03X}={v}" for t, v in sorted(self._regs.items()))
        return f"DeviceState({regs})"

    def __contains__(self, tag: object) -> bool:
        return tag in self._regs

    def __len__(self) -> int:
        return len(self._regs)

    def get(self, tag: TagT) -> int | None:
        return self._regs.get(tag)

    def set(self, tag: TagT, value: int) -> None:
        self._regs[tag] = value

    def snapshot(self) -> StateT:
        """Return a read-only copy of the registers."""
        return MappingProxyType(dict(self._regs))

    def require(self, tags: Iterable[TagT]) -> list[Tlv]:
        """Return the cached records of some tags.

        Raise AttachStateMissing if any of them has not been seen.
        """

        tags = tuple(tags)

        missing = [t for t in tags if t not in self._regs]
        if missing:
            raise exc.AttachStateMissing(
                "No cached value for: " + ", ".join(f"0x{t:03X}" for t in missing)
            )
        return [Tlv(t, self._regs[t]) for t in tags]
