#!/usr/bin/env python3
"""Ponder - the device models (field registries) of the supported appliances."""

from __future__ import annotations

from .base import (
    DeviceModel,
    DeviceState,
    Field,
    FieldRegistry,
    attach,
    get_model,
    known_models,
    read_map,
    register_model,
    write_map,
)
from .rac import RAC_056905_WW

__all__ = [
    "DeviceModel",
    "DeviceState",
    "Field",
    "FieldRegistry",
    "RAC_056905_WW",
    "attach",
    "get_model",
    "known_models",
    "read_map",
    "register_model",
    "write_map",
]
