#!/usr/bin/env python3
"""Ponder - a bridge from the clip register protocol to Home Assistant.

Appliances (via their MQTT broker) <-> Ponder <-> Home Assistant (via its MQTT broker).
"""

from __future__ import annotations

from .device import DeviceModel, Field, FieldRegistry, get_model, register_model
from .gateway import Gateway
from .manager import DeviceManager
from .session import DeviceSession
from .version import VERSION

__all__ = [
    "VERSION",
    "DeviceManager",
    "DeviceModel",
    "DeviceSession",
    "Field",
    "FieldRegistry",
    "Gateway",
    "get_model",
    "register_model",
]
