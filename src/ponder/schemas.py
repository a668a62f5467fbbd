#!/usr/bin/env python3
"""Ponder - a bridge from the clip register protocol to Home Assistant.

Schema processor for the gateway (upper) layer.
"""

from __future__ import annotations

import logging
from typing import Any, Final

import voluptuous as vol

from ponder_tx.schemas import (
    SCH_MQTT_CONFIG,
    SCH_MQTT_CONFIG_DICT,
    SCH_TRANSPORT_CONFIG_DICT,
    SZ_PUBLISH_TIMEOUT,  # noqa: F401
)

from .const import DEFAULT_DISCOVERY_PREFIX, DEFAULT_PONDER_PREFIX, SZ_CONFIG

_LOGGER = logging.getLogger(__name__)


SZ_BROKER: Final = "broker"
SZ_HOME_ASSISTANT: Final = "home_assistant"

SZ_PONDER_PREFIX: Final = "ponder_prefix"
SZ_DISCOVERY_PREFIX: Final = "discovery_prefix"

SZ_DEBUG_MODE: Final = "debug_mode"
SZ_LOG_FILE: Final = "log_file"
SZ_LOG_BACKUPS: Final = "log_backups"


def _topic_prefix(value: Any) -> str:
    """Validate an MQTT topic prefix (no wildcards, no leading/trailing '/')."""

    value = vol.Coerce(str)(value)
    if not value or value != value.strip("/") or any(c in value for c in "+#"):
        raise vol.Invalid(f"invalid topic prefix: {value!r}")
    return value


#
# 1/3: The appliances' broker
SCH_BROKER_CONFIG = SCH_MQTT_CONFIG

#
# 2/3: The hub's broker
SCH_HASS_CONFIG = vol.Schema(
    {
        **SCH_MQTT_CONFIG_DICT,
        vol.Optional(SZ_PONDER_PREFIX, default=DEFAULT_PONDER_PREFIX): _topic_prefix,
        vol.Optional(
            SZ_DISCOVERY_PREFIX, default=DEFAULT_DISCOVERY_PREFIX
        ): _topic_prefix,
    },
    extra=vol.PREVENT_EXTRA,
)

#
# 3/3: The gateway itself
SCH_GATEWAY_CONFIG = vol.Schema(
    {
        **SCH_TRANSPORT_CONFIG_DICT,
        vol.Optional(SZ_DEBUG_MODE, default=False): bool,
        vol.Optional(SZ_LOG_FILE, default=None): vol.Any(None, str),
        vol.Optional(SZ_LOG_BACKUPS, default=0): vol.All(int, vol.Range(min=0)),
    },
    extra=vol.PREVENT_EXTRA,
)

SCH_GLOBAL_CONFIG = vol.Schema(
    {
        vol.Optional(SZ_BROKER, default={}): SCH_BROKER_CONFIG,
        vol.Optional(SZ_HOME_ASSISTANT, default={}): SCH_HASS_CONFIG,
        vol.Optional(SZ_CONFIG, default={}): SCH_GATEWAY_CONFIG,
    },
    extra=vol.PREVENT_EXTRA,
)
