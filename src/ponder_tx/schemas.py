#!/usr/bin/env python3
"""Ponder - a bridge from the clip register protocol to Home Assistant.

Schema processor for the transport (lower) layer.
"""

from __future__ import annotations

import logging
from typing import Final, TypedDict

import voluptuous as vol

_LOGGER = logging.getLogger(__name__)


DEFAULT_MQTT_PORT: Final[int] = 1883
DEFAULT_PUBLISH_TIMEOUT: Final[float] = 5.0

#
# 1/2: MQTT broker configuration (used for both the appliances' & the hub's brokers)
SZ_HOST: Final = "host"
SZ_PORT: Final = "port"
SZ_USERNAME: Final = "username"
SZ_PASSWORD: Final = "password"
SZ_QOS: Final = "qos"
SZ_CLIENT_ID: Final = "client_id"


class MqttConfigT(TypedDict):
    host: str
    port: int
    username: str | None
    password: str | None
    qos: int
    client_id: str | None


SCH_MQTT_CONFIG_DICT = {
    vol.Optional(SZ_HOST, default="localhost"): vol.All(str, vol.Length(min=1)),
    vol.Optional(SZ_PORT, default=DEFAULT_MQTT_PORT): vol.All(
        vol.Coerce(int), vol.Range(min=1, max=65535)
    ),
    vol.Optional(SZ_USERNAME, default=None): vol.Any(None, str),
    vol.Optional(SZ_PASSWORD, default=None): vol.Any(None, str),
    vol.Optional(SZ_QOS, default=0): vol.All(vol.Coerce(int), vol.In((0, 1, 2))),
    vol.Optional(SZ_CLIENT_ID, default=None): vol.Any(None, str),
}
SCH_MQTT_CONFIG = vol.Schema(SCH_MQTT_CONFIG_DICT, extra=vol.PREVENT_EXTRA)

#
# 2/2: Transport behaviour
SZ_PUBLISH_TIMEOUT: Final = "publish_timeout"

SCH_TRANSPORT_CONFIG_DICT = {
    vol.Optional(SZ_PUBLISH_TIMEOUT, default=DEFAULT_PUBLISH_TIMEOUT): vol.All(
        vol.Coerce(float), vol.Range(min=0.1, max=60.0)
    ),
}
