#!/usr/bin/env python3
"""Ponder - Test the config schemas."""

import pytest
import voluptuous as vol

from ponder.schemas import SCH_GLOBAL_CONFIG
from ponder_tx.schemas import SCH_MQTT_CONFIG


def test_global_config_defaults() -> None:
    config = SCH_GLOBAL_CONFIG({})

    assert config["broker"] == {
        "host": "localhost",
        "port": 1883,
        "username": None,
        "password": None,
        "qos": 0,
        "client_id": None,
    }
    assert config["home_assistant"]["ponder_prefix"] == "ponder"
    assert config["home_assistant"]["discovery_prefix"] == "homeassistant"
    assert config["config"] == {
        "publish_timeout": 5.0,
        "debug_mode": False,
        "log_file": None,
        "log_backups": 0,
    }


def test_mqtt_config() -> None:
    config = SCH_MQTT_CONFIG({"host": "broker.lan", "port": "8883", "qos": 1})

    assert config["port"] == 8883
    assert config["qos"] == 1


@pytest.mark.parametrize(
    "config",
    [
        {"port": 0},
        {"port": 65536},
        {"qos": 3},
        {"host": ""},
        {"hostname": "broker.lan"},  # extra keys are not allowed
    ],
)
def test_mqtt_config_invalid(config: dict) -> None:
    with pytest.raises(vol.Invalid):
        SCH_MQTT_CONFIG(config)


@pytest.mark.parametrize("prefix", ["", "ponder/", "/ponder", "pon+der", "ponder/#"])
def test_topic_prefix_invalid(prefix: str) -> None:
    with pytest.raises(vol.Invalid):
        SCH_GLOBAL_CONFIG({"home_assistant": {"ponder_prefix": prefix}})


def test_topic_prefix_nested() -> None:
    config = SCH_GLOBAL_CONFIG({"home_assistant": {"ponder_prefix": "home/lg"}})
    assert config["home_assistant"]["ponder_prefix"] == "home/lg"


@pytest.mark.parametrize(
    "config",
    [
        {"unknown": {}},
        {"config": {"log_backups": -1}},
        {"config": {"publish_timeout": 0}},
    ],
)
def test_global_config_invalid(config: dict) -> None:
    with pytest.raises(vol.Invalid):
        SCH_GLOBAL_CONFIG(config)
