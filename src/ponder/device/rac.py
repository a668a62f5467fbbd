#!/usr/bin/env python3
"""Ponder - LG room air conditioners (RAC).

The power register is never published: it is redirected to the mode register, so
that an appliance that is switched off is reported as mode "off".
"""

from __future__ import annotations

from typing import Any, Final

from ponder_tx.const import VALUE_MAX

from .base import (
    DeviceModel,
    Field,
    FieldRegistry,
    StateT,
    attach,
    read_map,
    register_model,
    write_map,
)

TAG_POWER: Final = 0x1F7
TAG_MODE: Final = 0x1F9
TAG_FAN_MODE: Final = 0x1FA
TAG_CURRENT_TEMPERATURE: Final = 0x1FD
TAG_TEMPERATURE: Final = 0x1FE
TAG_VERTICAL_SWING_MODE: Final = 0x321
TAG_SWING_MODE: Final = 0x322

SZ_POWER: Final = "power"
SZ_MODE: Final = "mode"
SZ_OFF: Final = "off"

POWER_OFF: Final = "OFF"
POWER_ON: Final = "ON"

MODES: Final = {0: "cool", 1: "dry", 2: "fan_only", 4: "heat", 6: "auto"}
FAN_MODES: Final = {
    2: "very low",
    3: "low",
    4: "medium",
    5: "high",
    6: "very high",
    8: "auto",
}
VERTICAL_SWING_MODES: Final = {0: "off", **{i: str(i) for i in range(1, 7)}, 100: "on"}
SWING_MODES: Final = {
    0: "off",
    **{i: str(i) for i in range(1, 6)},
    13: "1-3",
    35: "3-5",
    100: "on",
}


def _half_degrees(raw: int, state: StateT) -> str:
    return f"{raw / 2:g}"


def _to_half_degrees(value: str) -> int | None:
    try:
        half_degrees = float(value) * 2
    except ValueError:  # e.g. "warm"
        return None
    if not 0 <= half_degrees < VALUE_MAX:  # also excludes "nan", "inf"
        return None
    return int(half_degrees + 0.5)  # rounds halves up, e.g. "22.25" is 45


def _read_power(raw: int, state: StateT) -> str:
    return POWER_OFF if raw == 0 else POWER_ON


def _write_power(value: str) -> int:
    return 1 if value == POWER_ON else 0


def _attach_power(raw: int) -> tuple[int, ...]:
    return () if raw == 0 else (TAG_MODE, TAG_FAN_MODE)


def _read_mode(raw: int, state: StateT) -> str | None:
    if state.get(TAG_POWER) == 0:
        return SZ_OFF
    return MODES.get(raw)


def _pre_write_mode(value: str) -> tuple[str, str] | None:
    return (SZ_POWER, POWER_OFF) if value == SZ_OFF else None


RAC_FIELDS = FieldRegistry(
    (
        Field(
            TAG_CURRENT_TEMPERATURE,
            "current_temperature",
            writable=False,
            read_xform=_half_degrees,
        ),
        Field(
            TAG_POWER,
            SZ_POWER,
            readable=False,
            read_xform=_read_power,
            read_callback=lambda value: TAG_MODE,
            write_xform=_write_power,
            write_attach=_attach_power,
        ),
        Field(
            TAG_MODE,
            SZ_MODE,
            read_xform=_read_mode,
            pre_write_xform=_pre_write_mode,
            write_xform=write_map(MODES),
            write_attach=attach(TAG_FAN_MODE, TAG_TEMPERATURE),
        ),
        Field(
            TAG_FAN_MODE,
            "fan_mode",
            read_xform=read_map(FAN_MODES),
            write_xform=write_map(FAN_MODES),
            write_attach=attach(TAG_MODE, TAG_TEMPERATURE),
        ),
        Field(
            TAG_TEMPERATURE,
            "temperature",
            read_xform=_half_degrees,
            write_xform=_to_half_degrees,
            write_attach=attach(TAG_MODE, TAG_FAN_MODE),
        ),
        Field(
            TAG_VERTICAL_SWING_MODE,
            "vertical_swing_mode",
            read_xform=read_map(VERTICAL_SWING_MODES),
            write_xform=write_map(VERTICAL_SWING_MODES),
            write_attach=attach(TAG_MODE, TAG_FAN_MODE),
        ),
        Field(
            TAG_SWING_MODE,
            "swing_mode",
            read_xform=read_map(SWING_MODES),
            write_xform=write_map(SWING_MODES),
            write_attach=attach(TAG_MODE, TAG_FAN_MODE),
        ),
    )
)


def _rac_capabilities(device_id: str, ponder_prefix: str) -> dict[str, Any]:
    topic = f"{ponder_prefix}/{device_id}"

    return {
        "name": "LG Air Conditioner",
        "temperature_unit": "C",
        "temp_step": 0.5,
        "precision": 0.5,
        "modes": ["off", *MODES.values()],
        "fan_modes": ["auto", "very low", "low", "medium", "high", "very high"],
        "swing_modes": ["1", "2", "3", "4", "5", "1-3", "3-5", "on", "off"],
        "vertical_swing_modes": ["1", "2", "3", "4", "5", "6", "on", "off"],
        "current_temperature_topic": f"{topic}/current_temperature",
        "power_command_topic": f"{topic}/power/set",
        "mode_state_topic": f"{topic}/mode",
        "mode_command_topic": f"{topic}/mode/set",
        "fan_mode_state_topic": f"{topic}/fan_mode",
        "fan_mode_command_topic": f"{topic}/fan_mode/set",
        "temperature_state_topic": f"{topic}/temperature",
        "temperature_command_topic": f"{topic}/temperature/set",
        "swing_mode_state_topic": f"{topic}/swing_mode",
        "swing_mode_command_topic": f"{topic}/swing_mode/set",
    }


RAC_056905_WW = register_model(
    DeviceModel(
        model="RAC_056905_WW",
        ha_class="climate",
        fields=RAC_FIELDS,
        capabilities=_rac_capabilities,
    )
)
