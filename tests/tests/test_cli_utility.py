#!/usr/bin/env python3
"""Ponder - Test the CLI utility."""

import json

import pytest
from click.testing import CliRunner

from ponder_cli.client import cli, deep_merge
from ponder_tx import Tlv, build_frame

FRAME = build_frame((1, 1, 2, 4, 1), [Tlv(0x1FD, 20), Tlv(0x1F7, 0)], marker=0x87)


def test_deep_merge() -> None:
    dst = {"broker": {"host": "a", "port": 1}, "config": {"debug_mode": False}}
    src = {"broker": {"host": "b"}, "home_assistant": {"host": "c"}}

    assert deep_merge(src, dst) == {
        "broker": {"host": "b", "port": 1},
        "config": {"debug_mode": False},
        "home_assistant": {"host": "c"},
    }
    assert dst["broker"]["host"] == "a"  # unchanged


def test_decode() -> None:
    result = CliRunner().invoke(cli, ["decode", FRAME.hex()])

    assert result.exit_code == 0, result.output
    assert "0x1FD = 20" in result.output
    assert "0x1F7 = 0" in result.output
    assert "checksum mismatch" not in result.output


def test_decode_with_kind() -> None:
    result = CliRunner().invoke(cli, ["decode", FRAME.hex(), "-k", "RAC_056905_WW"])

    assert result.exit_code == 0, result.output
    assert "ponder/decoded/current_temperature = 10 (retained)" in result.output
    assert "ponder/decoded/mode = off (retained)" in result.output


@pytest.mark.parametrize("frame", ["xyz", "0101"])
def test_decode_invalid(frame: str) -> None:
    result = CliRunner().invoke(cli, ["decode", frame])

    assert result.exit_code != 0
    assert "Bad frame" in result.output


def test_run_invalid_config(tmp_path) -> None:
    config_file = tmp_path / "ponder.json"
    config_file.write_text(json.dumps({"broker": {"port": 0}}))

    result = CliRunner().invoke(cli, ["-c", str(config_file), "run"])

    assert result.exit_code != 0
    assert "invalid configuration" in result.output
