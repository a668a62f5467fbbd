#!/usr/bin/env python3
"""A CLI for the ponder library."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Final

import click
import voluptuous as vol
from colorama import Fore, Style, init as colorama_init

from ponder import Gateway, exceptions as exc
from ponder.const import DEFAULT_PONDER_PREFIX, SZ_CONFIG
from ponder.device import get_model, known_models
from ponder.schemas import (
    SCH_GLOBAL_CONFIG,
    SZ_BROKER,
    SZ_DEBUG_MODE,
    SZ_HOME_ASSISTANT,
    SZ_LOG_BACKUPS,
    SZ_LOG_FILE,
    SZ_PONDER_PREFIX,
)
from ponder.session import DeviceSession
from ponder_tx import Frame, set_logging
from ponder_tx.logger import DEFAULT_DATEFMT, DEFAULT_FMT
from ponder_tx.schemas import SZ_HOST, SZ_PORT

# this is called before set_logging(), which replaces these handlers
logging.basicConfig(level=logging.WARNING, format=DEFAULT_FMT, datefmt=DEFAULT_DATEFMT)

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

DECODE_DEVICE_ID: Final = "decoded"


def deep_merge(src: dict[str, Any], dst: dict[str, Any]) -> dict[str, Any]:
    """Deep merge a src dict (precedent) into a dst dict and return the result."""

    result = dict(dst)
    for key, value in src.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(value, result[key])
        else:
            result[key] = value
    return result


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("-z", "--debug-mode", is_flag=True, help="log at DEBUG level")
@click.option("-c", "--config-file", type=click.File("r"), help="a JSON config file")
@click.pass_context
def cli(ctx: click.Context, config_file: Any = None, debug_mode: bool = False) -> None:
    """A bridge from the clip register protocol to Home Assistant."""

    lib_config: dict[str, Any] = {}

    if config_file:
        try:
            lib_config = json.load(config_file)
        except json.JSONDecodeError as err:
            raise click.BadParameter(f"not JSON: {err}", param_hint="--config-file")

    if debug_mode:  # CLI takes precedence
        lib_config = deep_merge({SZ_CONFIG: {SZ_DEBUG_MODE: True}}, lib_config)

    ctx.obj = lib_config


#
# 1/2: RUN (bridge the appliances' broker & the hub's broker, until interrupted)
@cli.command()
@click.option("-b", "--broker-host", help="the appliances' MQTT broker")
@click.option("-bp", "--broker-port", type=int)
@click.option("-H", "--hass-host", help="Home Assistant's MQTT broker")
@click.option("-Hp", "--hass-port", type=int)
@click.option("-p", "--ponder-prefix", help="the topic prefix of the properties")
@click.option("-o", "--log-file", type=click.Path(), help="also log to this file")
@click.pass_obj
def run(obj: dict[str, Any], **kwargs: Any) -> None:
    """Bridge the appliances to the hub."""

    cli_config: dict[str, Any] = {
        SZ_BROKER: {SZ_HOST: kwargs["broker_host"], SZ_PORT: kwargs["broker_port"]},
        SZ_HOME_ASSISTANT: {
            SZ_HOST: kwargs["hass_host"],
            SZ_PORT: kwargs["hass_port"],
            SZ_PONDER_PREFIX: kwargs["ponder_prefix"],
        },
        SZ_CONFIG: {SZ_LOG_FILE: kwargs["log_file"]},
    }
    cli_config = {  # drop the options that weren't given
        k: {kk: vv for kk, vv in v.items() if vv is not None}
        for k, v in cli_config.items()
    }

    try:
        config = SCH_GLOBAL_CONFIG(deep_merge(cli_config, obj))
    except vol.Invalid as err:
        raise click.UsageError(f"invalid configuration: {err}")

    set_logging(
        logging.getLogger(),
        file_name=config[SZ_CONFIG][SZ_LOG_FILE],
        rotate_backups=config[SZ_CONFIG][SZ_LOG_BACKUPS],
        debug_mode=config[SZ_CONFIG][SZ_DEBUG_MODE],
    )

    try:
        asyncio.run(_run(config))
    except KeyboardInterrupt:
        print(" - exiting via: KeyboardInterrupt")
    except exc.TransportError as err:
        raise click.ClickException(str(err))


async def _run(config: dict[str, Any]) -> None:
    gwy = Gateway(config)

    try:
        await gwy.start()
        await asyncio.Event().wait()  # until cancelled
    finally:
        await gwy.stop()


#
# 2/2: DECODE (a wire frame, e.g. from a packet capture)
class _EchoPublisher:
    """Print, rather than publish, the messages of a session."""

    def __init__(self, colour: str) -> None:
        self._colour = colour

    async def publish(self, topic: str, payload: str, retain: bool = False) -> None:
        print(f"{self._colour}{topic} = {payload}{' (retained)' if retain else ''}")


@cli.command()
@click.argument("frame")
@click.option(
    "-k", "--kind", type=click.Choice(known_models()), help="also show the properties"
)
def decode(frame: str, kind: str | None = None) -> None:
    """Decode a frame (a hex string) into its TLV records."""

    colorama_init(autoreset=True)

    try:
        pkt = Frame.from_hex(frame)
    except exc.FrameInvalid as err:
        raise click.ClickException(str(err))

    print(f"{Style.BRIGHT}{pkt!r}")
    if not pkt.crc_ok:
        print(f"{Fore.YELLOW}checksum mismatch")

    for rec in pkt.records:
        print(f"{Fore.CYAN}0x{rec.tag:03X} = {rec.value}")

    if kind is None:
        return

    session = DeviceSession(
        DECODE_DEVICE_ID,
        get_model(kind),
        broker=_EchoPublisher(Fore.MAGENTA),
        hub=_EchoPublisher(Fore.GREEN),
        ponder_prefix=DEFAULT_PONDER_PREFIX,
        discovery_prefix="",
    )
    asyncio.run(session.apply_inbound_packet(pkt.records))


def main() -> None:
    try:
        cli(prog_name="ponder")
    except exc.PonderException as err:
        print(f"{Fore.RED}{err}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
