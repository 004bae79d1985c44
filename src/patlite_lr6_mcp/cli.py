"""ptltectl: command-line control for the Patlite LR6-USB tower."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import click

from . import __version__
from .config import (
    ENV_PRODUCT_ID,
    ENV_TIMEOUT_MS,
    ENV_VENDOR_ID,
    PRODUCT_ID,
    TIMEOUT_MS,
    VENDOR_ID,
    DeviceConfig,
    parse_usb_id,
)
from .errors import TowerError
from .models.commands import (
    Command,
    make_buzzer,
    make_light,
    make_raw_report,
    make_reset,
    make_tower,
)
from .protocol.parser import parse_report
from .protocol.report import encode
from .transport.usb_connection import send_report

logger = logging.getLogger(__name__)


class UsbIdType(click.ParamType):
    """A 16-bit USB id in decimal or 0x-prefixed hex."""

    name = "usb-id"

    def convert(self, value, param, ctx):
        if isinstance(value, int):
            return value
        try:
            return parse_usb_id(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


@dataclass
class CliState:
    config: DeviceConfig
    dry_run: bool = False


def setup_logging(verbose: int) -> None:
    """Configure logging (0 = WARNING, 1 = INFO, 2+ = DEBUG)."""
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _show_report(report: bytes) -> None:
    click.echo(report.hex(" "))
    fields = parse_report(report).to_dict()
    buzzer = fields["buzzer"]
    click.echo(
        f"  buzzer: {buzzer['pattern']} limit={buzzer['limit']} "
        f"pitch={buzzer['pitch_a']:#x}/{buzzer['pitch_b']:#x}"
    )
    for color, state in fields["leds"].items():
        click.echo(f"  {color}: {state}")


def _run(obj: CliState, build: Callable[[], Command]) -> None:
    """Build, encode and send (or show) one command."""
    try:
        command = build()
        report = encode(command)
        logger.debug("Encoded %r as %s", command, report.hex(" "))
        if obj.dry_run:
            _show_report(report)
            return
        send_report(report, obj.config)
    except TowerError as e:
        raise click.ClickException(str(e)) from e
    click.echo("ok")


@click.group()
@click.version_option(version=__version__, prog_name="ptltectl")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v INFO, -vv DEBUG)")
@click.option(
    "--vendor-id", type=UsbIdType(), envvar=ENV_VENDOR_ID,
    default=f"{VENDOR_ID:#06x}", show_default=True, help="USB vendor id",
)
@click.option(
    "--product-id", type=UsbIdType(), envvar=ENV_PRODUCT_ID,
    default=f"{PRODUCT_ID:#06x}", show_default=True, help="USB product id",
)
@click.option(
    "--timeout", "timeout_ms", type=click.IntRange(min=1), envvar=ENV_TIMEOUT_MS,
    default=TIMEOUT_MS, show_default=True, help="USB write timeout in milliseconds",
)
@click.option("--dry-run", is_flag=True, help="Print the report instead of sending it")
@click.pass_context
def cli(ctx, verbose, vendor_id, product_id, timeout_ms, dry_run):
    """Control the Patlite LR6-USB tower."""
    setup_logging(verbose)
    ctx.obj = CliState(
        config=DeviceConfig(
            vendor_id=vendor_id, product_id=product_id, timeout_ms=timeout_ms
        ),
        dry_run=dry_run,
    )


@cli.command()
@click.argument("color")
@click.argument("state")
@click.pass_obj
def light(obj: CliState, color, state):
    """Set a single LED's state (color + pattern).

    COLOR: red yellow green blue white (or 0-4).
    STATE: led_off led_on led_pattern1-4 led_keep (or 0-15).
    """
    _run(obj, lambda: make_light(color, state))


@cli.command()
@click.argument("red")
@click.argument("yellow")
@click.argument("green")
@click.argument("blue")
@click.argument("white")
@click.pass_obj
def tower(obj: CliState, red, yellow, green, blue, white):
    """Set the entire tower: RED YELLOW GREEN BLUE WHITE.

    Each value is an LED state: led_off led_on led_pattern1-4 led_keep (or 0-15).
    """
    _run(obj, lambda: make_tower([red, yellow, green, blue, white]))


@cli.command()
@click.argument("pattern")
@click.argument("limit", required=False, default="0")
@click.argument("pitches", nargs=-1)
@click.pass_obj
def buzzer(obj: CliState, pattern, limit, pitches):
    """Control the buzzer with optional explicit pitches.

    \b
    PATTERN: buzz_off buzz_on buzz_pattern1-4 buzzer_keep (or 0-15).
    LIMIT:   0 = continuous, 1-15 = timed.
    PITCHES: up to two pitch nibbles (0-15), A then B. Defaults 0xE 0xF.
    """
    _run(obj, lambda: make_buzzer(pattern, limit, pitches or None))


@cli.command()
@click.argument("values", nargs=-1, metavar="BYTE...")
@click.pass_obj
def report(obj: CliState, values):
    """Send a raw 8-byte HID report (decimal or 0x-prefixed hex)."""
    _run(obj, lambda: make_raw_report(values))


@cli.command()
@click.pass_obj
def reset(obj: CliState):
    """Turn everything off."""
    _run(obj, make_reset)


@cli.command()
@click.argument("values", nargs=-1, metavar="BYTE...")
def describe(values):
    """Decode an 8-byte report without sending it."""
    try:
        _show_report(make_raw_report(values).data)
    except TowerError as e:
        raise click.ClickException(str(e)) from e


@cli.command()
def serve():
    """Run the MCP server over stdio."""
    from .server import main as serve_main

    # setup_logging already ran, so basicConfig in serve_main is a no-op
    root = logging.getLogger()
    if root.level > logging.INFO:
        root.setLevel(logging.INFO)
    serve_main()


def main():
    cli()


if __name__ == "__main__":
    main()
