"""MCP server entry point for the Patlite LR6-USB signal tower.

Exposes the tower commands as tools via the Model Context Protocol
using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from mcp.server.fastmcp import FastMCP

from .config import DeviceConfig
from .errors import CommandError
from .models.commands import (
    VOCABULARY,
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

mcp = FastMCP(
    "patlite-lr6",
    instructions="MCP server for the Patlite LR6-USB signal tower (LEDs and buzzer)",
)


def _get_config() -> DeviceConfig:
    return DeviceConfig.from_env()


def _send(build: Callable[[], Command]) -> dict[str, Any]:
    """Build, encode and send a command.

    Invalid arguments come back as ``{"error": ...}`` without touching the
    device. USB failures are raised.
    """
    try:
        command = build()
    except CommandError as e:
        return {"error": str(e)}

    report = encode(command)
    send_report(report, _get_config())
    logger.info("Sent %r as %s", command, report.hex(" "))
    return {"sent": True, "report": report.hex(" ")}


# ─── TOWER TOOLS ─────────────────────────────────────────────────────

@mcp.tool()
def light(color: str, state: str) -> dict[str, Any]:
    """Set a single LED; the other LEDs and the buzzer are left alone.

    Args:
        color: red, yellow, green, blue, white (or 0-4).
        state: off, on, pattern1-pattern4, keep (or the nibble value).
    """
    return _send(lambda: make_light(color, state))


@mcp.tool()
def tower(
    red: str, yellow: str, green: str, blue: str, white: str
) -> dict[str, Any]:
    """Set all five LEDs at once.

    Each argument takes an LED state: off, on, pattern1-pattern4, keep.
    """
    return _send(lambda: make_tower([red, yellow, green, blue, white]))


@mcp.tool()
def buzzer(
    pattern: str,
    limit: int = 0,
    pitches: list[int] | None = None,
) -> dict[str, Any]:
    """Control the buzzer. LEDs are left alone.

    Args:
        pattern: off, on, pattern1-pattern4, keep.
        limit: Repeat count 1-15, or 0 for continuous.
        pitches: Optional pitch nibbles [A, B] (0-15). Missing values use
                 the firmware defaults (0xE, 0xF).
    """
    return _send(lambda: make_buzzer(pattern, limit, pitches))


@mcp.tool()
def report(data: list[int]) -> dict[str, Any]:
    """Send a raw 8-byte HID report exactly as given.

    Args:
        data: Eight byte values 0-255, e.g. [0, 0, 15, 0, 31, 255, 240, 0].
    """
    return _send(lambda: make_raw_report(data))


@mcp.tool()
def reset() -> dict[str, Any]:
    """Turn every LED and the buzzer off."""
    return _send(make_reset)


@mcp.tool()
def describe_report(data: list[int]) -> dict[str, Any]:
    """Decode an 8-byte report into its fields without sending it."""
    try:
        return parse_report(make_raw_report(data).data).to_dict()
    except CommandError as e:
        return {"error": str(e)}


# ─── RESOURCES ───────────────────────────────────────────────────────

@mcp.resource("patlite://vocabulary")
def resource_vocabulary() -> str:
    """Accepted color, LED state and buzzer pattern names."""
    return json.dumps(VOCABULARY, indent=2)


@mcp.resource("patlite://device/config")
def resource_device_config() -> str:
    """USB ids and timeout the server will use."""
    config = _get_config()
    return json.dumps({
        "vendor_id": f"{config.vendor_id:#06x}",
        "product_id": f"{config.product_id:#06x}",
        "timeout_ms": config.timeout_ms,
    }, indent=2)


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
