"""Split an 8-byte report back into named fields.

Used to show what a report will do before (or instead of) sending it.
Nibbles with no matching enum member are kept as plain ints.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..errors import WrongLength
from ..models.commands import REPORT_LEN, BuzzerPattern, LedChannel, LedState
from .report import OFF_BUZZER, OFF_LED_GB, OFF_LED_RY, OFF_LED_W, OFF_PITCH


def _enum_or_int(enum_cls, value: int):
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _name(value) -> str:
    if isinstance(value, (LedState, BuzzerPattern)):
        return value.name.lower()
    return f"{value:#x}"


@dataclass
class ReportFields:
    """Decoded view of a control report."""

    version: int
    command_id: int
    buzzer_pattern: BuzzerPattern | int
    buzzer_limit: int
    pitches: tuple[int, int]
    leds: dict[LedChannel, LedState | int] = field(default_factory=dict)
    raw: bytes = b""

    def __repr__(self) -> str:
        leds = " ".join(f"{c.name.lower()}={_name(s)}" for c, s in self.leds.items())
        return (
            f"ReportFields(buzzer={_name(self.buzzer_pattern)}, "
            f"limit={self.buzzer_limit}, "
            f"pitches=({self.pitches[0]:#x}, {self.pitches[1]:#x}), {leds})"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "raw_hex": self.raw.hex(" "),
            "version": self.version,
            "command_id": self.command_id,
            "buzzer": {
                "pattern": _name(self.buzzer_pattern),
                "limit": self.buzzer_limit,
                "pitch_a": self.pitches[0],
                "pitch_b": self.pitches[1],
            },
            "leds": {c.name.lower(): _name(s) for c, s in self.leds.items()},
        }


def parse_report(data: bytes) -> ReportFields:
    """Decode an 8-byte report.

    Raises:
        WrongLength: If ``data`` is not exactly 8 bytes.
    """
    data = bytes(data)
    if len(data) != REPORT_LEN:
        raise WrongLength(f"report must be {REPORT_LEN} bytes, got {len(data)}")

    buzzer = data[OFF_BUZZER]
    pitch = data[OFF_PITCH]
    nibbles = [
        data[OFF_LED_RY] >> 4,
        data[OFF_LED_RY] & 0x0F,
        data[OFF_LED_GB] >> 4,
        data[OFF_LED_GB] & 0x0F,
        data[OFF_LED_W] >> 4,
    ]

    return ReportFields(
        version=data[0],
        command_id=data[1],
        buzzer_pattern=_enum_or_int(BuzzerPattern, buzzer & 0x0F),
        buzzer_limit=buzzer >> 4,
        pitches=(pitch >> 4, pitch & 0x0F),
        leds={
            channel: _enum_or_int(LedState, nibble)
            for channel, nibble in zip(LedChannel, nibbles)
        },
        raw=data,
    )
