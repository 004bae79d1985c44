"""Command model: validated, immutable values for each tower command.

There are five command families: a single light, the whole tower, the
buzzer, a raw report and a reset. Each is a frozen dataclass that checks
its fields in ``__post_init__``, so an instance that exists is always
encodable.

Arguments may be given as enum members, plain ints, or strings. Strings are
matched case-insensitively against the alias tables below (``"red"``,
``"led_on"``, ``"buzz_pattern2"`` ...) and otherwise parsed as a decimal or
``0x``-prefixed hex number.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Union

from ..errors import (
    InvalidByte,
    InvalidChannel,
    InvalidLimit,
    InvalidPattern,
    InvalidPitch,
    InvalidState,
    WrongArity,
    WrongLength,
)

NIBBLE_MAX = 0x0F
BYTE_MAX = 0xFF
REPORT_LEN = 8
TOWER_SIZE = 5
PITCH_COUNT = 2  # pitch A (high nibble) and pitch B (low nibble)

DEFAULT_PITCHES = (0x0E, 0x0F)
PITCH_OFF = (0x00, 0x00)


class LedChannel(IntEnum):
    """LED colors, in report order."""

    RED = 0
    YELLOW = 1
    GREEN = 2
    BLUE = 3
    WHITE = 4


class LedState(IntEnum):
    """LED state nibble values understood by the firmware."""

    OFF = 0x0
    ON = 0x1
    PATTERN1 = 0x2
    PATTERN2 = 0x3
    PATTERN3 = 0x4
    PATTERN4 = 0x5
    KEEP = 0xF


class BuzzerPattern(IntEnum):
    """Buzzer pattern nibble values. ``ON`` is a continuous tone."""

    OFF = 0x0
    ON = 0x1
    PATTERN1 = 0x2
    PATTERN2 = 0x3
    PATTERN3 = 0x4
    PATTERN4 = 0x5
    KEEP = 0xF


CHANNEL_ALIASES: dict[str, LedChannel] = {
    channel.name.lower(): channel for channel in LedChannel
}

LED_STATE_ALIASES: dict[str, LedState] = {
    "led_off": LedState.OFF,
    "off": LedState.OFF,
    "led_on": LedState.ON,
    "on": LedState.ON,
    "solid": LedState.ON,
    "led_pattern1": LedState.PATTERN1,
    "pattern1": LedState.PATTERN1,
    "led_pattern2": LedState.PATTERN2,
    "pattern2": LedState.PATTERN2,
    "led_pattern3": LedState.PATTERN3,
    "pattern3": LedState.PATTERN3,
    "led_pattern4": LedState.PATTERN4,
    "pattern4": LedState.PATTERN4,
    "led_keep": LedState.KEEP,
    "keep": LedState.KEEP,
}

BUZZER_ALIASES: dict[str, BuzzerPattern] = {
    "buzz_off": BuzzerPattern.OFF,
    "buzzer_off": BuzzerPattern.OFF,
    "off": BuzzerPattern.OFF,
    "buzz_on": BuzzerPattern.ON,
    "buzzer_on": BuzzerPattern.ON,
    "on": BuzzerPattern.ON,
    "buzz_pattern1": BuzzerPattern.PATTERN1,
    "pattern1": BuzzerPattern.PATTERN1,
    "buzz_pattern2": BuzzerPattern.PATTERN2,
    "pattern2": BuzzerPattern.PATTERN2,
    "buzz_pattern3": BuzzerPattern.PATTERN3,
    "pattern3": BuzzerPattern.PATTERN3,
    "buzz_pattern4": BuzzerPattern.PATTERN4,
    "pattern4": BuzzerPattern.PATTERN4,
    "buzzer_keep": BuzzerPattern.KEEP,
    "keep": BuzzerPattern.KEEP,
}


_NUMBER_RE = re.compile(r"0[xX][0-9a-fA-F]+|[0-9]+")


def parse_number(value: str) -> int:
    """Parse a decimal or ``0x``-prefixed hex string.

    Only plain digits are accepted: no sign, underscores or whitespace.

    Raises:
        ValueError: If the string is not a number.
    """
    if not _NUMBER_RE.fullmatch(value):
        raise ValueError(f"invalid number {value!r}")
    if value[:2].lower() == "0x":
        return int(value[2:], 16)
    return int(value, 10)


def _to_int(value, error: type[Exception], what: str) -> int:
    if isinstance(value, str):
        try:
            return parse_number(value)
        except ValueError:
            raise error(f"invalid {what} '{value}'") from None
    if isinstance(value, bool) or not isinstance(value, int):
        raise error(f"invalid {what} {value!r}")
    return int(value)


def _coerce(value, enum_cls, aliases: dict, error: type[Exception], what: str):
    """Resolve an enum member, alias string, or number to ``enum_cls``."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str) and value.strip().lower() in aliases:
        return aliases[value.strip().lower()]
    number = _to_int(value, error, what)
    try:
        return enum_cls(number)
    except ValueError:
        valid = ", ".join(f"{m.name.lower()}={m.value:#x}" for m in enum_cls)
        raise error(f"{what} {number:#x} is not one of: {valid}") from None


def _bounded(value, upper: int, error: type[Exception], what: str) -> int:
    number = _to_int(value, error, what)
    if not 0 <= number <= upper:
        raise error(f"{what} {number:#x} out of range (0x0-{upper:#x})")
    return number


def coerce_channel(value) -> LedChannel:
    return _coerce(value, LedChannel, CHANNEL_ALIASES, InvalidChannel, "color")


def coerce_led_state(value) -> LedState:
    return _coerce(value, LedState, LED_STATE_ALIASES, InvalidState, "LED state")


def coerce_buzzer_pattern(value) -> BuzzerPattern:
    return _coerce(
        value, BuzzerPattern, BUZZER_ALIASES, InvalidPattern, "buzzer pattern"
    )


@dataclass(frozen=True)
class LightCommand:
    """Set one LED; the other channels are left as they are."""

    channel: LedChannel
    state: LedState

    def __post_init__(self) -> None:
        object.__setattr__(self, "channel", coerce_channel(self.channel))
        object.__setattr__(self, "state", coerce_led_state(self.state))


@dataclass(frozen=True)
class TowerCommand:
    """Set all five LEDs at once, in red/yellow/green/blue/white order."""

    states: tuple[LedState, ...]

    def __post_init__(self) -> None:
        states = tuple(self.states)
        if len(states) != TOWER_SIZE:
            raise WrongArity(
                f"tower needs exactly {TOWER_SIZE} states "
                f"(red yellow green blue white), got {len(states)}"
            )
        object.__setattr__(
            self, "states", tuple(coerce_led_state(s) for s in states)
        )


@dataclass(frozen=True)
class BuzzerCommand:
    """Drive the buzzer.

    Covers the three buzzer variants with one value:

    * a numbered pattern with a repeat ``limit`` (0 = continuous),
    * ``BuzzerPattern.ON``, a continuous tone at the given pitches,
    * ``BuzzerPattern.OFF``, which defaults to zero pitches so the whole
      buzzer field is cleared.

    ``pitches`` holds the (A, B) pitch nibbles. Missing positions are
    filled from ``DEFAULT_PITCHES``.
    """

    pattern: BuzzerPattern
    limit: int = 0
    pitches: tuple[int, ...] | None = None

    def __post_init__(self) -> None:
        pattern = coerce_buzzer_pattern(self.pattern)
        limit = _bounded(
            0 if self.limit is None else self.limit,
            NIBBLE_MAX, InvalidLimit, "buzzer limit",
        )

        if self.pitches is None:
            pitches = PITCH_OFF if pattern is BuzzerPattern.OFF else DEFAULT_PITCHES
        else:
            given = tuple(self.pitches)
            if len(given) > PITCH_COUNT:
                raise WrongArity(
                    f"buzzer takes at most {PITCH_COUNT} pitches "
                    f"(pitch A, pitch B), got {len(given)}"
                )
            checked = [_bounded(p, NIBBLE_MAX, InvalidPitch, "pitch") for p in given]
            pitches = tuple(checked) + DEFAULT_PITCHES[len(checked):]

        object.__setattr__(self, "pattern", pattern)
        object.__setattr__(self, "limit", limit)
        object.__setattr__(self, "pitches", pitches)


@dataclass(frozen=True)
class RawReport:
    """An 8-byte report sent exactly as given."""

    data: bytes

    def __post_init__(self) -> None:
        values = list(self.data)
        if len(values) != REPORT_LEN:
            raise WrongLength(
                f"report must be {REPORT_LEN} bytes, got {len(values)}"
            )
        checked = [_bounded(v, BYTE_MAX, InvalidByte, "byte") for v in values]
        object.__setattr__(self, "data", bytes(checked))

    def __repr__(self) -> str:
        return f"RawReport(data={self.data.hex(' ')})"


@dataclass(frozen=True)
class ResetCommand:
    """Turn every LED and the buzzer off."""


Command = Union[LightCommand, TowerCommand, BuzzerCommand, RawReport, ResetCommand]


def make_light(channel, state) -> LightCommand:
    """Build a single-light command.

    Raises:
        InvalidChannel: Unknown color.
        InvalidState: Unknown LED state.
    """
    return LightCommand(channel, state)


def make_tower(states: Iterable) -> TowerCommand:
    """Build a whole-tower command from five states.

    Raises:
        WrongArity: Not exactly five states.
        InvalidState: Any state is unknown.
    """
    return TowerCommand(tuple(states))


def make_buzzer(kind, limit=0, pitches: Iterable | None = None) -> BuzzerCommand:
    """Build a buzzer command.

    Args:
        kind: Pattern alias or nibble (``off``, ``on``, ``pattern1``-``pattern4``, ``keep``).
        limit: Repeat count nibble, 0 = continuous.
        pitches: Up to two pitch nibbles (A, B). The report has a single
            pitch byte, so a third pitch raises ``WrongArity``.

    Raises:
        InvalidPattern, InvalidLimit, InvalidPitch, WrongArity
    """
    return BuzzerCommand(
        kind, limit, None if pitches is None else tuple(pitches)
    )


def make_raw_report(data: Iterable) -> RawReport:
    """Wrap 8 raw bytes.

    Raises:
        WrongLength: Not exactly 8 values.
        InvalidByte: A value outside 0-255.
    """
    if isinstance(data, (bytes, bytearray)):
        return RawReport(bytes(data))
    return RawReport(tuple(data))


def make_reset() -> ResetCommand:
    return ResetCommand()


VOCABULARY: dict[str, dict[str, int]] = {
    "colors": {name: int(v) for name, v in CHANNEL_ALIASES.items()},
    "led_states": {name: int(v) for name, v in LED_STATE_ALIASES.items()},
    "buzzer_patterns": {name: int(v) for name, v in BUZZER_ALIASES.items()},
}
