"""8-byte control report encoder.

Report layout::

    +---------+--------+---------------+--------+-------+-------+-------+-------+
    | Version | Cmd ID | Buzzer        | Pitch  | LED 1 | LED 2 | LED 3 | Spare |
    | 0x00    | 0x00   | limit:pattern | A:B    | R:Y   | G:B   | W:0   | 0x00  |
    +---------+--------+---------------+--------+-------+-------+-------+-------+

- Version and command id are always 0x00.
- Every field except the first two and the spare is a pair of nibbles.
- A nibble of 0xF means "keep the current value", which lets a light or
  buzzer command leave the rest of the tower untouched.

Encoding never fails: all validation happens when the command is built.
"""

from __future__ import annotations

from ..models.commands import (
    BuzzerCommand,
    BuzzerPattern,
    Command,
    LedChannel,
    LedState,
    LightCommand,
    RawReport,
    ResetCommand,
    TowerCommand,
)

COMMAND_VERSION = 0x00
COMMAND_ID = 0x00

OFF_BUZZER = 2
OFF_PITCH = 3
OFF_LED_RY = 4
OFF_LED_GB = 5
OFF_LED_W = 6

BUZZER_KEEP = BuzzerPattern.KEEP.value
BUZZER_OFF = 0x00
PITCH_NONE = 0x00


def pack_nibbles(high: int, low: int) -> int:
    """Combine two 4-bit values into one byte."""
    return ((high & 0x0F) << 4) | (low & 0x0F)


def build_report(
    buzzer: int,
    pitch: int,
    led_ry: int,
    led_gb: int,
    led_w: int,
) -> bytes:
    """Assemble the 8-byte report from its packed fields."""
    return bytes([
        COMMAND_VERSION,
        COMMAND_ID,
        buzzer,
        pitch,
        led_ry,
        led_gb,
        led_w,
        0x00,
    ])


def _pack_leds(states: tuple[LedState, ...]) -> tuple[int, int, int]:
    red, yellow, green, blue, white = states
    return (
        pack_nibbles(red, yellow),
        pack_nibbles(green, blue),
        pack_nibbles(white, 0),
    )


KEEP_LEDS = (LedState.KEEP,) * len(LedChannel)

# All-"keep" report: sending it changes nothing on the device.
KEEP_REPORT = build_report(BUZZER_KEEP, PITCH_NONE, *_pack_leds(KEEP_LEDS))

RESET_REPORT = build_report(BUZZER_OFF, PITCH_NONE, 0x00, 0x00, 0x00)


def encode_light(command: LightCommand) -> bytes:
    """Encode a single light against a keep background."""
    states = list(KEEP_LEDS)
    states[command.channel] = command.state
    return build_report(BUZZER_KEEP, PITCH_NONE, *_pack_leds(tuple(states)))


def encode_tower(command: TowerCommand) -> bytes:
    """Encode all five LED states; the buzzer is kept."""
    return build_report(BUZZER_KEEP, PITCH_NONE, *_pack_leds(command.states))


def encode_buzzer(command: BuzzerCommand) -> bytes:
    """Encode the buzzer and pitch bytes; every LED is kept."""
    pitch_a, pitch_b = command.pitches
    return build_report(
        pack_nibbles(command.limit, command.pattern),
        pack_nibbles(pitch_a, pitch_b),
        *_pack_leds(KEEP_LEDS),
    )


def encode_raw(command: RawReport) -> bytes:
    return command.data


def encode_reset(command: ResetCommand) -> bytes:
    return RESET_REPORT


_ENCODERS = {
    LightCommand: encode_light,
    TowerCommand: encode_tower,
    BuzzerCommand: encode_buzzer,
    RawReport: encode_raw,
    ResetCommand: encode_reset,
}


def encode(command: Command) -> bytes:
    """Encode any command into its 8-byte report.

    Raises:
        TypeError: If ``command`` is not one of the command model types.
    """
    encoder = _ENCODERS.get(type(command))
    if encoder is None:
        raise TypeError(f"Cannot encode {type(command).__name__}")
    return encoder(command)
