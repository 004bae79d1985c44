"""Command model for the signal tower."""

from .commands import (
    BuzzerCommand,
    BuzzerPattern,
    Command,
    LedChannel,
    LedState,
    LightCommand,
    RawReport,
    ResetCommand,
    TowerCommand,
    make_buzzer,
    make_light,
    make_raw_report,
    make_reset,
    make_tower,
)
