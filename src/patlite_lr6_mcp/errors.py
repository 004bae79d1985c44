"""Exception hierarchy.

Command errors are raised while building a command, before anything is
encoded or sent. Transport errors come from the USB layer.
"""

from __future__ import annotations


class TowerError(Exception):
    """Base class for every error raised by this package."""


class CommandError(TowerError, ValueError):
    """A command argument failed validation."""


class InvalidChannel(CommandError):
    pass


class InvalidState(CommandError):
    pass


class InvalidPattern(CommandError):
    pass


class InvalidPitch(CommandError):
    pass


class InvalidLimit(CommandError):
    pass


class InvalidByte(CommandError):
    pass


class WrongArity(CommandError):
    """Wrong number of values for a fixed-size field group."""


class WrongLength(CommandError):
    """A report was not exactly 8 bytes long."""


class TransportError(TowerError, ConnectionError):
    """The USB write could not be completed."""


class DeviceNotFound(TransportError):
    pass


class ShortWrite(TransportError):
    pass
