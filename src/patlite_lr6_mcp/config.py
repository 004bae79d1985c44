"""Device connection settings.

Defaults match the LR6-USB. Each value can be overridden through the
environment::

    PTLTECTL_VENDOR_ID=0x191a
    PTLTECTL_PRODUCT_ID=0x8003
    PTLTECTL_TIMEOUT_MS=1000
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .models.commands import parse_number

VENDOR_ID = 0x191A
PRODUCT_ID = 0x8003
TIMEOUT_MS = 1000

ENV_VENDOR_ID = "PTLTECTL_VENDOR_ID"
ENV_PRODUCT_ID = "PTLTECTL_PRODUCT_ID"
ENV_TIMEOUT_MS = "PTLTECTL_TIMEOUT_MS"


def parse_usb_id(value: str) -> int:
    """Parse a 16-bit USB id given as decimal or 0x-prefixed hex."""
    number = parse_number(value.strip())
    if not 0 <= number <= 0xFFFF:
        raise ValueError(f"USB id must be 0x0000-0xFFFF, got {value!r}")
    return number


@dataclass(frozen=True)
class DeviceConfig:
    """Which device to open and how long a write may take."""

    vendor_id: int = VENDOR_ID
    product_id: int = PRODUCT_ID
    timeout_ms: int = TIMEOUT_MS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DeviceConfig:
        """Build a config from ``PTLTECTL_*`` variables.

        Raises:
            ValueError: If a variable is set but not a valid number.
        """
        env = os.environ if environ is None else environ
        kwargs = {}
        if env.get(ENV_VENDOR_ID):
            kwargs["vendor_id"] = parse_usb_id(env[ENV_VENDOR_ID])
        if env.get(ENV_PRODUCT_ID):
            kwargs["product_id"] = parse_usb_id(env[ENV_PRODUCT_ID])
        if env.get(ENV_TIMEOUT_MS):
            timeout = int(env[ENV_TIMEOUT_MS])
            if timeout <= 0:
                raise ValueError(f"{ENV_TIMEOUT_MS} must be positive, got {timeout}")
            kwargs["timeout_ms"] = timeout
        return cls(**kwargs)

    def describe(self) -> str:
        return f"{self.vendor_id:04x}:{self.product_id:04x}"
