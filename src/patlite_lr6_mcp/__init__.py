"""Control the Patlite LR6-USB signal tower over USB HID."""

__version__ = "0.1.0"
