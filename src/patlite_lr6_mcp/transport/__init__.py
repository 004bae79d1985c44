"""USB transport for the signal tower."""

from .usb_connection import USBConnection, send_report
