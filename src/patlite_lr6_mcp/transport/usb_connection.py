"""USB HID connection to the Patlite LR6-USB signal tower.

Supports both ``hidapi`` (preferred) and ``pyusb`` backends.
The tower takes 8-byte output reports on Interface 0, OUT endpoint 0x01.
Nothing is ever read back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import DeviceConfig
from ..errors import DeviceNotFound, ShortWrite, TransportError, WrongLength
from ..models.commands import REPORT_LEN

logger = logging.getLogger(__name__)

HID_INTERFACE = 0
EP_OUT = 0x01
HID_REPORT_ID = 0x00


@dataclass
class DeviceInfo:
    """Basic device identification from USB descriptors."""

    vendor_id: int
    product_id: int
    manufacturer: str = ""
    product: str = ""
    backend: str = ""


class USBConnection:
    """Owns the USB handle for one or more report writes.

    Usage::

        with USBConnection(config) as conn:
            conn.write(report)

    The device is closed on every exit path, including a failed write.
    """

    def __init__(self, config: DeviceConfig | None = None) -> None:
        self._config = config or DeviceConfig()
        self._device = None
        self._backend: str = ""
        self._connected = False
        self._detached_kernel_driver = False
        self._device_info = DeviceInfo(
            vendor_id=self._config.vendor_id,
            product_id=self._config.product_id,
        )

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def device_info(self) -> DeviceInfo:
        return self._device_info

    def __enter__(self) -> USBConnection:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> DeviceInfo:
        """Open the tower, trying hidapi first, then pyusb.

        Raises:
            DeviceNotFound: If neither backend can open the device.
        """
        try:
            return self._open_hidapi()
        except Exception as e:
            logger.debug("hidapi backend failed: %s, trying pyusb", e)

        try:
            return self._open_pyusb()
        except Exception as e:
            raise DeviceNotFound(
                f"device {self._config.describe()} not found. "
                f"Ensure the tower is plugged in and you have permissions. "
                f"Last error: {e}"
            ) from e

    def _open_hidapi(self) -> DeviceInfo:
        """Open using the hidapi library."""
        import hid

        device = hid.device()
        device.open(self._config.vendor_id, self._config.product_id)
        try:
            info = DeviceInfo(
                vendor_id=self._config.vendor_id,
                product_id=self._config.product_id,
                manufacturer=device.get_manufacturer_string() or "",
                product=device.get_product_string() or "",
                backend="hidapi",
            )
        except Exception:
            device.close()
            raise

        self._device = device
        self._backend = "hidapi"
        self._connected = True
        self._device_info = info

        logger.info(
            "Connected via hidapi: %s %s",
            self._device_info.manufacturer,
            self._device_info.product,
        )
        return self._device_info

    def _open_pyusb(self) -> DeviceInfo:
        """Open using pyusb + libusb."""
        import usb.core
        import usb.util

        dev = usb.core.find(
            idVendor=self._config.vendor_id, idProduct=self._config.product_id
        )
        if dev is None:
            raise DeviceNotFound("Device not found via pyusb")

        if dev.is_kernel_driver_active(HID_INTERFACE):
            dev.detach_kernel_driver(HID_INTERFACE)
            self._detached_kernel_driver = True

        try:
            usb.util.claim_interface(dev, HID_INTERFACE)
        except Exception:
            if self._detached_kernel_driver:
                dev.attach_kernel_driver(HID_INTERFACE)
                self._detached_kernel_driver = False
            raise

        self._device = dev
        self._backend = "pyusb"
        self._connected = True
        self._device_info = DeviceInfo(
            vendor_id=self._config.vendor_id,
            product_id=self._config.product_id,
            manufacturer=usb.util.get_string(dev, dev.iManufacturer) or "",
            product=usb.util.get_string(dev, dev.iProduct) or "",
            backend=self._backend,
        )

        logger.info(
            "Connected via pyusb: %s %s",
            self._device_info.manufacturer,
            self._device_info.product,
        )
        return self._device_info

    def close(self) -> None:
        """Release the device."""
        if not self._connected:
            return

        try:
            if self._backend == "hidapi":
                self._device.close()
            elif self._backend == "pyusb":
                import usb.util
                usb.util.release_interface(self._device, HID_INTERFACE)
                if self._detached_kernel_driver:
                    self._device.attach_kernel_driver(HID_INTERFACE)
                usb.util.dispose_resources(self._device)
        except Exception as e:
            logger.warning("Error closing device: %s", e)
        finally:
            self._device = None
            self._connected = False
            self._detached_kernel_driver = False
            logger.info("Disconnected")

    def write(self, report: bytes) -> int:
        """Write one 8-byte report to the tower.

        Returns:
            Number of report bytes written (always 8).

        Raises:
            WrongLength: If ``report`` is not 8 bytes.
            TransportError: If not connected or the backend write fails.
            ShortWrite: If the device accepted fewer than 8 bytes.
        """
        if not self._connected:
            raise TransportError("Not connected to device")

        report = bytes(report)
        if len(report) != REPORT_LEN:
            raise WrongLength(
                f"HID report must be {REPORT_LEN} bytes, got {len(report)}"
            )

        logger.debug("Writing report: %s", report.hex(" "))
        try:
            if self._backend == "hidapi":
                # hidapi wants the report id in front; it is not part of the count
                written = self._device.write(bytes([HID_REPORT_ID]) + report) - 1
            elif self._backend == "pyusb":
                written = self._device.write(
                    EP_OUT, report, timeout=self._config.timeout_ms
                )
            else:
                raise RuntimeError(f"Unknown backend: {self._backend}")
        except (OSError, ValueError) as e:
            # usb.core.USBError is an IOError
            raise TransportError(f"usb error: {e}") from e

        if written != REPORT_LEN:
            raise ShortWrite(f"usb short write ({written} of {REPORT_LEN} bytes)")
        return written


def send_report(report: bytes, config: DeviceConfig | None = None) -> int:
    """Open the tower, write one report, and close it again."""
    with USBConnection(config) as conn:
        return conn.write(report)
