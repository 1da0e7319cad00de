"""
pyusb bulk transport for the C-7000.

Finds the meter by vendor/product id, picks the first interface that has both a
bulk OUT and a bulk IN endpoint, claims it, and exposes ``write``/``read`` with
a fixed timeout. Needs a libusb backend and permission to open the device.
"""

from typing import Optional, Tuple

import usb.core
import usb.util

from .constants import PRODUCT_ID, TIMEOUT_MS, VENDOR_ID
from .errors import TransportError, TransportTimeout


def _find_bulk_endpoints(dev) -> Tuple[object, int, int, int]:
    """Return (configuration, interface number, OUT address, IN address)."""
    for cfg in dev:
        for intf in cfg:
            ep_out = None
            ep_in = None
            for ep in intf.endpoints():
                if usb.util.endpoint_type(ep.bmAttributes) != usb.util.ENDPOINT_TYPE_BULK:
                    continue
                if usb.util.endpoint_direction(ep.bEndpointAddress) == usb.util.ENDPOINT_OUT:
                    ep_out = ep.bEndpointAddress
                else:
                    ep_in = ep.bEndpointAddress
            if ep_out is not None and ep_in is not None:
                return cfg, intf.bInterfaceNumber, ep_out, ep_in
    raise TransportError("No interface with bulk IN and OUT endpoints found")


class UsbTransport:
    """
    Bulk channel to a connected C-7000.

    Args:
        vendor_id: USB vendor id (Sekonic is 0x0A41).
        product_id: USB product id (C-7000 is 0x7003).
        timeout_ms: Timeout of every bulk read and write.
        verbose: Print the endpoints that were selected.
    """

    def __init__(self, vendor_id: int = VENDOR_ID, product_id: int = PRODUCT_ID,
                 timeout_ms: int = TIMEOUT_MS, verbose: bool = False):
        self.timeout_ms = timeout_ms
        self.dev = usb.core.find(idVendor=vendor_id, idProduct=product_id)
        if self.dev is None:
            raise TransportError(
                f"No Sekonic device detected (VID 0x{vendor_id:04x}, PID 0x{product_id:04x})"
            )

        try:
            cfg, self.interface, self.ep_out, self.ep_in = _find_bulk_endpoints(self.dev)
            if verbose:
                print(f"found OUT endpoint address=0x{self.ep_out:02x} config={cfg.bConfigurationValue} iface={self.interface}")
                print(f"found IN endpoint address=0x{self.ep_in:02x} config={cfg.bConfigurationValue} iface={self.interface}")

            try:
                if self.dev.is_kernel_driver_active(self.interface):
                    self.dev.detach_kernel_driver(self.interface)
            except NotImplementedError:
                # Backends without kernel driver queries (e.g. Windows).
                pass
            self.dev.set_configuration(cfg.bConfigurationValue)
            usb.util.claim_interface(self.dev, self.interface)
        except usb.core.USBError as e:
            usb.util.dispose_resources(self.dev)
            raise TransportError(f"Could not claim the device: {e}") from e

    def write(self, data: bytes) -> None:
        try:
            written = self.dev.write(self.ep_out, data, self.timeout_ms)
        except usb.core.USBTimeoutError as e:
            raise TransportTimeout(f"Bulk write timed out after {self.timeout_ms} ms") from e
        except usb.core.USBError as e:
            raise TransportError(f"Bulk write failed: {e}") from e
        if written != len(data):
            raise TransportError(f"Short bulk write: {written} of {len(data)} bytes")

    def read(self, max_len: int) -> bytes:
        try:
            return bytes(self.dev.read(self.ep_in, max_len, self.timeout_ms))
        except usb.core.USBTimeoutError as e:
            raise TransportTimeout(f"Bulk read timed out after {self.timeout_ms} ms") from e
        except usb.core.USBError as e:
            raise TransportError(f"Bulk read failed: {e}") from e

    def close(self) -> None:
        try:
            usb.util.release_interface(self.dev, self.interface)
        finally:
            usb.util.dispose_resources(self.dev)

    def __enter__(self) -> 'UsbTransport':
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.close()
        return None
