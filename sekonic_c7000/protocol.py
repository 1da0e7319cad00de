"""
Request/response transactions with the C-7000.

Every exchange is: write one ASCII command, read a 2-byte status frame, and on
OK read one more frame holding the payload. The channel has no request ids and
no pipelining, so exactly one transaction may be outstanding at a time.
"""

import threading
from typing import Protocol

from . import commands
from .constants import (
    READ_SIZE,
    STATUS_BAD_REQUEST,
    STATUS_LENGTH,
    STATUS_OK,
    WARM_UP_COMMANDS,
)
from .errors import (
    FramingError,
    RequestRejected,
    SekonicError,
    SessionBusyError,
    UnknownStatus,
)
from .records import (
    CaptureData,
    CaptureInfo,
    decode_capture_address,
    decode_capture_data,
    decode_capture_info,
)


class Transport(Protocol):
    """Bulk channel to the meter. Implementations raise TransportError on I/O failure."""

    def write(self, data: bytes) -> None:
        ...

    def read(self, max_len: int) -> bytes:
        ...


def execute(transport: Transport, command: bytes, verbose: bool = False) -> bytes:
    """
    Run one transaction and return the payload frame.

    Args:
        transport: Open channel to the meter. Must not be shared with another caller.
        command: ASCII command, e.g. ``b"GT0001"``.
        verbose: Print the request and hex dumps of both frames.

    Returns:
        The payload bytes, tag included.

    Raises:
        FramingError: The status frame was not exactly 2 bytes.
        RequestRejected: The device answered BAD_REQUEST.
        UnknownStatus: Any other status value.
        TransportError: Propagated from the transport.
    """
    if verbose:
        print(f"REQ: {command.decode('ascii', 'replace')}")
    transport.write(command)

    status = bytes(transport.read(READ_SIZE))
    if verbose:
        print(status.hex(' '))
    if len(status) != STATUS_LENGTH:
        raise FramingError(
            f"Expected {STATUS_LENGTH}-byte status for {command!r}, got {len(status)} bytes"
        )
    if status == STATUS_BAD_REQUEST:
        raise RequestRejected(command)
    if status != STATUS_OK:
        raise UnknownStatus(command, status)

    payload = bytes(transport.read(READ_SIZE))
    if verbose:
        print(payload.hex(' '))
    return payload


class DeviceSession:
    """
    Single owner of a transport.

    Transactions go through :meth:`execute`, which refuses to run concurrently
    and stops accepting commands once the channel may be out of step with the
    device (a transaction that failed after its command was written).

    Usage:
        with UsbTransport() as transport:
            session = DeviceSession(transport)
            session.warm_up()
            index = build_capture_index(session)
    """

    def __init__(self, transport: Transport, verbose: bool = False):
        self._transport = transport
        self._lock = threading.Lock()
        self.verbose = verbose
        self.desynchronized = False
        self.transactions = 0

    def execute(self, command: bytes) -> bytes:
        if not self._lock.acquire(blocking=False):
            raise SessionBusyError(f"Session busy, cannot send {command!r}")
        try:
            if self.desynchronized:
                raise FramingError(
                    f"Session out of sync with the device, reopen the channel before sending {command!r}"
                )
            try:
                payload = execute(self._transport, command, verbose=self.verbose)
            except RequestRejected:
                # A rejection has no payload frame, the channel is still in step.
                raise
            except SekonicError:
                self.desynchronized = True
                raise
            finally:
                self.transactions += 1
            return payload
        finally:
            self._lock.release()

    def warm_up(self) -> None:
        """
        Send the opaque start-up sequence the vendor software sends. Answers are discarded.

        A rejected command is skipped, older firmware does not know all of them.
        Any other error aborts the warm-up.
        """
        for command in WARM_UP_COMMANDS:
            try:
                self.execute(command)
            except RequestRejected:
                if self.verbose:
                    print(f"Warm-up command {command!r} rejected, continuing")


def fetch_capture_info(session: DeviceSession, global_id: int) -> CaptureInfo:
    return decode_capture_info(session.execute(commands.capture_info(global_id)))


def fetch_capture_data(session: DeviceSession, global_id: int) -> CaptureData:
    """Fetch the TM-30/SSI/TLCI record of a capture. Not cached."""
    return decode_capture_data(session.execute(commands.capture_data(global_id)))


def fetch_global_id(session: DeviceSession, title_id: int, local_capture_id: int) -> int:
    payload = session.execute(commands.capture_address(title_id, local_capture_id))
    return decode_capture_address(payload)


def open_session(transport: Transport, verbose: bool = False, warm_up: bool = True) -> DeviceSession:
    session = DeviceSession(transport, verbose=verbose)
    if warm_up:
        session.warm_up()
    return session
