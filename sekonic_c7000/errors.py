"""Exceptions raised while talking to the meter or decoding its answers."""

from typing import Optional


class SekonicError(Exception):
    """Base class for every error raised by this package."""


class TransportError(SekonicError):
    """I/O failure reported by the transport (USB bulk channel)."""


class TransportTimeout(TransportError):
    """A bulk read or write did not complete within the transport timeout."""


class FramingError(SekonicError):
    """
    The response did not have the expected shape.

    Raised for a status frame of the wrong length, a payload with the wrong tag,
    or any command issued on a session that already lost synchronization.
    The channel has to be reopened after this.
    """


class UnknownStatus(FramingError):
    """The 2-byte status frame was neither OK nor BAD_REQUEST."""

    def __init__(self, command: bytes, status: bytes):
        self.command = command
        self.status = status
        super().__init__(f"Unknown status {status.hex(' ')} for command {command!r}")


class RequestRejected(SekonicError):
    """The device answered BAD_REQUEST. Do not blindly resend the same command."""

    def __init__(self, command: bytes):
        self.command = command
        super().__init__(f"Device rejected command {command!r}")


class DecodeError(SekonicError):
    """A field did not match the type or width the record schema expects."""

    def __init__(self, message: str, tag: Optional[bytes] = None, offset: Optional[int] = None):
        self.message = message
        self.tag = tag
        self.offset = offset
        where = []
        if tag is not None:
            where.append(f"record {tag.decode('ascii', 'replace')}")
        if offset is not None:
            where.append(f"offset {offset}")
        prefix = f"[{', '.join(where)}] " if where else ""
        super().__init__(f"{prefix}{message}")


class SessionBusyError(SekonicError):
    """A second caller tried to use a session while a transaction was in flight."""


class DuplicateCaptureError(SekonicError):
    """The device reported the same global capture id for two different captures."""

    def __init__(self, global_id: int, first: tuple, second: tuple):
        self.global_id = global_id
        self.first = first
        self.second = second
        super().__init__(
            f"Global capture id {global_id} returned for (title, capture) {first} and {second}"
        )
