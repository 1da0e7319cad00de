"""
Field grammar of C-7000 response payloads.

A payload looks like ``TAG@@field,field,field``. Text fields run up to the next
comma. Binary fields (big-endian floats and float arrays) have a width that only
the record schema knows, and the byte right after them must be a comma or the
end of the payload. That comma is the only integrity check the format has, so a
wrong width assumption is reported as a DecodeError instead of silently
misaligning every field that follows.
"""

import struct
from typing import List, Optional

import numpy as np

from .constants import FIELD_SEPARATOR, MARKER, TAG_LENGTH
from .errors import DecodeError, FramingError

_COMMA = FIELD_SEPARATOR[0]
_UINT32_MAX = 0xFFFFFFFF
_UINT32_DIGITS = len(str(_UINT32_MAX))


class FieldCursor:
    """
    Forward-only reader over one response payload.

    Args:
        data: The payload bytes. Never modified.
        start: Offset of the first field inside ``data``.
        tag: Record tag, only used to give DecodeError some context.
    """

    def __init__(self, data: bytes, start: int = 0, tag: Optional[bytes] = None):
        self._data = bytes(data)
        self._pos = start
        self.tag = tag

    @property
    def offset(self) -> int:
        """Current read position, relative to the start of the payload."""
        return self._pos

    @property
    def remaining_length(self) -> int:
        return max(0, len(self._data) - self._pos)

    @property
    def exhausted(self) -> bool:
        return self._pos >= len(self._data)

    def _error(self, message: str, offset: int) -> DecodeError:
        return DecodeError(message, tag=self.tag, offset=offset)

    def next_delimited(self) -> bytes:
        """Return the bytes up to the next comma (or the end) and skip the comma."""
        if self.exhausted:
            return b''
        end = self._data.find(FIELD_SEPARATOR, self._pos)
        if end == -1:
            field = self._data[self._pos:]
            self._pos = len(self._data)
        else:
            field = self._data[self._pos:end]
            self._pos = end + 1
        return field

    def next_fixed(self, n: int) -> bytes:
        """
        Return the next ``n`` bytes verbatim.

        Raises:
            DecodeError: If fewer than ``n`` bytes are left, or if the byte after
                the blob exists and is not a comma.
        """
        start = self._pos
        if n < 0:
            raise ValueError(f"Negative field width: {n}")
        if n > self.remaining_length:
            raise self._error(
                f"Binary field of {n} bytes, only {self.remaining_length} left", start
            )
        end = start + n
        if end < len(self._data) and self._data[end] != _COMMA:
            raise self._error(
                f"Binary field of {n} bytes not followed by a comma "
                f"(found 0x{self._data[end]:02X})",
                start,
            )
        field = self._data[start:end]
        self._pos = end + 1 if end < len(self._data) else end
        return field

    def next_unsigned(self) -> int:
        """Decode the next text field as an unsigned 32-bit decimal number."""
        start = self._pos
        field = self.next_delimited()
        if not field or not field.isdigit():
            raise self._error(f"Expected unsigned decimal, got {field!r}", start)
        if len(field.lstrip(b'0')) > _UINT32_DIGITS:
            raise self._error(f"Unsigned value of {len(field)} digits does not fit in 32 bits", start)
        value = int(field)
        if value > _UINT32_MAX:
            raise self._error(f"Unsigned value {value} does not fit in 32 bits", start)
        return value

    def next_string(self) -> str:
        """Decode the next text field, dropping the null padding and anything after it."""
        start = self._pos
        field = self.next_delimited().split(b'\x00', 1)[0]
        try:
            return field.decode('ascii')
        except UnicodeDecodeError as e:
            raise self._error(f"Undecodable string field {field!r}: {e}", start) from e

    def next_f32_be(self) -> float:
        return struct.unpack('>f', self.next_fixed(4))[0]

    def next_f64_be(self) -> float:
        return struct.unpack('>d', self.next_fixed(8))[0]

    def next_f32_array_be(self, count: int) -> np.ndarray:
        """
        Decode ``count`` consecutive big-endian float32 values.

        The whole array is one binary field, there are no commas between the
        elements. The result is a read-only float64 array.
        """
        raw = self.next_fixed(4 * count)
        values = np.frombuffer(raw, dtype='>f4').astype(np.float64)
        values.flags.writeable = False
        return values

    def collect_remaining(self) -> List[bytes]:
        """Return every non-empty field left in the payload, as raw bytes."""
        fields = []
        while not self.exhausted:
            field = self.next_delimited()
            if field:
                fields.append(field)
        return fields


def open_envelope(payload: bytes, expected_tag: bytes) -> FieldCursor:
    """
    Check the ``TAG@@`` prefix of a payload and return a cursor on its first field.

    Raises:
        FramingError: If the payload does not start with ``expected_tag`` + ``@@``.
    """
    header = expected_tag + MARKER
    if len(expected_tag) != TAG_LENGTH:
        raise ValueError(f"Record tags are {TAG_LENGTH} bytes, got {expected_tag!r}")
    if not payload.startswith(header):
        raise FramingError(
            f"Expected payload tagged {header!r}, got {bytes(payload[:len(header)])!r}"
        )
    return FieldCursor(payload, start=len(header), tag=expected_tag)
