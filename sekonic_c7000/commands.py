"""
ASCII commands understood by the C-7000.

Numeric arguments are zero-padded to 4 decimal digits, e.g. ``GT0007`` or
``GA0007,0003``. Commands carry no terminator.
"""

from .constants import CAPTURE_ID_MAX

STORAGE_INFO = b'MI'


def _arg(value: int) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Command arguments are integers, got {value!r}")
    if not 0 <= value <= CAPTURE_ID_MAX:
        raise ValueError(f"Command argument {value} does not fit in 4 digits")
    return b'%04d' % value


def storage_info() -> bytes:
    return STORAGE_INFO


def title_info(title_id: int) -> bytes:
    """``GTnnnn``: name and capture count of a title (1-based)."""
    return b'GT' + _arg(title_id)


def capture_address(title_id: int, local_capture_id: int) -> bytes:
    """``GAtttt,cccc``: global id of the n-th capture of a title (both 1-based)."""
    return b'GA' + _arg(title_id) + b',' + _arg(local_capture_id)


def capture_info(global_id: int) -> bytes:
    return b'MR' + _arg(global_id)


def capture_data(global_id: int) -> bytes:
    return b'ME' + _arg(global_id)
