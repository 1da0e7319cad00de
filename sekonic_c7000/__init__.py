"""
Sekonic C-7000 USB memory reader.

Usage:
    from sekonic_c7000 import UsbTransport, open_session, build_capture_index

    with UsbTransport() as transport:
        session = open_session(transport)
        index = build_capture_index(session)
        for global_id, entry in index.items():
            print(global_id, entry.capture.cct, entry.capture.illuminance_lx)
"""

from .errors import (
    DecodeError,
    DuplicateCaptureError,
    FramingError,
    RequestRejected,
    SekonicError,
    SessionBusyError,
    TransportError,
    TransportTimeout,
    UnknownStatus,
)
from .fields import FieldCursor, open_envelope
from .index import CaptureEntry, CaptureIndex, build_capture_index
from .protocol import DeviceSession, execute, fetch_capture_data, fetch_capture_info, open_session
from .records import (
    CaptureData,
    CaptureInfo,
    StorageInfo,
    TitleInfo,
    decode_capture_address,
    decode_capture_data,
    decode_capture_info,
    decode_storage_info,
    decode_title_info,
)
from .usb_transport import UsbTransport


__version__ = '0.1.0'
