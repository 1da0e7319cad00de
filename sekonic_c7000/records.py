"""
Records returned by the C-7000 and their decoders.

Every decoder opens the payload envelope with the record's tag and then reads
the fields in a fixed order. The schemas are positional and were worked out by
comparing USB captures against what the meter shows on screen; nothing in the
payload describes its own layout. Fields whose meaning is still unknown are kept
as the raw bytes the device sent.

A decoder either returns a complete record or raises. There is no partial result.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from .constants import (
    CRI_SAMPLE_COUNT,
    SPD_1NM_POINTS,
    SPD_5NM_POINTS,
    TAG_CAPTURE_ADDRESS,
    TAG_CAPTURE_DATA,
    TAG_CAPTURE_INFO,
    TAG_STORAGE_INFO,
    TAG_TITLE_INFO,
    TM30_BIN_COLUMNS,
    TM30_HUE_BINS,
    WAVELENGTHS_1NM,
    WAVELENGTHS_5NM,
)
from .fields import open_envelope


@dataclass(frozen=True)
class StorageInfo:
    """Device-wide memory summary (``MI`` → ``MIB``)."""
    unknown1: int
    num_captures: int
    num_titles: int
    remaining: Tuple[bytes, ...] = ()


@dataclass(frozen=True)
class TitleInfo:
    """One title, the folder captures are filed under (``GTnnnn`` → ``GTB``)."""
    name: str
    num_captures: int
    remaining: Tuple[bytes, ...] = ()


@dataclass(frozen=True, eq=False)
class CaptureInfo:
    """
    Full colorimetric result of one capture (``MRnnnn`` → ``MRB``).

    Spectral arrays are read-only numpy arrays. ``unknown*`` fields and
    ``remaining`` are the device bytes, untouched.
    """
    unknown1: bytes
    unknown2: bytes
    title: str
    measuring_mode: int
    field_of_view: int
    unknown3: bytes

    cct: float
    delta_uv: float
    illuminance_lx: float
    illuminance_fc: float
    irradiance: float

    tristimulus_x: float
    tristimulus_y: float
    tristimulus_z: float

    cie1931_x: float
    cie1931_y: float
    cie1931_z: float
    cie1976_u: float
    cie1976_v: float

    dominant_wavelength: float
    purity: float
    ppfd: float

    cri_ra: float
    cri_ri: np.ndarray
    unknown4: bytes

    spd_5nm: np.ndarray
    spd_1nm: np.ndarray

    remaining: Tuple[bytes, ...] = ()

    def cri_sample(self, index: int) -> float:
        """Special colour rendering index Ri, 1-based like the meter shows it (R1..R15)."""
        if not 1 <= index <= CRI_SAMPLE_COUNT:
            raise IndexError(f"CRI samples are R1..R{CRI_SAMPLE_COUNT}, got R{index}")
        return float(self.cri_ri[index - 1])

    def spd_5nm_series(self) -> Tuple[np.ndarray, np.ndarray]:
        """(wavelengths, values) of the 5 nm spectral power distribution."""
        return WAVELENGTHS_5NM, self.spd_5nm

    def spd_1nm_series(self) -> Tuple[np.ndarray, np.ndarray]:
        """(wavelengths, values) of the 1 nm spectral power distribution."""
        return WAVELENGTHS_1NM, self.spd_1nm

    @property
    def peak_wavelength(self) -> int:
        return int(WAVELENGTHS_1NM[int(np.argmax(self.spd_1nm))])


@dataclass(frozen=True, eq=False)
class CaptureData:
    """
    Secondary result of one capture (``MEnnnn`` → ``MEB``).

    ``tm30_bins`` has one row per TM-30 hue bin and the columns
    (reference x, reference y, measured x, measured y).
    """
    unknown1: bytes
    tm30_rf: float
    tm30_rg: float
    tm30_bins: np.ndarray
    ssi: float
    tlci: float
    unknown2: bytes
    unknown3: bytes
    unknown4: bytes
    remaining: Tuple[bytes, ...] = ()

    @property
    def reference_chromaticity(self) -> np.ndarray:
        return self.tm30_bins[:, 0:2]

    @property
    def measured_chromaticity(self) -> np.ndarray:
        return self.tm30_bins[:, 2:4]


def decode_storage_info(payload: bytes) -> StorageInfo:
    """
    Decode a ``MIB`` payload, e.g. ``MIB@@007,0002,0001``.

    Raises:
        FramingError: Wrong tag.
        DecodeError: A field is not an unsigned decimal.
    """
    cursor = open_envelope(payload, TAG_STORAGE_INFO)
    unknown1 = cursor.next_unsigned()
    num_captures = cursor.next_unsigned()
    num_titles = cursor.next_unsigned()
    return StorageInfo(
        unknown1=unknown1,
        num_captures=num_captures,
        num_titles=num_titles,
        remaining=tuple(cursor.collect_remaining()),
    )


def decode_title_info(payload: bytes) -> TitleInfo:
    """Decode a ``GTB`` payload: null-padded title name, then its capture count."""
    cursor = open_envelope(payload, TAG_TITLE_INFO)
    name = cursor.next_string()
    num_captures = cursor.next_unsigned()
    return TitleInfo(
        name=name,
        num_captures=num_captures,
        remaining=tuple(cursor.collect_remaining()),
    )


def decode_capture_address(payload: bytes) -> int:
    """Decode a ``GAB`` payload into the global capture id it carries."""
    cursor = open_envelope(payload, TAG_CAPTURE_ADDRESS)
    global_id = cursor.next_unsigned()
    # Anything after the id is ignored.
    cursor.collect_remaining()
    return global_id


def decode_capture_info(payload: bytes) -> CaptureInfo:
    """
    Decode a ``MRB`` payload.

    Field order matters: each binary field is only found because every field
    before it had the expected width.
    """
    cursor = open_envelope(payload, TAG_CAPTURE_INFO)

    unknown1 = cursor.next_delimited()
    unknown2 = cursor.next_delimited()
    title = cursor.next_string()
    measuring_mode = cursor.next_unsigned()
    field_of_view = cursor.next_unsigned()
    unknown3 = cursor.next_fixed(4)

    cct = cursor.next_f32_be()
    delta_uv = cursor.next_f32_be()
    illuminance_lx = cursor.next_f32_be()
    illuminance_fc = cursor.next_f32_be()
    irradiance = cursor.next_f64_be()

    tristimulus_x = cursor.next_f32_be()
    tristimulus_y = cursor.next_f32_be()
    tristimulus_z = cursor.next_f32_be()

    cie1931_x = cursor.next_f32_be()
    cie1931_y = cursor.next_f32_be()
    cie1931_z = cursor.next_f32_be()
    cie1976_u = cursor.next_f32_be()
    cie1976_v = cursor.next_f32_be()

    dominant_wavelength = cursor.next_f32_be()
    purity = cursor.next_f32_be()
    ppfd = cursor.next_f32_be()

    cri_ra = cursor.next_f32_be()
    cri_ri = cursor.next_f32_array_be(CRI_SAMPLE_COUNT)
    unknown4 = cursor.next_fixed(8)

    spd_5nm = cursor.next_f32_array_be(SPD_5NM_POINTS)
    spd_1nm = cursor.next_f32_array_be(SPD_1NM_POINTS)

    return CaptureInfo(
        unknown1=unknown1,
        unknown2=unknown2,
        title=title,
        measuring_mode=measuring_mode,
        field_of_view=field_of_view,
        unknown3=unknown3,
        cct=cct,
        delta_uv=delta_uv,
        illuminance_lx=illuminance_lx,
        illuminance_fc=illuminance_fc,
        irradiance=irradiance,
        tristimulus_x=tristimulus_x,
        tristimulus_y=tristimulus_y,
        tristimulus_z=tristimulus_z,
        cie1931_x=cie1931_x,
        cie1931_y=cie1931_y,
        cie1931_z=cie1931_z,
        cie1976_u=cie1976_u,
        cie1976_v=cie1976_v,
        dominant_wavelength=dominant_wavelength,
        purity=purity,
        ppfd=ppfd,
        cri_ra=cri_ra,
        cri_ri=cri_ri,
        unknown4=unknown4,
        spd_5nm=spd_5nm,
        spd_1nm=spd_1nm,
        remaining=tuple(cursor.collect_remaining()),
    )


def decode_capture_data(payload: bytes) -> CaptureData:
    """Decode a ``MEB`` payload (TM-30, SSI, TLCI)."""
    cursor = open_envelope(payload, TAG_CAPTURE_DATA)

    unknown1 = cursor.next_delimited()
    tm30_rf = cursor.next_f32_be()
    tm30_rg = cursor.next_f32_be()
    bins = cursor.next_f32_array_be(TM30_HUE_BINS * TM30_BIN_COLUMNS)
    tm30_bins = bins.reshape(TM30_HUE_BINS, TM30_BIN_COLUMNS)
    ssi = cursor.next_f32_be()
    tlci = cursor.next_f32_be()
    unknown2 = cursor.next_delimited()
    unknown3 = cursor.next_delimited()
    unknown4 = cursor.next_delimited()

    return CaptureData(
        unknown1=unknown1,
        tm30_rf=tm30_rf,
        tm30_rg=tm30_rg,
        tm30_bins=tm30_bins,
        ssi=ssi,
        tlci=tlci,
        unknown2=unknown2,
        unknown3=unknown3,
        unknown4=unknown4,
        remaining=tuple(cursor.collect_remaining()),
    )


def format_raw_fields(fields: Sequence[bytes]) -> str:
    """Hex dump of raw fields, one ``[i] aa bb cc`` group per field."""
    return ' '.join(f"[{i}] {f.hex(' ')}" for i, f in enumerate(fields))
