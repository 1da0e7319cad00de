"""
Fixed protocol knowledge for the Sekonic C-7000.

Everything here was read off USB captures of the vendor software talking to the
meter. None of it is negotiated with the device at runtime.
"""

import numpy as np

# --- USB ---
VENDOR_ID = 0x0A41
PRODUCT_ID = 0x7003

IN_ENDPOINT_ADDR = 0x81
OUT_ENDPOINT_ADDR = 0x02

TIMEOUT_MS = 1000
READ_SIZE = 8192  # largest answer seen (MR) is ~2.2 KB

# --- Framing ---
STATUS_OK = b'\x06\x30'
STATUS_BAD_REQUEST = b'\x15\x32'
STATUS_LENGTH = 2

MARKER = b'@@'
TAG_LENGTH = 3
FIELD_SEPARATOR = b','

TAG_STORAGE_INFO = b'MIB'
TAG_TITLE_INFO = b'GTB'
TAG_CAPTURE_ADDRESS = b'GAB'
TAG_CAPTURE_INFO = b'MRB'
TAG_CAPTURE_DATA = b'MEB'

CAPTURE_ID_MAX = 9999  # command arguments are 4 zero-padded digits

# Opaque handshake the vendor software sends after opening the channel.
WARM_UP_COMMANDS = (b'ST', b'RT0', b'RT1', b'MN', b'SAr', b'FTr', b'FV', b'IUr')

# --- Spectral grids ---
WAVELENGTH_START_NM = 380
WAVELENGTH_END_NM = 780

WAVELENGTHS_5NM = np.arange(WAVELENGTH_START_NM, WAVELENGTH_END_NM + 1, 5)
WAVELENGTHS_1NM = np.arange(WAVELENGTH_START_NM, WAVELENGTH_END_NM + 1, 1)

SPD_5NM_POINTS = len(WAVELENGTHS_5NM)  # 81
SPD_1NM_POINTS = len(WAVELENGTHS_1NM)  # 401

CRI_SAMPLE_COUNT = 15  # R1..R15
TM30_HUE_BINS = 16
TM30_BIN_COLUMNS = 4  # reference x, reference y, measured x, measured y
