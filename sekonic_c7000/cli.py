"""
Command line front end.

    sekonic-c7000 list
    sekonic-c7000 show 42 --plot
"""

import argparse
import sys

import matplotlib.pyplot as plt

from .constants import CAPTURE_ID_MAX, PRODUCT_ID, TIMEOUT_MS, VENDOR_ID
from .errors import SekonicError
from .index import CaptureIndex, build_capture_index
from .protocol import DeviceSession, fetch_capture_data, fetch_capture_info, open_session
from .records import CaptureData, CaptureInfo, format_raw_fields
from .usb_transport import UsbTransport


def plot_spd(title, capture: CaptureInfo):
    """Plot both spectral power distributions of a capture."""
    wavelengths_1nm, spd_1nm = capture.spd_1nm_series()
    wavelengths_5nm, spd_5nm = capture.spd_5nm_series()
    fig, ax = plt.subplots(figsize=(12, 8))
    ax.plot(wavelengths_1nm, spd_1nm, linewidth=2, color='red', label='1 nm')
    ax.plot(wavelengths_5nm, spd_5nm, 'o', markersize=3, color='black', label='5 nm')
    ax.set_xlabel('Wavelength (nm)', fontsize=12, fontweight='bold')
    ax.set_ylabel('Spectral irradiance (W·m⁻²·nm⁻¹)', fontsize=12, fontweight='bold')
    ax.set_title(f'Spectral Distribution - {title} (CCT: {capture.cct:.0f}K)', fontsize=14, fontweight='bold')
    ax.set_xlim(wavelengths_1nm[0], wavelengths_1nm[-1])
    ax.grid(True, alpha=0.3)
    ax.legend()
    plt.tight_layout()
    plt.show()


def print_index(index: CaptureIndex):
    print(f"Successfully read {len(index)} captures in {len(index.titles)} titles:")
    print("-" * 60)
    for global_id, entry in index.items():
        capture = entry.capture
        print(f"Capture {global_id} (title {entry.title_id} '{index.title_name(global_id)}', #{entry.local_capture_id}):")
        print(f"  CCT: {capture.cct:.1f}K")
        print(f"  Illuminance: {capture.illuminance_lx:.1f} lx")
        print(f"  CRI Ra: {capture.cri_ra:.1f}")


def print_capture(global_id: int, capture: CaptureInfo, data: CaptureData):
    print(f"Capture {global_id}:")
    print(f"  Title: {capture.title}")
    print(f"  Measuring mode: {capture.measuring_mode}, field of view: {capture.field_of_view}°")
    print(f"  CCT: {capture.cct:.1f}K  Δuv: {capture.delta_uv:.4f}")
    print(f"  Illuminance: {capture.illuminance_lx:.2f} lx ({capture.illuminance_fc:.2f} fc)")
    print(f"  Irradiance: {capture.irradiance:.6g} W/m²")
    print(f"  Tristimulus XYZ: {capture.tristimulus_x:.4f} {capture.tristimulus_y:.4f} {capture.tristimulus_z:.4f}")
    print(f"  CIE1931 xyz: {capture.cie1931_x:.4f} {capture.cie1931_y:.4f} {capture.cie1931_z:.4f}")
    print(f"  CIE1976 u'v': {capture.cie1976_u:.4f} {capture.cie1976_v:.4f}")
    print(f"  Dominant wavelength: {capture.dominant_wavelength:.1f} nm, purity {capture.purity:.1f}%")
    print(f"  Peak wavelength: {capture.peak_wavelength} nm")
    print(f"  PPFD: {capture.ppfd:.2f} µmol/m²/s")
    print(f"  CRI Ra: {capture.cri_ra:.1f}")
    print("  CRI Ri: " + ' '.join(f"R{i}={v:.1f}" for i, v in enumerate(capture.cri_ri, 1)))
    print(f"  TM-30 Rf: {data.tm30_rf:.1f}  Rg: {data.tm30_rg:.1f}")
    print(f"  SSI: {data.ssi:.1f}  TLCI: {data.tlci:.1f}")
    print(f"  Unknown: {format_raw_fields([capture.unknown1, capture.unknown2, capture.unknown3, capture.unknown4])}")
    if capture.remaining:
        print(f"  Trailing MRB fields: {format_raw_fields(capture.remaining)}")
    if data.remaining:
        print(f"  Trailing MEB fields: {format_raw_fields(data.remaining)}")


def run(args, session: DeviceSession) -> int:
    if args.command == 'list':
        print_index(build_capture_index(session))
    elif args.command == 'show':
        capture = fetch_capture_info(session, args.global_id)
        data = fetch_capture_data(session, args.global_id)
        print_capture(args.global_id, capture, data)
        if args.plot:
            plot_spd(f"Capture {args.global_id}", capture)
    return 0


def capture_id(text: str) -> int:
    """argparse type for a global capture id, which is sent as 4 digits."""
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid capture id: {text!r}")
    if not 0 <= value <= CAPTURE_ID_MAX:
        raise argparse.ArgumentTypeError(f"capture id must be between 0 and {CAPTURE_ID_MAX}, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Read measurements from a Sekonic C-7000 over USB')
    parser.add_argument('--vid', type=lambda s: int(s, 0), default=VENDOR_ID,
                        help=f'USB vendor id (default: 0x{VENDOR_ID:04x})')
    parser.add_argument('--pid', type=lambda s: int(s, 0), default=PRODUCT_ID,
                        help=f'USB product id (default: 0x{PRODUCT_ID:04x})')
    parser.add_argument('--timeout', type=int, default=TIMEOUT_MS,
                        help=f'Bulk transfer timeout in ms (default: {TIMEOUT_MS})')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Print every request and hex dumps of the answers')

    sub = parser.add_subparsers(dest='command', required=True)
    sub.add_parser('list', help='Enumerate every capture stored on the meter')
    show = sub.add_parser('show', help='Show one capture by global id')
    show.add_argument('global_id', type=capture_id)
    show.add_argument('--plot', action='store_true', help='Plot the spectral power distribution')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        with UsbTransport(args.vid, args.pid, timeout_ms=args.timeout, verbose=args.verbose) as transport:
            session = open_session(transport, verbose=args.verbose)
            return run(args, session)
    except SekonicError as e:
        print(f"Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
