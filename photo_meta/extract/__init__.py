"""Per-image extraction: EXIF timestamp/GPS and QR payloads."""

from .analyzer import ImageAnalyzer
from .exif_reader import read_exif_bytes
from .qr_scanner import BarcodeScanner, decode_image, detect_qr_codes

__all__ = [
    "BarcodeScanner",
    "ImageAnalyzer",
    "decode_image",
    "detect_qr_codes",
    "read_exif_bytes",
]
