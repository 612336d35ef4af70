from __future__ import annotations

from io import BytesIO
from typing import Optional

import cv2
import numpy as np
import pytest
from PIL import ExifTags, Image

DATETIME_ORIGINAL_TAG = 36867


@pytest.fixture(autouse=True)
def isolate_dispatch_paths(tmp_path, monkeypatch):
    """Keep tests from writing to ~/Documents or launching the real script."""
    monkeypatch.setenv("PHOTO_META_OUTPUT_PATH", str(tmp_path / "Documents" / "photo_metadata.json"))
    monkeypatch.setenv("PHOTO_META_SCRIPT_PATH", str(tmp_path / "Documents" / "process_photos.sh"))
    monkeypatch.delenv("PHOTO_META_CONCURRENCY", raising=False)
    yield


def make_jpeg(
    datetime_original: Optional[str] = None,
    gps: Optional[dict] = None,
    size: tuple[int, int] = (16, 16),
) -> bytes:
    img = Image.new("RGB", size, color="red")
    exif = Image.Exif()
    if datetime_original is not None:
        exif[DATETIME_ORIGINAL_TAG] = datetime_original
    if gps is not None:
        exif[ExifTags.IFD.GPSInfo] = gps
    buf = BytesIO()
    if len(exif):
        img.save(buf, format="JPEG", exif=exif)
    else:
        img.save(buf, format="JPEG")
    return buf.getvalue()


def _qr_pixels(payload: str, scale: int, border: int) -> np.ndarray:
    encoder = cv2.QRCodeEncoder.create()
    qr = encoder.encode(payload)
    qr = cv2.resize(qr, None, fx=scale, fy=scale, interpolation=cv2.INTER_NEAREST)
    return cv2.copyMakeBorder(qr, border, border, border, border, cv2.BORDER_CONSTANT, value=255)


def _png(pixels: np.ndarray) -> bytes:
    ok, buf = cv2.imencode(".png", pixels)
    assert ok
    return buf.tobytes()


def make_qr_png(payload: str, scale: int = 8, border: int = 40) -> bytes:
    return _png(_qr_pixels(payload, scale, border))


def make_qr_row_png(payloads: list[str], scale: int = 8, border: int = 40) -> bytes:
    """Several QR codes side by side, left to right."""
    tiles = [_qr_pixels(p, scale, border) for p in payloads]
    height = max(t.shape[0] for t in tiles)
    tiles = [
        cv2.copyMakeBorder(t, 0, height - t.shape[0], 0, 0, cv2.BORDER_CONSTANT, value=255)
        for t in tiles
    ]
    return _png(np.hstack(tiles))
