from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence

import cv2
import numpy as np

logger = logging.getLogger(__name__)

SUPPORTED_SYMBOLOGIES = frozenset({"qr"})
DEFAULT_SYMBOLOGIES = ("qr",)

# Shared pool for detection passes so the event loop never runs OpenCV work.
_scan_executor = ThreadPoolExecutor(thread_name_prefix="qr-scan")


def decode_image(data: bytes) -> Optional[np.ndarray]:
    """Decode encoded image bytes into a BGR pixel array, or None if undecodable."""
    if not data:
        return None
    try:
        img = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
    except cv2.error:
        logger.debug("QR scan: OpenCV could not decode %d bytes", len(data), exc_info=True)
        return None
    if img is None or img.size == 0:
        return None
    return img


def _payloads(decoded: Iterable[object]) -> List[str]:
    return [text for text in decoded if isinstance(text, str) and text]


def detect_qr_codes(image: np.ndarray) -> List[str]:
    """Decode every QR code in the image, in detector order."""
    detector = cv2.QRCodeDetector()
    found, decoded, _points, _straight = detector.detectAndDecodeMulti(image)
    if found:
        codes = _payloads(decoded)
        if codes:
            return codes
    # The multi-code detector misses some lone codes the single pass finds.
    text, _points, _straight = detector.detectAndDecode(image)
    return _payloads([text])


class BarcodeScanner:
    """QR payload detection dispatched to a background thread pool."""

    def __init__(
        self,
        symbologies: Sequence[str] = DEFAULT_SYMBOLOGIES,
        executor: Executor | None = None,
    ) -> None:
        requested = {s.lower() for s in symbologies}
        unsupported = requested - SUPPORTED_SYMBOLOGIES
        if unsupported:
            raise ValueError(f"Unsupported barcode symbologies: {sorted(unsupported)}")
        if not requested:
            raise ValueError("At least one barcode symbology is required")
        self.symbologies = tuple(sorted(requested))
        self._executor = executor or _scan_executor

    def _detect(self, image: np.ndarray) -> List[str]:
        return detect_qr_codes(image)

    def _detect_quietly(self, image: np.ndarray) -> List[str]:
        try:
            return self._detect(image)
        except Exception:
            # A detector failure reads the same as "no codes present".
            logger.warning("QR scan: detector failed", exc_info=True)
            return []

    async def scan(self, image: np.ndarray) -> List[str]:
        """Suspend until the background detection pass completes exactly once."""
        loop = asyncio.get_running_loop()
        codes = await loop.run_in_executor(self._executor, self._detect_quietly, image)
        logger.debug("QR scan: %d code(s) decoded", len(codes))
        return codes
