from __future__ import annotations

import asyncio
import logging

from photo_meta.core.models import MetadataRecord

from .exif_reader import read_exif_bytes
from .qr_scanner import BarcodeScanner, decode_image

logger = logging.getLogger(__name__)


class ImageAnalyzer:
    """Combine EXIF extraction and QR scanning into one record per image.

    The two passes are independent: either may come back empty without
    affecting the other. Container parsing and pixel decoding run in worker
    threads so concurrent analyses do not serialize on the event loop.
    """

    def __init__(self, scanner: BarcodeScanner | None = None) -> None:
        self.scanner = scanner or BarcodeScanner()

    async def analyze(self, data: bytes) -> MetadataRecord:
        exif, image = await asyncio.gather(
            asyncio.to_thread(read_exif_bytes, data),
            asyncio.to_thread(decode_image, data),
        )
        record = MetadataRecord().merge_exif(exif)

        if image is None:
            # Indistinguishable in the output from a scan that found nothing.
            logger.debug("Analyze: pixel decode failed, QR scan skipped")
            return record
        codes = await self.scanner.scan(image)
        return record.with_qr_codes(codes)
