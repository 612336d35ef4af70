from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

from photo_meta.core.models import ImageSource, MetadataRecord
from photo_meta.extract import ImageAnalyzer

logger = logging.getLogger(__name__)


def load_image_bytes(source: ImageSource | None) -> Optional[bytes]:
    """Resolve an image source to bytes; None when the image cannot be obtained."""
    if source is None:
        return None
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    try:
        return Path(os.fspath(source)).read_bytes()
    except (OSError, TypeError) as exc:
        logger.warning("Batch: could not load image %r: %s", source, exc)
        return None


class BatchOrchestrator:
    """Run the analyzer over an ordered batch and keep the input order.

    concurrency=1 analyses one image at a time; a larger value bounds the
    number of in-flight analyses and 0 removes the bound. Images whose
    bytes cannot be loaded are skipped without a placeholder.
    """

    def __init__(self, analyzer: ImageAnalyzer | None = None, concurrency: int = 1) -> None:
        if concurrency < 0:
            raise ValueError("concurrency must be >= 0")
        self.analyzer = analyzer or ImageAnalyzer()
        self.concurrency = concurrency

    async def run(self, sources: Iterable[ImageSource | None]) -> List[MetadataRecord]:
        sources = list(sources)
        if self.concurrency == 1:
            records = await self._run_sequential(sources)
        else:
            records = await self._run_concurrent(sources)
        logger.info("Batch: %d of %d images analysed", len(records), len(sources))
        return records

    async def _run_sequential(self, sources: List[ImageSource | None]) -> List[MetadataRecord]:
        records: List[MetadataRecord] = []
        for index, source in enumerate(sources):
            data = load_image_bytes(source)
            if data is None:
                logger.warning("Batch: skipping image %d, no bytes available", index)
                continue
            records.append(await self.analyzer.analyze(data))
        return records

    async def _run_concurrent(self, sources: List[ImageSource | None]) -> List[MetadataRecord]:
        limit = self.concurrency or len(sources) or 1
        semaphore = asyncio.Semaphore(limit)
        results: List[Optional[MetadataRecord]] = [None] * len(sources)

        async def _analyze_at(index: int, source: ImageSource | None) -> None:
            async with semaphore:
                data = await asyncio.to_thread(load_image_bytes, source)
                if data is None:
                    logger.warning("Batch: skipping image %d, no bytes available", index)
                    return
                results[index] = await self.analyzer.analyze(data)

        await asyncio.gather(*(_analyze_at(i, s) for i, s in enumerate(sources)))
        return [record for record in results if record is not None]
