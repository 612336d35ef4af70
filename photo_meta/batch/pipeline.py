from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from photo_meta.core.models import BatchResult, ImageSource
from photo_meta.dispatch import SideEffectDispatcher

from .aggregator import render_text
from .orchestrator import BatchOrchestrator

logger = logging.getLogger(__name__)


async def process_batch(
    sources: Iterable[ImageSource | None],
    *,
    orchestrator: BatchOrchestrator | None = None,
    dispatcher: SideEffectDispatcher | None = None,
    dispatch: bool = True,
) -> BatchResult:
    """Analyse a batch, aggregate it to JSON, then write the file and launch the script.

    Side effects only run once the JSON rendered successfully. When it did
    not, output_text carries the error message instead of JSON.
    """
    orchestrator = orchestrator or BatchOrchestrator()
    records = await orchestrator.run(sources)
    data, text = render_text(records)
    if data is None:
        logger.error("Batch: aggregation failed: %s", text)
        return BatchResult(records=records, output_text=text, error=text)

    report = None
    if dispatch:
        dispatcher = dispatcher or SideEffectDispatcher()
        report = dispatcher.dispatch(data)
    return BatchResult(records=records, json_bytes=data, output_text=text, dispatch=report)


def run_batch(
    sources: Iterable[ImageSource | None],
    *,
    orchestrator: BatchOrchestrator | None = None,
    dispatcher: SideEffectDispatcher | None = None,
    dispatch: bool = True,
) -> BatchResult:
    """Synchronous entry point for callers without a running event loop."""
    return asyncio.run(
        process_batch(
            sources,
            orchestrator=orchestrator,
            dispatcher=dispatcher,
            dispatch=dispatch,
        )
    )
