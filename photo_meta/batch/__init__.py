"""Batch orchestration, JSON aggregation and the end-to-end pipeline."""

from .aggregator import AggregationError, render_text, serialize_records
from .orchestrator import BatchOrchestrator, load_image_bytes
from .pipeline import process_batch, run_batch

__all__ = [
    "AggregationError",
    "BatchOrchestrator",
    "load_image_bytes",
    "process_batch",
    "render_text",
    "run_batch",
    "serialize_records",
]
