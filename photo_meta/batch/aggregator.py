from __future__ import annotations

import json
from typing import Optional, Sequence, Tuple

from photo_meta.core.models import MetadataRecord


class AggregationError(ValueError):
    """Raised when a batch of records cannot be rendered as JSON."""


def serialize_records(records: Sequence[MetadataRecord]) -> bytes:
    """Render records as a pretty-printed UTF-8 JSON array."""
    payload = [record.to_json_dict() for record in records]
    try:
        text = json.dumps(payload, indent=2, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise AggregationError(f"Could not serialize metadata: {exc}") from exc
    return text.encode("utf-8")


def render_text(records: Sequence[MetadataRecord]) -> Tuple[Optional[bytes], str]:
    """JSON bytes plus display text, or (None, error text) when serialization fails."""
    try:
        data = serialize_records(records)
    except AggregationError as exc:
        return None, f"Error: {exc}"
    return data, data.decode("utf-8")
