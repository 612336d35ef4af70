import base64
import binascii
import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from photo_meta.batch import BatchOrchestrator, run_batch
from photo_meta.core.env import (
    configure_logging,
    dispatch_paths_from_env,
    load_dotenv_if_present,
    scan_concurrency_from_env,
)
from photo_meta.dispatch import SideEffectDispatcher

logger = logging.getLogger(__name__)

app = FastAPI(title="Photo Metadata API")

load_dotenv_if_present()
configure_logging()

DISPATCH_PATHS = dispatch_paths_from_env()
SCAN_CONCURRENCY = scan_concurrency_from_env()


class ExtractRequest(BaseModel):
    images: list[str]
    dispatch: bool = True


def _decode_upload(index: int, encoded: str) -> Optional[bytes]:
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        logger.warning("API: image %d is not valid base64, skipping", index)
        return None


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/extract")
def extract(request: ExtractRequest) -> dict:
    sources = [_decode_upload(i, encoded) for i, encoded in enumerate(request.images)]
    # Plain def: FastAPI runs it in a worker thread, so run_batch owns its own loop.
    result = run_batch(
        sources,
        orchestrator=BatchOrchestrator(concurrency=SCAN_CONCURRENCY),
        dispatcher=SideEffectDispatcher(DISPATCH_PATHS),
        dispatch=request.dispatch,
    )
    if result.error:
        raise HTTPException(status_code=500, detail=result.error)
    return {
        "records": [record.to_json_dict() for record in result.records],
        "output": result.output_text,
        "dispatch": result.dispatch.model_dump() if result.dispatch else None,
    }
