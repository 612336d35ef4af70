"""
Extract metadata from a batch of images and hand it to the post-processing script.

Usage:
  photo-meta IMG_0001.jpg IMG_0002.heic
  PHOTO_META_OUTPUT_PATH=/tmp/out.json photo-meta --no-dispatch ~/Pictures/*.jpg
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from photo_meta.batch import BatchOrchestrator, run_batch
from photo_meta.core.env import (
    configure_logging,
    dispatch_paths_from_env,
    load_dotenv_if_present,
    scan_concurrency_from_env,
)
from photo_meta.dispatch import SideEffectDispatcher


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Extract EXIF and QR metadata from images.")
    parser.add_argument("images", nargs="+", type=Path, help="Image files, in output order")
    parser.add_argument("--output", type=Path, help="Override the JSON destination path")
    parser.add_argument("--script", type=Path, help="Override the post-processing script path")
    parser.add_argument(
        "--concurrency",
        type=int,
        help="Images analysed at once (1 = sequential, 0 = unbounded)",
    )
    parser.add_argument(
        "--no-dispatch",
        action="store_true",
        help="Print the JSON without writing the file or launching the script",
    )
    args = parser.parse_args(argv)

    load_dotenv_if_present()
    configure_logging()

    paths = dispatch_paths_from_env()
    if args.output is not None:
        paths = paths.model_copy(update={"output_path": args.output.expanduser()})
    if args.script is not None:
        paths = paths.model_copy(update={"script_path": args.script.expanduser()})
    concurrency = args.concurrency if args.concurrency is not None else scan_concurrency_from_env()
    if concurrency < 0:
        parser.error("--concurrency must be >= 0")

    result = run_batch(
        args.images,
        orchestrator=BatchOrchestrator(concurrency=concurrency),
        dispatcher=SideEffectDispatcher(paths),
        dispatch=not args.no_dispatch,
    )
    print(result.output_text)
    return 1 if result.error else 0


if __name__ == "__main__":
    sys.exit(main())
