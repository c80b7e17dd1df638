#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
from pathlib import Path

from app.core.config import settings
from app.core.errors import CompositionError
from app.core.logging import setup_logging
from app.models.schemas import ProcessRequest
from app.services.fetch_service import FetchService
from app.services.reel_pipeline import ReelPipeline
from app.services.storage_service import R2StorageService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render an ayah reel from a request payload JSON file.")
    parser.add_argument("payload", type=str, help="JSON file with recitation_files, background and ayat.")
    parser.add_argument("--keep-workdir", action="store_true", help="Keep the working directory after a successful run.")
    parser.add_argument("--output", type=str, help="Write the result JSON here instead of stdout.")
    return parser


def main() -> None:
    args = build_parser().parse_args()
    setup_logging()

    payload = json.loads(Path(args.payload).read_text(encoding="utf-8"))
    pipeline = ReelPipeline(settings=settings, fetcher=FetchService(settings), storage=R2StorageService(settings))
    try:
        request = ProcessRequest.from_payload(payload)
        artifact = pipeline.process(request, retain_working_directory=args.keep_workdir or None)
    except CompositionError as exc:
        raise SystemExit(f"Render failed: {exc}") from exc
    finally:
        pipeline.fetcher.close()

    result = json.dumps(artifact.to_response(), ensure_ascii=False, indent=2)
    if args.output:
        Path(args.output).write_text(result + "\n", encoding="utf-8")
    else:
        print(result)


if __name__ == "__main__":
    main()
