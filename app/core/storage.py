import json
import os
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from filelock import FileLock

from app.core.logging import get_logger

logger = get_logger(__name__)


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write_json(path: Path, payload: Any) -> None:
    """Write JSON next to ``path`` under a unique name, then swap it in."""
    ensure_dir(path.parent)
    with tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
    ) as handle:
        json.dump(payload, handle, ensure_ascii=False, indent=2)
        handle.write("\n")
        handle.flush()
        os.fsync(handle.fileno())
    Path(handle.name).replace(path)


def read_json(path: Path, default: Any = None) -> Any:
    if not path.exists():
        return default
    return json.loads(path.read_text(encoding="utf-8"))


def job_lock(job_dir: Path, timeout: float = 30) -> FileLock:
    ensure_dir(job_dir)
    return FileLock(str(job_dir / ".lock"), timeout=timeout)


@contextmanager
def working_directory(root: Path, request_id: str, retain: bool = False) -> Iterator[Path]:
    """Yield a fresh per-request directory and remove it afterwards.

    The path is absolute so ffmpeg list files can reference it from any
    directory. Removal is always attempted on failure. ``retain`` only
    keeps the directory around after a successful run.
    """
    path = ensure_dir((root / request_id).resolve())
    succeeded = False
    try:
        yield path
        succeeded = True
    finally:
        if succeeded and retain:
            logger.bind(path=str(path)).info("working_directory_retained")
        else:
            shutil.rmtree(path, ignore_errors=True)
            logger.bind(path=str(path), succeeded=succeeded).debug("working_directory_removed")
