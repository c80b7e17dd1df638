import subprocess
from pathlib import Path

from app.core.errors import ConcatenationError, FetchError, NoMediaError
from app.core.logging import get_logger
from app.core.storage import ensure_dir

logger = get_logger(__name__)

EXTENSIONS = {"video": "mp4", "audio": "mp3"}


def _stderr_tail(exc: subprocess.CalledProcessError, limit: int = 600) -> str:
    stderr = exc.stderr or ""
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    return stderr.strip()[-limit:]


class MediaService:
    def probe_duration(self, path: Path) -> float:
        cmd = [
            "ffprobe",
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "default=noprint_wrappers=1:nokey=1",
            str(path),
        ]
        try:
            result = subprocess.run(cmd, check=True, capture_output=True, text=True)
        except subprocess.CalledProcessError as exc:
            raise FetchError(str(path), f"ffprobe failed: {_stderr_tail(exc)}") from exc
        except OSError as exc:
            raise FetchError(str(path), f"could not run ffprobe: {exc}") from exc
        raw = result.stdout.strip()
        try:
            return float(raw) if raw and raw != "N/A" else 0.0
        except ValueError:
            return 0.0

    def concatenate(self, paths: list[Path], kind: str, work_dir: Path) -> Path:
        if not paths:
            raise NoMediaError(kind)
        if len(paths) == 1:
            return paths[0]

        ensure_dir(work_dir)
        concat_list = work_dir / f"{kind}_concat.txt"
        lines = ["file '{}'".format(str(Path(path).resolve()).replace("'", "'\\''")) for path in paths]
        concat_list.write_text("\n".join(lines), encoding="utf-8")

        output_path = work_dir / f"concatenated_{kind}.{EXTENSIONS.get(kind, 'mp4')}"
        cmd = [
            "ffmpeg",
            "-y",
            "-f",
            "concat",
            "-safe",
            "0",
            "-i",
            str(concat_list),
            "-c",
            "copy",
            str(output_path),
        ]
        try:
            subprocess.run(cmd, check=True, capture_output=True, text=True)
        except subprocess.CalledProcessError as exc:
            raise ConcatenationError(kind, _stderr_tail(exc)) from exc
        except OSError as exc:
            raise ConcatenationError(kind, f"could not run ffmpeg: {exc}") from exc
        logger.bind(kind=kind, count=len(paths), path=str(output_path)).info("media_concatenated")
        return output_path
