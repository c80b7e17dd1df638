import subprocess
from pathlib import Path

from app.core.config import EncodeSettings
from app.core.errors import EncodeError
from app.core.logging import get_logger
from app.core.storage import ensure_dir
from app.models.composition import CompositionGraph

logger = get_logger(__name__)


class RenderService:
    def __init__(self, encode: EncodeSettings) -> None:
        self.encode = encode

    def build_command(self, graph: CompositionGraph, total_duration: float, output_path: Path) -> list[str]:
        cmd = ["ffmpeg", "-y"]
        for item in graph.inputs:
            cmd.extend(item.options)
            cmd.extend(["-i", str(item.path)])

        enc = self.encode
        cmd.extend(
            [
                "-filter_complex",
                graph.to_filter_complex(),
                "-map",
                f"[{graph.output_label}]",
                "-map",
                f"{graph.input_index('audio')}:a",
                "-t",
                str(total_duration),
                "-c:v",
                enc.video_codec,
                "-c:a",
                enc.audio_codec,
                "-pix_fmt",
                enc.pixel_format,
                "-threads",
                str(enc.threads),
                "-b:v",
                enc.video_bitrate,
                "-preset",
                enc.preset,
                "-crf",
                str(enc.crf),
                "-maxrate",
                enc.maxrate,
                "-bufsize",
                enc.bufsize,
                str(output_path),
            ]
        )
        return cmd

    def render(self, graph: CompositionGraph, total_duration: float, output_path: Path) -> Path:
        ensure_dir(output_path.parent)
        cmd = self.build_command(graph, total_duration, output_path)
        logger.bind(inputs=len(graph.inputs), duration=total_duration).info("encode_started")
        try:
            subprocess.run(cmd, check=True, capture_output=True, text=True)
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip()[-800:]
            raise EncodeError(f"ffmpeg failed with exit code {exc.returncode}: {stderr}") from exc
        except OSError as exc:
            raise EncodeError(f"Could not start ffmpeg: {exc}") from exc
        logger.bind(path=str(output_path)).info("encode_finished")
        return output_path
