from __future__ import annotations

import io
from collections.abc import Callable
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from app.core.config import TextStyle
from app.core.errors import FontResolutionError
from app.core.logging import get_logger
from app.core.storage import ensure_dir
from app.models.composition import TextKind, TextLayer

logger = get_logger(__name__)


def load_font(style: TextStyle) -> ImageFont.FreeTypeFont:
    path = Path(style.font_path)
    if not path.exists():
        raise FontResolutionError(f"Font file not found: {path}")
    try:
        return ImageFont.truetype(str(path), size=style.font_size)
    except OSError as exc:
        raise FontResolutionError(f"Could not load font {path}: {exc}") from exc


def wrap_words(text: str, measure: Callable[[str], float], max_width: float) -> list[str]:
    """Greedy word-wrap.

    A word is appended to the current line unless the widened line would
    exceed ``max_width`` and the current line already holds something.
    Words are never broken, so a single very wide word simply overflows.
    """
    lines: list[str] = []
    line = ""
    for word in text.split():
        candidate = f"{line}{word} "
        if measure(candidate) > max_width and line:
            lines.append(line.rstrip())
            line = f"{word} "
        else:
            line = candidate
    lines.append(line.rstrip())
    return lines


class TextRasterizer:
    def __init__(self, style: TextStyle, kind: TextKind, font: ImageFont.FreeTypeFont | ImageFont.ImageFont | None = None) -> None:
        self.style = style
        self.kind = kind
        self._font = font

    @property
    def font(self) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        if self._font is None:
            self._font = load_font(self.style)
        return self._font

    @property
    def max_line_width(self) -> float:
        return self.style.width * self.style.wrap_ratio

    def wrap(self, text: str) -> list[str]:
        return wrap_words(text, self.font.getlength, self.max_line_width)

    def _draw(self, text: str) -> tuple[Image.Image, int]:
        style = self.style
        lines = self.wrap(text)
        content_height = len(lines) * style.line_height
        canvas_height = content_height + 2 * style.vertical_padding

        canvas = Image.new("RGBA", (style.width, canvas_height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(canvas)
        first_center = style.vertical_padding + style.line_height / 2
        for index, line in enumerate(lines):
            draw.text(
                (style.width / 2, first_center + index * style.line_height),
                line,
                font=self.font,
                fill=style.fill,
                anchor="mm",
            )
        return canvas, content_height

    def render_bytes(self, text: str) -> tuple[bytes, int]:
        canvas, content_height = self._draw(text)
        buffer = io.BytesIO()
        canvas.save(buffer, "PNG")
        return buffer.getvalue(), content_height

    def render(self, text: str, output_path: Path) -> TextLayer:
        canvas, content_height = self._draw(text)
        ensure_dir(output_path.parent)
        canvas.save(output_path, "PNG")
        logger.bind(path=str(output_path), kind=self.kind.value, height=content_height).debug("text_layer_rendered")
        return TextLayer(
            image_path=output_path,
            pixel_height=content_height,
            canvas_height=canvas.height,
            kind=self.kind,
        )
