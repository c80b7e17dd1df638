from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class TextKind(str, Enum):
    arabic = "arabic"
    translation = "translation"


@dataclass(frozen=True)
class VerseRecord:
    verse_key: str
    primary_text: str
    translation_text: str

    @property
    def file_key(self) -> str:
        return self.verse_key.replace(":", "_")


@dataclass(frozen=True)
class AudioAsset:
    local_path: Path
    duration_seconds: float


@dataclass(frozen=True)
class TextLayer:
    image_path: Path
    pixel_height: int
    canvas_height: int
    kind: TextKind


@dataclass(frozen=True)
class TimelineEntry:
    verse_index: int
    start_seconds: float
    end_seconds: float

    @property
    def duration(self) -> float:
        return self.end_seconds - self.start_seconds


@dataclass(frozen=True)
class Timeline:
    entries: tuple[TimelineEntry, ...]
    total_duration: float

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class Visibility:
    """Overlay visibility: always on, or the half-open window [start, end)."""

    start: float | None = None
    end: float | None = None

    @classmethod
    def always(cls) -> Visibility:
        return cls()

    @classmethod
    def window(cls, start: float, end: float) -> Visibility:
        if end < start:
            raise ValueError(f"Visibility window ends before it starts: {start} > {end}")
        return cls(start=start, end=end)

    @property
    def always_on(self) -> bool:
        return self.start is None and self.end is None

    def is_visible(self, t: float) -> bool:
        if self.always_on:
            return True
        return self.start <= t < self.end  # type: ignore[operator]

    def expression(self) -> str | None:
        # between() is closed on both ends; adjacent windows would share a frame.
        if self.always_on:
            return None
        return f"gte(t,{self.start})*lt(t,{self.end})"


@dataclass(frozen=True)
class GraphInput:
    name: str
    path: Path
    options: tuple[str, ...] = ()


@dataclass(frozen=True)
class FilterStep:
    input_label: str
    filters: tuple[str, ...]
    output_label: str

    def render(self, resolve) -> str:
        return f"[{resolve(self.input_label)}]{','.join(self.filters)}[{self.output_label}]"


@dataclass(frozen=True)
class OverlayStep:
    base_label: str
    overlay_label: str
    x: str | int
    y: str | int
    visibility: Visibility
    output_label: str

    def render(self, resolve) -> str:
        expr = f"overlay=x={self.x}:y={self.y}"
        enable = self.visibility.expression()
        if enable is not None:
            expr += f":enable='{enable}'"
        return f"[{resolve(self.base_label)}][{resolve(self.overlay_label)}]{expr}[{self.output_label}]"


@dataclass
class CompositionGraph:
    """Ordered compositing steps over named inputs.

    Labels that match an input name refer to that input's video stream and
    are turned into ffmpeg ``<index>:v`` references only in
    :meth:`to_filter_complex`.
    """

    width: int
    height: int
    inputs: list[GraphInput] = field(default_factory=list)
    steps: list[FilterStep | OverlayStep] = field(default_factory=list)
    output_label: str = ""

    def input_index(self, name: str) -> int:
        for index, item in enumerate(self.inputs):
            if item.name == name:
                return index
        raise KeyError(f"Unknown graph input: {name}")

    def _resolve(self, label: str) -> str:
        if any(item.name == label for item in self.inputs):
            return f"{self.input_index(label)}:v"
        return label

    def overlays(self) -> list[OverlayStep]:
        return [step for step in self.steps if isinstance(step, OverlayStep)]

    def find_overlay(self, overlay_label: str) -> OverlayStep:
        for step in self.overlays():
            if step.overlay_label == overlay_label:
                return step
        raise KeyError(f"No overlay step for {overlay_label}")

    def to_filter_complex(self) -> str:
        return ";".join(step.render(self._resolve) for step in self.steps)


@dataclass(frozen=True)
class OutputArtifact:
    output_local_path: Path
    video_id: str
    public_url: str
    time_bounded_url: str

    def to_response(self) -> dict:
        return {
            "output": str(self.output_local_path),
            "videoId": self.video_id,
            "videoUrl": self.public_url,
            "presignedUrl": self.time_bounded_url,
        }
