from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from app.core.config import LayoutSettings
from app.core.errors import LayerAlignmentError
from app.models.composition import (
    CompositionGraph,
    FilterStep,
    GraphInput,
    OverlayStep,
    TextKind,
    TextLayer,
    Timeline,
    Visibility,
)

CENTER_X = "(W-w)/2"


@dataclass(frozen=True)
class GraphInputs:
    background: Path
    audio: Path
    watermark: Path
    vignette: Path
    arabic_layers: list[TextLayer]
    translation_layers: list[TextLayer]


class FilterGraphBuilder:
    """Builds the overlay chain that puts each verse on screen during its audio.

    Layer order is fixed: background, vignette, watermark, then one
    translation + arabic pair per verse. Every verse overlays the output of
    the previous one, so the chain never branches; disjoint time windows
    decide which pair is visible.
    """

    def __init__(self, layout: LayoutSettings) -> None:
        self.layout = layout

    @property
    def watermark_y(self) -> int:
        return self.layout.canvas_height - self.layout.watermark_bottom_offset

    def translation_y(self, translation_height: int) -> int:
        layout = self.layout
        return self.watermark_y - (translation_height + layout.translation_block_padding) - layout.translation_margin

    def arabic_y(self, translation_y: int, arabic_height: int) -> int:
        return translation_y - (arabic_height + self.layout.arabic_gap)

    def _validate(self, inputs: GraphInputs, timeline: Timeline) -> None:
        count = len(timeline)
        if count == 0:
            raise LayerAlignmentError("Timeline has no verses to lay out")
        if len(inputs.arabic_layers) != count or len(inputs.translation_layers) != count:
            raise LayerAlignmentError(
                f"Layer counts do not match timeline: {len(inputs.arabic_layers)} arabic, "
                f"{len(inputs.translation_layers)} translation, {count} verses"
            )
        for index, entry in enumerate(timeline.entries):
            if entry.verse_index != index:
                raise LayerAlignmentError(f"Timeline entry {index} is for verse {entry.verse_index}")
        for expected, layers in ((TextKind.arabic, inputs.arabic_layers), (TextKind.translation, inputs.translation_layers)):
            for index, layer in enumerate(layers):
                if layer.kind != expected:
                    raise LayerAlignmentError(f"Verse {index}: expected {expected.value} layer, got {layer.kind.value}")

    def build(self, inputs: GraphInputs, timeline: Timeline) -> CompositionGraph:
        self._validate(inputs, timeline)
        layout = self.layout
        count = len(timeline)

        graph = CompositionGraph(width=layout.canvas_width, height=layout.canvas_height)
        graph.inputs = [
            GraphInput("background", inputs.background, ("-stream_loop", "-1")),
            GraphInput("audio", inputs.audio),
            GraphInput("watermark", inputs.watermark),
            GraphInput("vignette", inputs.vignette),
        ]
        graph.inputs += [GraphInput(f"arabic_{i}", layer.image_path) for i, layer in enumerate(inputs.arabic_layers)]
        graph.inputs += [GraphInput(f"translation_{i}", layer.image_path) for i, layer in enumerate(inputs.translation_layers)]

        graph.steps.append(
            FilterStep("background", (f"scale={layout.canvas_width}:{layout.canvas_height}", "format=yuva420p"), "bg")
        )
        graph.steps.append(OverlayStep("bg", "vignette", CENTER_X, "(H-h)/2", Visibility.always(), "vig"))
        scale = layout.watermark_scale
        graph.steps.append(FilterStep("watermark", (f"scale=iw*{scale}:ih*{scale}",), "scaled_watermark"))
        graph.steps.append(
            OverlayStep("vig", "scaled_watermark", CENTER_X, self.watermark_y, Visibility.always(), "with_watermark")
        )

        previous = "with_watermark"
        for i in range(count):
            entry = timeline.entries[i]
            window = Visibility.window(entry.start_seconds, entry.end_seconds)

            trans_y = self.translation_y(inputs.translation_layers[i].pixel_height)
            graph.steps.append(OverlayStep(previous, f"translation_{i}", CENTER_X, trans_y, window, f"trans{i}"))

            arabic_y = self.arabic_y(trans_y, inputs.arabic_layers[i].pixel_height)
            graph.steps.append(OverlayStep(f"trans{i}", f"arabic_{i}", CENTER_X, arabic_y, window, f"arabic{i}"))
            previous = f"arabic{i}"

        graph.output_label = previous
        return graph
