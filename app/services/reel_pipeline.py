from __future__ import annotations

import random
import time
from pathlib import Path

from app.core.config import Settings
from app.core.errors import EmptyTimelineError, LayerAlignmentError, NoMediaError
from app.core.logging import get_logger
from app.core.storage import working_directory
from app.models.composition import AudioAsset, OutputArtifact, TextKind, TextLayer, VerseRecord
from app.models.schemas import ProcessRequest
from app.services.fetch_service import FetchService
from app.services.graph_service import FilterGraphBuilder, GraphInputs
from app.services.media_service import MediaService
from app.services.render_service import RenderService
from app.services.storage_service import FINAL_OUTPUT_NAME, R2StorageService
from app.services.text_service import TextRasterizer
from app.services.timeline_service import compute_timeline

logger = get_logger(__name__)


def generate_short_id() -> str:
    return f"{int(time.time() * 1000)}-{random.randint(0, 9999)}"


class ReelPipeline:
    def __init__(
        self,
        settings: Settings,
        fetcher: FetchService,
        storage: R2StorageService,
        renderer: RenderService | None = None,
        media: MediaService | None = None,
        arabic: TextRasterizer | None = None,
        translation: TextRasterizer | None = None,
    ) -> None:
        self.settings = settings
        self.fetcher = fetcher
        self.storage = storage
        self.renderer = renderer or RenderService(settings.encode)
        self.media = media or MediaService()
        self.arabic = arabic or TextRasterizer(settings.arabic_text, TextKind.arabic)
        self.translation = translation or TextRasterizer(settings.translation_text, TextKind.translation)
        self.graph_builder = FilterGraphBuilder(settings.layout)

    def _fetch_audio(self, request: ProcessRequest, verses: list[VerseRecord], work_dir: Path) -> list[AudioAsset]:
        jobs = [
            (self.fetcher.audio_url(recitation.audio_files[0].url), work_dir / f"audio_{verse.file_key}.mp3")
            for recitation, verse in zip(request.recitation_files, verses)
        ]
        paths = self.fetcher.download_all(jobs)
        assets = [AudioAsset(local_path=path, duration_seconds=self.media.probe_duration(path)) for path in paths]
        for verse, asset in zip(verses, assets):
            logger.bind(verse_key=verse.verse_key, duration=asset.duration_seconds).info("audio_ready")
        return assets

    def _fetch_backgrounds(self, links: list[str], work_dir: Path) -> list[Path]:
        jobs: list[tuple[str, Path]] = []
        for index, url in enumerate(links):
            if not self.fetcher.is_eligible_background(url):
                logger.bind(url=url).warning("background_link_skipped")
                continue
            jobs.append((url, work_dir / f"background_{index}.mp4"))
        if not jobs:
            raise NoMediaError("video")
        return self.fetcher.download_all(jobs)

    def _rasterize(self, verses: list[VerseRecord], work_dir: Path) -> tuple[list[TextLayer], list[TextLayer]]:
        arabic_layers = [self.arabic.render(v.primary_text, work_dir / f"arabic_{v.file_key}.png") for v in verses]
        translation_layers = [
            self.translation.render(v.translation_text, work_dir / f"translation_{v.file_key}.png") for v in verses
        ]
        return arabic_layers, translation_layers

    def process(self, request: ProcessRequest, *, retain_working_directory: bool | None = None) -> OutputArtifact:
        verses = request.verses()
        if not verses:
            raise EmptyTimelineError("Request contains no ayat")
        if len(request.recitation_files) != len(verses):
            raise LayerAlignmentError(
                f"{len(request.recitation_files)} recitation files for {len(verses)} ayat"
            )

        retain = retain_working_directory
        if retain is None:
            retain = self.settings.retain_working_directory

        video_id = generate_short_id()
        with working_directory(self.settings.tmp_dir, video_id, retain=retain) as work_dir:
            audio_assets = self._fetch_audio(request, verses, work_dir)
            backgrounds = self._fetch_backgrounds(request.background.links, work_dir)

            video_input = self.media.concatenate(backgrounds, "video", work_dir)
            audio_input = self.media.concatenate([asset.local_path for asset in audio_assets], "audio", work_dir)
            arabic_layers, translation_layers = self._rasterize(verses, work_dir)

            timeline = compute_timeline([asset.duration_seconds for asset in audio_assets])
            graph = self.graph_builder.build(
                GraphInputs(
                    background=video_input,
                    audio=audio_input,
                    watermark=self.settings.watermark_path,
                    vignette=self.settings.vignette_path,
                    arabic_layers=arabic_layers,
                    translation_layers=translation_layers,
                ),
                timeline,
            )
            output_path = self.renderer.render(graph, timeline.total_duration, work_dir / FINAL_OUTPUT_NAME)

            upload = self.storage.upload_video(output_path, video_id)
            logger.bind(video_id=video_id, url=upload.url, duration=timeline.total_duration).info("video_uploaded")

        return OutputArtifact(
            output_local_path=output_path,
            video_id=video_id,
            public_url=upload.url,
            time_bounded_url=upload.presigned_url,
        )

    def presigned_url(self, video_id: str | None, expiry_seconds: int | None = None) -> dict:
        return self.storage.presigned_url_for_video(video_id or "", expiry_seconds)
