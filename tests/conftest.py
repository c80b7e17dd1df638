"""Shared fixtures: settings rooted in tmp_path, fonts, and fake collaborators."""

from pathlib import Path

import pytest
from PIL import ImageFont

from app.core.config import Settings
from app.models.composition import TextKind
from app.services.storage_service import UploadResult, video_key
from app.services.text_service import TextRasterizer


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        tmp_dir=tmp_path / "tmp",
        outputs_dir=tmp_path / "outputs",
        watermark_path=tmp_path / "watermark.png",
        vignette_path=tmp_path / "vignette.png",
        r2_account_id="acct",
        r2_bucket_name="reels",
        fetch_workers=2,
    )


@pytest.fixture
def default_font():
    font = ImageFont.load_default(size=32)
    if not isinstance(font, ImageFont.FreeTypeFont):
        pytest.skip("Pillow built without FreeType")
    return font


@pytest.fixture
def rasterizers(test_settings, default_font):
    return (
        TextRasterizer(test_settings.arabic_text, TextKind.arabic, font=default_font),
        TextRasterizer(test_settings.translation_text, TextKind.translation, font=default_font),
    )


class FakeFetcher:
    def __init__(self, fail_url: str | None = None) -> None:
        self.fail_url = fail_url
        self.downloaded: list[str] = []

    def audio_url(self, relative_url: str) -> str:
        return f"https://verses.quran.com/{relative_url}"

    def is_eligible_background(self, url: str) -> bool:
        return url.startswith("https://cdn.pixabay.com/")

    def download_all(self, jobs: list[tuple[str, Path]]) -> list[Path]:
        from app.core.errors import FetchError

        paths = []
        for url, destination in jobs:
            if url == self.fail_url:
                raise FetchError(url, "HTTP 404")
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(b"data")
            self.downloaded.append(url)
            paths.append(destination)
        return paths

    def close(self) -> None:
        pass


class FakeMedia:
    def __init__(self, durations: dict[str, float] | None = None) -> None:
        self.durations = durations or {}
        self.concatenated: list[tuple[str, list[Path]]] = []

    def probe_duration(self, path: Path) -> float:
        return self.durations.get(path.name, 2.0)

    def concatenate(self, paths: list[Path], kind: str, work_dir: Path) -> Path:
        self.concatenated.append((kind, list(paths)))
        return paths[0]


class FakeRenderer:
    def __init__(self, fail: Exception | None = None) -> None:
        self.fail = fail
        self.calls = []

    def render(self, graph, total_duration: float, output_path: Path) -> Path:
        if self.fail is not None:
            raise self.fail
        self.calls.append((graph, total_duration, output_path))
        output_path.write_bytes(b"mp4")
        return output_path


class FakeStorage:
    def __init__(self) -> None:
        self.uploads: list[tuple[Path, str]] = []

    def upload_video(self, video_path: Path, video_id: str) -> UploadResult:
        self.uploads.append((video_path, video_id))
        key = video_key(video_id, video_path.name)
        return UploadResult(key=key, url=f"https://r2.test/{key}", presigned_url=f"https://r2.test/{key}?sig=1")

    def presigned_url_for_video(self, video_id: str, expiry_seconds: int | None = None) -> dict:
        from app.core.errors import NotFoundError

        if not video_id:
            raise NotFoundError("Video ID is required")
        expires_in = expiry_seconds or 7200
        return {"videoId": video_id, "presignedUrl": f"https://r2.test/{video_key(video_id)}?sig=1", "expiresIn": expires_in}


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def fake_media():
    return FakeMedia()


@pytest.fixture
def fake_renderer():
    return FakeRenderer()


@pytest.fixture
def fake_storage():
    return FakeStorage()


@pytest.fixture
def process_payload():
    return {
        "recitation_files": [
            {"audio_files": [{"url": "Alafasy/mp3/001001.mp3"}]},
            {"audio_files": [{"url": "Alafasy/mp3/001002.mp3"}]},
        ],
        "background": {
            "links": [
                "https://cdn.pixabay.com/video/clouds.mp4",
                "https://example.com/not-allowed.mp4",
            ]
        },
        "ayat": [
            {"verse_key": "1:1", "aya": "بِسْمِ ٱللَّهِ ٱلرَّحْمَٰنِ ٱلرَّحِيمِ", "translation": "In the name of Allah"},
            {"verse_key": "1:2", "aya": "ٱلْحَمْدُ لِلَّهِ رَبِّ ٱلْعَٰلَمِينَ", "translation": "All praise is for Allah"},
        ],
    }
