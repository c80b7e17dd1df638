from __future__ import annotations

from pathlib import Path

import httpx

from app.core.config import Settings
from app.core.errors import FetchError
from app.core.logging import get_logger
from app.core.storage import ensure_dir
from app.core.worker import BoundedPool

logger = get_logger(__name__)


class FetchService:
    def __init__(self, settings: Settings, client: httpx.Client | None = None) -> None:
        self.settings = settings
        self.pool = BoundedPool(settings.fetch_workers)
        self._client = client or httpx.Client(timeout=settings.fetch_timeout_seconds, follow_redirects=True)

    def audio_url(self, relative_url: str) -> str:
        return f"{self.settings.audio_base_url}{relative_url}"

    def is_eligible_background(self, url: str) -> bool:
        return url.startswith(self.settings.background_url_prefix)

    def download(self, url: str, destination: Path) -> Path:
        ensure_dir(destination.parent)
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(url, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise FetchError(url, str(exc)) from exc
        destination.write_bytes(response.content)
        logger.bind(url=url, path=str(destination)).info("asset_downloaded")
        return destination

    def download_all(self, jobs: list[tuple[str, Path]]) -> list[Path]:
        """Download ``(url, destination)`` pairs concurrently, keeping order."""
        return self.pool.map_ordered(lambda job: self.download(*job), jobs)

    def close(self) -> None:
        self._client.close()
