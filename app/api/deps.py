from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from app.core.config import settings
from app.services.fetch_service import FetchService
from app.services.reel_pipeline import ReelPipeline
from app.services.storage_service import R2StorageService


@lru_cache
def get_pipeline() -> ReelPipeline:
    return ReelPipeline(
        settings=settings,
        fetcher=FetchService(settings),
        storage=R2StorageService(settings),
    )


Pipeline = Annotated[ReelPipeline, Depends(get_pipeline)]
