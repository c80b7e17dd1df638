from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from app.api.deps import Pipeline
from app.core.errors import CompositionError
from app.core.logging import get_logger
from app.models.schemas import PresignedUrlResponse, ProcessRequest, ProcessResponse

logger = get_logger(__name__)

router = APIRouter(tags=["videos"])


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@router.get("/videos/{video_id}", response_model=PresignedUrlResponse)
def video_presigned_url(video_id: str, pipeline: Pipeline, expiry_seconds: int | None = None):
    try:
        result = pipeline.presigned_url(video_id, expiry_seconds)
    except CompositionError as exc:
        return _error(str(exc), exc.status_code)
    return PresignedUrlResponse(**result)


@router.post("/process", response_model=ProcessResponse)
def process_video(pipeline: Pipeline, payload: Any = Body(default=None)):
    try:
        request = ProcessRequest.from_payload(payload)
        artifact = pipeline.process(request)
    except CompositionError as exc:
        return _error(str(exc), exc.status_code)
    except Exception as exc:  # noqa: BLE001
        logger.bind(error=str(exc)).exception("process_crashed")
        return _error(str(exc) or exc.__class__.__name__, 500)
    return ProcessResponse(**artifact.to_response())
