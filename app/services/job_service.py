import re
from pathlib import Path
from typing import Any

from app.core.errors import CompositionError, InvalidJobIdError
from app.core.logging import get_logger
from app.core.storage import atomic_write_json, job_lock, read_json
from app.models.schemas import JOB_ID_PATTERN, MISSING_FIELDS_MESSAGE, REQUIRED_FIELDS, ProcessRequest
from app.services.reel_pipeline import ReelPipeline

logger = get_logger(__name__)

_JOB_ID = re.compile(JOB_ID_PATTERN)


class JobService:
    """Serverless-style jobs: ``{id, input}`` in, ``{id, output}`` out.

    Outputs are also written to ``<outputs_dir>/<id>/output.json`` so a
    job runner can collect them after the HTTP response.
    """

    def __init__(self, pipeline: ReelPipeline, outputs_dir: Path) -> None:
        self.pipeline = pipeline
        self.outputs_dir = outputs_dir

    def dispatch(self, job_input: dict[str, Any]) -> dict[str, Any]:
        if job_input.get("route") == "video":
            try:
                return self.pipeline.presigned_url(job_input.get("videoId"), job_input.get("expirySeconds"))
            except CompositionError as exc:
                return {"error": str(exc), "status": exc.status_code}

        if not all(job_input.get(name) for name in REQUIRED_FIELDS):
            return {"error": MISSING_FIELDS_MESSAGE}
        try:
            request = ProcessRequest.from_payload(job_input)
            return self.pipeline.process(request).to_response()
        except CompositionError as exc:
            logger.bind(error=str(exc)).error("job_failed")
            return {"error": str(exc)}
        except Exception as exc:  # noqa: BLE001
            logger.bind(error=str(exc)).exception("job_crashed")
            return {"error": str(exc) or exc.__class__.__name__}

    def run(self, job_id: str, job_input: dict[str, Any]) -> dict[str, Any]:
        self.output_path(job_id)
        logger.bind(job_id=job_id).info("job_received")
        output = self.dispatch(job_input)
        self.write_output(job_id, output)
        logger.bind(job_id=job_id, failed="error" in output).info("job_completed")
        return output

    def output_path(self, job_id: str) -> Path:
        if not _JOB_ID.fullmatch(job_id):
            raise InvalidJobIdError(job_id)
        return self.outputs_dir / job_id / "output.json"

    def write_output(self, job_id: str, output: dict[str, Any]) -> Path:
        path = self.output_path(job_id)
        with job_lock(path.parent):
            atomic_write_json(path, output)
        return path

    def read_output(self, job_id: str) -> dict[str, Any] | None:
        return read_json(self.output_path(job_id), default=None)
