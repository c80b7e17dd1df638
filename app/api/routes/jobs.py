from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.api.deps import Pipeline
from app.core.config import settings
from app.core.errors import InvalidJobIdError
from app.models.schemas import RunJobRequest, RunJobResponse
from app.services.job_service import JobService

router = APIRouter(tags=["jobs"])


@router.post("/run", response_model=RunJobResponse)
def run_job(payload: RunJobRequest, pipeline: Pipeline) -> RunJobResponse:
    jobs = JobService(pipeline, settings.outputs_dir)
    return RunJobResponse(id=payload.id, output=jobs.run(payload.id, payload.input))


@router.get("/run/{job_id}", response_model=RunJobResponse)
def job_output(job_id: str, pipeline: Pipeline):
    try:
        output = JobService(pipeline, settings.outputs_dir).read_output(job_id)
    except InvalidJobIdError as exc:
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)
    if output is None:
        return JSONResponse({"error": "Job output not found"}, status_code=404)
    return RunJobResponse(id=job_id, output=output)
