from fastapi import APIRouter

router = APIRouter(tags=["ui"])


@router.get("/")
def service_index() -> dict:
    return {
        "status": "ok",
        "service": "Quran API",
        "version": "1.0.0",
        "endpoints": [
            {"method": "GET", "path": "/videos/:id"},
            {"method": "POST", "path": "/process"},
        ],
        "runpod": {
            "info": "For RunPod serverless, submit jobs to POST /run",
            "required_parameters": ["recitation_files", "background", "ayat"],
        },
    }
