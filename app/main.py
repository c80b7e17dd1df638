from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import health, jobs, ui, videos
from app.core.logging import setup_logging

setup_logging()

app = FastAPI(title="ayah-reel-composer", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(ui.router)
app.include_router(health.router)
app.include_router(videos.router)
app.include_router(jobs.router)
