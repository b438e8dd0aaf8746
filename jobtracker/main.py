"""FastAPI entry point for the job application tracker backend."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobtracker.config import settings
from jobtracker.db import close as close_db
from jobtracker.db import get_connection
from jobtracker.routers import applications, csv_io, views
from jobtracker.services.application_store import application_store

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting job tracker backend on %s:%d", settings.host, settings.port)
    settings.data_dir.mkdir(parents=True, exist_ok=True)

    get_connection()

    # Serve nothing until the saved applications are in memory
    await application_store.load()

    yield

    # Shutdown
    await application_store.flush()
    close_db()
    logger.info("Job tracker backend stopped")


app = FastAPI(
    title="Job Application Tracker",
    description="Personal job application tracking backend",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # localhost only; tighten in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(applications.router)
app.include_router(views.router)
app.include_router(csv_io.router)


@app.get("/health")
async def health() -> dict:
    return {
        "status": "ok",
        "loaded": application_store.is_loaded,
        "applications": len(application_store),
    }


if __name__ == "__main__":
    uvicorn.run(
        "jobtracker.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
    )
