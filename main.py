"""seo-autopilot FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from api.cron import router as cron_router
from api.routes import router
from db.database import init_db

logger = logging.getLogger(__name__)


def check_settings() -> list[str]:
    """Warn about settings that leave the cron pipelines unable to run."""
    problems = []
    if not config.CRON_SECRET:
        problems.append("CRON_SECRET is not set; cron and internal endpoints reject every request")
    if config.PIPELINE_DISPATCH not in ("http", "local"):
        problems.append(f"PIPELINE_DISPATCH={config.PIPELINE_DISPATCH!r} is unknown; using http")
    if not config.GROQ_API_KEY:
        problems.append("GROQ_API_KEY is not set; article generation will fail")
    for problem in problems:
        logger.warning(problem)
    return problems


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize DB and check settings on startup."""
    init_db()
    check_settings()
    logger.info("seo-autopilot ready (dispatch=%s, app_url=%s)", config.PIPELINE_DISPATCH, config.APP_URL)
    yield


app = FastAPI(
    title="seo-autopilot",
    description="SEO article generation, scheduling and WordPress publishing",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
app.include_router(cron_router)

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    uvicorn.run("main:app", host=config.API_HOST, port=config.API_PORT, reload=True)
