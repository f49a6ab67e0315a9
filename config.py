"""seo-autopilot configuration."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent / ".env")

# --- Paths ---
BASE_DIR = Path(__file__).parent
DATA_DIR = BASE_DIR / "data"
DB_PATH = DATA_DIR / "seo_autopilot.db"
DATABASE_URL: str = os.getenv("DATABASE_URL", "")  # empty -> sqlite file at DB_PATH

# --- API ---
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8002"))

# Base URL the cron routes use to call the publish / generate endpoints
APP_URL: str = os.getenv("APP_URL", f"http://{API_HOST}:{API_PORT}").rstrip("/")

# Shared secret expected as "Authorization: Bearer <secret>" on cron + internal routes
CRON_SECRET: str = os.getenv("CRON_SECRET", "")

# "http": pipelines call the publish/generate endpoints over HTTP
# "local": pipelines call the same code in-process
PIPELINE_DISPATCH: str = os.getenv("PIPELINE_DISPATCH", "http")

# Timeout (seconds) for every outbound HTTP call
HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", "30"))

# --- Generation ---
GROQ_API_KEY: str = os.getenv("GROQ_API_KEY", "")
GROQ_BASE_URL: str = os.getenv("GROQ_BASE_URL", "https://api.groq.com/openai/v1")
LLM_MODEL: str = os.getenv("LLM_MODEL", "llama-3.3-70b-versatile")
GENERATION_MAX_ATTEMPTS: int = 3
GENERATION_BACKOFF_SECONDS: float = 2.0  # linear: attempt * backoff

# --- Enrichment providers ---
PIXABAY_API_KEY: str = os.getenv("PIXABAY_API_KEY", "")
PIXABAY_API_URL = "https://pixabay.com/api/"
YOUTUBE_API_KEY: str = os.getenv("YOUTUBE_API_KEY", "")
YOUTUBE_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"

# --- Scheduling defaults ---
DEFAULT_PUBLISH_TIME = "09:00:00"
DEFAULT_ARTICLES_PER_WEEK: int = 3
