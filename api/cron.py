"""Cron trigger endpoints.

Each accepts GET or POST, requires the bearer secret and runs one pipeline
pass. Partial failures come back as 200 with per-item results; a failure of
the run itself is a 500 with ``{success: false, error}``.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.auth import require_cron_secret
from api.deps import get_generation_gateway, get_publish_gateway
from db.database import get_session
from pipeline.auto_publish import run_auto_publish
from pipeline.content_plan import run_content_plan
from pipeline.gateways import GenerationGateway, PublishGateway
from pipeline.generate_ahead import run_generation_ahead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cron", dependencies=[Depends(require_cron_secret)])


def _failure(e: Exception, fallback: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"success": False, "error": str(e) or fallback})


@router.api_route("/auto-publish", methods=["GET", "POST"], response_model=None)
def auto_publish(
    publish_gateway: PublishGateway = Depends(get_publish_gateway),
) -> dict[str, Any] | JSONResponse:
    """Publish every scheduled article whose time has come."""
    session = get_session()
    try:
        return run_auto_publish(session, publish_gateway)
    except Exception as e:
        logger.exception("Auto-publish run failed")
        return _failure(e, "Failed to process scheduled articles")
    finally:
        session.close()


@router.api_route("/generate-articles", methods=["GET", "POST"], response_model=None)
def generate_articles(
    generation_gateway: GenerationGateway = Depends(get_generation_gateway),
    publish_gateway: PublishGateway = Depends(get_publish_gateway),
) -> dict[str, Any] | JSONResponse:
    """Pre-generate articles scheduled for tomorrow."""
    session = get_session()
    try:
        return run_generation_ahead(session, generation_gateway, publish_gateway)
    except Exception as e:
        logger.exception("Generation-ahead run failed")
        return _failure(e, "Failed to generate articles")
    finally:
        session.close()


@router.api_route("/auto-generate-articles", methods=["GET", "POST"], response_model=None)
def auto_generate_articles(
    generation_gateway: GenerationGateway = Depends(get_generation_gateway),
    publish_gateway: PublishGateway = Depends(get_publish_gateway),
) -> dict[str, Any] | JSONResponse:
    """Generate articles from the content plan on preferred days."""
    session = get_session()
    try:
        return run_content_plan(session, generation_gateway, publish_gateway)
    except Exception as e:
        logger.exception("Content-plan run failed")
        return _failure(e, "Failed to auto-generate articles")
    finally:
        session.close()
