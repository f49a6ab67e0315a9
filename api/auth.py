"""Bearer-secret check for cron and internal endpoints."""

import hmac
import logging

from fastapi import Header, HTTPException

from config import CRON_SECRET

logger = logging.getLogger(__name__)


def require_cron_secret(authorization: str | None = Header(default=None)) -> None:
    """Reject the request unless it carries ``Authorization: Bearer <CRON_SECRET>``.

    An unset secret rejects everything.
    """
    expected = f"Bearer {CRON_SECRET}"
    if not CRON_SECRET or not authorization or not hmac.compare_digest(
        authorization.encode("utf-8"), expected.encode("utf-8")
    ):
        logger.warning("Rejected request with missing or invalid bearer secret")
        raise HTTPException(status_code=401, detail="Unauthorized")
