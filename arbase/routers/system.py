# SPDX-License-Identifier: Apache-2.0
"""Health endpoint."""
import sys

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from arbase.config import settings
from arbase.database import engine

router = APIRouter(tags=["system"])


@router.get("/health")
def health():
    """Liveness/readiness, with which optional integrations are configured."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        database = "unavailable"
    return {
        "status": "ok" if database == "ok" else "degraded",
        "database": database,
        "ai_enabled": bool(settings.anthropic_api_key),
        "chain_enabled": settings.chain_enabled,
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
    }
