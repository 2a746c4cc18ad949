from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog
from fastapi import APIRouter

router = APIRouter(tags=["health"])
logger = structlog.get_logger(__name__)


@router.get("/health")
async def health() -> dict[str, Any]:
    logger.debug("health.check")
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/health/ready")
async def readiness() -> dict[str, Any]:
    logger.debug("health.readiness")
    return {"ready": True, "timestamp": datetime.now(timezone.utc).isoformat()}
