"""
FastAPI Dependencies
Candidate identity and the batch-trigger secret
"""
import hmac
from typing import Optional
from uuid import UUID

from fastapi import HTTPException, status, Header
from loguru import logger

from core.config import settings


async def get_candidate_id(
    x_candidate_id: Optional[str] = Header(None)
) -> UUID:
    """
    Candidate making the request, from the X-Candidate-Id header

    Usage:
        @router.get("/matches")
        async def get_matches(candidate_id: UUID = Depends(get_candidate_id)):
            ...
    """
    if not x_candidate_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Candidate-Id header",
        )

    try:
        return UUID(x_candidate_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid X-Candidate-Id format",
        )


async def verify_cron_secret(
    authorization: Optional[str] = Header(None)
) -> None:
    """Require `Authorization: Bearer <CRON_SECRET>` on the batch trigger"""
    if not settings.CRON_SECRET:
        logger.error("CRON_SECRET not configured, refusing batch trigger")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Batch trigger not configured",
        )

    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Extract token from "Bearer <token>"
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer" or not hmac.compare_digest(parts[1], settings.CRON_SECRET):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
