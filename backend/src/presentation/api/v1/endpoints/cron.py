"""
Batch Trigger Endpoint
Runs the daily discovery batch when called by the scheduler
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.logging_config import logger
from presentation.api.v1.container import build_discovery_driver
from presentation.api.v1.dependencies import verify_cron_secret
from presentation.api.v1.errors import internal_error
from presentation.api.v1.schemas.cron import DiscoveryRunResponse


router = APIRouter()


@router.post("/job-search", response_model=DiscoveryRunResponse, dependencies=[Depends(verify_cron_secret)])
async def run_job_search(session: AsyncSession = Depends(get_db)):
    """
    Discover, score, store and notify for every active candidate, then purge
    expired postings.

    Requires `Authorization: Bearer <CRON_SECRET>`.
    """
    logger.info("Batch job search triggered")
    try:
        summary = await build_discovery_driver(session).run()
        return DiscoveryRunResponse.from_summary(summary)
    except Exception as e:
        raise internal_error(e, "run job search")
