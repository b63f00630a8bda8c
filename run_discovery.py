"""
Run the daily job discovery batch once

Discovers, scores and stores postings for every active candidate, sends
due digests, then purges expired postings. Schedule it (cron, systemd
timer) or call POST /api/v1/cron/job-search instead.
"""
import asyncio
import os
import sys

from dotenv import load_dotenv

load_dotenv()
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'backend', 'src'))

from core.database import get_db_session, close_db  # noqa: E402
from core.logging_config import logger  # noqa: E402
from infrastructure.cache.redis_cache_service import cache_service  # noqa: E402
from presentation.api.v1.container import build_discovery_driver  # noqa: E402


async def main() -> int:
    await cache_service.connect()
    try:
        async with get_db_session() as session:
            summary = await build_discovery_driver(session).run()
    finally:
        await cache_service.disconnect()
        await close_db()

    logger.info(
        f"Processed {summary.candidates_processed}, skipped {summary.candidates_skipped}, "
        f"failed {summary.candidates_failed}; {summary.total_inserted} new postings, "
        f"{summary.total_matched} matches, {summary.digests_sent} digests, "
        f"{summary.borderline_deleted + summary.dismissed_deleted} postings purged"
    )
    for error in summary.errors:
        logger.warning(f"  {error}")

    return 1 if summary.candidates_failed else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
