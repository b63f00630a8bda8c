"""
Purge expired job postings

Deletes borderline postings older than the borderline TTL and dismissed
postings whose discard period ended more than the dismissed TTL ago.
"""
import asyncio
import os
import sys

from dotenv import load_dotenv

load_dotenv()
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'backend', 'src'))

from core.database import get_db_session, close_db  # noqa: E402
from core.logging_config import logger  # noqa: E402
from presentation.api.v1.container import build_lifecycle_manager  # noqa: E402


async def cleanup_postings() -> int:
    try:
        async with get_db_session() as session:
            result = await build_lifecycle_manager(session).cleanup()
    finally:
        await close_db()

    logger.info(
        f"🧹 Removed {result.borderline_deleted} borderline and "
        f"{result.dismissed_deleted} dismissed postings"
    )
    for error in result.errors:
        logger.error(f"  {error}")

    return 1 if result.errors else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(cleanup_postings()))
