"""
API V1 Endpoints Package
Exports routers used by main app
"""
from .preferences import router as preferences_router
from .insights import router as insights_router
from .job_postings import router as job_postings_router
from .cron import router as cron_router

__all__ = [
    "preferences_router",
    "insights_router",
    "job_postings_router",
    "cron_router",
]
