"""
Search Insights API Endpoints
"""
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from application.services.insights.insights_cache import InsightsCache
from application.services.preference import IPreferenceService
from core.exceptions import DomainException
from presentation.api.v1.container import get_insights_cache, get_preference_service
from presentation.api.v1.dependencies import get_candidate_id
from presentation.api.v1.errors import internal_error, to_http_exception
from presentation.api.v1.schemas.insights import InsightsResponse


router = APIRouter()


@router.get("/insights", response_model=InsightsResponse)
async def get_insights(
    force_refresh: bool = Query(False, description="Regenerate even if the cached insights are fresh"),
    candidate_id: UUID = Depends(get_candidate_id),
    preference_service: IPreferenceService = Depends(get_preference_service),
    insights_cache: InsightsCache = Depends(get_insights_cache)
):
    """
    AI search guidance: keywords, job boards, market insight and strategy.

    Served from cache for a week; `stale` is true when regeneration failed
    and an older cached copy was returned instead.
    """
    try:
        preferences = await preference_service.get_preferences(candidate_id)
        result = await insights_cache.get_insights(preferences, force_refresh=force_refresh)
        return InsightsResponse.from_result(result)
    except DomainException as e:
        raise to_http_exception(e, "get insights")
    except Exception as e:
        raise internal_error(e, "get insights")
