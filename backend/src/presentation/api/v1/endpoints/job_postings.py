"""
Job Posting API Endpoints
Matches listing, view, feedback and apply
"""
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from application.services.feedback import FeedbackService
from application.services.lifecycle import IMatchesCache, LifecycleManager
from core.exceptions import DomainException
from core.logging_config import logger
from presentation.api.v1.container import (
    get_feedback_service,
    get_lifecycle_manager,
    get_matches_cache,
)
from presentation.api.v1.dependencies import get_candidate_id
from presentation.api.v1.errors import internal_error, to_http_exception
from presentation.api.v1.schemas.job_postings import (
    ApplyRequest,
    ApplyResponse,
    FeedbackRequest,
    FeedbackResponse,
    JobPostingResponse,
    MatchesResponse,
)


router = APIRouter()

# The cached listing always holds the top entries; requests slice it
MAX_MATCHES = 20


@router.get("/matches", response_model=MatchesResponse)
async def get_matches(
    limit: int = Query(10, ge=1, le=MAX_MATCHES),
    candidate_id: UUID = Depends(get_candidate_id),
    lifecycle: LifecycleManager = Depends(get_lifecycle_manager),
    matches_cache: IMatchesCache = Depends(get_matches_cache)
):
    """
    Top matches for the candidate, best first.

    Only postings scored 75+ that are new, viewed or liked and not currently
    discarded are listed.
    """
    try:
        cached = await matches_cache.get(candidate_id)
        if cached is not None:
            logger.debug(f"Serving cached matches for candidate {candidate_id}")
            return MatchesResponse(matches=cached[:limit], count=len(cached[:limit]), cached=True)

        postings = await lifecycle.list_matches(candidate_id, limit=MAX_MATCHES)
        items = [JobPostingResponse.from_entity(p).model_dump(mode="json") for p in postings]
        await matches_cache.set(candidate_id, items)

        return MatchesResponse(matches=items[:limit], count=len(items[:limit]))
    except DomainException as e:
        raise to_http_exception(e, "get matches")
    except Exception as e:
        raise internal_error(e, "get matches")


@router.post("/postings/{posting_id}/view", response_model=JobPostingResponse)
async def view_posting(
    posting_id: UUID,
    candidate_id: UUID = Depends(get_candidate_id),
    lifecycle: LifecycleManager = Depends(get_lifecycle_manager)
):
    """Mark a new posting as viewed; other statuses are returned unchanged"""
    try:
        posting = await lifecycle.mark_viewed(candidate_id, posting_id)
        return JobPostingResponse.from_entity(posting)
    except DomainException as e:
        raise to_http_exception(e, "view posting")
    except Exception as e:
        raise internal_error(e, "view posting")


@router.post("/feedback", response_model=FeedbackResponse)
async def submit_feedback(
    request: FeedbackRequest,
    candidate_id: UUID = Depends(get_candidate_id),
    feedback_service: FeedbackService = Depends(get_feedback_service)
):
    """
    Like, dislike or hide a posting.

    **Feedback:**
    - like: posting moves to liked
    - dislike: posting is dismissed for 30 days; an optional reason is learned from
    - hide: posting is dismissed for 30 days
    """
    try:
        result = await feedback_service.submit(
            candidate_id,
            request.posting_id,
            request.feedback,
            reason=request.reason,
        )
        return FeedbackResponse(
            success=True,
            posting=JobPostingResponse.from_entity(result.posting),
            preferences_updated=result.preferences_updated,
        )
    except DomainException as e:
        raise to_http_exception(e, "submit feedback")
    except Exception as e:
        raise internal_error(e, "submit feedback")


@router.post("/apply", response_model=ApplyResponse)
async def apply_to_posting(
    request: ApplyRequest,
    candidate_id: UUID = Depends(get_candidate_id),
    lifecycle: LifecycleManager = Depends(get_lifecycle_manager)
):
    """
    Create an application record from a posting and mark it applied.

    Applying again to an applied posting returns the existing application.
    """
    try:
        result = await lifecycle.apply(candidate_id, request.posting_id)
        message = "Application created" if result.created else "Already applied"
        if not result.posting_updated:
            message = "Application created, but the posting status could not be updated"
        return ApplyResponse(
            success=True,
            application_id=str(result.application_id),
            created=result.created,
            posting_updated=result.posting_updated,
            message=message,
        )
    except DomainException as e:
        raise to_http_exception(e, "apply to posting")
    except Exception as e:
        raise internal_error(e, "apply to posting")
