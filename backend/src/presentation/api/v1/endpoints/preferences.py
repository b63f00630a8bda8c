"""
Job Search Preferences API Endpoints
Read, partial update (with rescoring) and digest unsubscribe
"""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger

from application.services.notification.digest_content import parse_unsubscribe_token
from application.services.preference import IPreferenceService
from core.config import settings
from core.exceptions import DomainException
from presentation.api.v1.container import get_preference_service
from presentation.api.v1.dependencies import get_candidate_id
from presentation.api.v1.errors import internal_error, to_http_exception
from presentation.api.v1.schemas.preferences import (
    PreferencesResponse,
    PreferencesUpdateRequest,
    PreferencesUpdateResponse,
    RescoringResponse,
    UnsubscribeResponse,
)


router = APIRouter()


@router.get("/preferences", response_model=PreferencesResponse)
async def get_preferences(
    candidate_id: UUID = Depends(get_candidate_id),
    preference_service: IPreferenceService = Depends(get_preference_service)
):
    """
    Get the candidate's search preferences.

    The default preferences row is created on first access.
    """
    try:
        preferences = await preference_service.get_preferences(candidate_id)
        return PreferencesResponse.from_entity(preferences)
    except DomainException as e:
        raise to_http_exception(e, "get preferences")
    except Exception as e:
        raise internal_error(e, "get preferences")


@router.put("/preferences", response_model=PreferencesUpdateResponse)
async def update_preferences(
    request: PreferencesUpdateRequest,
    candidate_id: UUID = Depends(get_candidate_id),
    preference_service: IPreferenceService = Depends(get_preference_service)
):
    """
    Update search preferences (partial).

    Changing titles, locations, required skills, salary floor, remote policy,
    company sizes or avoided companies rescores recent borderline postings;
    the outcome is returned under `rescoring`.
    """
    try:
        preferences, rescoring = await preference_service.update_preferences(candidate_id, request.changes())
        return PreferencesUpdateResponse(
            preferences=PreferencesResponse.from_entity(preferences),
            rescoring=RescoringResponse.from_result(rescoring),
        )
    except DomainException as e:
        raise to_http_exception(e, "update preferences")
    except Exception as e:
        raise internal_error(e, "update preferences")


@router.get("/unsubscribe", response_model=UnsubscribeResponse)
async def unsubscribe(
    token: str = Query(..., min_length=1, description="Token from the digest email"),
    preference_service: IPreferenceService = Depends(get_preference_service)
):
    """Turn digest emails off from the link in a digest"""
    candidate_id = parse_unsubscribe_token(token, settings.UNSUBSCRIBE_SECRET)
    if candidate_id is None:
        logger.warning("Rejected malformed unsubscribe token")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid unsubscribe token"
        )

    try:
        await preference_service.unsubscribe(candidate_id)
        return UnsubscribeResponse(success=True, message="You have been unsubscribed from job match emails")
    except DomainException as e:
        raise to_http_exception(e, "unsubscribe")
    except Exception as e:
        raise internal_error(e, "unsubscribe")
