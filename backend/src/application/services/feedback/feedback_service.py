"""
Feedback Service
Records like/dislike/hide on a posting and learns implicit preferences from it.
"""
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from loguru import logger

from application.repositories.interfaces import IJobSearchPreferencesRepository
from application.services.lifecycle import LifecycleManager
from application.services.matching.match_scorer import MAX_SALARY_ADJUSTMENT
from domain.entities import (
    FeedbackStats,
    ImplicitPreferences,
    JobPosting,
    JobSearchPreferences,
)
from domain.enums import FeedbackReason, PostingStatus, UserFeedback

SALARY_ADJUSTMENT_STEP = 10

FEEDBACK_STATUS = {
    UserFeedback.LIKE: PostingStatus.LIKED,
    UserFeedback.DISLIKE: PostingStatus.DISMISSED,
    UserFeedback.HIDE: PostingStatus.DISMISSED,
}


@dataclass(frozen=True)
class FeedbackResult:
    posting: JobPosting
    preferences_updated: bool


class FeedbackService:
    """Applies explicit feedback to a posting"""

    def __init__(
        self,
        lifecycle: LifecycleManager,
        preferences_repository: IJobSearchPreferencesRepository,
        discard_days: int = 30,
    ):
        self.lifecycle = lifecycle
        self.preferences_repo = preferences_repository
        self.discard_period = timedelta(days=discard_days)

    async def submit(
        self,
        candidate_id: UUID,
        posting_id: UUID,
        feedback: UserFeedback,
        reason: Optional[FeedbackReason] = None,
        now: Optional[datetime] = None
    ) -> FeedbackResult:
        """
        Record feedback and move the posting to liked or dismissed

        The posting update is the primary effect and its errors propagate.
        Learning from the feedback is best-effort.
        """
        now = now or datetime.now(timezone.utc)
        posting = await self.lifecycle.get_owned_posting(candidate_id, posting_id)

        if feedback == UserFeedback.LIKE:
            discarded_until = None
            stored_reason = None
        else:
            discarded_until = now + self.discard_period
            stored_reason = reason if feedback == UserFeedback.DISLIKE else None

        updated = await self.lifecycle.transition(
            posting,
            FEEDBACK_STATUS[feedback],
            now,
            user_feedback=feedback,
            feedback_reason=stored_reason,
            discarded_until=discarded_until,
        )
        logger.info(f"Feedback '{feedback.value}' recorded on posting {posting_id}")

        preferences_updated = await self._learn(candidate_id, posting, feedback, reason, now)
        return FeedbackResult(posting=updated, preferences_updated=preferences_updated)

    async def _learn(
        self,
        candidate_id: UUID,
        posting: JobPosting,
        feedback: UserFeedback,
        reason: Optional[FeedbackReason],
        now: datetime
    ) -> bool:
        try:
            preferences = await self.preferences_repo.get_by_candidate_id(candidate_id)
            if preferences is None:
                return False
            await self.preferences_repo.update(apply_feedback(preferences, posting, feedback, reason, now))
            return True
        except Exception as e:
            logger.warning(f"Feedback stats not updated for candidate {candidate_id}: {e}")
            return False


def apply_feedback(
    preferences: JobSearchPreferences,
    posting: JobPosting,
    feedback: UserFeedback,
    reason: Optional[FeedbackReason],
    now: datetime
) -> JobSearchPreferences:
    """Copy of the preferences with stats and implicit preferences updated"""
    # Reasons are only recorded for dislikes
    if feedback != UserFeedback.DISLIKE:
        reason = None

    old_stats = preferences.feedback_stats
    stats = FeedbackStats(
        total_likes=old_stats.total_likes + (feedback == UserFeedback.LIKE),
        total_dislikes=old_stats.total_dislikes + (feedback == UserFeedback.DISLIKE),
        total_hides=old_stats.total_hides + (feedback == UserFeedback.HIDE),
        reasons=dict(old_stats.reasons),
    )
    if reason is not None:
        stats.reasons[reason.value] = stats.reasons.get(reason.value, 0) + 1

    old_implicit = preferences.implicit_preferences
    implicit = ImplicitPreferences(
        salary_adjustment=old_implicit.salary_adjustment,
        liked_skills=dict(old_implicit.liked_skills),
        avoided_locations=list(old_implicit.avoided_locations),
    )
    avoid_companies = list(preferences.avoid_companies)

    if feedback == UserFeedback.LIKE:
        for skill in posting.required_skills:
            key = skill.strip().lower()
            if key:
                implicit.liked_skills[key] = implicit.liked_skills.get(key, 0) + 1

    elif reason == FeedbackReason.SALARY_TOO_LOW:
        implicit.salary_adjustment = min(
            implicit.salary_adjustment + SALARY_ADJUSTMENT_STEP, MAX_SALARY_ADJUSTMENT
        )

    elif reason == FeedbackReason.NOT_INTERESTED_IN_COMPANY:
        if posting.company_name.lower() not in (c.lower() for c in avoid_companies):
            avoid_companies.append(posting.company_name)

    elif reason == FeedbackReason.WRONG_LOCATION and posting.location:
        if posting.location not in implicit.avoided_locations:
            implicit.avoided_locations.append(posting.location)

    return replace(
        preferences,
        feedback_stats=stats,
        implicit_preferences=implicit,
        avoid_companies=avoid_companies,
        updated_at=now,
    )
