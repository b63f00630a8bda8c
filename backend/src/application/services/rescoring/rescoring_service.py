"""
Rescoring Service
Re-runs the match scorer over recent borderline postings after a preference
change, promoting the ones that now clear the match threshold.
"""
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import FrozenSet, Iterable, Optional, Set
from uuid import UUID

from loguru import logger

from application.repositories.interfaces import (
    ICandidateProfileRepository,
    IJobPostingRepository,
)
from application.services.lifecycle.interfaces import IMatchesCache
from application.services.matching import MatchScorer
from domain.entities import JobSearchPreferences
from domain.enums import PostingStatus
from domain.value_objects import MATCH_THRESHOLD, BORDERLINE_THRESHOLD
from .interfaces import ICandidateLock


# Preference fields whose change can move a score across the match threshold
SIGNIFICANT_FIELDS: FrozenSet[str] = frozenset({
    "preferred_job_titles",
    "preferred_locations",
    "required_skills",
    "salary_min_override",
    "remote_policy_preferences",
    "company_size_preferences",
    "avoid_companies",
})


def significant_changes(changed_fields: Iterable[str]) -> Set[str]:
    """Subset of changed fields that triggers rescoring"""
    return SIGNIFICANT_FIELDS.intersection(changed_fields)


@dataclass(frozen=True)
class RescoringResult:
    """What a rescoring pass did for one candidate"""

    triggered: bool
    promoted: int = 0
    examined: int = 0
    error: Optional[str] = None


class RescoringService:
    """Promotes borderline postings that qualify under new preferences"""

    def __init__(
        self,
        posting_repository: IJobPostingRepository,
        profile_repository: ICandidateProfileRepository,
        scorer: MatchScorer,
        lock: Optional[ICandidateLock] = None,
        match_threshold: int = MATCH_THRESHOLD,
        borderline_threshold: int = BORDERLINE_THRESHOLD,
        window_days: int = 7,
        matches_cache: Optional[IMatchesCache] = None,
    ):
        self.posting_repo = posting_repository
        self.profile_repo = profile_repository
        self.scorer = scorer
        self.lock = lock
        self.match_threshold = match_threshold
        self.borderline_threshold = borderline_threshold
        self.window = timedelta(days=window_days)
        self.matches_cache = matches_cache

    async def rescore(
        self,
        candidate_id: UUID,
        preferences: JobSearchPreferences,
        now: Optional[datetime] = None
    ) -> RescoringResult:
        """
        Rescore borderline postings discovered within the window

        Args:
            candidate_id: Candidate whose preferences changed
            preferences: The NEW preferences
            now: Reference time for the window

        Returns:
            RescoringResult; a missing profile yields triggered=False with an error
        """
        if self.lock is not None and not await self.lock.acquire(candidate_id):
            logger.warning(f"Rescoring already running for candidate {candidate_id}, skipping")
            return RescoringResult(triggered=False, error="Rescoring already in progress")

        try:
            return await self._rescore(candidate_id, preferences, now or datetime.now(timezone.utc))
        finally:
            if self.lock is not None:
                await self.lock.release(candidate_id)

    async def _rescore(
        self,
        candidate_id: UUID,
        preferences: JobSearchPreferences,
        now: datetime
    ) -> RescoringResult:
        try:
            profile = await self.profile_repo.get_by_id(candidate_id)
        except Exception as e:
            logger.warning(f"Could not load profile for candidate {candidate_id}, skipping rescoring: {e}")
            return RescoringResult(triggered=False, error="Profile unavailable")

        if profile is None:
            logger.warning(f"No profile for candidate {candidate_id}, skipping rescoring")
            return RescoringResult(triggered=False, error="Profile unavailable")

        postings = await self.posting_repo.get_borderline(
            candidate_id,
            min_score=self.borderline_threshold,
            max_score=self.match_threshold,
            discovered_since=now - self.window,
        )

        promoted = 0
        for posting in postings:
            result = self.scorer.score(posting.to_raw(), profile, preferences)
            if result.score < self.match_threshold:
                continue

            try:
                await self.posting_repo.update(replace(
                    posting,
                    match_score=result.score,
                    match_breakdown=result.breakdown,
                    match_reasons=list(result.reasons),
                    status=PostingStatus.NEW,
                    updated_at=now,
                ))
                promoted += 1
                logger.debug(f"Promoted posting {posting.id}: {posting.match_score} -> {result.score}")
            except Exception as e:
                logger.error(f"Failed to promote posting {posting.id} for candidate {candidate_id}: {e}")

        if promoted and self.matches_cache is not None:
            await self.matches_cache.invalidate(candidate_id)

        logger.info(
            f"Rescored {len(postings)} borderline postings for candidate {candidate_id}, promoted {promoted}"
        )
        return RescoringResult(triggered=True, promoted=promoted, examined=len(postings))
