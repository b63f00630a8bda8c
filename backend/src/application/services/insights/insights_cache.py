"""
Insights Cache
Time-boxed cache of AI search guidance stored on the preferences row
"""
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from loguru import logger

from application.repositories.interfaces import (
    ICandidateProfileRepository,
    IJobPostingRepository,
    IJobSearchPreferencesRepository,
)
from core.exceptions import CollaboratorUnavailableException, ResourceNotFoundException
from domain.entities import JobSearchPreferences, SearchInsights
from . import IInsightsGenerator


@dataclass(frozen=True)
class InsightsResult:
    insights: SearchInsights
    cached: bool
    stale: bool = False


class InsightsCache:
    """Returns cached insights while fresh, regenerates otherwise"""

    def __init__(
        self,
        preferences_repository: IJobSearchPreferencesRepository,
        profile_repository: ICandidateProfileRepository,
        posting_repository: IJobPostingRepository,
        generator: IInsightsGenerator,
        refresh_days: int = 7,
        context_postings: int = 20,
    ):
        self.preferences_repo = preferences_repository
        self.profile_repo = profile_repository
        self.posting_repo = posting_repository
        self.generator = generator
        self.refresh_days = refresh_days
        self.context_postings = context_postings

    def is_fresh(self, preferences: JobSearchPreferences, now: datetime) -> bool:
        cached = preferences.insights
        return cached is not None and cached.is_fresh(now, self.refresh_days)

    async def get_insights(
        self,
        preferences: JobSearchPreferences,
        force_refresh: bool = False,
        now: Optional[datetime] = None
    ) -> InsightsResult:
        """
        Get insights for the candidate owning these preferences

        Args:
            preferences: Candidate's current preferences (holds the cache fields)
            force_refresh: Regenerate regardless of age
            now: Reference time for the freshness check

        Returns:
            InsightsResult with cached=True when served from cache

        Raises:
            CollaboratorUnavailableException: regeneration failed and nothing was cached
        """
        now = now or datetime.now(timezone.utc)
        candidate_id = preferences.candidate_id
        cached = preferences.insights

        if not force_refresh and self.is_fresh(preferences, now):
            logger.debug(f"Serving cached insights for candidate {candidate_id}")
            return InsightsResult(insights=cached, cached=True)

        try:
            insights = await self._generate(preferences, now)
        except Exception as e:
            if cached is not None:
                logger.warning(f"Insights regeneration failed for candidate {candidate_id}, serving stale cache: {e}")
                return InsightsResult(insights=cached, cached=True, stale=True)
            logger.error(f"Insights generation failed for candidate {candidate_id}: {e}")
            if isinstance(e, (CollaboratorUnavailableException, ResourceNotFoundException)):
                raise
            raise CollaboratorUnavailableException("insights", str(e)) from e

        try:
            await self.preferences_repo.update(preferences.with_insights(insights))
        except Exception as e:
            logger.warning(f"Failed to cache insights for candidate {candidate_id}: {e}")

        logger.info(f"Generated fresh insights for candidate {candidate_id}")
        return InsightsResult(insights=insights, cached=False)

    async def _generate(self, preferences: JobSearchPreferences, now: datetime) -> SearchInsights:
        candidate_id = preferences.candidate_id
        profile = await self.profile_repo.get_by_id(candidate_id)
        if profile is None:
            raise ResourceNotFoundException("CandidateProfile", str(candidate_id))

        recent = await self.posting_repo.get_recent(candidate_id, self.context_postings)
        insights = await self.generator.generate(profile, preferences, recent)
        return replace(insights, generated_at=now)
