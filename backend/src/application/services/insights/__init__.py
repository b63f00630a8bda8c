"""
Insights Generator Interface
Produces AI search guidance for a candidate
"""
from abc import ABC, abstractmethod
from typing import List

from domain.entities import (
    CandidateProfile,
    JobPosting,
    JobSearchPreferences,
    SearchInsights,
)


class IInsightsGenerator(ABC):
    """AI insight collaborator interface"""

    @abstractmethod
    async def generate(
        self,
        profile: CandidateProfile,
        preferences: JobSearchPreferences,
        recent_postings: List[JobPosting]
    ) -> SearchInsights:
        """
        Generate keywords, recommended boards, market insight and strategy

        Args:
            profile: Candidate profile
            preferences: Current search preferences
            recent_postings: Most recently discovered postings, for context

        Returns:
            SearchInsights

        Raises:
            CollaboratorUnavailableException: generation failed outright
        """
        pass
