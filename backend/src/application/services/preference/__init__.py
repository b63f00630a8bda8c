"""
Preference Service Interface
Manages a candidate's job search preferences and the rescoring they trigger
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple
from uuid import UUID

from application.services.rescoring import RescoringResult
from domain.entities import JobSearchPreferences


class IPreferenceService(ABC):
    """Preference service interface"""

    @abstractmethod
    async def get_preferences(self, candidate_id: UUID) -> JobSearchPreferences:
        """
        Get a candidate's preferences, creating the default row on first access

        Args:
            candidate_id: Candidate ID

        Returns:
            JobSearchPreferences entity
        """
        pass

    @abstractmethod
    async def update_preferences(
        self,
        candidate_id: UUID,
        changes: Dict[str, Any]
    ) -> Tuple[JobSearchPreferences, RescoringResult]:
        """
        Apply a partial update

        Args:
            candidate_id: Candidate ID
            changes: Field name to new value; absent fields are left unchanged

        Returns:
            Saved preferences and the outcome of any rescoring it triggered

        Raises:
            ValidationException: unknown field or invalid value
        """
        pass

    @abstractmethod
    async def unsubscribe(self, candidate_id: UUID) -> JobSearchPreferences:
        """Turn digest emails off"""
        pass
