"""
Job Discovery Client Interface
Black-box source of candidate postings
"""
from abc import ABC, abstractmethod
from typing import List

from domain.entities import CandidateProfile, JobSearchPreferences, RawPosting


class IDiscoveryClient(ABC):
    """Discovery collaborator interface"""

    @abstractmethod
    async def discover(
        self,
        profile: CandidateProfile,
        preferences: JobSearchPreferences
    ) -> List[RawPosting]:
        """
        Find postings for a candidate

        Args:
            profile: Candidate profile
            preferences: Candidate search preferences

        Returns:
            Zero or more raw postings

        Raises:
            CollaboratorUnavailableException: source unreachable or failed
        """
        pass
