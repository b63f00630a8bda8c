"""
Repository Interfaces (Abstract Base Classes)
Define contracts for data access without implementation details
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, List, Sequence
from uuid import UUID

from domain.entities import (
    CandidateProfile,
    JobApplication,
    JobPosting,
    JobSearchPreferences,
)
from domain.enums import PostingStatus


class InsertOutcome(str, Enum):
    """Result of an insert-with-conflict-detection"""
    INSERTED = "inserted"
    CONFLICT = "conflict"
    ERROR = "error"


@dataclass(frozen=True)
class PersistenceResult:
    """Typed insert result; a conflict is expected, not an exception"""

    outcome: InsertOutcome
    posting: Optional[JobPosting] = None
    error: Optional[str] = None

    @property
    def inserted(self) -> bool:
        return self.outcome == InsertOutcome.INSERTED

    @property
    def conflict(self) -> bool:
        return self.outcome == InsertOutcome.CONFLICT

    @property
    def failed(self) -> bool:
        return self.outcome == InsertOutcome.ERROR


class ICandidateProfileRepository(ABC):
    """Candidate profile repository interface (read-only to matching)"""

    @abstractmethod
    async def get_by_id(self, candidate_id: UUID) -> Optional[CandidateProfile]:
        """Get profile by candidate ID"""
        pass


class IJobSearchPreferencesRepository(ABC):
    """Job search preferences repository interface"""

    @abstractmethod
    async def get_by_candidate_id(self, candidate_id: UUID) -> Optional[JobSearchPreferences]:
        """Get the preferences row for a candidate"""
        pass

    @abstractmethod
    async def create(self, preferences: JobSearchPreferences) -> JobSearchPreferences:
        """Create the preferences row"""
        pass

    @abstractmethod
    async def update(self, preferences: JobSearchPreferences) -> JobSearchPreferences:
        """Update the preferences row"""
        pass

    @abstractmethod
    async def get_active(self) -> List[JobSearchPreferences]:
        """All preferences rows with is_active set"""
        pass


class IJobPostingRepository(ABC):
    """Job posting repository interface"""

    @abstractmethod
    async def insert(self, posting: JobPosting) -> PersistenceResult:
        """
        Insert a posting, detecting (candidate, fingerprint) conflicts

        Returns:
            PersistenceResult with outcome inserted, conflict or error
        """
        pass

    @abstractmethod
    async def get_by_id(self, posting_id: UUID) -> Optional[JobPosting]:
        """Get posting by ID"""
        pass

    @abstractmethod
    async def update(self, posting: JobPosting) -> JobPosting:
        """Update an existing posting by ID"""
        pass

    @abstractmethod
    async def get_borderline(
        self,
        candidate_id: UUID,
        min_score: int,
        max_score: int,
        discovered_since: datetime
    ) -> List[JobPosting]:
        """Postings scored in [min_score, max_score) discovered after discovered_since"""
        pass

    @abstractmethod
    async def get_recent(self, candidate_id: UUID, limit: int) -> List[JobPosting]:
        """Most recently discovered postings"""
        pass

    @abstractmethod
    async def get_matches(
        self,
        candidate_id: UUID,
        min_score: int,
        statuses: Sequence[PostingStatus],
        now: datetime,
        limit: int
    ) -> List[JobPosting]:
        """Visible matches ordered by score, excluding postings discarded until after now"""
        pass

    @abstractmethod
    async def get_digest_postings(
        self,
        candidate_id: UUID,
        min_score: int,
        statuses: Sequence[PostingStatus],
        discovered_since: datetime,
        limit: int
    ) -> List[JobPosting]:
        """Matches discovered since a point in time, ordered by score"""
        pass

    @abstractmethod
    async def delete_by_score_before(
        self,
        min_score: int,
        max_score: int,
        discovered_before: datetime
    ) -> int:
        """Delete postings scored in [min_score, max_score) discovered before a cutoff"""
        pass

    @abstractmethod
    async def delete_dismissed_before(self, discarded_before: datetime) -> int:
        """Delete dismissed postings whose discard-until is set and before a cutoff"""
        pass


class IJobApplicationRepository(ABC):
    """Job application repository interface"""

    @abstractmethod
    async def create(self, application: JobApplication) -> JobApplication:
        """Create application record"""
        pass

    @abstractmethod
    async def get_by_id(self, application_id: UUID) -> Optional[JobApplication]:
        """Get application by ID"""
        pass
