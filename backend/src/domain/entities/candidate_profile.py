"""
CandidateProfile Domain Entity
Read-only view of a candidate's stated and CV-derived attributes.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List
from uuid import UUID

from ..enums import CompanySize, ExperienceLevel, WorkType


@dataclass(frozen=True)
class CvAnalysis:
    """Skills and seniority extracted from the candidate's CV"""

    skills: List[str] = field(default_factory=list)
    experience_years: Optional[float] = None
    industries: List[str] = field(default_factory=list)
    seniority_level: Optional[ExperienceLevel] = None


@dataclass(frozen=True)
class LocationPreference:
    """Where the candidate wants to work"""

    city: Optional[str] = None
    country: Optional[str] = None
    remote_policy: Optional[WorkType] = None
    willing_to_relocate: bool = False


@dataclass
class CandidateProfile:
    """Candidate profile domain entity"""

    id: UUID
    full_name: Optional[str] = None
    email: Optional[str] = None

    # Matching signals, highest priority first
    preferred_job_titles: List[str] = field(default_factory=list)
    preferred_industries: List[str] = field(default_factory=list)
    minimum_salary_expectation: Optional[int] = None
    salary_currency: str = "USD"
    location_preferences: LocationPreference = field(default_factory=LocationPreference)
    company_size_preferences: List[CompanySize] = field(default_factory=list)
    career_goals: Optional[str] = None

    # Optional CV-derived analysis
    cv_analysis: Optional[CvAnalysis] = None

    # Timestamps
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def cv_skills(self) -> List[str]:
        return list(self.cv_analysis.skills) if self.cv_analysis else []

    @property
    def seniority_level(self) -> Optional[ExperienceLevel]:
        return self.cv_analysis.seniority_level if self.cv_analysis else None

    def __str__(self) -> str:
        return f"CandidateProfile({self.id})"
