"""
JobPosting Domain Entity
A discovered job opportunity scored against one candidate.
"""
import hashlib
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from ..enums import (
    ALLOWED_STATUS_TRANSITIONS,
    CompanySize,
    ExperienceLevel,
    FeedbackReason,
    PostingStatus,
    SourcePlatform,
    UserFeedback,
    WorkType,
)
from ..value_objects import SalaryRange, MatchScore, MATCH_THRESHOLD, BORDERLINE_THRESHOLD


def generate_content_fingerprint(title: str, company_name: str) -> str:
    """
    Deterministic de-duplication key for a posting.

    sha256 of ``lower(trim(title)) + "::" + lower(trim(company))``,
    hex digest truncated to 32 characters.
    """
    normalized = f"{title.strip().lower()}::{company_name.strip().lower()}"
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:32]


@dataclass(frozen=True)
class RawPosting:
    """Posting as returned by the discovery source, before scoring"""

    title: str
    company_name: str
    source_url: str
    description: Optional[str] = None
    location: Optional[str] = None
    work_type: Optional[WorkType] = None
    experience_level: Optional[ExperienceLevel] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    salary_currency: str = "USD"
    required_skills: List[str] = field(default_factory=list)
    benefits: List[str] = field(default_factory=list)
    company_size: Optional[CompanySize] = None
    source_platform: Optional[SourcePlatform] = None
    posted_date: Optional[datetime] = None

    @property
    def content_fingerprint(self) -> str:
        return generate_content_fingerprint(self.title, self.company_name)

    @property
    def salary_range(self) -> SalaryRange:
        return SalaryRange(
            min_salary=self.salary_min,
            max_salary=self.salary_max,
            currency=self.salary_currency or "USD",
        )


@dataclass(frozen=True)
class MatchBreakdown:
    """Weighted points per scoring component; they add up to the total score"""

    skills: float = 0.0
    experience: float = 0.0
    location: float = 0.0
    salary: float = 0.0
    preferences: float = 0.0
    behavioral: float = 0.0

    def total_points(self) -> float:
        return (
            self.skills + self.experience + self.location
            + self.salary + self.preferences + self.behavioral
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "skills": self.skills,
            "experience": self.experience,
            "location": self.location,
            "salary": self.salary,
            "preferences": self.preferences,
            "behavioral": self.behavioral,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "MatchBreakdown":
        data = data or {}
        return cls(**{k: float(data.get(k, 0.0) or 0.0) for k in cls.__dataclass_fields__})


@dataclass(frozen=True)
class MatchResult:
    """Output of the match scorer for one posting"""

    score: int
    breakdown: MatchBreakdown
    reasons: List[str] = field(default_factory=list)

    def __post_init__(self):
        MatchScore(self.score)

    @property
    def passes_threshold(self) -> bool:
        return self.score >= MATCH_THRESHOLD

    @property
    def is_borderline(self) -> bool:
        return BORDERLINE_THRESHOLD <= self.score < MATCH_THRESHOLD


@dataclass
class JobPosting:
    """Persisted posting for one candidate"""

    candidate_id: UUID
    title: str
    company_name: str
    source_url: str
    content_fingerprint: str
    id: Optional[UUID] = None

    # Source details
    description: Optional[str] = None
    location: Optional[str] = None
    work_type: Optional[WorkType] = None
    experience_level: Optional[ExperienceLevel] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    salary_currency: str = "USD"
    required_skills: List[str] = field(default_factory=list)
    benefits: List[str] = field(default_factory=list)
    company_size: Optional[CompanySize] = None
    source_platform: Optional[SourcePlatform] = None
    posted_date: Optional[datetime] = None

    # Match
    match_score: int = 0
    match_breakdown: MatchBreakdown = field(default_factory=MatchBreakdown)
    match_reasons: List[str] = field(default_factory=list)

    # Lifecycle
    status: PostingStatus = PostingStatus.NEW
    user_feedback: Optional[UserFeedback] = None
    feedback_reason: Optional[FeedbackReason] = None
    discarded_until: Optional[datetime] = None
    job_application_id: Optional[UUID] = None

    # Timestamps
    discovered_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate score bounds"""
        MatchScore(self.match_score)

    @classmethod
    def from_raw(
        cls,
        candidate_id: UUID,
        raw: RawPosting,
        result: MatchResult,
        discovered_at: datetime
    ) -> "JobPosting":
        return cls(
            candidate_id=candidate_id,
            title=raw.title,
            company_name=raw.company_name,
            source_url=raw.source_url,
            content_fingerprint=raw.content_fingerprint,
            description=raw.description,
            location=raw.location,
            work_type=raw.work_type,
            experience_level=raw.experience_level,
            salary_min=raw.salary_min,
            salary_max=raw.salary_max,
            salary_currency=raw.salary_currency,
            required_skills=list(raw.required_skills),
            benefits=list(raw.benefits),
            company_size=raw.company_size,
            source_platform=raw.source_platform,
            posted_date=raw.posted_date,
            match_score=result.score,
            match_breakdown=result.breakdown,
            match_reasons=list(result.reasons),
            status=PostingStatus.NEW,
            discovered_at=discovered_at,
        )

    def to_raw(self) -> RawPosting:
        """Source view of the posting, used to re-run the scorer"""
        return RawPosting(
            title=self.title,
            company_name=self.company_name,
            source_url=self.source_url,
            description=self.description,
            location=self.location,
            work_type=self.work_type,
            experience_level=self.experience_level,
            salary_min=self.salary_min,
            salary_max=self.salary_max,
            salary_currency=self.salary_currency,
            required_skills=list(self.required_skills),
            benefits=list(self.benefits),
            company_size=self.company_size,
            source_platform=self.source_platform,
            posted_date=self.posted_date,
        )

    @property
    def salary_range(self) -> SalaryRange:
        return self.to_raw().salary_range

    def can_transition_to(self, target: PostingStatus) -> bool:
        if target == self.status:
            return True
        return target in ALLOWED_STATUS_TRANSITIONS.get(self.status, [])

    def is_match(self, threshold: int = MATCH_THRESHOLD) -> bool:
        return self.match_score >= threshold

    def is_borderline(
        self,
        borderline: int = BORDERLINE_THRESHOLD,
        threshold: int = MATCH_THRESHOLD
    ) -> bool:
        return borderline <= self.match_score < threshold

    def __str__(self) -> str:
        return f"JobPosting({self.title} at {self.company_name}, score={self.match_score})"
