"""
JobSearchPreferences Domain Entity
Per-candidate search filters, cached AI insights, cadence state and learned feedback.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from ..enums import CompanySize, EmailFrequency, WorkType, parse_enum


@dataclass(frozen=True)
class SkillRequirement:
    """Skill the candidate asked to filter on"""

    skill: str
    proficiency: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"skill": self.skill, "proficiency": self.proficiency}

    @classmethod
    def from_value(cls, value: Any) -> "SkillRequirement":
        if isinstance(value, SkillRequirement):
            return value
        if isinstance(value, dict):
            return cls(skill=str(value.get("skill", "")).strip(), proficiency=value.get("proficiency"))
        return cls(skill=str(value).strip())


@dataclass
class FeedbackStats:
    """Running totals of explicit feedback"""

    total_likes: int = 0
    total_dislikes: int = 0
    total_hides: int = 0
    reasons: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_likes": self.total_likes,
            "total_dislikes": self.total_dislikes,
            "total_hides": self.total_hides,
            "reasons": dict(self.reasons),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FeedbackStats":
        data = data or {}
        return cls(
            total_likes=int(data.get("total_likes", 0)),
            total_dislikes=int(data.get("total_dislikes", 0)),
            total_hides=int(data.get("total_hides", 0)),
            reasons=dict(data.get("reasons") or {}),
        )


@dataclass
class ImplicitPreferences:
    """Preferences inferred from feedback rather than stated"""

    salary_adjustment: int = 0  # percent added to the salary floor
    liked_skills: Dict[str, int] = field(default_factory=dict)
    avoided_locations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "salary_adjustment": self.salary_adjustment,
            "liked_skills": dict(self.liked_skills),
            "avoided_locations": list(self.avoided_locations),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ImplicitPreferences":
        data = data or {}
        return cls(
            salary_adjustment=int(data.get("salary_adjustment", 0) or 0),
            liked_skills={str(k): int(v) for k, v in (data.get("liked_skills") or {}).items()},
            avoided_locations=[str(loc) for loc in (data.get("avoided_locations") or [])],
        )


@dataclass(frozen=True)
class RecommendedBoard:
    """Job board suggested by the insights generator"""

    name: str
    url: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "url": self.url, "reason": self.reason}


@dataclass(frozen=True)
class SearchInsights:
    """AI-generated search guidance, cached on the preferences row"""

    keywords: List[str] = field(default_factory=list)
    recommended_boards: List[RecommendedBoard] = field(default_factory=list)
    market_insights: str = ""
    personalized_strategy: str = ""
    generated_at: Optional[datetime] = None

    def age_days(self, now: datetime) -> Optional[float]:
        if self.generated_at is None:
            return None
        return (now - self.generated_at).total_seconds() / 86400

    def is_fresh(self, now: datetime, max_age_days: int) -> bool:
        age = self.age_days(now)
        return age is not None and age < max_age_days


@dataclass
class JobSearchPreferences:
    """Job search preferences domain entity (one per candidate)"""

    candidate_id: UUID
    id: Optional[UUID] = None

    # Explicit filters
    preferred_job_titles: List[str] = field(default_factory=list)
    preferred_locations: List[str] = field(default_factory=list)
    required_skills: List[SkillRequirement] = field(default_factory=list)
    salary_min_override: Optional[int] = None
    remote_policy_preferences: List[WorkType] = field(default_factory=list)
    company_size_preferences: List[CompanySize] = field(default_factory=list)
    avoid_companies: List[str] = field(default_factory=list)
    avoid_keywords: List[str] = field(default_factory=list)
    required_benefits: List[str] = field(default_factory=list)

    # Cached AI insights
    ai_keywords: List[str] = field(default_factory=list)
    ai_recommended_boards: List[RecommendedBoard] = field(default_factory=list)
    ai_market_insights: Optional[str] = None
    ai_personalized_strategy: Optional[str] = None
    ai_last_analysis_at: Optional[datetime] = None

    # Cadence state
    is_active: bool = True
    email_notification_frequency: EmailFrequency = EmailFrequency.WEEKLY
    last_email_sent_at: Optional[datetime] = None
    last_search_at: Optional[datetime] = None
    consecutive_zero_match_days: int = 0

    # Learned from feedback
    feedback_stats: FeedbackStats = field(default_factory=FeedbackStats)
    implicit_preferences: ImplicitPreferences = field(default_factory=ImplicitPreferences)

    # Timestamps
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def required_skill_names(self) -> List[str]:
        return [s.skill for s in self.required_skills if s.skill]

    @property
    def insights(self) -> Optional[SearchInsights]:
        """Cached insights, or None when never generated"""
        if self.ai_last_analysis_at is None:
            return None
        return SearchInsights(
            keywords=list(self.ai_keywords),
            recommended_boards=list(self.ai_recommended_boards),
            market_insights=self.ai_market_insights or "",
            personalized_strategy=self.ai_personalized_strategy or "",
            generated_at=self.ai_last_analysis_at,
        )

    def with_insights(self, insights: SearchInsights) -> "JobSearchPreferences":
        """Copy with every cached insight field overwritten"""
        return replace(
            self,
            ai_keywords=list(insights.keywords),
            ai_recommended_boards=list(insights.recommended_boards),
            ai_market_insights=insights.market_insights,
            ai_personalized_strategy=insights.personalized_strategy,
            ai_last_analysis_at=insights.generated_at,
        )

    def __str__(self) -> str:
        return f"JobSearchPreferences(candidate={self.candidate_id})"


def default_preferences(candidate_id: UUID, now: Optional[datetime] = None) -> JobSearchPreferences:
    """Preferences row created lazily on first access"""
    now = now or datetime.now(timezone.utc)
    return JobSearchPreferences(
        candidate_id=candidate_id,
        is_active=True,
        email_notification_frequency=EmailFrequency.WEEKLY,
        consecutive_zero_match_days=0,
        feedback_stats=FeedbackStats(),
        implicit_preferences=ImplicitPreferences(),
        created_at=now,
        updated_at=now,
    )


def parse_remote_policies(values: Optional[List[Any]]) -> List[WorkType]:
    return [p for p in (parse_enum(WorkType, v) for v in values or []) if p is not None]


def parse_company_sizes(values: Optional[List[Any]]) -> List[CompanySize]:
    return [s for s in (parse_enum(CompanySize, v) for v in values or []) if s is not None]
