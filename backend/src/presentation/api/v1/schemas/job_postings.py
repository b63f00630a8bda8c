"""
Job Posting Schemas
Matches listing, feedback and apply
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from domain.entities import JobPosting
from domain.enums import FeedbackReason, UserFeedback


class MatchBreakdownSchema(BaseModel):
    skills: float
    experience: float
    location: float
    salary: float
    preferences: float
    behavioral: float = 0.0


class JobPostingResponse(BaseModel):
    """One posting as shown to the candidate"""

    id: str
    title: str
    company_name: str
    location: Optional[str] = None
    work_type: Optional[str] = None
    experience_level: Optional[str] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    salary_currency: str = "USD"
    salary_display: str
    description: Optional[str] = None
    required_skills: List[str] = []
    benefits: List[str] = []
    company_size: Optional[str] = None
    source_url: str
    source_platform: Optional[str] = None
    posted_date: Optional[datetime] = None
    match_score: int
    match_breakdown: MatchBreakdownSchema
    match_reasons: List[str] = []
    status: str
    user_feedback: Optional[str] = None
    job_application_id: Optional[str] = None
    discovered_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, posting: JobPosting) -> "JobPostingResponse":
        return cls(
            id=str(posting.id),
            title=posting.title,
            company_name=posting.company_name,
            location=posting.location,
            work_type=posting.work_type.value if posting.work_type else None,
            experience_level=posting.experience_level.value if posting.experience_level else None,
            salary_min=posting.salary_min,
            salary_max=posting.salary_max,
            salary_currency=posting.salary_currency,
            salary_display=str(posting.salary_range),
            description=posting.description,
            required_skills=posting.required_skills,
            benefits=posting.benefits,
            company_size=posting.company_size.value if posting.company_size else None,
            source_url=posting.source_url,
            source_platform=posting.source_platform.value if posting.source_platform else None,
            posted_date=posting.posted_date,
            match_score=posting.match_score,
            match_breakdown=MatchBreakdownSchema(**posting.match_breakdown.to_dict()),
            match_reasons=posting.match_reasons,
            status=posting.status.value,
            user_feedback=posting.user_feedback.value if posting.user_feedback else None,
            job_application_id=str(posting.job_application_id) if posting.job_application_id else None,
            discovered_at=posting.discovered_at,
        )


class MatchesResponse(BaseModel):
    matches: List[Dict[str, Any]]
    count: int
    cached: bool = False


class FeedbackRequest(BaseModel):
    """Like, dislike or hide a posting"""

    posting_id: UUID
    feedback: UserFeedback
    reason: Optional[FeedbackReason] = Field(None, description="Only kept for dislikes")

    @model_validator(mode="after")
    def drop_reason_unless_dislike(self) -> "FeedbackRequest":
        if self.feedback != UserFeedback.DISLIKE:
            self.reason = None
        return self


class FeedbackResponse(BaseModel):
    success: bool
    posting: JobPostingResponse
    preferences_updated: bool


class ApplyRequest(BaseModel):
    posting_id: UUID


class ApplyResponse(BaseModel):
    success: bool
    application_id: str
    created: bool
    posting_updated: bool
    message: str
