"""
Job Search Preferences Schemas
"""
from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from application.services.rescoring import RescoringResult
from domain.entities import JobSearchPreferences
from domain.enums import CompanySize, EmailFrequency, WorkType


class SkillRequirementSchema(BaseModel):
    skill: str = Field(..., min_length=1)
    proficiency: Optional[str] = None


class PreferencesUpdateRequest(BaseModel):
    """Partial update; only fields present in the body are changed"""

    preferred_job_titles: Optional[List[str]] = Field(None, examples=[["Backend Engineer", "Python Developer"]])
    preferred_locations: Optional[List[str]] = Field(None, examples=[["Berlin", "Remote"]])
    required_skills: Optional[List[Union[SkillRequirementSchema, str]]] = None
    salary_min_override: Optional[int] = Field(None, ge=0, description="Salary floor overriding the profile")
    remote_policy_preferences: Optional[List[WorkType]] = None
    company_size_preferences: Optional[List[CompanySize]] = None
    avoid_companies: Optional[List[str]] = None
    avoid_keywords: Optional[List[str]] = None
    required_benefits: Optional[List[str]] = None
    email_notification_frequency: Optional[EmailFrequency] = None
    is_active: Optional[bool] = None

    @field_validator('preferred_job_titles')
    @classmethod
    def validate_job_titles(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        return [t.strip() for t in v if t and t.strip()]

    @field_validator('email_notification_frequency', 'is_active')
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError('may be omitted but not null')
        return v

    def changes(self) -> Dict:
        """Only the fields the client sent"""
        return self.model_dump(exclude_unset=True)


class RescoringResponse(BaseModel):
    triggered: bool
    promoted: int = 0
    examined: int = 0
    error: Optional[str] = None

    @classmethod
    def from_result(cls, result: RescoringResult) -> "RescoringResponse":
        return cls(
            triggered=result.triggered,
            promoted=result.promoted,
            examined=result.examined,
            error=result.error,
        )


class PreferencesResponse(BaseModel):
    """Preferences response"""

    candidate_id: str
    preferred_job_titles: List[str]
    preferred_locations: List[str]
    required_skills: List[SkillRequirementSchema]
    salary_min_override: Optional[int] = None
    remote_policy_preferences: List[WorkType]
    company_size_preferences: List[CompanySize]
    avoid_companies: List[str]
    avoid_keywords: List[str]
    required_benefits: List[str]
    is_active: bool
    email_notification_frequency: EmailFrequency
    last_email_sent_at: Optional[datetime] = None
    last_search_at: Optional[datetime] = None
    consecutive_zero_match_days: int = 0
    feedback_stats: Dict
    implicit_preferences: Dict
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, preferences: JobSearchPreferences) -> "PreferencesResponse":
        return cls(
            candidate_id=str(preferences.candidate_id),
            preferred_job_titles=preferences.preferred_job_titles,
            preferred_locations=preferences.preferred_locations,
            required_skills=[
                SkillRequirementSchema(skill=s.skill, proficiency=s.proficiency)
                for s in preferences.required_skills
            ],
            salary_min_override=preferences.salary_min_override,
            remote_policy_preferences=preferences.remote_policy_preferences,
            company_size_preferences=preferences.company_size_preferences,
            avoid_companies=preferences.avoid_companies,
            avoid_keywords=preferences.avoid_keywords,
            required_benefits=preferences.required_benefits,
            is_active=preferences.is_active,
            email_notification_frequency=preferences.email_notification_frequency,
            last_email_sent_at=preferences.last_email_sent_at,
            last_search_at=preferences.last_search_at,
            consecutive_zero_match_days=preferences.consecutive_zero_match_days,
            feedback_stats=preferences.feedback_stats.to_dict(),
            implicit_preferences=preferences.implicit_preferences.to_dict(),
            updated_at=preferences.updated_at,
        )


class PreferencesUpdateResponse(BaseModel):
    preferences: PreferencesResponse
    rescoring: RescoringResponse


class UnsubscribeResponse(BaseModel):
    success: bool
    message: str
