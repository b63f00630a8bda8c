"""
JobApplication Domain Entity
Application record created when a candidate applies from a match
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from ..enums import ApplicationPriority, ApplicationStatus


@dataclass(frozen=True)
class JobApplication:
    """Job application domain entity - immutable"""

    candidate_id: UUID
    company_name: str
    position_title: str
    job_url: str
    id: Optional[UUID] = None

    # Pre-filled from the posting
    job_description: Optional[str] = None
    location: Optional[str] = None
    application_method: Optional[str] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    salary_currency: str = "USD"
    notes: Optional[str] = None

    status: ApplicationStatus = ApplicationStatus.PREPARED
    priority: ApplicationPriority = ApplicationPriority.LOW
    application_date: Optional[date] = None

    # Timestamps
    created_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate application data"""
        if not self.job_url or len(self.job_url.strip()) == 0:
            raise ValueError("Job URL cannot be empty")


def priority_for_score(score: int) -> ApplicationPriority:
    """High for 90+, medium for 80+, low otherwise"""
    if score >= 90:
        return ApplicationPriority.HIGH
    if score >= 80:
        return ApplicationPriority.MEDIUM
    return ApplicationPriority.LOW
