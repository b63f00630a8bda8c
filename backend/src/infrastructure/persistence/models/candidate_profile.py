"""
CandidateProfile ORM Model
Candidate attributes read by the matching engine
"""
import uuid
from sqlalchemy import Column, String, Integer, DateTime, Text, Boolean, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from core.database import Base


class CandidateProfileModel(Base):
    """Candidate profile table ORM model"""

    __tablename__ = "candidate_profiles"

    # Primary Key
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)

    # Identity
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True, index=True)

    # Stated preferences
    preferred_job_titles = Column(JSON, default=list, nullable=False)
    preferred_industries = Column(JSON, default=list, nullable=False)
    minimum_salary_expectation = Column(Integer, nullable=True)
    salary_currency = Column(String(10), nullable=False, default="USD")
    location_city = Column(String(255), nullable=True)
    location_country = Column(String(255), nullable=True)
    remote_policy = Column(String(20), nullable=True)  # remote, hybrid, onsite, flexible
    willing_to_relocate = Column(Boolean, nullable=False, default=False)
    company_size_preferences = Column(JSON, default=list, nullable=False)
    career_goals = Column(Text, nullable=True)

    # CV analysis: {skills, experience_years, industries, seniority_level}
    cv_analysis = Column(JSON, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<CandidateProfileModel {self.id}>"
