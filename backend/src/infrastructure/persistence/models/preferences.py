"""
Job Search Preferences ORM Model
One row per candidate: filters, cached AI insights, cadence state and learned feedback.
"""
import uuid
from sqlalchemy import Column, Integer, DateTime, JSON, ForeignKey, String, Text, Boolean
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from core.database import Base


class JobSearchPreferencesModel(Base):
    __tablename__ = "job_search_preferences"

    # Primary Key
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Foreign Key to candidate
    candidate_id = Column(
        UUID(as_uuid=True),
        ForeignKey("candidate_profiles.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    # Explicit filters
    preferred_job_titles = Column(JSON, default=list, nullable=False)
    preferred_locations = Column(JSON, default=list, nullable=False)
    required_skills = Column(JSON, default=list, nullable=False)  # [{skill, proficiency}]
    salary_min_override = Column(Integer, nullable=True)
    remote_policy_preferences = Column(JSON, default=list, nullable=False)
    company_size_preferences = Column(JSON, default=list, nullable=False)
    avoid_companies = Column(JSON, default=list, nullable=False)
    avoid_keywords = Column(JSON, default=list, nullable=False)
    required_benefits = Column(JSON, default=list, nullable=False)

    # Cached AI insights
    ai_keywords = Column(JSON, default=list, nullable=False)
    ai_recommended_boards = Column(JSON, default=list, nullable=False)  # [{name, url, reason}]
    ai_market_insights = Column(Text, nullable=True)
    ai_personalized_strategy = Column(Text, nullable=True)
    ai_last_analysis_at = Column(DateTime(timezone=True), nullable=True)

    # Cadence state
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    email_notification_frequency = Column(String(20), nullable=False, default="weekly")
    last_email_sent_at = Column(DateTime(timezone=True), nullable=True)
    last_search_at = Column(DateTime(timezone=True), nullable=True)
    consecutive_zero_match_days = Column(Integer, nullable=False, default=0)

    # Learned from feedback
    feedback_stats = Column(JSON, default=dict, nullable=False)
    implicit_preferences = Column(JSON, default=dict, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<JobSearchPreferencesModel for candidate {self.candidate_id}>"
