"""
JobPosting Model (Persistence)
One row per (candidate, discovered job), de-duplicated by content fingerprint.
"""
import uuid
from sqlalchemy import Column, String, Integer, DateTime, Text, JSON, ForeignKey, UniqueConstraint, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from core.database import Base

FINGERPRINT_CONSTRAINT = "uq_job_postings_candidate_fingerprint"


class JobPostingModel(Base):
    __tablename__ = "job_postings"

    # Primary Key
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)

    candidate_id = Column(
        UUID(as_uuid=True),
        ForeignKey("candidate_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Deduplication Key: (candidate_id + content_fingerprint)
    content_fingerprint = Column(String(64), nullable=False)

    # Job Details
    title = Column(String(500), nullable=False)
    company_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    work_type = Column(String(20), nullable=True)
    experience_level = Column(String(20), nullable=True)
    company_size = Column(String(20), nullable=True)
    required_skills = Column(JSON, default=list, nullable=False)
    benefits = Column(JSON, default=list, nullable=False)

    # Salary
    salary_min = Column(Integer, nullable=True)
    salary_max = Column(Integer, nullable=True)
    salary_currency = Column(String(10), nullable=True, default="USD")

    # Source
    source_url = Column(String(1000), nullable=False)
    source_platform = Column(String(50), nullable=True)
    posted_date = Column(DateTime(timezone=True), nullable=True)

    # Matching
    match_score = Column(Integer, nullable=False, index=True)
    match_breakdown = Column(JSON, default=dict, nullable=False)
    match_reasons = Column(JSON, default=list, nullable=False)

    # Lifecycle
    status = Column(String(20), nullable=False, default="new", index=True)
    user_feedback = Column(String(20), nullable=True)
    feedback_reason = Column(String(50), nullable=True)
    discarded_until = Column(DateTime(timezone=True), nullable=True)
    job_application_id = Column(
        UUID(as_uuid=True),
        ForeignKey("job_applications.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Timestamps
    discovered_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    # Constraints
    __table_args__ = (
        UniqueConstraint("candidate_id", "content_fingerprint", name=FINGERPRINT_CONSTRAINT),
        Index("ix_job_postings_candidate_score", "candidate_id", "match_score"),
        Index("ix_job_postings_candidate_status", "candidate_id", "status"),
    )

    def __repr__(self):
        return f"<JobPostingModel {self.title} at {self.company_name} ({self.match_score})>"
