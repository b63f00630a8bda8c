"""
Application ORM Model
SQLAlchemy model for job applications created from matches
"""
import uuid
from sqlalchemy import Column, String, Integer, Date, DateTime, Text, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from core.database import Base


class JobApplicationModel(Base):
    """Job application table ORM model"""

    __tablename__ = "job_applications"

    # Primary Key
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)

    # Foreign Keys
    candidate_id = Column(
        UUID(as_uuid=True),
        ForeignKey("candidate_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Application Details
    company_name = Column(String(255), nullable=False)
    position_title = Column(String(500), nullable=False)
    job_url = Column(String(1000), nullable=False)
    job_description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    application_method = Column(String(50), nullable=True)

    # Salary
    salary_min = Column(Integer, nullable=True)
    salary_max = Column(Integer, nullable=True)
    salary_currency = Column(String(10), nullable=False, default="USD")

    # Tracking
    status = Column(String(50), nullable=False, default="prepared", index=True)
    priority = Column(String(20), nullable=False, default="low")
    application_date = Column(Date, nullable=True)

    # Notes
    notes = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<JobApplicationModel {self.id} - {self.status}>"
