"""
CandidateProfile Repository Implementation
Read-only access to the profiles owned by the rest of the platform
"""
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from application.repositories.interfaces import ICandidateProfileRepository
from core.exceptions import RepositoryException
from domain.entities import CandidateProfile, CvAnalysis, LocationPreference
from domain.entities.search_preferences import parse_company_sizes
from domain.enums import ExperienceLevel, WorkType, parse_enum
from infrastructure.persistence.models.candidate_profile import CandidateProfileModel
from .common import as_utc


class SQLAlchemyCandidateProfileRepository(ICandidateProfileRepository):
    """SQLAlchemy implementation of candidate profile repository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, candidate_id: UUID) -> Optional[CandidateProfile]:
        try:
            result = await self.session.execute(
                select(CandidateProfileModel).where(CandidateProfileModel.id == candidate_id)
            )
            model = result.scalar_one_or_none()
            return self._to_entity(model) if model else None

        except SQLAlchemyError as e:
            logger.error(f"Failed to get profile {candidate_id}: {str(e)}")
            raise RepositoryException(f"Failed to get profile: {str(e)}")

    def _to_entity(self, model: CandidateProfileModel) -> CandidateProfile:
        cv_analysis = None
        if isinstance(model.cv_analysis, dict):
            data = model.cv_analysis
            years = data.get("experience_years")
            cv_analysis = CvAnalysis(
                skills=[str(s) for s in data.get("skills") or [] if s],
                experience_years=float(years) if years is not None else None,
                industries=[str(i) for i in data.get("industries") or [] if i],
                seniority_level=parse_enum(ExperienceLevel, data.get("seniority_level")),
            )

        return CandidateProfile(
            id=model.id,
            full_name=model.full_name,
            email=model.email,
            preferred_job_titles=list(model.preferred_job_titles or []),
            preferred_industries=list(model.preferred_industries or []),
            minimum_salary_expectation=model.minimum_salary_expectation,
            salary_currency=model.salary_currency or "USD",
            location_preferences=LocationPreference(
                city=model.location_city,
                country=model.location_country,
                remote_policy=parse_enum(WorkType, model.remote_policy),
                willing_to_relocate=bool(model.willing_to_relocate),
            ),
            company_size_preferences=parse_company_sizes(model.company_size_preferences),
            career_goals=model.career_goals,
            cv_analysis=cv_analysis,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )
