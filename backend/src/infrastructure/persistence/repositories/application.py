"""
JobApplication Repository Implementation
"""
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from application.repositories.interfaces import IJobApplicationRepository
from core.exceptions import RepositoryException
from domain.entities import JobApplication
from domain.enums import ApplicationPriority, ApplicationStatus, parse_enum
from infrastructure.persistence.models.application import JobApplicationModel
from .common import as_utc


class SQLAlchemyJobApplicationRepository(IJobApplicationRepository):
    """SQLAlchemy implementation of job application repository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, application: JobApplication) -> JobApplication:
        try:
            model = JobApplicationModel(
                candidate_id=application.candidate_id,
                company_name=application.company_name,
                position_title=application.position_title,
                job_url=application.job_url,
                job_description=application.job_description,
                location=application.location,
                application_method=application.application_method,
                salary_min=application.salary_min,
                salary_max=application.salary_max,
                salary_currency=application.salary_currency,
                notes=application.notes,
                status=application.status.value,
                priority=application.priority.value,
                application_date=application.application_date,
                created_at=application.created_at or datetime.now(timezone.utc),
            )
            if application.id is not None:
                model.id = application.id

            async with self.session.begin_nested():
                self.session.add(model)
                await self.session.flush()
            await self.session.refresh(model)

            logger.info(f"Created application {model.id} for candidate {application.candidate_id}")
            return self._to_entity(model)

        except SQLAlchemyError as e:
            logger.error(f"Failed to create application: {str(e)}")
            raise RepositoryException(f"Failed to create application: {str(e)}")

    async def get_by_id(self, application_id: UUID) -> Optional[JobApplication]:
        try:
            result = await self.session.execute(
                select(JobApplicationModel).where(JobApplicationModel.id == application_id)
            )
            model = result.scalar_one_or_none()
            return self._to_entity(model) if model else None

        except SQLAlchemyError as e:
            logger.error(f"Failed to get application {application_id}: {str(e)}")
            raise RepositoryException(f"Failed to get application: {str(e)}")

    def _to_entity(self, model: JobApplicationModel) -> JobApplication:
        return JobApplication(
            id=model.id,
            candidate_id=model.candidate_id,
            company_name=model.company_name,
            position_title=model.position_title,
            job_url=model.job_url,
            job_description=model.job_description,
            location=model.location,
            application_method=model.application_method,
            salary_min=model.salary_min,
            salary_max=model.salary_max,
            salary_currency=model.salary_currency or "USD",
            notes=model.notes,
            status=parse_enum(ApplicationStatus, model.status, ApplicationStatus.PREPARED),
            priority=parse_enum(ApplicationPriority, model.priority, ApplicationPriority.LOW),
            application_date=model.application_date,
            created_at=as_utc(model.created_at),
        )
