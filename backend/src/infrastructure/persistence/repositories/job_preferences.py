"""
JobSearchPreferences Repository Implementation
"""
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from application.repositories.interfaces import IJobSearchPreferencesRepository
from core.exceptions import RepositoryException
from domain.entities import (
    FeedbackStats,
    ImplicitPreferences,
    JobSearchPreferences,
    RecommendedBoard,
    SkillRequirement,
)
from domain.entities.search_preferences import parse_company_sizes, parse_remote_policies
from domain.enums import EmailFrequency, parse_enum
from infrastructure.persistence.models.preferences import JobSearchPreferencesModel
from .common import as_utc


class SQLAlchemyJobSearchPreferencesRepository(IJobSearchPreferencesRepository):
    """SQLAlchemy implementation of job search preferences repository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_candidate_id(self, candidate_id: UUID) -> Optional[JobSearchPreferences]:
        try:
            result = await self.session.execute(
                select(JobSearchPreferencesModel).where(JobSearchPreferencesModel.candidate_id == candidate_id)
            )
            model = result.scalar_one_or_none()
            return self._to_entity(model) if model else None

        except SQLAlchemyError as e:
            logger.error(f"Failed to get preferences for candidate {candidate_id}: {str(e)}")
            raise RepositoryException(f"Failed to get preferences: {str(e)}")

    async def create(self, preferences: JobSearchPreferences) -> JobSearchPreferences:
        try:
            model = JobSearchPreferencesModel(candidate_id=preferences.candidate_id)
            if preferences.id is not None:
                model.id = preferences.id
            self._apply(model, preferences)
            model.created_at = preferences.created_at or datetime.now(timezone.utc)

            async with self.session.begin_nested():
                self.session.add(model)
                await self.session.flush()
            await self.session.refresh(model)

            return self._to_entity(model)

        except SQLAlchemyError as e:
            logger.error(f"Failed to create preferences for candidate {preferences.candidate_id}: {str(e)}")
            raise RepositoryException(f"Failed to create preferences: {str(e)}")

    async def update(self, preferences: JobSearchPreferences) -> JobSearchPreferences:
        try:
            async with self.session.begin_nested():
                result = await self.session.execute(
                    select(JobSearchPreferencesModel).where(
                        JobSearchPreferencesModel.candidate_id == preferences.candidate_id
                    )
                )
                model = result.scalar_one_or_none()
                if not model:
                    raise RepositoryException(f"Preferences not found for candidate: {preferences.candidate_id}")

                self._apply(model, preferences)
                await self.session.flush()

            await self.session.refresh(model)
            return self._to_entity(model)

        except SQLAlchemyError as e:
            logger.error(f"Failed to update preferences for candidate {preferences.candidate_id}: {str(e)}")
            raise RepositoryException(f"Failed to update preferences: {str(e)}")

    async def get_active(self) -> List[JobSearchPreferences]:
        try:
            result = await self.session.execute(
                select(JobSearchPreferencesModel)
                .where(JobSearchPreferencesModel.is_active.is_(True))
                .order_by(JobSearchPreferencesModel.created_at)
            )
            return [self._to_entity(m) for m in result.scalars().all()]

        except SQLAlchemyError as e:
            logger.error(f"Failed to list active preferences: {str(e)}")
            raise RepositoryException(f"Failed to list active preferences: {str(e)}")

    def _apply(self, model: JobSearchPreferencesModel, preferences: JobSearchPreferences) -> None:
        """Copy every mutable field from the entity onto the model"""
        model.preferred_job_titles = list(preferences.preferred_job_titles)
        model.preferred_locations = list(preferences.preferred_locations)
        model.required_skills = [s.to_dict() for s in preferences.required_skills]
        model.salary_min_override = preferences.salary_min_override
        model.remote_policy_preferences = [p.value for p in preferences.remote_policy_preferences]
        model.company_size_preferences = [s.value for s in preferences.company_size_preferences]
        model.avoid_companies = list(preferences.avoid_companies)
        model.avoid_keywords = list(preferences.avoid_keywords)
        model.required_benefits = list(preferences.required_benefits)

        model.ai_keywords = list(preferences.ai_keywords)
        model.ai_recommended_boards = [b.to_dict() for b in preferences.ai_recommended_boards]
        model.ai_market_insights = preferences.ai_market_insights
        model.ai_personalized_strategy = preferences.ai_personalized_strategy
        model.ai_last_analysis_at = preferences.ai_last_analysis_at

        model.is_active = preferences.is_active
        model.email_notification_frequency = preferences.email_notification_frequency.value
        model.last_email_sent_at = preferences.last_email_sent_at
        model.last_search_at = preferences.last_search_at
        model.consecutive_zero_match_days = preferences.consecutive_zero_match_days

        model.feedback_stats = preferences.feedback_stats.to_dict()
        model.implicit_preferences = preferences.implicit_preferences.to_dict()
        model.updated_at = preferences.updated_at or datetime.now(timezone.utc)

    def _to_entity(self, model: JobSearchPreferencesModel) -> JobSearchPreferences:
        boards = [
            RecommendedBoard(name=b.get("name", ""), url=b.get("url", ""), reason=b.get("reason", ""))
            for b in (model.ai_recommended_boards or [])
            if isinstance(b, dict)
        ]
        return JobSearchPreferences(
            id=model.id,
            candidate_id=model.candidate_id,
            preferred_job_titles=list(model.preferred_job_titles or []),
            preferred_locations=list(model.preferred_locations or []),
            required_skills=[SkillRequirement.from_value(s) for s in (model.required_skills or [])],
            salary_min_override=model.salary_min_override,
            remote_policy_preferences=parse_remote_policies(model.remote_policy_preferences),
            company_size_preferences=parse_company_sizes(model.company_size_preferences),
            avoid_companies=list(model.avoid_companies or []),
            avoid_keywords=list(model.avoid_keywords or []),
            required_benefits=list(model.required_benefits or []),
            ai_keywords=list(model.ai_keywords or []),
            ai_recommended_boards=boards,
            ai_market_insights=model.ai_market_insights,
            ai_personalized_strategy=model.ai_personalized_strategy,
            ai_last_analysis_at=as_utc(model.ai_last_analysis_at),
            is_active=bool(model.is_active),
            email_notification_frequency=parse_enum(
                EmailFrequency, model.email_notification_frequency, EmailFrequency.WEEKLY
            ),
            last_email_sent_at=as_utc(model.last_email_sent_at),
            last_search_at=as_utc(model.last_search_at),
            consecutive_zero_match_days=model.consecutive_zero_match_days or 0,
            feedback_stats=FeedbackStats.from_dict(model.feedback_stats),
            implicit_preferences=ImplicitPreferences.from_dict(model.implicit_preferences),
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )
