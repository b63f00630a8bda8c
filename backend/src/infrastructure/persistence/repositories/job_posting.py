"""
JobPosting Repository Implementation
Per-candidate posting store with fingerprint conflict detection
"""
from datetime import datetime, timezone
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from application.repositories.interfaces import IJobPostingRepository, InsertOutcome, PersistenceResult
from core.exceptions import RepositoryException
from domain.entities import JobPosting, MatchBreakdown
from domain.enums import (
    CompanySize,
    ExperienceLevel,
    FeedbackReason,
    PostingStatus,
    SourcePlatform,
    UserFeedback,
    WorkType,
    parse_enum,
)
from infrastructure.persistence.models.job_posting import FINGERPRINT_CONSTRAINT, JobPostingModel
from .common import as_utc

UNIQUE_VIOLATION = "23505"


def is_fingerprint_conflict(error: IntegrityError) -> bool:
    """True when the integrity error is the (candidate, fingerprint) unique constraint"""
    if getattr(error.orig, "sqlstate", None) == UNIQUE_VIOLATION:
        return True
    message = str(error.orig)
    return FINGERPRINT_CONSTRAINT in message or "content_fingerprint" in message


class SQLAlchemyJobPostingRepository(IJobPostingRepository):
    """SQLAlchemy implementation of job posting repository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, posting: JobPosting) -> PersistenceResult:
        model = self._to_model(posting)
        try:
            async with self.session.begin_nested():
                self.session.add(model)
                await self.session.flush()
        except IntegrityError as e:
            if is_fingerprint_conflict(e):
                return PersistenceResult(outcome=InsertOutcome.CONFLICT)
            logger.error(f"Integrity error inserting posting '{posting.title}': {e.orig}")
            return PersistenceResult(outcome=InsertOutcome.ERROR, error=str(e.orig))
        except SQLAlchemyError as e:
            logger.error(f"Failed to insert posting '{posting.title}': {str(e)}")
            return PersistenceResult(outcome=InsertOutcome.ERROR, error=str(e))

        await self.session.refresh(model)
        return PersistenceResult(outcome=InsertOutcome.INSERTED, posting=self._to_entity(model))

    async def get_by_id(self, posting_id: UUID) -> Optional[JobPosting]:
        try:
            result = await self.session.execute(
                select(JobPostingModel).where(JobPostingModel.id == posting_id)
            )
            model = result.scalar_one_or_none()
            return self._to_entity(model) if model else None

        except SQLAlchemyError as e:
            logger.error(f"Failed to get posting {posting_id}: {str(e)}")
            raise RepositoryException(f"Failed to get posting: {str(e)}")

    async def update(self, posting: JobPosting) -> JobPosting:
        try:
            async with self.session.begin_nested():
                result = await self.session.execute(
                    select(JobPostingModel).where(JobPostingModel.id == posting.id)
                )
                model = result.scalar_one_or_none()
                if not model:
                    raise RepositoryException(f"Posting not found: {posting.id}")

                model.match_score = posting.match_score
                model.match_breakdown = posting.match_breakdown.to_dict()
                model.match_reasons = list(posting.match_reasons)
                model.status = posting.status.value
                model.user_feedback = posting.user_feedback.value if posting.user_feedback else None
                model.feedback_reason = posting.feedback_reason.value if posting.feedback_reason else None
                model.discarded_until = posting.discarded_until
                model.job_application_id = posting.job_application_id
                model.updated_at = posting.updated_at or datetime.now(timezone.utc)

                await self.session.flush()

            await self.session.refresh(model)
            return self._to_entity(model)

        except SQLAlchemyError as e:
            logger.error(f"Failed to update posting {posting.id}: {str(e)}")
            raise RepositoryException(f"Failed to update posting: {str(e)}")

    async def get_borderline(
        self,
        candidate_id: UUID,
        min_score: int,
        max_score: int,
        discovered_since: datetime
    ) -> List[JobPosting]:
        return await self._select(
            and_(
                JobPostingModel.candidate_id == candidate_id,
                JobPostingModel.match_score >= min_score,
                JobPostingModel.match_score < max_score,
                JobPostingModel.discovered_at >= discovered_since,
            ),
            order_by=(JobPostingModel.match_score.desc(),),
        )

    async def get_recent(self, candidate_id: UUID, limit: int) -> List[JobPosting]:
        return await self._select(
            JobPostingModel.candidate_id == candidate_id,
            order_by=(JobPostingModel.discovered_at.desc(),),
            limit=limit,
        )

    async def get_matches(
        self,
        candidate_id: UUID,
        min_score: int,
        statuses: Sequence[PostingStatus],
        now: datetime,
        limit: int
    ) -> List[JobPosting]:
        return await self._select(
            and_(
                JobPostingModel.candidate_id == candidate_id,
                JobPostingModel.match_score >= min_score,
                JobPostingModel.status.in_([s.value for s in statuses]),
                or_(
                    JobPostingModel.discarded_until.is_(None),
                    JobPostingModel.discarded_until <= now,
                ),
            ),
            order_by=(JobPostingModel.match_score.desc(), JobPostingModel.discovered_at.desc()),
            limit=limit,
        )

    async def get_digest_postings(
        self,
        candidate_id: UUID,
        min_score: int,
        statuses: Sequence[PostingStatus],
        discovered_since: datetime,
        limit: int
    ) -> List[JobPosting]:
        return await self._select(
            and_(
                JobPostingModel.candidate_id == candidate_id,
                JobPostingModel.match_score >= min_score,
                JobPostingModel.status.in_([s.value for s in statuses]),
                JobPostingModel.discovered_at >= discovered_since,
            ),
            order_by=(JobPostingModel.match_score.desc(), JobPostingModel.discovered_at.desc()),
            limit=limit,
        )

    async def delete_by_score_before(
        self,
        min_score: int,
        max_score: int,
        discovered_before: datetime
    ) -> int:
        return await self._delete(
            and_(
                JobPostingModel.match_score >= min_score,
                JobPostingModel.match_score < max_score,
                JobPostingModel.discovered_at < discovered_before,
            )
        )

    async def delete_dismissed_before(self, discarded_before: datetime) -> int:
        return await self._delete(
            and_(
                JobPostingModel.status == PostingStatus.DISMISSED.value,
                JobPostingModel.discarded_until.is_not(None),
                JobPostingModel.discarded_until < discarded_before,
            )
        )

    async def _select(self, criteria, order_by=(), limit: Optional[int] = None) -> List[JobPosting]:
        query = select(JobPostingModel).where(criteria).order_by(*order_by)
        if limit is not None:
            query = query.limit(limit)
        try:
            result = await self.session.execute(query)
            return [self._to_entity(m) for m in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to query postings: {str(e)}")
            raise RepositoryException(f"Failed to query postings: {str(e)}")

    async def _delete(self, criteria) -> int:
        try:
            async with self.session.begin_nested():
                result = await self.session.execute(
                    delete(JobPostingModel)
                    .where(criteria)
                    .execution_options(synchronize_session=False)
                )
            return result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete postings: {str(e)}")
            raise RepositoryException(f"Failed to delete postings: {str(e)}")

    def _to_model(self, posting: JobPosting) -> JobPostingModel:
        now = datetime.now(timezone.utc)
        model = JobPostingModel(
            candidate_id=posting.candidate_id,
            content_fingerprint=posting.content_fingerprint,
            title=posting.title,
            company_name=posting.company_name,
            description=posting.description,
            location=posting.location,
            work_type=posting.work_type.value if posting.work_type else None,
            experience_level=posting.experience_level.value if posting.experience_level else None,
            company_size=posting.company_size.value if posting.company_size else None,
            required_skills=list(posting.required_skills),
            benefits=list(posting.benefits),
            salary_min=posting.salary_min,
            salary_max=posting.salary_max,
            salary_currency=posting.salary_currency,
            source_url=posting.source_url,
            source_platform=posting.source_platform.value if posting.source_platform else None,
            posted_date=posting.posted_date,
            match_score=posting.match_score,
            match_breakdown=posting.match_breakdown.to_dict(),
            match_reasons=list(posting.match_reasons),
            status=posting.status.value,
            user_feedback=posting.user_feedback.value if posting.user_feedback else None,
            feedback_reason=posting.feedback_reason.value if posting.feedback_reason else None,
            discarded_until=posting.discarded_until,
            job_application_id=posting.job_application_id,
            discovered_at=posting.discovered_at or now,
            created_at=posting.created_at or now,
        )
        if posting.id is not None:
            model.id = posting.id
        return model

    def _to_entity(self, model: JobPostingModel) -> JobPosting:
        return JobPosting(
            id=model.id,
            candidate_id=model.candidate_id,
            title=model.title,
            company_name=model.company_name,
            source_url=model.source_url,
            content_fingerprint=model.content_fingerprint,
            description=model.description,
            location=model.location,
            work_type=parse_enum(WorkType, model.work_type),
            experience_level=parse_enum(ExperienceLevel, model.experience_level),
            salary_min=model.salary_min,
            salary_max=model.salary_max,
            salary_currency=model.salary_currency or "USD",
            required_skills=list(model.required_skills or []),
            benefits=list(model.benefits or []),
            company_size=parse_enum(CompanySize, model.company_size),
            source_platform=parse_enum(SourcePlatform, model.source_platform),
            posted_date=as_utc(model.posted_date),
            match_score=model.match_score,
            match_breakdown=MatchBreakdown.from_dict(model.match_breakdown),
            match_reasons=list(model.match_reasons or []),
            status=parse_enum(PostingStatus, model.status, PostingStatus.NEW),
            user_feedback=parse_enum(UserFeedback, model.user_feedback),
            feedback_reason=parse_enum(FeedbackReason, model.feedback_reason),
            discarded_until=as_utc(model.discarded_until),
            job_application_id=model.job_application_id,
            discovered_at=as_utc(model.discovered_at),
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )
