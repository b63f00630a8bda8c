"""
Posting Lifecycle Manager
Status state machine, apply flow, matches listing and the two expiry purges
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID

from loguru import logger

from application.repositories.interfaces import (
    IJobApplicationRepository,
    IJobPostingRepository,
)
from core.exceptions import (
    AuthorizationException,
    InvalidStatusTransitionException,
    ResourceNotFoundException,
)
from domain.entities import JobApplication, JobPosting, priority_for_score
from domain.enums import VISIBLE_STATUSES, PostingStatus
from domain.value_objects import MATCH_THRESHOLD, BORDERLINE_THRESHOLD
from .interfaces import IMatchesCache


@dataclass
class CleanupResult:
    """Outcome of one cleanup pass; each purge reports independently"""

    borderline_deleted: int = 0
    dismissed_deleted: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def total_deleted(self) -> int:
        return self.borderline_deleted + self.dismissed_deleted


@dataclass(frozen=True)
class ApplyResult:
    application_id: UUID
    created: bool
    posting_updated: bool = True


class LifecycleManager:
    """Owns posting status changes and time-based expiry"""

    def __init__(
        self,
        posting_repository: IJobPostingRepository,
        application_repository: Optional[IJobApplicationRepository] = None,
        match_threshold: int = MATCH_THRESHOLD,
        borderline_threshold: int = BORDERLINE_THRESHOLD,
        borderline_ttl_days: int = 7,
        dismissed_ttl_days: int = 30,
        matches_cache: Optional[IMatchesCache] = None,
    ):
        self.posting_repo = posting_repository
        self.application_repo = application_repository
        self.match_threshold = match_threshold
        self.borderline_threshold = borderline_threshold
        self.borderline_ttl = timedelta(days=borderline_ttl_days)
        self.dismissed_ttl = timedelta(days=dismissed_ttl_days)
        self.matches_cache = matches_cache

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    async def get_owned_posting(self, candidate_id: UUID, posting_id: UUID) -> JobPosting:
        """Load a posting and check it belongs to the candidate"""
        posting = await self.posting_repo.get_by_id(posting_id)
        if posting is None:
            raise ResourceNotFoundException("JobPosting", str(posting_id))
        if posting.candidate_id != candidate_id:
            raise AuthorizationException(f"Posting {posting_id} does not belong to candidate {candidate_id}")
        return posting

    async def transition(
        self,
        posting: JobPosting,
        target: PostingStatus,
        now: Optional[datetime] = None,
        **changes
    ) -> JobPosting:
        """
        Move a posting to a new status, applying extra field changes

        Raises:
            InvalidStatusTransitionException: target not reachable from current status
        """
        if not posting.can_transition_to(target):
            raise InvalidStatusTransitionException(posting.status.value, target.value)

        now = now or datetime.now(timezone.utc)
        updated = replace(posting, status=target, updated_at=now, **changes)
        saved = await self.posting_repo.update(updated)
        await self.invalidate_matches(posting.candidate_id)
        logger.debug(f"Posting {posting.id}: {posting.status.value} -> {target.value}")
        return saved

    async def mark_viewed(self, candidate_id: UUID, posting_id: UUID) -> JobPosting:
        """new -> viewed; any other status is left as is"""
        posting = await self.get_owned_posting(candidate_id, posting_id)
        if posting.status != PostingStatus.NEW:
            return posting
        return await self.transition(posting, PostingStatus.VIEWED)

    async def apply(self, candidate_id: UUID, posting_id: UUID, now: Optional[datetime] = None) -> ApplyResult:
        """
        Create an application record from a posting and mark the posting applied

        The application is the primary effect. If linking it back onto the
        posting fails, the application is still returned and the failure is
        only logged.
        """
        if self.application_repo is None:
            raise RuntimeError("LifecycleManager was built without an application repository")

        now = now or datetime.now(timezone.utc)
        posting = await self.get_owned_posting(candidate_id, posting_id)

        if posting.status == PostingStatus.APPLIED and posting.job_application_id:
            return ApplyResult(application_id=posting.job_application_id, created=False)

        if not posting.can_transition_to(PostingStatus.APPLIED):
            raise InvalidStatusTransitionException(posting.status.value, PostingStatus.APPLIED.value)

        application = await self.application_repo.create(JobApplication(
            candidate_id=candidate_id,
            company_name=posting.company_name,
            position_title=posting.title,
            job_url=posting.source_url,
            job_description=posting.description,
            location=posting.location,
            application_method=posting.source_platform.value if posting.source_platform else None,
            salary_min=posting.salary_min,
            salary_max=posting.salary_max,
            salary_currency=posting.salary_currency or "USD",
            notes="\n".join(posting.match_reasons) or None,
            priority=priority_for_score(posting.match_score),
            application_date=now.date(),
        ))

        try:
            await self.transition(
                posting,
                PostingStatus.APPLIED,
                now=now,
                job_application_id=application.id,
            )
            posting_updated = True
        except Exception as e:
            logger.error(f"Application {application.id} created but posting {posting_id} was not updated: {e}")
            posting_updated = False

        logger.info(f"Created application {application.id} for posting {posting_id} (candidate {candidate_id})")
        return ApplyResult(application_id=application.id, created=True, posting_updated=posting_updated)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def invalidate_matches(self, candidate_id: UUID) -> None:
        if self.matches_cache is not None:
            await self.matches_cache.invalidate(candidate_id)

    async def list_matches(
        self,
        candidate_id: UUID,
        limit: int = 10,
        now: Optional[datetime] = None
    ) -> List[JobPosting]:
        """Visible matches (>= threshold, not currently discarded), best first"""
        now = now or datetime.now(timezone.utc)
        limit = max(1, min(20, limit))
        return await self.posting_repo.get_matches(
            candidate_id,
            min_score=self.match_threshold,
            statuses=VISIBLE_STATUSES,
            now=now,
            limit=limit,
        )

    # ------------------------------------------------------------------
    # Expiry
    # ------------------------------------------------------------------

    async def purge_borderline(self, now: datetime) -> int:
        """Delete borderline postings discovered more than the TTL ago, any status"""
        cutoff = now - self.borderline_ttl
        deleted = await self.posting_repo.delete_by_score_before(
            min_score=self.borderline_threshold,
            max_score=self.match_threshold,
            discovered_before=cutoff,
        )
        logger.info(f"Borderline purge removed {deleted} postings discovered before {cutoff.isoformat()}")
        return deleted

    async def purge_dismissed(self, now: datetime) -> int:
        """Delete dismissed postings whose discard-until passed more than the TTL ago"""
        cutoff = now - self.dismissed_ttl
        deleted = await self.posting_repo.delete_dismissed_before(cutoff)
        logger.info(f"Dismissed purge removed {deleted} postings discarded before {cutoff.isoformat()}")
        return deleted

    async def cleanup(self, now: Optional[datetime] = None) -> CleanupResult:
        """Run both purges; a failure in one never stops the other"""
        now = now or datetime.now(timezone.utc)
        result = CleanupResult()

        try:
            result.borderline_deleted = await self.purge_borderline(now)
        except Exception as e:
            logger.error(f"Borderline purge failed: {e}")
            result.errors.append(f"borderline: {e}")

        try:
            result.dismissed_deleted = await self.purge_dismissed(now)
        except Exception as e:
            logger.error(f"Dismissed purge failed: {e}")
            result.errors.append(f"dismissed: {e}")

        return result
