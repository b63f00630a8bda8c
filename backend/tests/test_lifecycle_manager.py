"""
Tests for posting status changes, apply flow, matches listing and expiry
"""
import pytest
from datetime import timedelta
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

from application.services.lifecycle import LifecycleManager
from core.exceptions import (
    AuthorizationException,
    InvalidStatusTransitionException,
    RepositoryException,
    ResourceNotFoundException,
)
from domain.entities import JobApplication
from domain.enums import ApplicationPriority, PostingStatus, VISIBLE_STATUSES
from factories import NOW, make_posting


def _echo(posting):
    return posting


@pytest.fixture
def posting_repo():
    repo = Mock()
    repo.get_by_id = AsyncMock()
    repo.update = AsyncMock(side_effect=_echo)
    repo.get_matches = AsyncMock(return_value=[])
    repo.delete_by_score_before = AsyncMock(return_value=0)
    repo.delete_dismissed_before = AsyncMock(return_value=0)
    return repo


@pytest.fixture
def application_repo():
    repo = Mock()
    app_id = uuid4()
    repo.create = AsyncMock(side_effect=lambda application: JobApplication(
        id=app_id,
        candidate_id=application.candidate_id,
        company_name=application.company_name,
        position_title=application.position_title,
        job_url=application.job_url,
        priority=application.priority,
    ))
    return repo


@pytest.fixture
def matches_cache():
    cache = Mock()
    cache.invalidate = AsyncMock()
    return cache


@pytest.fixture
def lifecycle(posting_repo, application_repo, matches_cache):
    return LifecycleManager(posting_repo, application_repo, matches_cache=matches_cache)


class TestOwnership:

    @pytest.mark.asyncio
    async def test_missing_posting(self, lifecycle, posting_repo):
        posting_repo.get_by_id.return_value = None

        with pytest.raises(ResourceNotFoundException):
            await lifecycle.get_owned_posting(uuid4(), uuid4())

    @pytest.mark.asyncio
    async def test_other_candidates_posting(self, lifecycle, posting_repo):
        posting_repo.get_by_id.return_value = make_posting(candidate_id=uuid4())

        with pytest.raises(AuthorizationException):
            await lifecycle.get_owned_posting(uuid4(), uuid4())


class TestTransitions:

    @pytest.mark.asyncio
    async def test_invalid_transition_rejected(self, lifecycle, posting_repo):
        posting = make_posting(status=PostingStatus.APPLIED)

        with pytest.raises(InvalidStatusTransitionException):
            await lifecycle.transition(posting, PostingStatus.VIEWED, NOW)
        posting_repo.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transition_saves_and_invalidates_cache(self, lifecycle, matches_cache):
        posting = make_posting()

        updated = await lifecycle.transition(posting, PostingStatus.LIKED, NOW)

        assert updated.status == PostingStatus.LIKED
        assert updated.updated_at == NOW
        matches_cache.invalidate.assert_awaited_once_with(posting.candidate_id)

    @pytest.mark.asyncio
    async def test_view_moves_new_to_viewed(self, lifecycle, posting_repo):
        posting = make_posting()
        posting_repo.get_by_id.return_value = posting

        viewed = await lifecycle.mark_viewed(posting.candidate_id, posting.id)

        assert viewed.status == PostingStatus.VIEWED

    @pytest.mark.asyncio
    async def test_view_leaves_other_statuses_alone(self, lifecycle, posting_repo):
        posting = make_posting(status=PostingStatus.LIKED)
        posting_repo.get_by_id.return_value = posting

        viewed = await lifecycle.mark_viewed(posting.candidate_id, posting.id)

        assert viewed.status == PostingStatus.LIKED
        posting_repo.update.assert_not_awaited()


class TestApply:

    @pytest.mark.asyncio
    async def test_apply_creates_application_and_links_it(self, lifecycle, posting_repo, application_repo):
        posting = make_posting(score=92, salary_min=100_000, salary_max=120_000)
        posting_repo.get_by_id.return_value = posting

        result = await lifecycle.apply(posting.candidate_id, posting.id, NOW)

        assert result.created
        assert result.posting_updated
        created = application_repo.create.await_args.args[0]
        assert created.priority == ApplicationPriority.HIGH
        assert created.job_url == posting.source_url
        assert created.application_date == NOW.date()
        saved = posting_repo.update.await_args.args[0]
        assert saved.status == PostingStatus.APPLIED
        assert saved.job_application_id == result.application_id

    @pytest.mark.asyncio
    async def test_reapply_returns_existing_application(self, lifecycle, posting_repo, application_repo):
        existing = uuid4()
        posting = make_posting(status=PostingStatus.APPLIED, job_application_id=existing)
        posting_repo.get_by_id.return_value = posting

        result = await lifecycle.apply(posting.candidate_id, posting.id, NOW)

        assert result.application_id == existing
        assert not result.created
        application_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_dismissed_posting_cannot_be_applied(self, lifecycle, posting_repo):
        posting = make_posting(status=PostingStatus.DISMISSED)
        posting_repo.get_by_id.return_value = posting

        with pytest.raises(InvalidStatusTransitionException):
            await lifecycle.apply(posting.candidate_id, posting.id, NOW)

    @pytest.mark.asyncio
    async def test_application_kept_when_posting_update_fails(self, lifecycle, posting_repo):
        posting = make_posting()
        posting_repo.get_by_id.return_value = posting
        posting_repo.update.side_effect = RepositoryException("db down")

        result = await lifecycle.apply(posting.candidate_id, posting.id, NOW)

        assert result.created
        assert not result.posting_updated


class TestListing:

    @pytest.mark.asyncio
    async def test_matches_query(self, lifecycle, posting_repo):
        candidate_id = uuid4()

        await lifecycle.list_matches(candidate_id, limit=50, now=NOW)

        posting_repo.get_matches.assert_awaited_once_with(
            candidate_id, min_score=75, statuses=VISIBLE_STATUSES, now=NOW, limit=20,
        )

    @pytest.mark.asyncio
    async def test_limit_floor(self, lifecycle, posting_repo):
        await lifecycle.list_matches(uuid4(), limit=0, now=NOW)

        assert posting_repo.get_matches.await_args.kwargs["limit"] == 1


class TestCleanup:

    @pytest.mark.asyncio
    async def test_purge_cutoffs(self, lifecycle, posting_repo):
        posting_repo.delete_by_score_before.return_value = 3
        posting_repo.delete_dismissed_before.return_value = 2

        result = await lifecycle.cleanup(NOW)

        assert result.borderline_deleted == 3
        assert result.dismissed_deleted == 2
        assert result.total_deleted == 5
        posting_repo.delete_by_score_before.assert_awaited_once_with(
            min_score=65, max_score=75, discovered_before=NOW - timedelta(days=7),
        )
        posting_repo.delete_dismissed_before.assert_awaited_once_with(NOW - timedelta(days=30))

    @pytest.mark.asyncio
    async def test_one_purge_failing_does_not_stop_the_other(self, lifecycle, posting_repo):
        posting_repo.delete_by_score_before.side_effect = RepositoryException("locked")
        posting_repo.delete_dismissed_before.return_value = 4

        result = await lifecycle.cleanup(NOW)

        assert result.borderline_deleted == 0
        assert result.dismissed_deleted == 4
        assert len(result.errors) == 1
        assert result.errors[0].startswith("borderline")
