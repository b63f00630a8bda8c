"""
Tests for rescoring borderline postings after a preference change
"""
import pytest
from dataclasses import replace
from datetime import timedelta
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

from application.services.matching import MatchScorer
from application.services.rescoring import RescoringService, significant_changes
from domain.entities import LocationPreference, MatchBreakdown, MatchResult, SkillRequirement
from domain.enums import ExperienceLevel, PostingStatus, WorkType
from factories import NOW, make_posting, make_preferences, make_profile


def _result(score):
    return MatchResult(score=score, breakdown=MatchBreakdown(skills=float(score)))


@pytest.fixture
def candidate_id():
    return uuid4()


@pytest.fixture
def posting_repo():
    repo = Mock()
    repo.get_borderline = AsyncMock(return_value=[])
    repo.update = AsyncMock(side_effect=lambda posting: posting)
    return repo


@pytest.fixture
def profile_repo(candidate_id):
    repo = Mock()
    repo.get_by_id = AsyncMock(return_value=make_profile(candidate_id))
    return repo


@pytest.fixture
def scorer():
    return Mock()


def test_significant_fields():
    assert significant_changes({"preferred_job_titles", "is_active"}) == {"preferred_job_titles"}
    assert significant_changes({"email_notification_frequency", "avoid_keywords"}) == set()


class TestRescoringService:

    @pytest.mark.asyncio
    async def test_promotes_only_postings_reaching_threshold(self, candidate_id, posting_repo, profile_repo, scorer):
        rising = make_posting(candidate_id, score=70, title="Rising")
        staying = make_posting(candidate_id, score=68, title="Staying")
        posting_repo.get_borderline.return_value = [rising, staying]
        scorer.score.side_effect = [_result(80), _result(72)]
        cache = Mock(invalidate=AsyncMock())
        service = RescoringService(posting_repo, profile_repo, scorer, matches_cache=cache)

        result = await service.rescore(candidate_id, make_preferences(candidate_id), NOW)

        assert result.triggered
        assert result.examined == 2
        assert result.promoted == 1
        promoted = posting_repo.update.await_args.args[0]
        assert promoted.id == rising.id
        assert promoted.match_score == 80
        assert promoted.status == PostingStatus.NEW
        cache.invalidate.assert_awaited_once_with(candidate_id)

    @pytest.mark.asyncio
    async def test_queries_recent_borderline_window(self, candidate_id, posting_repo, profile_repo, scorer):
        service = RescoringService(posting_repo, profile_repo, scorer)

        await service.rescore(candidate_id, make_preferences(candidate_id), NOW)

        posting_repo.get_borderline.assert_awaited_once_with(
            candidate_id, min_score=65, max_score=75, discovered_since=NOW - timedelta(days=7),
        )

    @pytest.mark.asyncio
    async def test_missing_profile_skips(self, candidate_id, posting_repo, profile_repo, scorer):
        profile_repo.get_by_id.return_value = None
        service = RescoringService(posting_repo, profile_repo, scorer)

        result = await service.rescore(candidate_id, make_preferences(candidate_id), NOW)

        assert not result.triggered
        assert result.error == "Profile unavailable"
        posting_repo.get_borderline.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_promotion_is_skipped(self, candidate_id, posting_repo, profile_repo, scorer):
        posting_repo.get_borderline.return_value = [
            make_posting(candidate_id, score=70, title="A"),
            make_posting(candidate_id, score=70, title="B"),
        ]
        posting_repo.update.side_effect = [Exception("write failed"), make_posting(candidate_id)]
        scorer.score.return_value = _result(90)
        service = RescoringService(posting_repo, profile_repo, scorer)

        result = await service.rescore(candidate_id, make_preferences(candidate_id), NOW)

        assert result.promoted == 1

    @pytest.mark.asyncio
    async def test_lock_held_elsewhere(self, candidate_id, posting_repo, profile_repo, scorer):
        lock = Mock(acquire=AsyncMock(return_value=False), release=AsyncMock())
        service = RescoringService(posting_repo, profile_repo, scorer, lock=lock)

        result = await service.rescore(candidate_id, make_preferences(candidate_id), NOW)

        assert not result.triggered
        lock.release.assert_not_awaited()
        posting_repo.get_borderline.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lock_released_after_error(self, candidate_id, posting_repo, profile_repo, scorer):
        lock = Mock(acquire=AsyncMock(return_value=True), release=AsyncMock())
        posting_repo.get_borderline.side_effect = RuntimeError("db gone")
        service = RescoringService(posting_repo, profile_repo, scorer, lock=lock)

        with pytest.raises(RuntimeError):
            await service.rescore(candidate_id, make_preferences(candidate_id), NOW)

        lock.release.assert_awaited_once_with(candidate_id)


def _office_posting(candidate_id, title, location, skills):
    posting = make_posting(
        candidate_id,
        title=title,
        location=location,
        work_type=WorkType.ONSITE,
        experience_level=ExperienceLevel.SENIOR,
        salary_min=110_000,
        salary_max=130_000,
        required_skills=skills,
    )
    # Stored score is what the scorer gave under the old preferences
    old = MatchScorer().score(posting.to_raw(), _profile_for(candidate_id), make_preferences())
    return replace(posting, match_score=old.score)


def _profile_for(candidate_id):
    return make_profile(candidate_id, location_preferences=LocationPreference(city="London", country="United Kingdom"))


class TestRescoringWithScorer:

    @pytest.fixture
    def profile_repo(self, candidate_id):
        return Mock(get_by_id=AsyncMock(return_value=_profile_for(candidate_id)))

    @pytest.mark.asyncio
    async def test_added_skill_promotes_borderline_posting(self, candidate_id, posting_repo, profile_repo):
        rising = _office_posting(candidate_id, "Rising", "Paris, France", ["Python", "Kafka"])
        staying = _office_posting(candidate_id, "Staying", "Paris, France", ["Python", "Erlang"])
        assert 65 <= rising.match_score < 75
        assert 65 <= staying.match_score < 75
        posting_repo.get_borderline.return_value = [rising, staying]
        service = RescoringService(posting_repo, profile_repo, MatchScorer())

        result = await service.rescore(
            candidate_id, make_preferences(candidate_id, required_skills=[SkillRequirement("Kafka")]), NOW,
        )

        assert result.promoted == 1
        promoted = posting_repo.update.await_args.args[0]
        assert promoted.id == rising.id
        assert promoted.match_score >= 75
        assert promoted.status == PostingStatus.NEW

    @pytest.mark.asyncio
    async def test_preferred_location_promotes_borderline_posting(self, candidate_id, posting_repo, profile_repo):
        berlin = _office_posting(candidate_id, "Berlin role", "Berlin, Germany", ["Python", "Kafka"])
        paris = _office_posting(candidate_id, "Paris role", "Paris, France", ["Python", "Kafka"])
        posting_repo.get_borderline.return_value = [berlin, paris]
        service = RescoringService(posting_repo, profile_repo, MatchScorer())
        preferences = make_preferences(
            candidate_id, preferred_locations=["Berlin"], remote_policy_preferences=[WorkType.ONSITE],
        )

        result = await service.rescore(candidate_id, preferences, NOW)

        assert result.promoted == 1
        assert posting_repo.update.await_args.args[0].id == berlin.id
