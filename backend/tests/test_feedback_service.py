"""
Tests for posting feedback and the implicit preferences learned from it
"""
import pytest
from dataclasses import replace
from datetime import timedelta
from unittest.mock import AsyncMock, Mock

from application.services.feedback import FeedbackService, apply_feedback
from core.exceptions import InvalidStatusTransitionException
from domain.entities import FeedbackStats, ImplicitPreferences
from domain.enums import FeedbackReason, PostingStatus, UserFeedback
from factories import NOW, make_posting, make_preferences


class TestApplyFeedback:

    def test_like_counts_posting_skills(self):
        posting = make_posting(required_skills=["Python", " Go ", ""])
        prefs = make_preferences(implicit_preferences=ImplicitPreferences(liked_skills={"python": 2}))

        updated = apply_feedback(prefs, posting, UserFeedback.LIKE, None, NOW)

        assert updated.feedback_stats.total_likes == 1
        assert updated.implicit_preferences.liked_skills == {"python": 3, "go": 1}
        assert updated.updated_at == NOW

    def test_salary_dislike_raises_adjustment_up_to_cap(self):
        prefs = make_preferences(implicit_preferences=ImplicitPreferences(salary_adjustment=45))

        updated = apply_feedback(prefs, make_posting(), UserFeedback.DISLIKE, FeedbackReason.SALARY_TOO_LOW, NOW)

        assert updated.implicit_preferences.salary_adjustment == 50
        assert updated.feedback_stats.total_dislikes == 1
        assert updated.feedback_stats.reasons == {"Salary too low": 1}

    def test_company_dislike_adds_company_once(self):
        prefs = make_preferences(avoid_companies=["Globex"])
        posting = make_posting(company_name="Acme")

        once = apply_feedback(prefs, posting, UserFeedback.DISLIKE, FeedbackReason.NOT_INTERESTED_IN_COMPANY, NOW)
        twice = apply_feedback(
            replace(once, avoid_companies=["globex", "ACME"]),
            posting,
            UserFeedback.DISLIKE,
            FeedbackReason.NOT_INTERESTED_IN_COMPANY,
            NOW,
        )

        assert once.avoid_companies == ["Globex", "Acme"]
        assert twice.avoid_companies == ["globex", "ACME"]

    def test_location_dislike_records_location(self):
        posting = make_posting(location="Paris, France")

        updated = apply_feedback(make_preferences(), posting, UserFeedback.DISLIKE, FeedbackReason.WRONG_LOCATION, NOW)

        assert updated.implicit_preferences.avoided_locations == ["Paris, France"]

    def test_hide_only_counts(self):
        prefs = make_preferences(feedback_stats=FeedbackStats(total_hides=4))

        updated = apply_feedback(prefs, make_posting(), UserFeedback.HIDE, None, NOW)

        assert updated.feedback_stats.total_hides == 5
        assert updated.implicit_preferences == prefs.implicit_preferences
        assert updated.avoid_companies == prefs.avoid_companies

    def test_hide_with_reason_learns_nothing(self):
        prefs = make_preferences(avoid_companies=["Globex"])
        posting = make_posting(company_name="Acme")

        updated = apply_feedback(prefs, posting, UserFeedback.HIDE, FeedbackReason.NOT_INTERESTED_IN_COMPANY, NOW)

        assert updated.feedback_stats.total_hides == 1
        assert updated.feedback_stats.reasons == {}
        assert updated.avoid_companies == ["Globex"]
        assert updated.implicit_preferences == prefs.implicit_preferences

    def test_original_preferences_untouched(self):
        prefs = make_preferences()

        apply_feedback(prefs, make_posting(required_skills=["Rust"]), UserFeedback.LIKE, None, NOW)

        assert prefs.implicit_preferences.liked_skills == {}
        assert prefs.feedback_stats.total_likes == 0


def _transition(posting, target, now=None, **changes):
    return replace(posting, status=target, updated_at=now, **changes)


class TestFeedbackService:

    @pytest.fixture
    def posting(self):
        return make_posting()

    @pytest.fixture
    def lifecycle(self, posting):
        lifecycle = Mock()
        lifecycle.get_owned_posting = AsyncMock(return_value=posting)
        lifecycle.transition = AsyncMock(side_effect=_transition)
        return lifecycle

    @pytest.fixture
    def preferences_repo(self, posting):
        repo = Mock()
        repo.get_by_candidate_id = AsyncMock(return_value=make_preferences(posting.candidate_id))
        repo.update = AsyncMock()
        return repo

    @pytest.fixture
    def service(self, lifecycle, preferences_repo):
        return FeedbackService(lifecycle, preferences_repo)

    @pytest.mark.asyncio
    async def test_like(self, service, posting):
        result = await service.submit(posting.candidate_id, posting.id, UserFeedback.LIKE, now=NOW)

        assert result.posting.status == PostingStatus.LIKED
        assert result.posting.user_feedback == UserFeedback.LIKE
        assert result.posting.discarded_until is None
        assert result.preferences_updated

    @pytest.mark.asyncio
    async def test_dislike_discards_for_thirty_days(self, service, posting):
        result = await service.submit(
            posting.candidate_id, posting.id, UserFeedback.DISLIKE, FeedbackReason.SKILLS_MISMATCH, now=NOW,
        )

        assert result.posting.status == PostingStatus.DISMISSED
        assert result.posting.feedback_reason == FeedbackReason.SKILLS_MISMATCH
        assert result.posting.discarded_until == NOW + timedelta(days=30)

    @pytest.mark.asyncio
    async def test_hide_ignores_reason(self, service, posting, preferences_repo):
        result = await service.submit(
            posting.candidate_id, posting.id, UserFeedback.HIDE, FeedbackReason.SALARY_TOO_LOW, now=NOW,
        )

        assert result.posting.status == PostingStatus.DISMISSED
        assert result.posting.feedback_reason is None
        saved = preferences_repo.update.await_args.args[0]
        assert saved.implicit_preferences.salary_adjustment == 0
        assert saved.feedback_stats.reasons == {}

    @pytest.mark.asyncio
    async def test_learning_failure_keeps_feedback(self, service, posting, preferences_repo):
        preferences_repo.update.side_effect = Exception("db down")

        result = await service.submit(posting.candidate_id, posting.id, UserFeedback.LIKE, now=NOW)

        assert result.posting.status == PostingStatus.LIKED
        assert not result.preferences_updated

    @pytest.mark.asyncio
    async def test_no_preferences_row(self, service, posting, preferences_repo):
        preferences_repo.get_by_candidate_id.return_value = None

        result = await service.submit(posting.candidate_id, posting.id, UserFeedback.HIDE, now=NOW)

        assert not result.preferences_updated
        preferences_repo.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transition_error_propagates(self, service, posting, lifecycle, preferences_repo):
        lifecycle.transition.side_effect = InvalidStatusTransitionException("applied", "liked")

        with pytest.raises(InvalidStatusTransitionException):
            await service.submit(posting.candidate_id, posting.id, UserFeedback.LIKE, now=NOW)

        preferences_repo.get_by_candidate_id.assert_not_awaited()
