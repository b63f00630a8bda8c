"""
Tests for preference reads, partial updates and the rescoring they trigger
"""
import pytest
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

from application.services.rescoring import RescoringResult
from core.exceptions import ValidationException
from domain.entities import SkillRequirement
from domain.enums import CompanySize, EmailFrequency, WorkType
from factories import make_preferences
from infrastructure.services.preference_service import PreferenceService


@pytest.fixture
def candidate_id():
    return uuid4()


@pytest.fixture
def repo(candidate_id):
    repo = Mock()
    repo.get_by_candidate_id = AsyncMock(return_value=make_preferences(candidate_id))
    repo.create = AsyncMock(side_effect=lambda preferences: preferences)
    repo.update = AsyncMock(side_effect=lambda preferences: preferences)
    return repo


@pytest.fixture
def rescoring():
    return Mock(rescore=AsyncMock(return_value=RescoringResult(triggered=True, promoted=2, examined=5)))


@pytest.fixture
def service(repo, rescoring):
    return PreferenceService(repo, rescoring)


class TestGetPreferences:

    @pytest.mark.asyncio
    async def test_existing_row(self, service, repo, candidate_id):
        prefs = await service.get_preferences(candidate_id)

        assert prefs.candidate_id == candidate_id
        repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_default_row_created_on_first_access(self, service, repo, candidate_id):
        repo.get_by_candidate_id.return_value = None

        prefs = await service.get_preferences(candidate_id)

        assert prefs.is_active
        assert prefs.email_notification_frequency == EmailFrequency.WEEKLY
        assert prefs.consecutive_zero_match_days == 0
        repo.create.assert_awaited_once()


class TestUpdatePreferences:

    @pytest.mark.asyncio
    async def test_unknown_field_rejected(self, service, repo, candidate_id):
        with pytest.raises(ValidationException) as exc_info:
            await service.update_preferences(candidate_id, {"favourite_colour": "blue"})

        assert exc_info.value.field == "favourite_colour"
        repo.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_value_rejected(self, service, candidate_id):
        with pytest.raises(ValidationException):
            await service.update_preferences(candidate_id, {"salary_min_override": -5})

    @pytest.mark.asyncio
    async def test_unchanged_values_do_not_write(self, service, repo, rescoring, candidate_id):
        prefs, result = await service.update_preferences(candidate_id, {"avoid_keywords": []})

        assert not result.triggered
        repo.update.assert_not_awaited()
        rescoring.rescore.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_minor_change_saved_without_rescoring(self, service, repo, rescoring, candidate_id):
        prefs, result = await service.update_preferences(
            candidate_id, {"email_notification_frequency": "daily", "avoid_keywords": [" on-call ", ""]},
        )

        assert prefs.email_notification_frequency == EmailFrequency.DAILY
        assert prefs.avoid_keywords == ["on-call"]
        assert not result.triggered
        rescoring.rescore.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_significant_change_triggers_rescoring(self, service, rescoring, candidate_id):
        prefs, result = await service.update_preferences(candidate_id, {
            "preferred_job_titles": ["Data Engineer"],
            "required_skills": ["Spark", {"skill": "Airflow", "proficiency": "expert"}],
            "remote_policy_preferences": ["remote", "bogus"],
            "company_size_preferences": ["11-50"],
        })

        assert prefs.preferred_job_titles == ["Data Engineer"]
        assert prefs.required_skills == [SkillRequirement("Spark"), SkillRequirement("Airflow", "expert")]
        assert prefs.remote_policy_preferences == [WorkType.REMOTE]
        assert prefs.company_size_preferences == [CompanySize.SMALL]
        assert result.promoted == 2
        assert rescoring.rescore.await_args.args[:2] == (candidate_id, prefs)

    @pytest.mark.asyncio
    async def test_rescoring_failure_keeps_update(self, service, repo, rescoring, candidate_id):
        rescoring.rescore.side_effect = RuntimeError("lock backend down")

        prefs, result = await service.update_preferences(candidate_id, {"avoid_companies": ["Initech"]})

        assert prefs.avoid_companies == ["Initech"]
        assert not result.triggered
        assert result.error == "lock backend down"
        repo.update.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unsubscribe(self, service, candidate_id):
        prefs = await service.unsubscribe(candidate_id)

        assert prefs.email_notification_frequency == EmailFrequency.DISABLED
