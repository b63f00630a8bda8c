"""
Tests for the HTTP layer: candidate identity, error mapping and the batch trigger
"""
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock, patch
from uuid import uuid4

from fastapi.testclient import TestClient

from application.services.discovery.discovery_driver import DiscoveryRunSummary
from application.services.lifecycle.lifecycle_manager import ApplyResult
from application.services.notification.digest_content import generate_unsubscribe_token
from core.config import settings
from core.database import get_db
from core.exceptions import (
    AuthorizationException,
    CollaboratorUnavailableException,
    InvalidStatusTransitionException,
    ResourceNotFoundException,
    ValidationException,
)
from domain.enums import PostingStatus
from factories import make_posting, make_preferences
from main import app
from presentation.api.v1.container import (
    get_feedback_service,
    get_insights_cache,
    get_lifecycle_manager,
    get_matches_cache,
    get_preference_service,
)
from presentation.api.v1.errors import to_http_exception

BASE = "/api/v1/job-search"


@pytest.fixture
def candidate_id():
    return uuid4()


@pytest.fixture
def headers(candidate_id):
    return {"X-Candidate-Id": str(candidate_id)}


@pytest.fixture
def preference_service(candidate_id):
    service = Mock()
    service.get_preferences = AsyncMock(return_value=make_preferences(candidate_id))
    service.unsubscribe = AsyncMock(return_value=make_preferences(candidate_id))
    return service


@pytest.fixture
def lifecycle():
    return Mock(list_matches=AsyncMock(return_value=[]), mark_viewed=AsyncMock(), apply=AsyncMock())


@pytest.fixture
def matches_cache():
    return Mock(get=AsyncMock(return_value=None), set=AsyncMock())


@pytest.fixture
def client(preference_service, lifecycle, matches_cache):
    # Lifespan is not entered, so no database or Redis is touched
    app.dependency_overrides[get_preference_service] = lambda: preference_service
    app.dependency_overrides[get_lifecycle_manager] = lambda: lifecycle
    app.dependency_overrides[get_matches_cache] = lambda: matches_cache
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


class TestCandidateIdentity:

    def test_missing_header(self, client):
        response = client.get(f"{BASE}/preferences")
        assert response.status_code == 401

    def test_malformed_header(self, client):
        response = client.get(f"{BASE}/preferences", headers={"X-Candidate-Id": "not-a-uuid"})
        assert response.status_code == 400

    def test_preferences_for_candidate(self, client, headers, candidate_id, preference_service):
        response = client.get(f"{BASE}/preferences", headers=headers)

        assert response.status_code == 200
        assert response.json()["candidate_id"] == str(candidate_id)
        preference_service.get_preferences.assert_awaited_once_with(candidate_id)


class TestErrorMapping:

    @pytest.mark.parametrize("error,status", [
        (ResourceNotFoundException("JobPosting", "x"), 404),
        (AuthorizationException("not yours"), 403),
        (ValidationException("salary_min_override", "must not be negative"), 400),
        (InvalidStatusTransitionException("applied", "new"), 400),
        (CollaboratorUnavailableException("discovery", "HTTP 503"), 503),
    ])
    def test_domain_errors(self, error, status):
        assert to_http_exception(error, "do something").status_code == status

    def test_update_validation_error(self, client, headers, preference_service):
        preference_service.update_preferences = AsyncMock(
            side_effect=ValidationException("preferred_locations", "bad value"),
        )

        response = client.put(f"{BASE}/preferences", headers=headers, json={"preferred_locations": ["Mars"]})

        assert response.status_code == 400

    def test_feedback_on_foreign_posting(self, client, headers):
        feedback_service = Mock(submit=AsyncMock(side_effect=AuthorizationException("not yours")))
        app.dependency_overrides[get_feedback_service] = lambda: feedback_service

        response = client.post(f"{BASE}/feedback", headers=headers, json={
            "posting_id": str(uuid4()), "feedback": "like",
        })

        assert response.status_code == 403

    def test_apply_to_missing_posting(self, client, headers, lifecycle):
        lifecycle.apply.side_effect = ResourceNotFoundException("JobPosting", "missing")

        response = client.post(f"{BASE}/apply", headers=headers, json={"posting_id": str(uuid4())})

        assert response.status_code == 404

    def test_insights_unavailable(self, client, headers):
        insights = Mock(get_insights=AsyncMock(side_effect=CollaboratorUnavailableException("insights", "down")))
        app.dependency_overrides[get_insights_cache] = lambda: insights

        response = client.get(f"{BASE}/insights", headers=headers)

        assert response.status_code == 503

    def test_unexpected_error(self, client, headers, lifecycle):
        lifecycle.mark_viewed.side_effect = RuntimeError("boom")

        response = client.post(f"{BASE}/postings/{uuid4()}/view", headers=headers)

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to view posting"


class TestMatches:

    def test_served_from_cache(self, client, headers, lifecycle, matches_cache):
        matches_cache.get.return_value = [{"title": f"Job {i}"} for i in range(5)]

        body = client.get(f"{BASE}/matches?limit=2", headers=headers).json()

        assert body["cached"] is True
        assert body["count"] == 2
        lifecycle.list_matches.assert_not_awaited()

    def test_cache_miss_fills_cache(self, client, headers, candidate_id, lifecycle, matches_cache):
        lifecycle.list_matches.return_value = [make_posting(candidate_id, score=90), make_posting(candidate_id)]

        body = client.get(f"{BASE}/matches?limit=1", headers=headers).json()

        assert body["count"] == 1
        assert body["matches"][0]["match_score"] == 90
        assert len(matches_cache.set.await_args.args[1]) == 2

    def test_limit_bounds(self, client, headers):
        assert client.get(f"{BASE}/matches?limit=0", headers=headers).status_code == 422
        assert client.get(f"{BASE}/matches?limit=21", headers=headers).status_code == 422

    def test_view_returns_posting(self, client, headers, candidate_id, lifecycle):
        lifecycle.mark_viewed.return_value = make_posting(candidate_id, status=PostingStatus.VIEWED)

        response = client.post(f"{BASE}/postings/{uuid4()}/view", headers=headers)

        assert response.json()["status"] == "viewed"

    def test_apply_partial_success(self, client, headers, lifecycle):
        lifecycle.apply.return_value = ApplyResult(application_id=uuid4(), created=True, posting_updated=False)

        body = client.post(f"{BASE}/apply", headers=headers, json={"posting_id": str(uuid4())}).json()

        assert body["created"] is True
        assert body["posting_updated"] is False
        assert "could not be updated" in body["message"]


class TestUnsubscribe:

    def test_valid_token(self, client, candidate_id, preference_service):
        token = generate_unsubscribe_token(candidate_id, settings.UNSUBSCRIBE_SECRET)

        response = client.get(f"{BASE}/unsubscribe", params={"token": token})

        assert response.status_code == 200
        preference_service.unsubscribe.assert_awaited_once_with(candidate_id)

    def test_forged_token(self, client, candidate_id, preference_service):
        token = generate_unsubscribe_token(candidate_id, "some-other-secret")

        response = client.get(f"{BASE}/unsubscribe", params={"token": token})

        assert response.status_code == 400
        preference_service.unsubscribe.assert_not_awaited()


class TestBatchTrigger:

    URL = "/api/v1/cron/job-search"

    def test_unconfigured_secret(self, client):
        with patch.object(settings, "CRON_SECRET", None):
            response = client.post(self.URL, headers={"Authorization": "Bearer anything"})
        assert response.status_code == 503

    @pytest.mark.parametrize("header", [None, "Bearer wrong", "s3cret", "Basic s3cret"])
    def test_rejected_credentials(self, client, header):
        headers = {"Authorization": header} if header else {}
        with patch.object(settings, "CRON_SECRET", "s3cret"):
            response = client.post(self.URL, headers=headers)
        assert response.status_code == 401

    def test_runs_batch(self, client):
        async def _session():
            yield Mock()

        summary = DiscoveryRunSummary(started_at=datetime(2026, 3, 16, tzinfo=timezone.utc), candidates_processed=3)
        driver = Mock(run=AsyncMock(return_value=summary))
        app.dependency_overrides[get_db] = _session

        with patch.object(settings, "CRON_SECRET", "s3cret"), \
                patch("presentation.api.v1.endpoints.cron.build_discovery_driver", return_value=driver):
            response = client.post(self.URL, headers={"Authorization": "Bearer s3cret"})

        assert response.status_code == 200
        assert response.json()["candidates_processed"] == 3
        assert response.json()["success"] is True
