"""
Tests for digest cadence, the notification gate and digest delivery
"""
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

from application.services.notification import DigestResult
from application.services.notification.digest_content import (
    build_email_html,
    build_subject_line,
    generate_unsubscribe_token,
    parse_unsubscribe_token,
)
from application.services.notification.digest_service import DigestService
from application.services.notification.notification_gate import NotificationGate, is_digest_due
from domain.enums import EmailFrequency, VISIBLE_STATUSES
from factories import NOW, make_posting, make_preferences, make_profile

SECRET = "test-secret"


class TestDigestCadence:

    def test_never_sent_is_due(self):
        assert is_digest_due(make_preferences(email_notification_frequency=EmailFrequency.MONTHLY), NOW)

    def test_disabled_is_never_due(self):
        assert not is_digest_due(make_preferences(email_notification_frequency=EmailFrequency.DISABLED), NOW)

    @pytest.mark.parametrize("hours_ago,due", [(25, True), (23, False)])
    def test_daily(self, hours_ago, due):
        prefs = make_preferences(
            email_notification_frequency=EmailFrequency.DAILY,
            last_email_sent_at=NOW - timedelta(hours=hours_ago),
        )
        assert is_digest_due(prefs, NOW) is due

    def test_weekly_on_monday(self):
        prefs = make_preferences(last_email_sent_at=NOW - timedelta(days=7))
        assert is_digest_due(prefs, NOW)

    def test_weekly_too_soon(self):
        prefs = make_preferences(last_email_sent_at=NOW - timedelta(days=5))
        assert not is_digest_due(prefs, NOW)

    def test_weekly_not_monday(self):
        prefs = make_preferences(last_email_sent_at=NOW - timedelta(days=14))
        assert not is_digest_due(prefs, NOW + timedelta(days=1))

    def test_monthly_on_first_day(self):
        first = datetime(2026, 4, 1, 9, 0, tzinfo=timezone.utc)
        prefs = make_preferences(
            email_notification_frequency=EmailFrequency.MONTHLY,
            last_email_sent_at=first - timedelta(days=31),
        )
        assert is_digest_due(prefs, first)
        assert not is_digest_due(prefs, first + timedelta(days=1))

    def test_naive_last_sent_is_treated_as_utc(self):
        prefs = make_preferences(
            email_notification_frequency=EmailFrequency.DAILY,
            last_email_sent_at=datetime(2026, 3, 15, 8, 0),
        )
        assert is_digest_due(prefs, NOW)


class TestNotificationGate:

    @pytest.fixture
    def sender(self):
        return Mock(send_digest=AsyncMock(return_value=DigestResult(sent=True, emails_sent=1, postings_included=3)))

    @pytest.fixture
    def capability(self):
        return Mock(notifications_enabled=Mock(return_value=True))

    @pytest.mark.asyncio
    async def test_sends_when_due_with_matches(self, sender, capability):
        prefs = make_preferences()

        outcome = await NotificationGate(sender, capability).notify(prefs, new_matches=3, now=NOW)

        assert outcome.attempted and outcome.sent
        sender.send_digest.assert_awaited_once_with(prefs.candidate_id, EmailFrequency.WEEKLY, NOW)

    @pytest.mark.asyncio
    async def test_no_matches_skips(self, sender, capability):
        outcome = await NotificationGate(sender, capability).notify(make_preferences(), new_matches=0, now=NOW)

        assert not outcome.attempted
        assert outcome.reason == "no new matches"
        sender.send_digest.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_capability_off_skips(self, sender, capability):
        capability.notifications_enabled.return_value = False

        outcome = await NotificationGate(sender, capability).notify(make_preferences(), new_matches=2, now=NOW)

        assert outcome.reason == "notifications disabled"

    @pytest.mark.asyncio
    async def test_not_due_skips(self, sender, capability):
        prefs = make_preferences(last_email_sent_at=NOW - timedelta(days=2))

        outcome = await NotificationGate(sender, capability).notify(prefs, new_matches=2, now=NOW)

        assert outcome.reason == "not due"

    @pytest.mark.asyncio
    async def test_send_failure_is_reported_not_raised(self, sender, capability):
        sender.send_digest.side_effect = RuntimeError("smtp down")

        outcome = await NotificationGate(sender, capability).notify(make_preferences(), new_matches=2, now=NOW)

        assert outcome.attempted
        assert not outcome.sent
        assert outcome.error == "smtp down"


class TestDigestContent:

    @pytest.mark.parametrize("frequency,count,subject", [
        (EmailFrequency.DAILY, 1, "1 New Job Match for You"),
        (EmailFrequency.DAILY, 4, "4 New Job Matches for You"),
        (EmailFrequency.WEEKLY, 3, "Your Weekly Job Digest: 3 New Matches"),
        (EmailFrequency.MONTHLY, 9, "March Job Market Summary"),
    ])
    def test_subject_lines(self, frequency, count, subject):
        assert build_subject_line(frequency, count, NOW) == subject

    def test_html_shows_five_cards_and_escapes_text(self):
        postings = [make_posting(company_name="<Acme>", title=f"Engineer {i}") for i in range(7)]

        html = build_email_html("Dana", postings, EmailFrequency.WEEKLY, "https://app.example.com", "https://u")

        assert "&lt;Acme&gt;" in html
        assert "<Acme>" not in html
        assert "Engineer 4" in html
        assert "Engineer 5" not in html
        assert "View 2 more matches" in html

    def test_unsubscribe_token_round_trip(self):
        candidate_id = uuid4()
        token = generate_unsubscribe_token(candidate_id, SECRET)

        assert parse_unsubscribe_token(token, SECRET) == candidate_id

    def test_unsubscribe_token_rejects_tampering(self):
        token = generate_unsubscribe_token(uuid4(), SECRET)
        other = generate_unsubscribe_token(uuid4(), SECRET)
        forged = f"{other.split('.')[0]}.{token.split('.')[1]}"

        assert parse_unsubscribe_token(forged, SECRET) is None
        assert parse_unsubscribe_token(token, "another-secret") is None
        assert parse_unsubscribe_token("garbage", SECRET) is None


class TestDigestService:

    @pytest.fixture
    def candidate_id(self):
        return uuid4()

    @pytest.fixture
    def repos(self, candidate_id):
        posting_repo = Mock(get_digest_postings=AsyncMock(return_value=[make_posting(candidate_id)]))
        preferences_repo = Mock(
            get_by_candidate_id=AsyncMock(return_value=make_preferences(candidate_id)),
            update=AsyncMock(),
        )
        profile_repo = Mock(get_by_id=AsyncMock(return_value=make_profile(candidate_id)))
        return posting_repo, preferences_repo, profile_repo

    @pytest.fixture
    def email_client(self):
        return Mock(send=AsyncMock(return_value="msg-1"))

    @pytest.fixture
    def service(self, repos, email_client):
        return DigestService(*repos, email_client, app_url="https://app.example.com/", unsubscribe_secret=SECRET)

    @pytest.mark.asyncio
    async def test_sends_recent_matches(self, service, repos, email_client, candidate_id):
        posting_repo, preferences_repo, _ = repos

        result = await service.send_digest(candidate_id, EmailFrequency.WEEKLY, NOW)

        assert result.sent
        assert result.postings_included == 1
        posting_repo.get_digest_postings.assert_awaited_once_with(
            candidate_id,
            min_score=75,
            statuses=VISIBLE_STATUSES,
            discovered_since=NOW - timedelta(hours=168),
            limit=20,
        )
        to, subject, html = email_client.send.await_args.args
        assert to == "dana@example.com"
        assert subject == "Your Weekly Job Digest: 1 New Match"
        assert "https://app.example.com/api/v1/job-search/unsubscribe?token=" in html
        assert preferences_repo.update.await_args.args[0].last_email_sent_at == NOW

    @pytest.mark.asyncio
    async def test_window_starts_at_last_send(self, service, repos, candidate_id):
        posting_repo, preferences_repo, _ = repos
        last = NOW - timedelta(days=3)
        preferences_repo.get_by_candidate_id.return_value = make_preferences(candidate_id, last_email_sent_at=last)

        await service.send_digest(candidate_id, EmailFrequency.DAILY, NOW)

        assert posting_repo.get_digest_postings.await_args.kwargs["discovered_since"] == last

    @pytest.mark.asyncio
    async def test_nothing_new_sends_nothing(self, service, repos, email_client, candidate_id):
        repos[0].get_digest_postings.return_value = []

        result = await service.send_digest(candidate_id, EmailFrequency.WEEKLY, NOW)

        assert not result.sent
        email_client.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_email(self, service, repos, candidate_id):
        repos[2].get_by_id.return_value = None

        result = await service.send_digest(candidate_id, EmailFrequency.WEEKLY, NOW)

        assert not result.sent
        assert result.error == "Candidate email not found"

    @pytest.mark.asyncio
    async def test_delivery_failure_keeps_last_sent(self, service, repos, email_client, candidate_id):
        email_client.send.side_effect = Exception("rejected")

        result = await service.send_digest(candidate_id, EmailFrequency.WEEKLY, NOW)

        assert not result.sent
        assert result.error == "rejected"
        repos[1].update.assert_not_awaited()
