"""
Tests for the SQLAlchemy posting and preferences repositories
"""
import pytest
from datetime import timedelta
from uuid import uuid4

from application.repositories.interfaces import InsertOutcome
from domain.entities import FeedbackStats, ImplicitPreferences, RecommendedBoard, SkillRequirement
from domain.enums import EmailFrequency, PostingStatus, VISIBLE_STATUSES, WorkType
from factories import NOW, make_posting, make_preferences
from infrastructure.persistence.repositories.job_posting import SQLAlchemyJobPostingRepository
from infrastructure.persistence.repositories.job_preferences import SQLAlchemyJobSearchPreferencesRepository


@pytest.fixture
def postings(db_session):
    return SQLAlchemyJobPostingRepository(db_session)


@pytest.fixture
def preferences(db_session):
    return SQLAlchemyJobSearchPreferencesRepository(db_session)


async def _insert_all(repo, *items):
    for item in items:
        result = await repo.insert(item)
        assert result.inserted


class TestJobPostingRepository:

    @pytest.mark.asyncio
    async def test_insert_returns_stored_posting(self, postings):
        posting = make_posting(score=88, work_type=WorkType.REMOTE, required_skills=["Python", "Go"])

        result = await postings.insert(posting)

        assert result.outcome == InsertOutcome.INSERTED
        stored = result.posting
        assert stored.id == posting.id
        assert stored.match_score == 88
        assert stored.work_type == WorkType.REMOTE
        assert stored.required_skills == ["Python", "Go"]
        assert stored.discovered_at == NOW
        assert stored.discovered_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_same_fingerprint_for_same_candidate_conflicts(self, postings):
        candidate_id = uuid4()
        await _insert_all(postings, make_posting(candidate_id))

        again = await postings.insert(make_posting(candidate_id, source_url="https://elsewhere.example.com"))
        other_candidate = await postings.insert(make_posting(uuid4()))

        assert again.outcome == InsertOutcome.CONFLICT
        assert other_candidate.outcome == InsertOutcome.INSERTED

    @pytest.mark.asyncio
    async def test_conflict_does_not_break_the_session(self, postings):
        candidate_id = uuid4()
        await _insert_all(postings, make_posting(candidate_id))
        await postings.insert(make_posting(candidate_id))

        result = await postings.insert(make_posting(candidate_id, title="Another Role"))

        assert result.inserted

    @pytest.mark.asyncio
    async def test_update_persists_status_and_feedback_fields(self, postings):
        posting = make_posting()
        await _insert_all(postings, posting)
        changed = make_posting(
            posting.candidate_id,
            id=posting.id,
            status=PostingStatus.DISMISSED,
            discarded_until=NOW + timedelta(days=30),
            updated_at=NOW,
        )

        await postings.update(changed)
        stored = await postings.get_by_id(posting.id)

        assert stored.status == PostingStatus.DISMISSED
        assert stored.discarded_until == NOW + timedelta(days=30)

    @pytest.mark.asyncio
    async def test_get_matches_filters_and_orders(self, postings):
        cid = uuid4()
        top = make_posting(cid, score=95, title="Expired discard", discarded_until=NOW - timedelta(days=1))
        good = make_posting(cid, score=90, title="Good")
        fair = make_posting(cid, score=80, title="Fair")
        hidden = make_posting(cid, score=99, title="Hidden", discarded_until=NOW + timedelta(days=5))
        border = make_posting(cid, score=70, title="Borderline")
        applied = make_posting(cid, score=97, title="Applied", status=PostingStatus.APPLIED)
        await _insert_all(postings, top, good, fair, hidden, border, applied, make_posting(uuid4(), score=99))

        matches = await postings.get_matches(cid, min_score=75, statuses=VISIBLE_STATUSES, now=NOW, limit=10)

        assert [m.title for m in matches] == ["Expired discard", "Good", "Fair"]

    @pytest.mark.asyncio
    async def test_get_matches_limit(self, postings):
        cid = uuid4()
        await _insert_all(postings, *[make_posting(cid, score=80 + i, title=f"Job {i}") for i in range(4)])

        matches = await postings.get_matches(cid, min_score=75, statuses=VISIBLE_STATUSES, now=NOW, limit=2)

        assert [m.match_score for m in matches] == [83, 82]

    @pytest.mark.asyncio
    async def test_borderline_window(self, postings):
        cid = uuid4()
        recent = make_posting(cid, score=70, title="Recent")
        old = make_posting(cid, score=70, title="Old", discovered_at=NOW - timedelta(days=9))
        await _insert_all(postings, recent, old, make_posting(cid, score=80, title="Match"))

        found = await postings.get_borderline(cid, min_score=65, max_score=75, discovered_since=NOW - timedelta(days=7))

        assert [p.title for p in found] == ["Recent"]

    @pytest.mark.asyncio
    async def test_purge_old_borderline(self, postings):
        cid = uuid4()
        old_border = make_posting(cid, score=68, title="Old border", discovered_at=NOW - timedelta(days=8))
        new_border = make_posting(cid, score=68, title="New border")
        six_days = make_posting(cid, score=70, title="Six days", discovered_at=NOW - timedelta(days=6))
        old_match = make_posting(cid, score=90, title="Old match", discovered_at=NOW - timedelta(days=40))
        await _insert_all(postings, old_border, new_border, six_days, old_match)

        deleted = await postings.delete_by_score_before(65, 75, NOW - timedelta(days=7))

        assert deleted == 1
        assert await postings.get_by_id(old_border.id) is None
        assert await postings.get_by_id(six_days.id) is not None
        assert await postings.get_by_id(old_match.id) is not None

    @pytest.mark.asyncio
    async def test_purge_dismissed_requires_discard_date(self, postings):
        cid = uuid4()
        expired = make_posting(
            cid, title="Expired", status=PostingStatus.DISMISSED, discarded_until=NOW - timedelta(days=31),
        )
        recent = make_posting(
            cid, title="Recent", status=PostingStatus.DISMISSED, discarded_until=NOW - timedelta(days=2),
        )
        undated = make_posting(cid, title="Undated", status=PostingStatus.DISMISSED)
        await _insert_all(postings, expired, recent, undated)

        deleted = await postings.delete_dismissed_before(NOW - timedelta(days=30))

        assert deleted == 1
        assert await postings.get_by_id(undated.id) is not None


class TestJobSearchPreferencesRepository:

    @pytest.mark.asyncio
    async def test_round_trip(self, preferences):
        prefs = make_preferences(
            preferred_job_titles=["Backend Engineer"],
            required_skills=[SkillRequirement("Python", "expert")],
            remote_policy_preferences=[WorkType.REMOTE],
            email_notification_frequency=EmailFrequency.DAILY,
            ai_recommended_boards=[RecommendedBoard(name="HN", url="https://hn.example.com", reason="Startups")],
            ai_last_analysis_at=NOW,
            feedback_stats=FeedbackStats(total_likes=2, reasons={"Other": 1}),
            implicit_preferences=ImplicitPreferences(salary_adjustment=10, liked_skills={"python": 2}),
        )

        await preferences.create(prefs)
        stored = await preferences.get_by_candidate_id(prefs.candidate_id)

        assert stored.required_skills == [SkillRequirement("Python", "expert")]
        assert stored.remote_policy_preferences == [WorkType.REMOTE]
        assert stored.email_notification_frequency == EmailFrequency.DAILY
        assert stored.insights.recommended_boards[0].name == "HN"
        assert stored.insights.generated_at == NOW
        assert stored.feedback_stats.total_likes == 2
        assert stored.implicit_preferences.liked_skills == {"python": 2}

    @pytest.mark.asyncio
    async def test_get_active_skips_inactive(self, preferences):
        active = make_preferences()
        await preferences.create(active)
        await preferences.create(make_preferences(is_active=False))

        found = await preferences.get_active()

        assert [p.candidate_id for p in found] == [active.candidate_id]
