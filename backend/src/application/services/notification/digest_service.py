"""
Digest Service
Selects recent matches for a candidate and emails them as one digest
"""
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from loguru import logger

from application.repositories.interfaces import (
    ICandidateProfileRepository,
    IJobPostingRepository,
    IJobSearchPreferencesRepository,
)
from domain.enums import FREQUENCY_WINDOW_HOURS, VISIBLE_STATUSES, EmailFrequency
from domain.value_objects import MATCH_THRESHOLD
from . import DigestResult, IDigestSender, IEmailClient
from .digest_content import build_email_html, build_subject_line, build_unsubscribe_url


class DigestService(IDigestSender):
    """Email-digest collaborator built on a transactional email client"""

    def __init__(
        self,
        posting_repository: IJobPostingRepository,
        preferences_repository: IJobSearchPreferencesRepository,
        profile_repository: ICandidateProfileRepository,
        email_client: IEmailClient,
        app_url: str,
        unsubscribe_secret: str,
        match_threshold: int = MATCH_THRESHOLD,
        max_postings: int = 20,
    ):
        self.posting_repo = posting_repository
        self.preferences_repo = preferences_repository
        self.profile_repo = profile_repository
        self.email_client = email_client
        self.app_url = app_url.rstrip("/")
        self.unsubscribe_secret = unsubscribe_secret
        self.match_threshold = match_threshold
        self.max_postings = max_postings

    async def send_digest(
        self,
        candidate_id: UUID,
        frequency: EmailFrequency,
        now: Optional[datetime] = None
    ) -> DigestResult:
        if frequency == EmailFrequency.DISABLED:
            return DigestResult(sent=False)

        now = now or datetime.now(timezone.utc)

        profile = await self.profile_repo.get_by_id(candidate_id)
        if profile is None or not profile.email:
            logger.warning(f"No email address for candidate {candidate_id}, digest not sent")
            return DigestResult(sent=False, error="Candidate email not found")

        preferences = await self.preferences_repo.get_by_candidate_id(candidate_id)
        last_sent = preferences.last_email_sent_at if preferences else None
        since = last_sent or now - timedelta(hours=FREQUENCY_WINDOW_HOURS[frequency])

        postings = await self.posting_repo.get_digest_postings(
            candidate_id,
            min_score=self.match_threshold,
            statuses=VISIBLE_STATUSES,
            discovered_since=since,
            limit=self.max_postings,
        )
        if not postings:
            logger.debug(f"No new matches since {since.isoformat()} for candidate {candidate_id}")
            return DigestResult(sent=False)

        subject = build_subject_line(frequency, len(postings), now)
        html = build_email_html(
            profile.full_name,
            postings,
            frequency,
            self.app_url,
            build_unsubscribe_url(self.app_url, candidate_id, self.unsubscribe_secret),
        )

        try:
            await self.email_client.send(profile.email, subject, html)
        except Exception as e:
            logger.error(f"Failed to send digest to candidate {candidate_id}: {e}")
            return DigestResult(sent=False, error=str(e))

        if preferences is not None:
            try:
                await self.preferences_repo.update(replace(preferences, last_email_sent_at=now, updated_at=now))
            except Exception as e:
                logger.warning(f"Digest sent but last_email_sent_at not saved for candidate {candidate_id}: {e}")

        return DigestResult(sent=True, emails_sent=1, postings_included=len(postings))
