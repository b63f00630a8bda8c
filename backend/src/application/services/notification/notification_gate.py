"""
Notification Gate
Decides whether a candidate's digest is due, independent of how the
discovery run itself went.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from loguru import logger

from application.services.access import ICapabilityCheck
from domain.entities import JobSearchPreferences
from domain.enums import EmailFrequency
from . import IDigestSender


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_digest_due(preferences: JobSearchPreferences, now: datetime) -> bool:
    """
    Cadence check alone (no match-count requirement)

    daily: more than 24h since the last send
    weekly: Monday (UTC) and more than 6 days since the last send
    monthly: first day of the month (UTC)
    """
    frequency = preferences.email_notification_frequency
    if frequency == EmailFrequency.DISABLED:
        return False

    last_sent = preferences.last_email_sent_at
    if last_sent is None:
        return True

    now = _as_utc(now)
    elapsed = now - _as_utc(last_sent)

    if frequency == EmailFrequency.DAILY:
        return elapsed > timedelta(hours=24)
    if frequency == EmailFrequency.WEEKLY:
        return now.weekday() == 0 and elapsed > timedelta(days=6)
    if frequency == EmailFrequency.MONTHLY:
        return now.day == 1
    return False


@dataclass(frozen=True)
class NotificationOutcome:
    attempted: bool
    sent: bool = False
    reason: Optional[str] = None
    error: Optional[str] = None


class NotificationGate:
    """Gates digest dispatch on cadence and on matches found in the current run"""

    def __init__(self, digest_sender: IDigestSender, capability: ICapabilityCheck):
        self.digest_sender = digest_sender
        self.capability = capability

    def should_notify(self, preferences: JobSearchPreferences, new_matches: int, now: datetime) -> Optional[str]:
        """Return None when eligible, otherwise the reason for skipping"""
        if new_matches <= 0:
            return "no new matches"
        if not self.capability.notifications_enabled(preferences.candidate_id):
            return "notifications disabled"
        if not is_digest_due(preferences, now):
            return "not due"
        return None

    async def notify(
        self,
        preferences: JobSearchPreferences,
        new_matches: int,
        now: Optional[datetime] = None
    ) -> NotificationOutcome:
        """Send the digest when eligible; a send failure is logged and reported, never raised"""
        now = now or datetime.now(timezone.utc)
        candidate_id = preferences.candidate_id

        skip_reason = self.should_notify(preferences, new_matches, now)
        if skip_reason:
            logger.debug(f"Digest skipped for candidate {candidate_id}: {skip_reason}")
            return NotificationOutcome(attempted=False, reason=skip_reason)

        try:
            result = await self.digest_sender.send_digest(
                candidate_id, preferences.email_notification_frequency, now
            )
        except Exception as e:
            logger.error(f"Digest failed for candidate {candidate_id}: {e}")
            return NotificationOutcome(attempted=True, sent=False, error=str(e))

        if result.sent:
            logger.info(f"Digest sent to candidate {candidate_id} ({result.postings_included} postings)")
        return NotificationOutcome(attempted=True, sent=result.sent, error=result.error)
