"""
Discovery Driver
Daily batch: discover, score, ingest and notify for every active candidate,
then run cleanup once for the whole batch.
"""
import contextlib
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import AsyncContextManager, Callable, List, Optional
from uuid import UUID

from loguru import logger

from application.repositories.interfaces import (
    ICandidateProfileRepository,
    IJobSearchPreferencesRepository,
)
from application.services.access import ICapabilityCheck
from application.services.ingestion import PostingIngestor
from application.services.lifecycle import LifecycleManager
from application.services.matching import MatchScorer
from application.services.notification.notification_gate import NotificationGate
from core.exceptions import ResourceNotFoundException
from domain.entities import JobSearchPreferences
from . import IDiscoveryClient


def should_search_today(
    preferences: JobSearchPreferences,
    now: datetime,
    backoff_after_days: int = 7,
    backoff_interval_days: int = 3
) -> bool:
    """
    Cadence policy

    Candidates search daily until they have gone `backoff_after_days`
    consecutive days without a match, then every `backoff_interval_days`.
    """
    if not preferences.is_active:
        return False
    if preferences.consecutive_zero_match_days < backoff_after_days:
        return True
    if preferences.last_search_at is None:
        return True

    last = preferences.last_search_at
    if last.tzinfo is None:
        last = last.replace(tzinfo=timezone.utc)
    return now - last >= timedelta(days=backoff_interval_days)


@dataclass
class CandidateRunResult:
    candidate_id: UUID
    status: str  # processed | skipped | discovery_failed | failed
    discovered: int = 0
    inserted: int = 0
    duplicates: int = 0
    matched: int = 0
    borderline: int = 0
    digest_sent: bool = False
    reason: Optional[str] = None


@dataclass
class DiscoveryRunSummary:
    started_at: datetime
    finished_at: Optional[datetime] = None
    candidates_processed: int = 0
    candidates_skipped: int = 0
    candidates_failed: int = 0
    total_discovered: int = 0
    total_inserted: int = 0
    total_matched: int = 0
    total_borderline: int = 0
    digests_sent: int = 0
    borderline_deleted: int = 0
    dismissed_deleted: int = 0
    errors: List[str] = field(default_factory=list)
    results: List[CandidateRunResult] = field(default_factory=list)

    def add(self, result: CandidateRunResult) -> None:
        self.results.append(result)
        if result.status == "skipped":
            self.candidates_skipped += 1
        elif result.status == "failed":
            self.candidates_failed += 1
        else:
            self.candidates_processed += 1
        self.total_discovered += result.discovered
        self.total_inserted += result.inserted
        self.total_matched += result.matched
        self.total_borderline += result.borderline
        self.digests_sent += int(result.digest_sent)


class DiscoveryDriver:
    """Runs one discovery batch across all active candidates"""

    def __init__(
        self,
        preferences_repository: IJobSearchPreferencesRepository,
        profile_repository: ICandidateProfileRepository,
        discovery_client: IDiscoveryClient,
        scorer: MatchScorer,
        ingestor: PostingIngestor,
        lifecycle: LifecycleManager,
        notification_gate: NotificationGate,
        capability: ICapabilityCheck,
        backoff_after_days: int = 7,
        backoff_interval_days: int = 3,
        unit_of_work: Optional[Callable[[], AsyncContextManager]] = None,
    ):
        self.preferences_repo = preferences_repository
        self.profile_repo = profile_repository
        self.discovery_client = discovery_client
        self.scorer = scorer
        self.ingestor = ingestor
        self.lifecycle = lifecycle
        self.notification_gate = notification_gate
        self.capability = capability
        self.backoff_after_days = backoff_after_days
        self.backoff_interval_days = backoff_interval_days
        # Wraps each candidate so a failed candidate rolls back alone
        self.unit_of_work = unit_of_work or contextlib.nullcontext

    async def run(self, now: Optional[datetime] = None) -> DiscoveryRunSummary:
        now = now or datetime.now(timezone.utc)
        summary = DiscoveryRunSummary(started_at=now)
        logger.info("Starting job discovery run")

        try:
            candidates = await self.preferences_repo.get_active()
        except Exception as e:
            logger.error(f"Could not load active candidates: {e}")
            summary.errors.append(f"Active candidates unavailable: {e}")
            candidates = []

        logger.info(f"{len(candidates)} candidates with active search preferences")

        for preferences in candidates:
            candidate_id = preferences.candidate_id
            try:
                async with self.unit_of_work():
                    result = await self.process_candidate(preferences, now)
            except Exception as e:
                logger.error(f"Discovery failed for candidate {candidate_id}: {e}")
                summary.errors.append(f"{candidate_id}: {e}")
                result = CandidateRunResult(candidate_id=candidate_id, status="failed", reason=str(e))
            summary.add(result)

        cleanup = await self.lifecycle.cleanup(now)
        summary.borderline_deleted = cleanup.borderline_deleted
        summary.dismissed_deleted = cleanup.dismissed_deleted
        summary.errors.extend(cleanup.errors)

        summary.finished_at = datetime.now(timezone.utc)
        logger.info(
            f"Discovery run complete: {summary.candidates_processed} processed, "
            f"{summary.candidates_skipped} skipped, {summary.candidates_failed} failed, "
            f"{summary.total_inserted} new postings, {summary.total_matched} matches, "
            f"{summary.digests_sent} digests"
        )
        return summary

    async def process_candidate(self, preferences: JobSearchPreferences, now: datetime) -> CandidateRunResult:
        candidate_id = preferences.candidate_id

        if not self.capability.discovery_enabled(candidate_id):
            return CandidateRunResult(candidate_id=candidate_id, status="skipped", reason="discovery disabled")

        if not should_search_today(preferences, now, self.backoff_after_days, self.backoff_interval_days):
            logger.debug(
                f"Skipping candidate {candidate_id}: {preferences.consecutive_zero_match_days} days without matches"
            )
            return CandidateRunResult(candidate_id=candidate_id, status="skipped", reason="not due")

        profile = await self.profile_repo.get_by_id(candidate_id)
        if profile is None:
            raise ResourceNotFoundException("CandidateProfile", str(candidate_id))

        try:
            raw_postings = await self.discovery_client.discover(profile, preferences)
        except Exception as e:
            logger.warning(f"Discovery unavailable for candidate {candidate_id}: {e}")
            return CandidateRunResult(candidate_id=candidate_id, status="discovery_failed", reason=str(e))

        logger.info(f"Discovered {len(raw_postings)} postings for candidate {candidate_id}")

        batch = raw_postings[:self.ingestor.max_postings_per_run]
        scored = [(raw, self.scorer.score(raw, profile, preferences)) for raw in batch]
        ingestion = await self.ingestor.ingest(candidate_id, scored, now)
        if ingestion.inserted:
            await self.lifecycle.invalidate_matches(candidate_id)

        zero_days = 0 if ingestion.matched > 0 else preferences.consecutive_zero_match_days + 1
        updated = replace(preferences, last_search_at=now, consecutive_zero_match_days=zero_days, updated_at=now)
        try:
            updated = await self.preferences_repo.update(updated)
        except Exception as e:
            logger.warning(f"Search state not saved for candidate {candidate_id}: {e}")

        outcome = await self.notification_gate.notify(updated, ingestion.matched, now)

        return CandidateRunResult(
            candidate_id=candidate_id,
            status="processed",
            discovered=len(raw_postings),
            inserted=ingestion.inserted,
            duplicates=ingestion.duplicates,
            matched=ingestion.matched,
            borderline=ingestion.borderline,
            digest_sent=outcome.sent,
        )
