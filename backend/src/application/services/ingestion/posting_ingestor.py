"""
Posting Ingestor
Turns a scored batch of discovered postings into persisted rows, de-duplicated
per candidate by content fingerprint.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Sequence, Set, Tuple
from uuid import UUID

from loguru import logger

from application.repositories.interfaces import IJobPostingRepository
from domain.entities import JobPosting, MatchResult, RawPosting
from domain.value_objects import MATCH_THRESHOLD, BORDERLINE_THRESHOLD


@dataclass
class IngestionResult:
    """Per-candidate ingestion counters"""

    received: int = 0
    inserted: int = 0
    duplicates: int = 0
    discarded: int = 0
    errors: int = 0
    matched: int = 0
    borderline: int = 0
    over_cap: int = 0
    inserted_postings: List[JobPosting] = field(default_factory=list)


class PostingIngestor:
    """Idempotent insert of scored postings"""

    def __init__(
        self,
        posting_repository: IJobPostingRepository,
        max_postings_per_run: int = 50,
        match_threshold: int = MATCH_THRESHOLD,
        borderline_threshold: int = BORDERLINE_THRESHOLD,
    ):
        self.posting_repo = posting_repository
        self.max_postings_per_run = max_postings_per_run
        self.match_threshold = match_threshold
        self.borderline_threshold = borderline_threshold

    async def ingest(
        self,
        candidate_id: UUID,
        scored_postings: Sequence[Tuple[RawPosting, MatchResult]],
        discovered_at: datetime,
    ) -> IngestionResult:
        """
        Persist every posting scored at or above the borderline floor

        Args:
            candidate_id: Candidate the postings were discovered for
            scored_postings: (raw posting, match result) pairs
            discovered_at: Discovery timestamp stamped on new rows

        Returns:
            IngestionResult; a fingerprint conflict counts as a duplicate, not an error
        """
        result = IngestionResult(received=len(scored_postings))
        seen: Set[str] = set()

        batch = list(scored_postings)
        if len(batch) > self.max_postings_per_run:
            result.over_cap = len(batch) - self.max_postings_per_run
            batch = batch[: self.max_postings_per_run]

        for raw, match in batch:
            if match.score < self.borderline_threshold:
                result.discarded += 1
                continue

            fingerprint = raw.content_fingerprint
            if fingerprint in seen:
                result.duplicates += 1
                continue
            seen.add(fingerprint)

            posting = JobPosting.from_raw(candidate_id, raw, match, discovered_at)
            outcome = await self.posting_repo.insert(posting)

            if outcome.conflict:
                logger.debug(f"Posting already known for candidate {candidate_id}: {raw.title} at {raw.company_name}")
                result.duplicates += 1
                continue

            if outcome.failed:
                logger.error(
                    f"Failed to store posting '{raw.title}' at {raw.company_name} "
                    f"for candidate {candidate_id}: {outcome.error}"
                )
                result.errors += 1
                continue

            result.inserted += 1
            result.inserted_postings.append(outcome.posting or posting)
            if match.score >= self.match_threshold:
                result.matched += 1
            else:
                result.borderline += 1

        logger.info(
            f"Ingested postings for candidate {candidate_id}: inserted={result.inserted} "
            f"(matched={result.matched}, borderline={result.borderline}), "
            f"duplicates={result.duplicates}, discarded={result.discarded}, errors={result.errors}"
        )
        return result
