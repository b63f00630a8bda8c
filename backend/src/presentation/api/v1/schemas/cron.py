"""
Batch Trigger Schemas
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from application.services.discovery.discovery_driver import DiscoveryRunSummary


class CandidateRunSchema(BaseModel):
    candidate_id: str
    status: str
    discovered: int
    inserted: int
    duplicates: int
    matched: int
    borderline: int
    digest_sent: bool
    reason: Optional[str] = None


class DiscoveryRunResponse(BaseModel):
    success: bool
    started_at: datetime
    finished_at: Optional[datetime] = None
    candidates_processed: int
    candidates_skipped: int
    candidates_failed: int
    total_discovered: int
    total_inserted: int
    total_matched: int
    total_borderline: int
    digests_sent: int
    borderline_deleted: int
    dismissed_deleted: int
    errors: List[str]
    results: List[CandidateRunSchema]

    @classmethod
    def from_summary(cls, summary: DiscoveryRunSummary) -> "DiscoveryRunResponse":
        return cls(
            success=summary.candidates_failed == 0,
            started_at=summary.started_at,
            finished_at=summary.finished_at,
            candidates_processed=summary.candidates_processed,
            candidates_skipped=summary.candidates_skipped,
            candidates_failed=summary.candidates_failed,
            total_discovered=summary.total_discovered,
            total_inserted=summary.total_inserted,
            total_matched=summary.total_matched,
            total_borderline=summary.total_borderline,
            digests_sent=summary.digests_sent,
            borderline_deleted=summary.borderline_deleted,
            dismissed_deleted=summary.dismissed_deleted,
            errors=summary.errors,
            results=[
                CandidateRunSchema(
                    candidate_id=str(r.candidate_id),
                    status=r.status,
                    discovered=r.discovered,
                    inserted=r.inserted,
                    duplicates=r.duplicates,
                    matched=r.matched,
                    borderline=r.borderline,
                    digest_sent=r.digest_sent,
                    reason=r.reason,
                )
                for r in summary.results
            ],
        )
