"""
Rescoring Trigger
Re-evaluation of borderline postings after preference changes
"""
from .interfaces import ICandidateLock
from .rescoring_service import (
    RescoringService,
    RescoringResult,
    SIGNIFICANT_FIELDS,
    significant_changes,
)

__all__ = [
    "ICandidateLock",
    "RescoringService",
    "RescoringResult",
    "SIGNIFICANT_FIELDS",
    "significant_changes",
]
