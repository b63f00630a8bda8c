"""Domain Entities - Core business objects"""

from .candidate_profile import CandidateProfile, CvAnalysis, LocationPreference
from .search_preferences import (
    JobSearchPreferences,
    SearchInsights,
    RecommendedBoard,
    SkillRequirement,
    FeedbackStats,
    ImplicitPreferences,
    default_preferences,
)
from .job_posting import (
    RawPosting,
    JobPosting,
    MatchBreakdown,
    MatchResult,
    generate_content_fingerprint,
)
from .application import JobApplication, priority_for_score
__all__ = [
    "CandidateProfile",
    "CvAnalysis",
    "LocationPreference",
    "JobSearchPreferences",
    "SearchInsights",
    "RecommendedBoard",
    "SkillRequirement",
    "FeedbackStats",
    "ImplicitPreferences",
    "default_preferences",
    "RawPosting",
    "JobPosting",
    "MatchBreakdown",
    "MatchResult",
    "generate_content_fingerprint",
    "JobApplication",
    "priority_for_score",
]
