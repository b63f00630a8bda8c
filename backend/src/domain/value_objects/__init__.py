"""Value Objects - Immutable objects defined by their attributes"""

from .salary_range import SalaryRange
from .match_score import MatchScore, MATCH_THRESHOLD, BORDERLINE_THRESHOLD
__all__ = [
    "SalaryRange",
    "MatchScore",
    "MATCH_THRESHOLD",
    "BORDERLINE_THRESHOLD",
]
