"""
MatchScore Value Object
Type-safe match score with validation (0-100) and threshold bands
"""
from dataclasses import dataclass


MATCH_THRESHOLD = 75
BORDERLINE_THRESHOLD = 65


@dataclass(frozen=True)
class MatchScore:
    """Match score value object - immutable"""

    value: int

    def __post_init__(self):
        """Validate match score range"""
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError("Match score must be an integer")

        if not 0 <= self.value <= 100:
            raise ValueError("Match score must be between 0 and 100")

    def is_match(self, threshold: int = MATCH_THRESHOLD) -> bool:
        """Score qualifies as a match (drives notification eligibility)"""
        return self.value >= threshold

    def is_borderline(
        self,
        borderline: int = BORDERLINE_THRESHOLD,
        threshold: int = MATCH_THRESHOLD
    ) -> bool:
        """Score is persisted but not notification-worthy"""
        return borderline <= self.value < threshold

    def should_persist(self, borderline: int = BORDERLINE_THRESHOLD) -> bool:
        """Anything under the borderline floor is discarded"""
        return self.value >= borderline

    @classmethod
    def clamp(cls, raw: float) -> "MatchScore":
        """Build a score from an unbounded raw total"""
        return cls(int(max(0, min(100, round(raw)))))

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return f"{self.value}%"

    def __repr__(self) -> str:
        return f"MatchScore({self.value})"
