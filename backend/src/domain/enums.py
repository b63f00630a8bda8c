"""
Domain Enums
Business enumerations for job discovery and matching
"""
from enum import Enum
from typing import Dict, List, Optional


class WorkType(str, Enum):
    """Work arrangement of a posting (also used as a candidate's remote policy)"""
    REMOTE = "remote"
    HYBRID = "hybrid"
    ONSITE = "onsite"
    FLEXIBLE = "flexible"


class ExperienceLevel(str, Enum):
    """Seniority bands, ordered from junior to senior"""
    ENTRY = "entry"
    MID = "mid"
    SENIOR = "senior"
    EXECUTIVE = "executive"


# Ordered hierarchy used for distance-based experience scoring
EXPERIENCE_HIERARCHY: List[ExperienceLevel] = [
    ExperienceLevel.ENTRY,
    ExperienceLevel.MID,
    ExperienceLevel.SENIOR,
    ExperienceLevel.EXECUTIVE,
]


class CompanySize(str, Enum):
    """Company headcount bands"""
    MICRO = "1-10"
    SMALL = "11-50"
    MEDIUM = "51-200"
    LARGE = "201-500"
    XLARGE = "501-1000"
    ENTERPRISE = "1000+"


class SourcePlatform(str, Enum):
    """Where a posting was found"""
    LINKEDIN = "LinkedIn"
    INDEED = "Indeed"
    GLASSDOOR = "Glassdoor"
    WELLFOUND = "Wellfound"
    COMPANY_WEBSITE = "Company Website"
    OTHER = "Other"


class PostingStatus(str, Enum):
    """Lifecycle status of a discovered posting"""
    NEW = "new"
    VIEWED = "viewed"
    APPLIED = "applied"
    DISMISSED = "dismissed"
    LIKED = "liked"


# Statuses a posting may move to from each status. Any status may be dismissed.
ALLOWED_STATUS_TRANSITIONS: Dict[PostingStatus, List[PostingStatus]] = {
    PostingStatus.NEW: [
        PostingStatus.VIEWED,
        PostingStatus.APPLIED,
        PostingStatus.LIKED,
        PostingStatus.DISMISSED,
    ],
    PostingStatus.VIEWED: [
        PostingStatus.APPLIED,
        PostingStatus.LIKED,
        PostingStatus.DISMISSED,
    ],
    PostingStatus.LIKED: [
        PostingStatus.APPLIED,
        PostingStatus.DISMISSED,
    ],
    PostingStatus.DISMISSED: [
        PostingStatus.LIKED,
    ],
    PostingStatus.APPLIED: [
        PostingStatus.DISMISSED,
    ],
}

# Statuses that surface in the matches listing and in digests
VISIBLE_STATUSES: List[PostingStatus] = [
    PostingStatus.NEW,
    PostingStatus.VIEWED,
    PostingStatus.LIKED,
]


class UserFeedback(str, Enum):
    """Explicit candidate reaction to a posting"""
    LIKE = "like"
    DISLIKE = "dislike"
    HIDE = "hide"


class FeedbackReason(str, Enum):
    """Fixed reasons attached to a dislike"""
    SALARY_TOO_LOW = "Salary too low"
    WRONG_LOCATION = "Wrong location"
    NOT_INTERESTED_IN_COMPANY = "Not interested in company"
    SKILLS_MISMATCH = "Skills mismatch"
    OTHER = "Other"


class EmailFrequency(str, Enum):
    """Digest cadence"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    DISABLED = "disabled"


# Look-back window (hours) for a digest that was never sent before
FREQUENCY_WINDOW_HOURS: Dict[EmailFrequency, int] = {
    EmailFrequency.DAILY: 24,
    EmailFrequency.WEEKLY: 168,
    EmailFrequency.MONTHLY: 720,
    EmailFrequency.DISABLED: 0,
}


class ApplicationPriority(str, Enum):
    """Priority of an application created from a match"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ApplicationStatus(str, Enum):
    """Status of an application record created by the apply flow"""
    PREPARED = "prepared"
    APPLIED = "applied"
    INTERVIEWING = "interviewing"
    OFFER = "offer"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


def parse_enum(enum_cls, value, default=None) -> Optional[Enum]:
    """Return the enum member for value, or default when it is not a member"""
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return default
