"""ORM Models Package"""

from .application import JobApplicationModel
from .candidate_profile import CandidateProfileModel
from .job_posting import JobPostingModel, FINGERPRINT_CONSTRAINT
from .preferences import JobSearchPreferencesModel

__all__ = [
    "JobApplicationModel",
    "CandidateProfileModel",
    "JobPostingModel",
    "FINGERPRINT_CONSTRAINT",
    "JobSearchPreferencesModel",
]
