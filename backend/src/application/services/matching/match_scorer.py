"""
Match Scorer
Weighted-rule scoring of one posting against a candidate's profile and preferences.

Each component produces a 0-100 sub-score which is scaled by its weight
into points; the points are the stored breakdown and add up to the total.
Pure and deterministic: no I/O, no clock.
"""
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from domain.entities import (
    CandidateProfile,
    JobSearchPreferences,
    LocationPreference,
    MatchBreakdown,
    MatchResult,
    RawPosting,
)
from domain.entities.search_preferences import ImplicitPreferences
from domain.enums import EXPERIENCE_HIERARCHY, ExperienceLevel, WorkType, parse_enum
from domain.value_objects import MatchScore
from .skill_relationships import related_similarity


NEUTRAL_SCORE = 70
MAX_SALARY_ADJUSTMENT = 50
_WORD_RE = re.compile(r"[a-z0-9+#.]+")


@dataclass(frozen=True)
class MatchWeights:
    """Points available per component. The five base weights add up to 100."""

    skills: float = 36.0
    experience: float = 20.0
    location: float = 16.0
    salary: float = 16.0
    preferences: float = 12.0
    behavioral_cap: float = 4.0

    def __post_init__(self):
        total = self.skills + self.experience + self.location + self.salary + self.preferences
        if abs(total - 100.0) > 0.01:
            raise ValueError(f"Base match weights must add up to 100, got {total}")
        if not 0 <= self.behavioral_cap <= 5:
            raise ValueError("behavioral_cap must be between 0 and 5")


DEFAULT_WEIGHTS = MatchWeights()


def _normalize(values: Sequence[str]) -> List[str]:
    seen: Dict[str, None] = {}
    for value in values:
        if value and value.strip():
            seen.setdefault(value.strip().lower(), None)
    return list(seen)


# ---------------------------------------------------------------------------
# Component scores (0-100)
# ---------------------------------------------------------------------------

def calculate_skills_score(job_skills: Sequence[str], candidate_skills: Sequence[str]) -> int:
    """Exact match = 100, related skill = similarity, no match = 0; averaged over job skills"""
    normalized_job = _normalize(job_skills)
    if not normalized_job:
        return NEUTRAL_SCORE

    normalized_candidate = _normalize(candidate_skills)
    total = 0.0
    for job_skill in normalized_job:
        if job_skill in normalized_candidate:
            total += 100
            continue
        total += related_similarity(job_skill, normalized_candidate) * 100

    return round(total / len(normalized_job))


def calculate_title_alignment_score(
    job_title: str,
    job_description: Optional[str],
    preferred_titles: Sequence[str],
    preferred_industries: Sequence[str]
) -> int:
    """
    Skills fallback used when the candidate has no skills on record.

    Compares the posting against the stated job titles (strongest) and
    industries. Never negative.
    """
    titles = _normalize(preferred_titles)
    industries = _normalize(preferred_industries)
    if not titles and not industries:
        return 50

    job_title_lower = (job_title or "").lower()
    job_words = set(_WORD_RE.findall(job_title_lower))
    description_lower = (job_description or "").lower()

    best = 0
    for title in titles:
        if title in job_title_lower:
            return 100
        words = [w for w in _WORD_RE.findall(title) if len(w) > 2]
        if words and all(w in job_words for w in words):
            best = max(best, 85)
        elif any(w in job_words for w in words):
            best = max(best, 60)

    if industries and any(ind in description_lower or ind in job_title_lower for ind in industries):
        best = max(best, 60)

    return best if best else 30


def calculate_experience_score(
    job_level: Optional[ExperienceLevel],
    candidate_level: Optional[ExperienceLevel]
) -> int:
    """Exact = 100, one level off = 70, two = 30, more = 0"""
    job_level = parse_enum(ExperienceLevel, job_level)
    candidate_level = parse_enum(ExperienceLevel, candidate_level)
    if job_level is None or candidate_level is None:
        return NEUTRAL_SCORE

    diff = abs(EXPERIENCE_HIERARCHY.index(job_level) - EXPERIENCE_HIERARCHY.index(candidate_level))
    return {0: 100, 1: 70, 2: 30}.get(diff, 0)


def calculate_location_score(
    job_location: Optional[str],
    job_work_type: Optional[WorkType],
    location_preference: LocationPreference,
    preferred_locations: Sequence[str] = (),
    remote_policies: Sequence[WorkType] = ()
) -> int:
    """
    Remote/flexible postings fit anyone the policy allows; otherwise
    preferred location > city > country > relocation.

    Search-preference locations and remote policies replace the profile's
    city and remote policy when set. A posting whose arrangement is not an
    accepted policy scores 20 (50 for hybrid when remote is accepted).
    """
    policies = [p for p in (parse_enum(WorkType, p) for p in remote_policies) if p is not None]
    if not policies and location_preference.remote_policy == WorkType.REMOTE:
        policies = [WorkType.REMOTE]

    if policies and job_work_type != WorkType.FLEXIBLE:
        if job_work_type is None:
            if set(policies) == {WorkType.REMOTE}:
                return 20
        elif job_work_type not in policies:
            return 50 if job_work_type == WorkType.HYBRID and WorkType.REMOTE in policies else 20

    if job_work_type == WorkType.REMOTE:
        return 100
    if job_work_type == WorkType.FLEXIBLE:
        return 95

    if not job_location:
        return NEUTRAL_SCORE

    job_location_lower = job_location.lower()
    wanted = [loc for loc in _normalize(preferred_locations) if loc != "remote"]
    if not wanted and location_preference.city:
        wanted = _normalize([location_preference.city])
    country = (location_preference.country or "").strip().lower()

    if any(loc in job_location_lower for loc in wanted):
        return 100
    if country and country in job_location_lower:
        return 80 if job_work_type == WorkType.HYBRID else 70
    if location_preference.willing_to_relocate:
        return 50
    return 20


def calculate_salary_score(
    job_salary_min: Optional[int],
    job_salary_max: Optional[int],
    candidate_min: Optional[int],
    implicit_adjustment: int = 0
) -> int:
    """At or above the (adjusted) floor = 100, within 10% = 70, within 20% = 40, else 0"""
    if job_salary_min is None and job_salary_max is None:
        return NEUTRAL_SCORE
    if not candidate_min:
        return 100

    adjustment = max(0, min(MAX_SALARY_ADJUSTMENT, implicit_adjustment or 0))
    adjusted_min = candidate_min * (1 + adjustment / 100)
    job_salary = job_salary_max or job_salary_min or 0

    if job_salary >= adjusted_min:
        return 100

    deficit = (adjusted_min - job_salary) / adjusted_min
    if deficit <= 0.10:
        return 70
    if deficit <= 0.20:
        return 40
    return 0


def calculate_preference_score(
    posting: RawPosting,
    preferences: JobSearchPreferences,
    profile: CandidateProfile
) -> int:
    """
    Company size +30, industry +30, benefits up to +20, avoid-lists +10 each.

    An avoided company costs 50 and an avoided keyword 30; the result is
    clamped to 0-100.
    """
    score = 0

    size_prefs = preferences.company_size_preferences or profile.company_size_preferences
    if not size_prefs:
        score += 30
    elif posting.company_size is not None and posting.company_size in size_prefs:
        score += 30

    industries = _normalize(profile.preferred_industries)
    if not industries:
        score += 30
    elif posting.description:
        description = posting.description.lower()
        if any(ind in description for ind in industries):
            score += 30

    required_benefits = _normalize(preferences.required_benefits)
    if not required_benefits:
        score += 20
    elif posting.benefits:
        job_benefits = [b.lower() for b in posting.benefits]
        matched = [req for req in required_benefits if any(req in jb for jb in job_benefits)]
        score += round(len(matched) / len(required_benefits) * 20)

    avoid_companies = _normalize(preferences.avoid_companies)
    company = posting.company_name.lower()
    if any(avoid in company for avoid in avoid_companies):
        score -= 50
    else:
        score += 10

    avoid_keywords = _normalize(preferences.avoid_keywords)
    haystack = f"{posting.title} {posting.description or ''}".lower()
    if any(kw in haystack for kw in avoid_keywords):
        score -= 30
    else:
        score += 10

    return max(0, min(100, score))


def calculate_behavioral_adjustment(
    posting: RawPosting,
    implicit: ImplicitPreferences,
    cap: float
) -> float:
    """+1 per liked skill the posting asks for, -cap for an avoided location; within [-cap, cap]"""
    if cap <= 0:
        return 0.0

    adjustment = 0.0
    liked = {skill.lower() for skill in implicit.liked_skills}
    if liked:
        overlap = sum(1 for skill in _normalize(posting.required_skills) if skill in liked)
        adjustment += min(cap, float(overlap))

    if posting.location and implicit.avoided_locations:
        location = posting.location.lower()
        if any(avoided.lower() in location for avoided in implicit.avoided_locations if avoided):
            adjustment -= cap

    return max(-cap, min(cap, adjustment))


# ---------------------------------------------------------------------------
# Reasons
# ---------------------------------------------------------------------------

def generate_match_reasons(
    posting: RawPosting,
    candidate_skills: Sequence[str],
    components: Dict[str, int],
    behavioral: float = 0.0
) -> List[str]:
    """3-5 short "why this fits you" strings"""
    reasons: List[str] = []

    if components["skills"] >= 80:
        candidate = set(_normalize(candidate_skills))
        matched = [s for s in posting.required_skills if s.strip().lower() in candidate]
        if matched:
            reasons.append(f"Your {', '.join(matched[:3])} skills are a strong match")
        else:
            reasons.append("Your background aligns well with this role")
    elif components["skills"] >= 60:
        reasons.append("Your skills partially match with room to grow")

    if components["experience"] >= 90:
        reasons.append("The experience level is exactly what you are looking for")
    elif components["experience"] >= 70:
        reasons.append("The seniority level aligns with your career stage")

    if components["location"] >= 90:
        if posting.work_type == WorkType.REMOTE:
            reasons.append("Fully remote position matches your flexibility needs")
        else:
            reasons.append(f"Location in {posting.location or 'your area'} is convenient")
    elif posting.work_type == WorkType.HYBRID:
        reasons.append("Hybrid work arrangement offers flexibility")

    if components["salary"] >= 90 and posting.salary_min:
        amount = posting.salary_range.format_amount(posting.salary_min)
        reasons.append(f"Salary starting at {amount} meets your expectations")
    elif components["salary"] >= 70:
        reasons.append("Compensation is competitive for this role")

    if components["preferences"] >= 80 and posting.company_size is not None:
        reasons.append(f"Company size ({posting.company_size.value} employees) fits your preference")

    if posting.benefits and components["preferences"] >= 60:
        reasons.append(f"Benefits include {' and '.join(posting.benefits[:2])}")

    if behavioral > 0:
        reasons.append("Similar to postings you liked before")

    if len(reasons) < 3:
        if not any("remote" in r.lower() or "location" in r.lower() for r in reasons):
            reasons.append("This role offers good work-life balance potential")
        if not any("skills" in r.lower() for r in reasons):
            reasons.append("Opportunity to apply and expand your skillset")
        if not any("company" in r.lower() for r in reasons):
            reasons.append(f"{posting.company_name} could be a good career move")

    return reasons[:5]


# ---------------------------------------------------------------------------
# Scorer
# ---------------------------------------------------------------------------

class MatchScorer:
    """Computes a MatchResult for a (posting, profile, preferences) triple"""

    def __init__(self, weights: Optional[MatchWeights] = None):
        self.weights = weights or DEFAULT_WEIGHTS

    @staticmethod
    def candidate_skills(profile: CandidateProfile, preferences: JobSearchPreferences) -> List[str]:
        """CV skills plus skills named in the search preferences"""
        return _normalize(list(profile.cv_skills) + preferences.required_skill_names)

    def component_scores(
        self,
        posting: RawPosting,
        profile: CandidateProfile,
        preferences: JobSearchPreferences
    ) -> Dict[str, int]:
        skills = self.candidate_skills(profile, preferences)
        if skills:
            skills_score = calculate_skills_score(posting.required_skills, skills)
        elif not posting.required_skills:
            skills_score = NEUTRAL_SCORE
        else:
            skills_score = calculate_title_alignment_score(
                posting.title,
                posting.description,
                preferences.preferred_job_titles or profile.preferred_job_titles,
                profile.preferred_industries,
            )

        salary_floor = preferences.salary_min_override or profile.minimum_salary_expectation

        return {
            "skills": skills_score,
            "experience": calculate_experience_score(posting.experience_level, profile.seniority_level),
            "location": calculate_location_score(
                posting.location,
                posting.work_type,
                profile.location_preferences,
                preferences.preferred_locations,
                preferences.remote_policy_preferences,
            ),
            "salary": calculate_salary_score(
                posting.salary_min,
                posting.salary_max,
                salary_floor,
                preferences.implicit_preferences.salary_adjustment,
            ),
            "preferences": calculate_preference_score(posting, preferences, profile),
        }

    def score(
        self,
        posting: RawPosting,
        profile: CandidateProfile,
        preferences: JobSearchPreferences
    ) -> MatchResult:
        components = self.component_scores(posting, profile, preferences)
        behavioral = calculate_behavioral_adjustment(
            posting, preferences.implicit_preferences, self.weights.behavioral_cap
        )

        breakdown = MatchBreakdown(
            skills=round(components["skills"] * self.weights.skills / 100, 1),
            experience=round(components["experience"] * self.weights.experience / 100, 1),
            location=round(components["location"] * self.weights.location / 100, 1),
            salary=round(components["salary"] * self.weights.salary / 100, 1),
            preferences=round(components["preferences"] * self.weights.preferences / 100, 1),
            behavioral=round(behavioral, 1),
        )
        total = MatchScore.clamp(breakdown.total_points())

        reasons = generate_match_reasons(
            posting, self.candidate_skills(profile, preferences), components, behavioral
        )
        return MatchResult(score=total.value, breakdown=breakdown, reasons=reasons)
