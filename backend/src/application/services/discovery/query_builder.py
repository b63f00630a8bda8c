"""
Search query construction from a candidate's profile and preferences
"""
from datetime import datetime, timezone
from typing import List, Optional

from domain.entities import CandidateProfile, JobSearchPreferences
from domain.enums import WorkType

DEFAULT_TITLE = "Software Engineer"


def _dedupe(values: List[str]) -> List[str]:
    seen = {}
    for value in values:
        if value and value.strip():
            seen.setdefault(value.strip(), None)
    return list(seen)


def _query_string(title: str, location: str, skills: str, remote: str, industry: Optional[str], year: int) -> str:
    parts = [
        f'"{title}"',
        skills,
        f'"{location}"' if location else "",
        remote,
        industry or "",
        f"open positions {year}",
    ]
    return " ".join(p for p in parts if p).strip()


def build_search_queries(
    profile: CandidateProfile,
    preferences: JobSearchPreferences,
    now: Optional[datetime] = None
) -> List[str]:
    """
    Two or three query variations to widen the net

    Titles and locations come from the preferences, falling back to the profile.
    """
    year = (now or datetime.now(timezone.utc)).year

    titles = preferences.preferred_job_titles or profile.preferred_job_titles
    locations = preferences.preferred_locations or [
        loc for loc in (profile.location_preferences.city, profile.location_preferences.country) if loc
    ]
    skills = _dedupe(profile.cv_skills[:5] + preferences.required_skill_names[:3])[:5]
    remote = "remote" if WorkType.REMOTE in preferences.remote_policy_preferences else ""
    industries = profile.preferred_industries[:2]

    primary_title = titles[0] if titles else DEFAULT_TITLE
    primary_location = locations[0] if locations else ""

    queries = [
        _query_string(
            primary_title, primary_location, " ".join(skills[:3]), remote,
            industries[0] if industries else None, year,
        )
    ]

    if len(titles) > 1:
        queries.append(_query_string(
            titles[1], primary_location, " ".join(skills[1:4]), remote,
            industries[1] if len(industries) > 1 else None, year,
        ))

    if industries or len(skills) > 3:
        queries.append(_query_string(
            primary_title,
            locations[1] if len(locations) > 1 else primary_location,
            " ".join(skills[:2]),
            remote,
            " ".join(industries),
            year,
        ))

    if len(queries) < 2:
        queries.append(
            " ".join(p for p in [f'hiring "{primary_title}"', primary_location, remote, f"open positions {year}"] if p)
        )

    return queries[:3]
