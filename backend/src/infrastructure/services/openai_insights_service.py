"""
OpenAI Insights Service
Generates search keywords, recommended boards, a market insight and a
personalized strategy with four chat-completion calls.
"""
import asyncio
from datetime import datetime, timezone
from typing import List, Optional

import httpx

from application.services.insights import IInsightsGenerator
from application.services.insights.parsers import parse_boards_response, parse_keywords_response
from core.config import settings
from core.exceptions import CollaboratorUnavailableException
from core.logging_config import logger
from domain.entities import CandidateProfile, JobPosting, JobSearchPreferences, SearchInsights
from .chat_completion import chat_completion


def _joined(values: List[str], fallback: str, limit: Optional[int] = None) -> str:
    values = [v for v in values if v][:limit] if limit else [v for v in values if v]
    return ", ".join(values) or fallback


def _titles(profile: CandidateProfile, preferences: JobSearchPreferences) -> List[str]:
    return preferences.preferred_job_titles or profile.preferred_job_titles


def _seniority(profile: CandidateProfile) -> str:
    return profile.seniority_level.value if profile.seniority_level else "Not specified"


def _remote(preferences: JobSearchPreferences) -> str:
    return _joined([p.value for p in preferences.remote_policy_preferences], "Flexible")


def build_keywords_prompt(profile: CandidateProfile, preferences: JobSearchPreferences) -> str:
    return f"""Based on this candidate profile, generate 8-15 strategic job search keywords that will help them find relevant positions.

Profile:
- Target roles: {_joined(_titles(profile, preferences), "Not specified")}
- Skills: {_joined(profile.cv_skills, "Not specified", 10)}
- Industries: {_joined(profile.preferred_industries, "Open to all")}
- Experience level: {_seniority(profile)}
- Career goals: {profile.career_goals or "Not specified"}

Return ONLY a JSON array of keyword strings, like: ["keyword1", "keyword2", ...]
Include a mix of role variations and synonyms, key technical skills, industry-specific terms
and in-demand skills in their field."""


def build_boards_prompt(profile: CandidateProfile, preferences: JobSearchPreferences) -> str:
    return f"""Recommend 5-8 job boards or platforms for this candidate. Focus on boards that match their specific profile.

Profile:
- Target roles: {_joined(_titles(profile, preferences), "Not specified")}
- Skills: {_joined(profile.cv_skills, "Not specified", 8)}
- Industries: {_joined(profile.preferred_industries, "Open to all")}
- Experience level: {_seniority(profile)}
- Remote preference: {_remote(preferences)}

Return ONLY a JSON array with this exact structure:
[
  {{"name": "Board Name", "url": "https://...", "reason": "Why this board is good for them"}}
]"""


def build_market_prompt(profile: CandidateProfile, recent_postings: List[JobPosting]) -> str:
    salaries = [p.salary_min for p in recent_postings if p.salary_min]
    salary_line = ""
    if salaries:
        salary_line = f"\n- Average salary range seen: ~${round(sum(salaries) / len(salaries)):,}"

    return f"""Provide a brief market insight (2-3 sentences) for this job seeker.

Profile:
- Target roles: {_joined(profile.preferred_job_titles, "General")}
- Key skills: {_joined(profile.cv_skills, "Various", 5)}
- Recent job findings: {len(recent_postings)} positions found{salary_line}

Focus on current demand for their skills, salary trends if relevant and the competitive landscape.
Keep it actionable and encouraging. Return ONLY the 2-3 sentence paragraph, no JSON or formatting."""


def build_strategy_prompt(
    profile: CandidateProfile,
    preferences: JobSearchPreferences,
    recent_postings: List[JobPosting]
) -> str:
    years = profile.cv_analysis.experience_years if profile.cv_analysis else None
    return f"""Provide a personalized job search strategy (2-3 sentences) for this candidate.

Profile:
- Target roles: {_joined(_titles(profile, preferences), "Various")}
- Key skills: {_joined(profile.cv_skills, "Various", 5)}
- Experience: {years if years is not None else "Not specified"} years
- Recent matches found: {len(recent_postings)}
- Remote preference: {_remote(preferences)}

Provide specific, actionable advice on how to stand out, which skills to highlight,
networking and timing. Return ONLY the 2-3 sentence recommendation, no JSON or formatting."""


class OpenAIInsightsService(IInsightsGenerator):
    """AI insight collaborator using OpenAI chat completions"""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.api_url = api_url or settings.OPENAI_API_URL
        self.api_key = api_key or settings.OPENAI_API_KEY
        self.model = model or settings.OPENAI_MODEL
        self.timeout = httpx.Timeout(timeout_seconds or settings.AI_REQUEST_TIMEOUT_SECONDS)

        if not self.api_key:
            logger.warning("OPENAI_API_KEY not set - AI insights will be unavailable")

    async def generate(
        self,
        profile: CandidateProfile,
        preferences: JobSearchPreferences,
        recent_postings: List[JobPosting]
    ) -> SearchInsights:
        """
        Run the four generations concurrently

        A single failed call leaves its field empty; if all four fail the
        collaborator is reported unavailable.
        """
        if not self.api_key:
            raise CollaboratorUnavailableException("insights", "OPENAI_API_KEY not configured")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            results = await asyncio.gather(
                self._ask(client, "You are a job search strategist. Return only the requested format.",
                          build_keywords_prompt(profile, preferences), 300),
                self._ask(client, "You are a job search strategist. Return only valid JSON arrays.",
                          build_boards_prompt(profile, preferences), 800),
                self._ask(client, "You are a job market analyst. Be concise and encouraging.",
                          build_market_prompt(profile, recent_postings), 200),
                self._ask(client, "You are a career coach. Be specific and actionable.",
                          build_strategy_prompt(profile, preferences, recent_postings), 200),
                return_exceptions=True,
            )

        errors = [r for r in results if isinstance(r, BaseException)]
        for error in errors:
            logger.warning(f"Insight generation call failed for candidate {profile.id}: {error}")
        if len(errors) == len(results):
            raise CollaboratorUnavailableException("insights", str(errors[0]))

        keywords_text, boards_text, market_text, strategy_text = (
            "" if isinstance(r, BaseException) else r for r in results
        )

        insights = SearchInsights(
            keywords=parse_keywords_response(keywords_text),
            recommended_boards=parse_boards_response(boards_text),
            market_insights=market_text,
            personalized_strategy=strategy_text,
            generated_at=datetime.now(timezone.utc),
        )
        logger.info(
            f"Generated {len(insights.keywords)} keywords and {len(insights.recommended_boards)} boards "
            f"for candidate {profile.id}"
        )
        return insights

    async def _ask(self, client: httpx.AsyncClient, system: str, prompt: str, max_tokens: int) -> str:
        return await chat_completion(
            client,
            "insights",
            self.api_url,
            self.api_key,
            self.model,
            [{"role": "system", "content": system}, {"role": "user", "content": prompt}],
            temperature=0.7,
            max_tokens=max_tokens,
        )
