"""
AI Job Discovery Client
Asks a web-search-grounded model for currently open positions and converts
its answer into RawPosting objects.
"""
import asyncio
import json
import re
from datetime import datetime, timezone
from typing import Any, List, Optional
from urllib.parse import urlparse

import httpx

from application.services.discovery import IDiscoveryClient
from application.services.discovery.query_builder import build_search_queries
from core.config import settings
from core.exceptions import CollaboratorUnavailableException
from core.logging_config import logger
from domain.entities import CandidateProfile, JobSearchPreferences, RawPosting
from domain.enums import CompanySize, ExperienceLevel, SourcePlatform, WorkType, parse_enum
from .chat_completion import chat_completion

MAX_JOBS_PER_QUERY = 25
DESCRIPTION_LIMIT = 500

SYSTEM_PROMPT = f"""You are a job search assistant that finds ACTUAL, CURRENTLY OPEN job positions from the web.

IMPORTANT RULES:
1. Only return jobs that appear to be genuinely open and from legitimate sources
2. Only include jobs posted within the last 7 days
3. Extract accurate, structured data for each job
4. Maximum {MAX_JOBS_PER_QUERY} jobs per search
5. Return ONLY a JSON array, no explanations

For each job found, extract:
{{
  "title": "exact job title",
  "company_name": "company name",
  "location": "city, state/country",
  "work_type": "remote" | "hybrid" | "onsite" | "flexible",
  "experience_level": "entry" | "mid" | "senior" | "executive",
  "salary_min": number or null,
  "salary_max": number or null,
  "salary_currency": "USD" | "EUR" | "GBP" | etc,
  "description": "first 500 characters of job description",
  "required_skills": ["skill1", "skill2"],
  "benefits": ["benefit1", "benefit2"],
  "company_size": "1-10" | "11-50" | "51-200" | "201-500" | "501-1000" | "1000+",
  "source_url": "actual URL to the job posting",
  "source_platform": "LinkedIn" | "Indeed" | "Glassdoor" | "Wellfound" | "Company Website" | "Other",
  "posted_date": "YYYY-MM-DD"
}}"""

_CODE_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_UNQUOTED_KEY_RE = re.compile(r"([{,])\s*([A-Za-z_][A-Za-z0-9_]*)\s*:")

_PLATFORM_DOMAINS = [
    ("linkedin.com", SourcePlatform.LINKEDIN),
    ("indeed.com", SourcePlatform.INDEED),
    ("glassdoor.com", SourcePlatform.GLASSDOOR),
    ("wellfound.com", SourcePlatform.WELLFOUND),
    ("angel.co", SourcePlatform.WELLFOUND),
]


# ---------------------------------------------------------------------------
# Boundary normalization
# ---------------------------------------------------------------------------

def _text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _amount(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value) if value >= 0 else None


def _strings(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def normalize_work_type(value: Any) -> Optional[WorkType]:
    text = _text(value)
    if text is None:
        return None
    text = text.lower()
    exact = parse_enum(WorkType, text)
    if exact:
        return exact
    if "remote" in text:
        return WorkType.REMOTE
    if "hybrid" in text:
        return WorkType.HYBRID
    if "onsite" in text or "on-site" in text or "office" in text:
        return WorkType.ONSITE
    return None


def normalize_experience_level(value: Any) -> Optional[ExperienceLevel]:
    text = _text(value)
    if text is None:
        return None
    text = text.lower()
    exact = parse_enum(ExperienceLevel, text)
    if exact:
        return exact
    if any(k in text for k in ("junior", "entry", "graduate")):
        return ExperienceLevel.ENTRY
    if "mid" in text or "intermediate" in text:
        return ExperienceLevel.MID
    if "senior" in text or "lead" in text:
        return ExperienceLevel.SENIOR
    if any(k in text for k in ("executive", "director", "vp", "chief")):
        return ExperienceLevel.EXECUTIVE
    return None


def normalize_source_platform(value: Any, source_url: str) -> SourcePlatform:
    text = _text(value)
    if text is not None:
        for platform in SourcePlatform:
            if platform.value.lower() == text.lower():
                return platform
        return SourcePlatform.OTHER

    url = source_url.lower()
    for domain, platform in _PLATFORM_DOMAINS:
        if domain in url:
            return platform
    return SourcePlatform.COMPANY_WEBSITE


def _posted_date(value: Any) -> Optional[datetime]:
    text = _text(value)
    if text is None:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _is_absolute_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def raw_posting_from_payload(data: Any) -> Optional[RawPosting]:
    """
    Convert one untyped job item into a RawPosting

    Returns None when title, company or a valid absolute URL is missing.
    """
    if not isinstance(data, dict):
        return None

    title = _text(data.get("title"))
    company = _text(data.get("company_name"))
    source_url = _text(data.get("source_url"))
    if not title or not company or not source_url or not _is_absolute_url(source_url):
        return None

    description = _text(data.get("description"))
    currency = _text(data.get("salary_currency"))
    salary_min, salary_max = _amount(data.get("salary_min")), _amount(data.get("salary_max"))
    if salary_min is not None and salary_max is not None and salary_max < salary_min:
        salary_min, salary_max = salary_max, salary_min

    return RawPosting(
        title=title,
        company_name=company,
        source_url=source_url,
        description=description[:DESCRIPTION_LIMIT] if description else None,
        location=_text(data.get("location")),
        work_type=normalize_work_type(data.get("work_type")),
        experience_level=normalize_experience_level(data.get("experience_level")),
        salary_min=salary_min,
        salary_max=salary_max,
        salary_currency=currency.upper()[:3] if currency else "USD",
        required_skills=_strings(data.get("required_skills")),
        benefits=_strings(data.get("benefits")),
        company_size=parse_enum(CompanySize, _text(data.get("company_size"))),
        source_platform=normalize_source_platform(data.get("source_platform"), source_url),
        posted_date=_posted_date(data.get("posted_date")),
    )


def _load_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    repaired = text.replace("'", '"')
    repaired = _TRAILING_COMMA_RE.sub(r"\1", repaired)
    repaired = _UNQUOTED_KEY_RE.sub(r'\1"\2":', repaired)
    try:
        return json.loads(repaired)
    except json.JSONDecodeError:
        return None


def parse_job_response(raw_text: str) -> List[RawPosting]:
    """
    Parse a model answer into postings; never raises

    Handles bare JSON, JSON inside code fences or prose, a {"jobs": [...]}
    wrapper and light repair of malformed JSON.
    """
    if not raw_text or not isinstance(raw_text, str):
        return []

    text = raw_text.strip()
    fenced = _CODE_FENCE_RE.search(text)
    if fenced:
        text = fenced.group(1).strip()

    parsed = _load_json(text)
    if parsed is None:
        array = _ARRAY_RE.search(text)
        if array:
            parsed = _load_json(array.group(0))

    if isinstance(parsed, dict) and isinstance(parsed.get("jobs"), list):
        parsed = parsed["jobs"]
    if not isinstance(parsed, list):
        return []

    postings = []
    for item in parsed:
        posting = raw_posting_from_payload(item)
        if posting is not None:
            postings.append(posting)
    return postings


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class AIJobDiscoveryClient(IDiscoveryClient):
    """Discovery collaborator backed by an OpenAI-compatible model endpoint"""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_results: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        max_retries: int = 3,
        retry_base_delay: float = 2.0,
    ):
        self.api_url = api_url or settings.DISCOVERY_API_URL
        self.api_key = api_key or settings.DISCOVERY_API_KEY
        self.model = model or settings.DISCOVERY_MODEL
        self.max_results = max_results or settings.DISCOVERY_MAX_RESULTS
        self.timeout = httpx.Timeout(timeout_seconds or settings.AI_REQUEST_TIMEOUT_SECONDS)
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay

        if not self.api_key:
            logger.warning("DISCOVERY_API_KEY not set - job discovery will be unavailable")

    async def discover(
        self,
        profile: CandidateProfile,
        preferences: JobSearchPreferences
    ) -> List[RawPosting]:
        if not self.api_key:
            raise CollaboratorUnavailableException("discovery", "DISCOVERY_API_KEY not configured")

        queries = build_search_queries(profile, preferences)
        logger.info(f"Running {len(queries)} discovery queries for candidate {profile.id}")

        postings: List[RawPosting] = []
        seen = set()
        failed = 0

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for query in queries:
                if len(postings) >= self.max_results:
                    break
                try:
                    text = await self._query_with_retry(client, query)
                except CollaboratorUnavailableException as e:
                    failed += 1
                    logger.warning(f"Discovery query failed: {e}")
                    continue

                found = parse_job_response(text)
                logger.debug(f"Parsed {len(found)} postings from query '{query[:80]}'")
                for posting in found:
                    if len(postings) >= self.max_results:
                        break
                    if posting.content_fingerprint in seen:
                        continue
                    seen.add(posting.content_fingerprint)
                    postings.append(posting)

        if queries and failed == len(queries):
            raise CollaboratorUnavailableException("discovery", f"all {failed} queries failed")

        return postings

    async def _query_with_retry(self, client: httpx.AsyncClient, query: str) -> str:
        """Retry rate limits, timeouts and 5xx with exponential backoff (2s, 4s)"""
        attempt = 0
        while True:
            try:
                return await chat_completion(
                    client,
                    "discovery",
                    self.api_url,
                    self.api_key,
                    self.model,
                    [
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": f"Search for open job positions: {query}"},
                    ],
                    temperature=0.2,
                    max_tokens=4000,
                )
            except CollaboratorUnavailableException as e:
                attempt += 1
                if not e.retryable or attempt >= self.max_retries:
                    raise
                delay = self.retry_base_delay * (2 ** (attempt - 1))
                logger.info(f"Discovery retry {attempt}/{self.max_retries} in {delay:.0f}s: {e.message}")
                await asyncio.sleep(delay)
