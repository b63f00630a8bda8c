"""
Dependency Injection Container
Manages service and repository instances
"""
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import Depends

from core.config import settings
from core.database import get_db
from application.repositories.interfaces import (
    ICandidateProfileRepository,
    IJobApplicationRepository,
    IJobPostingRepository,
    IJobSearchPreferencesRepository,
)
from application.services.access import ICapabilityCheck
from application.services.discovery import IDiscoveryClient
from application.services.discovery.discovery_driver import DiscoveryDriver
from application.services.feedback import FeedbackService
from application.services.ingestion import PostingIngestor
from application.services.insights import IInsightsGenerator
from application.services.insights.insights_cache import InsightsCache
from application.services.lifecycle import IMatchesCache, LifecycleManager
from application.services.matching import MatchScorer
from application.services.notification import IEmailClient
from application.services.notification.digest_service import DigestService
from application.services.notification.notification_gate import NotificationGate
from application.services.preference import IPreferenceService
from application.services.rescoring import RescoringService
from infrastructure.cache.candidate_cache import RedisCandidateLock, RedisMatchesCache
from infrastructure.cache.redis_cache_service import cache_service
from infrastructure.persistence.repositories.application import SQLAlchemyJobApplicationRepository
from infrastructure.persistence.repositories.candidate_profile import SQLAlchemyCandidateProfileRepository
from infrastructure.persistence.repositories.job_posting import SQLAlchemyJobPostingRepository
from infrastructure.persistence.repositories.job_preferences import SQLAlchemyJobSearchPreferencesRepository
from infrastructure.services.capability_check import SettingsCapabilityCheck
from infrastructure.services.job_discovery_client import AIJobDiscoveryClient
from infrastructure.services.openai_insights_service import OpenAIInsightsService
from infrastructure.services.preference_service import PreferenceService
from infrastructure.services.resend_email_client import ResendEmailClient


# Singleton instances
_scorer: MatchScorer | None = None
_capability: ICapabilityCheck | None = None
_matches_cache: IMatchesCache | None = None
_discovery_client: IDiscoveryClient | None = None
_insights_generator: IInsightsGenerator | None = None
_email_client: IEmailClient | None = None


def get_match_scorer() -> MatchScorer:
    """Get match scorer instance (singleton)"""
    global _scorer
    if _scorer is None:
        _scorer = MatchScorer()
    return _scorer


def get_capability_check() -> ICapabilityCheck:
    """Get capability check instance (singleton)"""
    global _capability
    if _capability is None:
        _capability = SettingsCapabilityCheck(settings)
    return _capability


def get_matches_cache() -> IMatchesCache:
    """Get matches listing cache (singleton)"""
    global _matches_cache
    if _matches_cache is None:
        _matches_cache = RedisMatchesCache(cache_service)
    return _matches_cache


def get_discovery_client() -> IDiscoveryClient:
    """Get discovery collaborator (singleton)"""
    global _discovery_client
    if _discovery_client is None:
        _discovery_client = AIJobDiscoveryClient()
    return _discovery_client


def get_insights_generator() -> IInsightsGenerator:
    """Get AI insights collaborator (singleton)"""
    global _insights_generator
    if _insights_generator is None:
        _insights_generator = OpenAIInsightsService()
    return _insights_generator


def get_email_client() -> IEmailClient:
    """Get email client (singleton)"""
    global _email_client
    if _email_client is None:
        _email_client = ResendEmailClient()
    return _email_client


# ----------------------------------------------------------------------
# Per-request repositories
# ----------------------------------------------------------------------

def get_profile_repository(
    session: AsyncSession = Depends(get_db)
) -> ICandidateProfileRepository:
    """Get candidate profile repository instance (per-request)"""
    return SQLAlchemyCandidateProfileRepository(session)


def get_preferences_repository(
    session: AsyncSession = Depends(get_db)
) -> IJobSearchPreferencesRepository:
    """Get search preferences repository instance (per-request)"""
    return SQLAlchemyJobSearchPreferencesRepository(session)


def get_posting_repository(
    session: AsyncSession = Depends(get_db)
) -> IJobPostingRepository:
    """Get job posting repository instance (per-request)"""
    return SQLAlchemyJobPostingRepository(session)


def get_application_repository(
    session: AsyncSession = Depends(get_db)
) -> IJobApplicationRepository:
    """Get job application repository instance (per-request)"""
    return SQLAlchemyJobApplicationRepository(session)


# ----------------------------------------------------------------------
# Per-request services
# ----------------------------------------------------------------------

def get_lifecycle_manager(
    posting_repo: IJobPostingRepository = Depends(get_posting_repository),
    application_repo: IJobApplicationRepository = Depends(get_application_repository),
    matches_cache: IMatchesCache = Depends(get_matches_cache)
) -> LifecycleManager:
    return LifecycleManager(
        posting_repo,
        application_repo,
        match_threshold=settings.MATCH_THRESHOLD,
        borderline_threshold=settings.BORDERLINE_THRESHOLD,
        borderline_ttl_days=settings.BORDERLINE_TTL_DAYS,
        dismissed_ttl_days=settings.DISMISSED_TTL_DAYS,
        matches_cache=matches_cache,
    )


def get_feedback_service(
    lifecycle: LifecycleManager = Depends(get_lifecycle_manager),
    preferences_repo: IJobSearchPreferencesRepository = Depends(get_preferences_repository)
) -> FeedbackService:
    return FeedbackService(lifecycle, preferences_repo, discard_days=settings.DISCARD_DAYS)


def get_rescoring_service(
    posting_repo: IJobPostingRepository = Depends(get_posting_repository),
    profile_repo: ICandidateProfileRepository = Depends(get_profile_repository),
    scorer: MatchScorer = Depends(get_match_scorer),
    matches_cache: IMatchesCache = Depends(get_matches_cache)
) -> RescoringService:
    return RescoringService(
        posting_repo,
        profile_repo,
        scorer,
        lock=RedisCandidateLock(cache_service),
        match_threshold=settings.MATCH_THRESHOLD,
        borderline_threshold=settings.BORDERLINE_THRESHOLD,
        window_days=settings.RESCORING_WINDOW_DAYS,
        matches_cache=matches_cache,
    )


def get_preference_service(
    preferences_repo: IJobSearchPreferencesRepository = Depends(get_preferences_repository),
    rescoring_service: RescoringService = Depends(get_rescoring_service)
) -> IPreferenceService:
    """Get preference service instance (per-request)"""
    return PreferenceService(preferences_repo, rescoring_service)


def get_insights_cache(
    preferences_repo: IJobSearchPreferencesRepository = Depends(get_preferences_repository),
    profile_repo: ICandidateProfileRepository = Depends(get_profile_repository),
    posting_repo: IJobPostingRepository = Depends(get_posting_repository),
    generator: IInsightsGenerator = Depends(get_insights_generator)
) -> InsightsCache:
    return InsightsCache(
        preferences_repo,
        profile_repo,
        posting_repo,
        generator,
        refresh_days=settings.INSIGHTS_REFRESH_DAYS,
        context_postings=settings.INSIGHTS_CONTEXT_POSTINGS,
    )


def build_discovery_driver(session: AsyncSession) -> DiscoveryDriver:
    """
    Wire a discovery driver on one session

    Used by the cron endpoint and the batch scripts. Each candidate runs in
    its own savepoint so a failed candidate rolls back alone.
    """
    posting_repo = SQLAlchemyJobPostingRepository(session)
    preferences_repo = SQLAlchemyJobSearchPreferencesRepository(session)
    profile_repo = SQLAlchemyCandidateProfileRepository(session)
    capability = get_capability_check()

    lifecycle = LifecycleManager(
        posting_repo,
        SQLAlchemyJobApplicationRepository(session),
        match_threshold=settings.MATCH_THRESHOLD,
        borderline_threshold=settings.BORDERLINE_THRESHOLD,
        borderline_ttl_days=settings.BORDERLINE_TTL_DAYS,
        dismissed_ttl_days=settings.DISMISSED_TTL_DAYS,
        matches_cache=get_matches_cache(),
    )
    digest_service = DigestService(
        posting_repo,
        preferences_repo,
        profile_repo,
        get_email_client(),
        app_url=settings.APP_URL,
        unsubscribe_secret=settings.UNSUBSCRIBE_SECRET,
        match_threshold=settings.MATCH_THRESHOLD,
        max_postings=settings.DIGEST_MAX_POSTINGS,
    )
    ingestor = PostingIngestor(
        posting_repo,
        max_postings_per_run=settings.MAX_POSTINGS_PER_RUN,
        match_threshold=settings.MATCH_THRESHOLD,
        borderline_threshold=settings.BORDERLINE_THRESHOLD,
    )

    return DiscoveryDriver(
        preferences_repo,
        profile_repo,
        get_discovery_client(),
        get_match_scorer(),
        ingestor,
        lifecycle,
        NotificationGate(digest_service, capability),
        capability,
        backoff_after_days=settings.ZERO_MATCH_BACKOFF_DAYS,
        backoff_interval_days=settings.BACKOFF_SEARCH_INTERVAL_DAYS,
        unit_of_work=session.begin_nested,
    )


def build_lifecycle_manager(session: AsyncSession) -> LifecycleManager:
    """Lifecycle manager for the standalone cleanup script"""
    return LifecycleManager(
        SQLAlchemyJobPostingRepository(session),
        match_threshold=settings.MATCH_THRESHOLD,
        borderline_threshold=settings.BORDERLINE_THRESHOLD,
        borderline_ttl_days=settings.BORDERLINE_TTL_DAYS,
        dismissed_ttl_days=settings.DISMISSED_TTL_DAYS,
    )
