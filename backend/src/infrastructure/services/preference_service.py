"""
PreferenceService Implementation
Lazy default preferences, partial updates and the rescoring trigger
"""
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import UUID

from application.repositories.interfaces import IJobSearchPreferencesRepository
from application.services.preference import IPreferenceService
from application.services.rescoring import RescoringResult, RescoringService, significant_changes
from core.exceptions import ValidationException
from core.logging_config import logger
from domain.entities import JobSearchPreferences, SkillRequirement, default_preferences
from domain.entities.search_preferences import parse_company_sizes, parse_remote_policies
from domain.enums import EmailFrequency, parse_enum


def _string_list(field: str, value: Any) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValidationException(field, "must be a list")
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def _skills(field: str, value: Any) -> List[SkillRequirement]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValidationException(field, "must be a list")
    skills = [SkillRequirement.from_value(v) for v in value]
    return [s for s in skills if s.skill]


def _salary(field: str, value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        amount = int(value)
    except (TypeError, ValueError):
        raise ValidationException(field, "must be a whole number")
    if amount < 0:
        raise ValidationException(field, "must not be negative")
    return amount


def _frequency(field: str, value: Any) -> EmailFrequency:
    frequency = parse_enum(EmailFrequency, value)
    if frequency is None:
        raise ValidationException(field, f"must be one of {[f.value for f in EmailFrequency]}")
    return frequency


def _flag(field: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValidationException(field, "must be true or false")
    return value


UPDATABLE_FIELDS: Dict[str, Callable[[str, Any], Any]] = {
    "preferred_job_titles": _string_list,
    "preferred_locations": _string_list,
    "required_skills": _skills,
    "salary_min_override": _salary,
    "remote_policy_preferences": lambda field, value: parse_remote_policies(value),
    "company_size_preferences": lambda field, value: parse_company_sizes(value),
    "avoid_companies": _string_list,
    "avoid_keywords": _string_list,
    "required_benefits": _string_list,
    "email_notification_frequency": _frequency,
    "is_active": _flag,
}


class PreferenceService(IPreferenceService):
    """Preference service implementation"""

    def __init__(
        self,
        preferences_repository: IJobSearchPreferencesRepository,
        rescoring_service: Optional[RescoringService] = None,
    ):
        """
        Initialize preference service

        Args:
            preferences_repository: Job search preferences repository
            rescoring_service: Runs after significant changes; None disables rescoring
        """
        self.preferences_repo = preferences_repository
        self.rescoring_service = rescoring_service

    async def get_preferences(self, candidate_id: UUID) -> JobSearchPreferences:
        preferences = await self.preferences_repo.get_by_candidate_id(candidate_id)
        if preferences is not None:
            return preferences

        logger.info(f"Creating default search preferences for candidate {candidate_id}")
        return await self.preferences_repo.create(default_preferences(candidate_id))

    async def update_preferences(
        self,
        candidate_id: UUID,
        changes: Dict[str, Any]
    ) -> Tuple[JobSearchPreferences, RescoringResult]:
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationException(sorted(unknown)[0], "is not an updatable preference")

        coerced = {name: UPDATABLE_FIELDS[name](name, value) for name, value in changes.items()}

        current = await self.get_preferences(candidate_id)
        changed = {name for name, value in coerced.items() if getattr(current, name) != value}
        if not changed:
            return current, RescoringResult(triggered=False)

        now = datetime.now(timezone.utc)
        saved = await self.preferences_repo.update(replace(current, updated_at=now, **coerced))
        logger.info(f"Updated search preferences for candidate {candidate_id}: {sorted(changed)}")

        significant = significant_changes(changed)
        if not significant or self.rescoring_service is None:
            return saved, RescoringResult(triggered=False)

        logger.info(f"Significant preference change for candidate {candidate_id} ({sorted(significant)}), rescoring")
        try:
            rescoring = await self.rescoring_service.rescore(candidate_id, saved, now)
        except Exception as e:
            # The update is already saved
            logger.error(f"Rescoring failed for candidate {candidate_id}: {e}")
            rescoring = RescoringResult(triggered=False, error=str(e))

        return saved, rescoring

    async def unsubscribe(self, candidate_id: UUID) -> JobSearchPreferences:
        preferences, _ = await self.update_preferences(
            candidate_id, {"email_notification_frequency": EmailFrequency.DISABLED}
        )
        logger.info(f"Candidate {candidate_id} unsubscribed from digest emails")
        return preferences
