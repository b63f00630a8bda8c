"""
Settings-driven capability check
"""
from uuid import UUID

from application.services.access import ICapabilityCheck
from core.config import Settings, settings as default_settings


class SettingsCapabilityCheck(ICapabilityCheck):
    """Global switches from configuration; the same answer for every candidate"""

    def __init__(self, settings: Settings = default_settings):
        self.settings = settings

    def discovery_enabled(self, candidate_id: UUID) -> bool:
        return self.settings.JOB_SEARCH_ENABLED

    def notifications_enabled(self, candidate_id: UUID) -> bool:
        return self.settings.EMAIL_NOTIFICATIONS_ENABLED
