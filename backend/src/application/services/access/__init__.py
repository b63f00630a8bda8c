"""
Capability Check Interface
Decides whether discovery and notifications may run for a candidate
"""
from abc import ABC, abstractmethod
from uuid import UUID


class ICapabilityCheck(ABC):
    """Capability check passed to the discovery driver and notification gate"""

    @abstractmethod
    def discovery_enabled(self, candidate_id: UUID) -> bool:
        """Whether discovery may run for this candidate"""
        pass

    @abstractmethod
    def notifications_enabled(self, candidate_id: UUID) -> bool:
        """Whether digests may be sent to this candidate"""
        pass


class AllowAllCapabilityCheck(ICapabilityCheck):
    """Everything enabled"""

    def discovery_enabled(self, candidate_id: UUID) -> bool:
        return True

    def notifications_enabled(self, candidate_id: UUID) -> bool:
        return True
