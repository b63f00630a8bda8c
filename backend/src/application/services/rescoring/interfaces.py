"""
Rescoring Interfaces
"""
from abc import ABC, abstractmethod
from uuid import UUID


class ICandidateLock(ABC):
    """One-in-flight guard per candidate"""

    @abstractmethod
    async def acquire(self, candidate_id: UUID) -> bool:
        """
        Try to take the lock

        Returns:
            True if acquired, False if another holder has it
        """
        pass

    @abstractmethod
    async def release(self, candidate_id: UUID) -> None:
        """Release the lock"""
        pass
