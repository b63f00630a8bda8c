"""
Lifecycle Interfaces
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from uuid import UUID


class IMatchesCache(ABC):
    """Short-lived cache of a candidate's rendered top-matches listing"""

    @abstractmethod
    async def get(self, candidate_id: UUID) -> Optional[List[Dict[str, Any]]]:
        pass

    @abstractmethod
    async def set(self, candidate_id: UUID, items: List[Dict[str, Any]]) -> None:
        pass

    @abstractmethod
    async def invalidate(self, candidate_id: UUID) -> None:
        """Drop the cached listing; implementations must not raise"""
        pass
