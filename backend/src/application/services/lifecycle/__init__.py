"""
Posting Lifecycle
Status transitions and expiry policies
"""
from .interfaces import IMatchesCache
from .lifecycle_manager import LifecycleManager, CleanupResult, ApplyResult

__all__ = ["IMatchesCache", "LifecycleManager", "CleanupResult", "ApplyResult"]
