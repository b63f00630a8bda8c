"""
Notification Interfaces
Digest sending and raw email delivery
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from domain.enums import EmailFrequency


@dataclass(frozen=True)
class DigestResult:
    """Outcome of one digest attempt"""

    sent: bool
    emails_sent: int = 0
    postings_included: int = 0
    error: Optional[str] = None


class IDigestSender(ABC):
    """Email-digest collaborator interface"""

    @abstractmethod
    async def send_digest(
        self,
        candidate_id: UUID,
        frequency: EmailFrequency,
        now: Optional[datetime] = None
    ) -> DigestResult:
        """
        Send a digest of recent matches to a candidate

        Args:
            candidate_id: Recipient candidate
            frequency: Configured cadence (selects the look-back window and wording)
            now: Reference time

        Returns:
            DigestResult
        """
        pass


class IEmailClient(ABC):
    """Transactional email delivery interface"""

    @abstractmethod
    async def send(self, to: str, subject: str, html: str) -> Optional[str]:
        """
        Deliver one email

        Returns:
            Provider message ID, if any

        Raises:
            CollaboratorUnavailableException: delivery failed
        """
        pass
