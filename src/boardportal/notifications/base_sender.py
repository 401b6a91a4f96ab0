"""
Base Sender

Abstract interface for reminder delivery channels.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class SendResult:
    """Result of a send attempt"""
    success: bool
    error: Optional[str] = None


class BaseSender(ABC):
    """Abstract reminder sender"""

    @abstractmethod
    async def send(self, config: dict, title: str, content: str) -> SendResult:
        """
        Send a reminder.

        Args:
            config: Recipient details ({"user_id": "...", "email": "...", "meeting_id": "..."})
            title: Short heading
            content: Message text to send
        Returns:
            SendResult with success flag and optional error message
        """
        ...

    @abstractmethod
    async def close(self):
        """Cleanup resources"""
        ...
