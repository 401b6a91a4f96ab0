"""
In-App Sender

Queues reminders per user until the portal client drains them.
Nothing is written to the notifications table.
"""
import logging
from collections import defaultdict, deque
from typing import Deque, Dict, List, Optional
from uuid import UUID

from .base_sender import BaseSender, SendResult
from ..models.notification import Reminder

logger = logging.getLogger("boardportal.notifications.inapp")


class InAppSender(BaseSender):
    """Per-user reminder inbox"""

    def __init__(self, max_pending: int = 100):
        self.max_pending = max_pending
        self._inbox: Dict[UUID, Deque[Reminder]] = defaultdict(
            lambda: deque(maxlen=self.max_pending)
        )

    async def send(self, config: dict, title: str, content: str) -> SendResult:
        """
        Queue a reminder for a user.

        config must contain 'user_id' and 'meeting_id'.
        """
        user_id = config.get("user_id")
        meeting_id = config.get("meeting_id")
        if not user_id or not meeting_id:
            return SendResult(success=False, error="user_id and meeting_id are required")

        reminder = Reminder(
            meeting_id=UUID(str(meeting_id)),
            user_id=UUID(str(user_id)),
            title=title,
            message=content,
        )
        self._inbox[reminder.user_id].append(reminder)
        logger.info(f"Reminder queued for user {user_id}: {content}")
        return SendResult(success=True)

    def pending(self, user_id: UUID) -> List[Reminder]:
        """Peek at queued reminders without consuming them"""
        return list(self._inbox.get(user_id, ()))

    def drain(self, user_id: UUID) -> List[Reminder]:
        """Return and remove all queued reminders of a user"""
        queue: Optional[Deque[Reminder]] = self._inbox.pop(user_id, None)
        return list(queue) if queue else []

    def clear(self, user_id: UUID):
        self._inbox.pop(user_id, None)

    async def close(self):
        self._inbox.clear()
