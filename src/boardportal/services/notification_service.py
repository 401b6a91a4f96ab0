"""
Notification Service

Creates persisted in-app notifications for any user, and fans session
reminders out to the registered delivery channels.
"""
import logging
from typing import Dict, Optional
from uuid import UUID

from ..models.directory import Profile
from ..models.notification import Notification, NotificationType, Reminder
from ..notifications.base_sender import BaseSender
from ..storage.base import STORAGE_ERRORS
from ..storage.notification_storage import NotificationStorage

logger = logging.getLogger("boardportal.services.notification")


class NotificationService:
    """
    Notification orchestrator.

    create_notification() writes a row the recipient's session will pick up
    through the change feed. It is best-effort: a failure is logged and the
    action that triggered it still succeeds.

    send_reminder() delivers to every registered sender; a failing channel
    does not stop the others and is never retried.
    """

    def __init__(
        self,
        storage: NotificationStorage,
        senders: Optional[Dict[str, BaseSender]] = None,
    ):
        self.storage = storage
        # channel name -> sender instance
        self._senders: Dict[str, BaseSender] = senders or {}

    def register_sender(self, channel: str, sender: BaseSender):
        """Register a reminder delivery channel"""
        self._senders[channel] = sender
        logger.info(f"Registered reminder sender: {channel}")

    def get_sender(self, channel: str) -> Optional[BaseSender]:
        return self._senders.get(channel)

    async def create_notification(
        self,
        user_id: UUID,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
    ) -> Optional[Notification]:
        """Insert an unread notification for a user"""
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=NotificationType(type),
            is_read=False,
        )
        try:
            return await self.storage.create(notification)
        except STORAGE_ERRORS as e:
            logger.error(f"Error creating notification for user {user_id}: {e}")
            return None

    async def send_reminder(self, recipient: Profile, reminder: Reminder) -> int:
        """
        Deliver a reminder through every channel.

        Returns the number of channels that accepted it.
        """
        config = {
            "user_id": str(recipient.id),
            "email": recipient.email,
            "meeting_id": str(reminder.meeting_id),
        }
        delivered = 0
        for channel, sender in self._senders.items():
            result = await sender.send(config, reminder.title, reminder.message)
            if result.success:
                delivered += 1
            else:
                logger.warning(
                    f"Reminder via {channel} failed for user {recipient.id}: {result.error}"
                )
        if not delivered:
            logger.error(f"No channel delivered reminder for meeting {reminder.meeting_id}")
        return delivered

    async def close(self):
        """Cleanup sender resources"""
        for sender in self._senders.values():
            await sender.close()
