"""
Notification Storage

PostgreSQL storage for in-app notifications.
"""
import logging
from typing import List, Optional
from uuid import UUID

from .base import BaseStorage
from ..models.notification import Notification

logger = logging.getLogger("boardportal.storage.notification")


class NotificationStorage(BaseStorage):
    """Storage for Notification entities"""

    async def create(self, notification: Notification) -> Notification:
        """Create a new notification"""
        query = """
            INSERT INTO notifications (
                id, user_id, title, message, type, is_read, created_at
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7)
            RETURNING *
        """
        row = await self.fetchrow(
            query,
            notification.id, notification.user_id, notification.title,
            notification.message, notification.type.value,
            notification.is_read, notification.created_at
        )
        return self._row_to_notification(row)

    async def list_by_user(self, user_id: UUID) -> List[Notification]:
        """List notifications for a user, newest first"""
        query = """
            SELECT * FROM notifications
            WHERE user_id = $1
            ORDER BY created_at DESC
        """
        rows = await self.fetch(query, user_id)
        return [self._row_to_notification(row) for row in rows]

    async def get_by_id(self, notification_id: UUID, user_id: UUID) -> Optional[Notification]:
        """Get one notification; scoped to its owner"""
        row = await self.fetchrow(
            "SELECT * FROM notifications WHERE id = $1 AND user_id = $2",
            notification_id, user_id
        )
        return self._row_to_notification(row) if row else None

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> bool:
        """Mark one notification read; scoped to its owner"""
        query = """
            UPDATE notifications
            SET is_read = true
            WHERE id = $1 AND user_id = $2
        """
        result = await self.execute(query, notification_id, user_id)
        return self.affected_rows(result) > 0

    async def mark_all_read(self, user_id: UUID) -> int:
        """Mark every unread notification of a user read"""
        query = """
            UPDATE notifications
            SET is_read = true
            WHERE user_id = $1 AND is_read = false
        """
        result = await self.execute(query, user_id)
        return self.affected_rows(result)

    def _row_to_notification(self, row) -> Notification:
        """Convert database row to Notification"""
        return Notification.from_dict(dict(row))
