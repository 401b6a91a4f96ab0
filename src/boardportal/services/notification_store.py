"""
Notification Store

In-memory mirror of the current user's notifications with read-state
bookkeeping.
"""
import logging
from dataclasses import replace
from typing import List
from uuid import UUID

from ..models.change_event import ChangeEvent
from ..models.fields import as_uuid
from ..models.notification import Notification, count_unread
from ..storage.base import STORAGE_ERRORS
from ..storage.notification_storage import NotificationStorage
from .context import SessionContext
from .errors import RemoteOperationError
from .reducers import ChangeSequence, apply_change, patch, upsert
from .scope import OperationScope

logger = logging.getLogger("boardportal.services.notification_store")


class NotificationStore:
    """
    Mirror of `notifications` rows addressed to the session user,
    newest first.

    Read-state writes go to the backend first, then the mirror is updated
    optimistically without waiting for the change-feed echo. The echo is
    applied by identity, so it is a no-op by the time it arrives.
    """

    table = "notifications"

    def __init__(
        self,
        context: SessionContext,
        storage: NotificationStorage,
        scope: OperationScope,
    ):
        self.context = context
        self.storage = storage
        self.scope = scope
        self.notifications: List[Notification] = []
        self.loading = False
        self._sequence = ChangeSequence()

    @property
    def unread_count(self) -> int:
        return count_unread(self.notifications)

    async def fetch_notifications(self) -> List[Notification]:
        """Load the user's notifications from the backend"""
        self.loading = True
        try:
            rows = await self.scope.run(self.storage.list_by_user(self.context.user_id))
        except STORAGE_ERRORS as e:
            logger.error(f"Error fetching notifications: {e}")
            raise RemoteOperationError("load notifications", e) from e
        finally:
            self.loading = False

        if not self.scope.is_active:
            return self.notifications
        self.notifications = rows
        return self.notifications

    async def refresh_notifications(self) -> List[Notification]:
        return await self.fetch_notifications()

    async def mark_as_read(self, notification_id: UUID) -> bool:
        """Mark one notification read (remote, then mirror)"""
        try:
            updated = await self.scope.run(
                self.storage.mark_read(notification_id, self.context.user_id)
            )
        except STORAGE_ERRORS as e:
            logger.error(f"Error marking notification as read: {e}")
            raise RemoteOperationError("mark notification as read", e) from e

        if self.scope.is_active:
            self.notifications = patch(
                self.notifications, notification_id, lambda n: replace(n, is_read=True)
            )
        return updated

    async def mark_all_as_read(self) -> int:
        """Mark every notification of the user read (remote, then mirror)"""
        try:
            count = await self.scope.run(self.storage.mark_all_read(self.context.user_id))
        except STORAGE_ERRORS as e:
            logger.error(f"Error marking all notifications as read: {e}")
            raise RemoteOperationError("mark all notifications as read", e) from e

        if self.scope.is_active:
            self.notifications = [
                n if n.is_read else replace(n, is_read=True) for n in self.notifications
            ]
        logger.info(f"Marked {count} notification(s) read for user {self.context.user_id}")
        return count

    def apply_change(self, change: ChangeEvent):
        """Change-feed handler; new notifications go to the top"""
        if not self.scope.is_active:
            return None
        notification_id = as_uuid(change.record.get("id"))
        ticket = self._sequence.bump(notification_id)
        if change.needs_reload:
            return self._reload(notification_id, ticket)
        self.notifications = apply_change(
            self.notifications,
            change,
            parse=Notification.from_dict,
            prepend=True,
            record_key=lambda r: as_uuid(r.get("id")),
        )
        return None

    async def _reload(self, notification_id: UUID, ticket: int):
        try:
            notification = await self.scope.run(
                self.storage.get_by_id(notification_id, self.context.user_id)
            )
        except STORAGE_ERRORS as e:
            logger.warning(f"Could not reload pushed notification {notification_id}: {e}")
            return
        if notification is None or not self.scope.is_active:
            return
        if not self._sequence.is_current(notification_id, ticket):
            return
        self.notifications = upsert(self.notifications, notification, prepend=True)
