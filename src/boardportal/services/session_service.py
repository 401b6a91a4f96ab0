"""
Session Service

Opens and tears down portal sessions. A session bundles the stores of one
signed-in member, their change-feed subscriptions and the reminder
scheduler, all sharing one operation scope.
"""
import asyncio
import logging
from typing import Dict, Optional, Set
from uuid import UUID
from zoneinfo import ZoneInfo

from ..models.directory import Profile, ProfileStatus
from ..notifications.inapp_sender import InAppSender
from ..storage.base import STORAGE_ERRORS
from ..storage.change_feed import ChangeFeed
from ..storage.invite_storage import InviteStorage
from ..storage.meeting_storage import MeetingStorage
from ..storage.notification_storage import NotificationStorage
from ..storage.profile_storage import ProfileStorage
from ..storage.task_storage import TaskStorage
from .audit_service import AuditService
from .context import SessionContext
from .errors import RemoteOperationError, SessionDeniedError, SessionNotFoundError
from .meeting_store import MeetingStore
from .notification_service import NotificationService
from .notification_store import NotificationStore
from .reminder_scheduler import ReminderScheduler
from .scope import OperationScope
from .task_store import TaskStore
from .user_directory import UserDirectory

logger = logging.getLogger("boardportal.services.sessions")


class PortalSession:
    """Everything one signed-in member works with"""

    def __init__(
        self,
        context: SessionContext,
        scope: OperationScope,
        meetings: MeetingStore,
        tasks: TaskStore,
        notifications: NotificationStore,
        directory: UserDirectory,
        reminders: ReminderScheduler,
    ):
        self.context = context
        self.scope = scope
        self.meetings = meetings
        self.tasks = tasks
        self.notifications = notifications
        self.directory = directory
        self.reminders = reminders

    @property
    def user_id(self) -> UUID:
        return self.context.user_id

    @property
    def profile(self) -> Profile:
        return self.context.profile

    def to_dict(self) -> dict:
        return {
            "session_id": str(self.context.session_id),
            "user": self.profile.to_dict(),
            "meetings": len(self.meetings.meetings),
            "tasks": len(self.tasks.tasks),
            "unread_notifications": self.notifications.unread_count,
            "reminders_running": self.reminders.is_running,
        }


class SessionRegistry:
    """
    Active portal sessions, one per user.

    Opening a session for a user who already has one closes the old one
    first. Opens for the same user are serialized, and the set of meetings
    already reminded about is kept per user across re-opens.
    """

    def __init__(
        self,
        profile_storage: ProfileStorage,
        invite_storage: InviteStorage,
        meeting_storage: MeetingStorage,
        task_storage: TaskStorage,
        notification_storage: NotificationStorage,
        change_feed: ChangeFeed,
        notification_service: NotificationService,
        audit_service: AuditService,
        inbox: Optional[InAppSender] = None,
        reminder_poll_interval: int = 60,
        reminder_window_minutes: int = 15,
        timezone: str = "UTC",
        reminders_enabled: bool = True,
    ):
        self.profile_storage = profile_storage
        self.invite_storage = invite_storage
        self.meeting_storage = meeting_storage
        self.task_storage = task_storage
        self.notification_storage = notification_storage
        self.change_feed = change_feed
        self.notification_service = notification_service
        self.audit_service = audit_service
        self.inbox = inbox
        self.reminder_poll_interval = reminder_poll_interval
        self.reminder_window_minutes = reminder_window_minutes
        self.tz = ZoneInfo(timezone)
        self.reminders_enabled = reminders_enabled
        self._sessions: Dict[UUID, PortalSession] = {}
        self._open_locks: Dict[UUID, asyncio.Lock] = {}
        self._notified: Dict[UUID, Set[UUID]] = {}

    def get(self, user_id: UUID) -> PortalSession:
        session = self._sessions.get(user_id)
        if session is None:
            raise SessionNotFoundError(f"No open portal session for user {user_id}")
        return session

    def find(self, user_id: UUID) -> Optional[PortalSession]:
        return self._sessions.get(user_id)

    @property
    def active_count(self) -> int:
        return len(self._sessions)

    async def open_session(self, user_id: UUID) -> PortalSession:
        """
        Open a portal session for a signed-in user.

        Raises:
            LookupError: no profile exists for the user
            SessionDeniedError: the profile is not Active
            RemoteOperationError: the backend could not be reached
        """
        lock = self._open_locks.setdefault(user_id, asyncio.Lock())
        async with lock:
            return await self._open_locked(user_id)

    async def _open_locked(self, user_id: UUID) -> PortalSession:
        try:
            profile = await self.profile_storage.get_by_id(user_id)
        except STORAGE_ERRORS as e:
            logger.error(f"Error loading profile {user_id}: {e}")
            raise RemoteOperationError("load profile", e) from e

        if profile is None:
            raise LookupError(f"Profile not found: {user_id}")
        if profile.status != ProfileStatus.ACTIVE:
            logger.warning(f"Session refused for {user_id}: status {profile.status.value}")
            raise SessionDeniedError(profile.status.value)

        try:
            await self.profile_storage.touch_last_active(user_id)
        except STORAGE_ERRORS as e:
            logger.warning(f"Could not update last_active for {user_id}: {e}")

        previous = self._sessions.pop(user_id, None)
        if previous is not None:
            await self._teardown(previous, clear_inbox=False)

        context = SessionContext(profile=profile)
        scope = OperationScope(context.owner_key)
        meetings = MeetingStore(context, self.meeting_storage, self.notification_service, scope)
        tasks = TaskStore(context, self.task_storage, self.notification_service, scope)
        notifications = NotificationStore(context, self.notification_storage, scope)
        directory = UserDirectory(
            context,
            self.profile_storage,
            self.invite_storage,
            self.notification_service,
            self.audit_service,
            scope,
        )
        reminders = ReminderScheduler(
            context,
            meetings,
            self.notification_service,
            poll_interval=self.reminder_poll_interval,
            window_minutes=self.reminder_window_minutes,
            tz=self.tz,
            enabled=self.reminders_enabled,
            notified=self._notified.setdefault(user_id, set()),
        )
        session = PortalSession(context, scope, meetings, tasks, notifications, directory, reminders)

        # Changes pushed during the initial load are applied by identity
        self._subscribe(session)
        try:
            await meetings.fetch_meetings()
            await tasks.fetch_tasks()
            await notifications.fetch_notifications()
            await directory.fetch_directory()
        except RemoteOperationError:
            scope.close()
            self.change_feed.unsubscribe_owner(context.owner_key)
            raise

        self._sessions[user_id] = session
        await reminders.start()

        logger.info(f"Portal session opened for {profile.email or user_id}")
        return session

    def _subscribe(self, session: PortalSession):
        owner = session.context.owner_key
        feed = self.change_feed
        feed.subscribe(
            session.notifications.table,
            session.notifications.apply_change,
            filters={"user_id": str(session.user_id)},
            owner=owner,
        )
        feed.subscribe(session.meetings.table, session.meetings.apply_change, owner=owner)
        feed.subscribe(session.tasks.table, session.tasks.apply_change, owner=owner)
        feed.subscribe(
            session.directory.profiles_table, session.directory.apply_profile_change, owner=owner
        )
        feed.subscribe(
            session.directory.invites_table, session.directory.apply_invite_change, owner=owner
        )

    async def _teardown(self, session: PortalSession, clear_inbox: bool) -> int:
        session.scope.close()
        removed = self.change_feed.unsubscribe_owner(session.context.owner_key)
        await session.reminders.stop()
        if clear_inbox and self.inbox is not None:
            self.inbox.clear(session.user_id)
        return removed

    async def close_session(self, user_id: UUID) -> bool:
        """Tear down a session; results of in-flight calls are discarded"""
        session = self._sessions.pop(user_id, None)
        if session is None:
            return False

        removed = await self._teardown(session, clear_inbox=True)
        self._notified.pop(user_id, None)

        logger.info(f"Portal session closed for {user_id} ({removed} subscription(s) removed)")
        return True

    async def close_all(self):
        for user_id in list(self._sessions):
            await self.close_session(user_id)
