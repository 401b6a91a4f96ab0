"""
Meeting Store

In-memory mirror of meetings for one portal session.
"""
import logging
from typing import Callable, List, Optional
from uuid import UUID

from ..models.change_event import ChangeEvent
from ..models.fields import as_uuid
from ..models.meeting import Meeting, MeetingDraft, MeetingStatus
from ..models.notification import NotificationType
from ..storage.base import STORAGE_ERRORS
from ..storage.meeting_storage import MeetingStorage
from .context import SessionContext
from .errors import RemoteOperationError
from .notification_service import NotificationService
from .reducers import ChangeSequence, apply_change, remove, upsert
from .scope import OperationScope

logger = logging.getLogger("boardportal.services.meeting_store")


def _sort_key(meeting: Meeting):
    return (meeting.date is None, meeting.date, meeting.start_time is None, meeting.start_time)


class MeetingStore:
    """Mirror of `meetings` rows, ordered by date and start time"""

    table = "meetings"

    def __init__(
        self,
        context: SessionContext,
        storage: MeetingStorage,
        notification_service: NotificationService,
        scope: OperationScope,
    ):
        self.context = context
        self.storage = storage
        self.notification_service = notification_service
        self.scope = scope
        self.meetings: List[Meeting] = []
        self.loading = False
        self._listeners: List[Callable[[], None]] = []
        self._sequence = ChangeSequence()

    def add_listener(self, listener: Callable[[], None]):
        """Call listener() whenever the mirror changes"""
        self._listeners.append(listener)

    def _set_meetings(self, meetings: List[Meeting]):
        self.meetings = sorted(meetings, key=_sort_key)
        for listener in list(self._listeners):
            listener()

    def get(self, meeting_id: UUID) -> Optional[Meeting]:
        return next((m for m in self.meetings if m.id == meeting_id), None)

    def upcoming(self) -> List[Meeting]:
        return [m for m in self.meetings if m.status == MeetingStatus.UPCOMING]

    async def fetch_meetings(self) -> List[Meeting]:
        """Load all visible meetings from the backend"""
        self.loading = True
        try:
            rows = await self.scope.run(self.storage.list_all())
        except STORAGE_ERRORS as e:
            logger.error(f"Error fetching meetings: {e}")
            raise RemoteOperationError("load meetings", e) from e
        finally:
            self.loading = False

        if self.scope.is_active:
            self._set_meetings(rows)
        return self.meetings

    async def schedule_meeting(self, draft: MeetingDraft) -> Meeting:
        """
        Create a meeting owned by the current user.

        Status starts as Upcoming and the attendee count follows the
        attendee list. The owner and every other attendee get a
        notification.
        """
        meeting = Meeting(
            title=draft.title,
            date=draft.date,
            start_time=draft.start_time,
            end_time=draft.end_time,
            location=draft.location,
            link=draft.link,
            description=draft.description,
            category=draft.category,
            status=MeetingStatus.UPCOMING,
            attendees=len(draft.attendee_list),
            attendee_list=list(draft.attendee_list),
            attached_docs=list(draft.attached_docs),
            owner_id=self.context.user_id,
        )
        try:
            created = await self.scope.run(self.storage.create(meeting))
        except STORAGE_ERRORS as e:
            logger.error(f"Error scheduling meeting: {e}")
            raise RemoteOperationError("schedule meeting", e) from e

        if not self.scope.is_active:
            return created

        self._set_meetings(upsert(self.meetings, created))
        logger.info(f"Scheduled meeting '{created.title}' on {created.date}")

        when = created.date.strftime("%b %d, %Y") if created.date else "a date to be confirmed"
        await self.notification_service.create_notification(
            self.context.user_id,
            "Meeting Scheduled",
            f'You scheduled "{created.title}" for {when}.',
            NotificationType.MEETING,
        )
        for invitee_id in created.attendee_list:
            if invitee_id == self.context.user_id:
                continue
            await self.notification_service.create_notification(
                invitee_id,
                "New Meeting Invitation",
                f'You have been invited to "{created.title}" on {when}.',
                NotificationType.MEETING,
            )
        return created

    async def update_meeting_status(self, meeting_id: UUID, status: MeetingStatus) -> Optional[Meeting]:
        """Set the status of a meeting"""
        try:
            updated = await self.scope.run(
                self.storage.update_status(meeting_id, MeetingStatus(status))
            )
        except STORAGE_ERRORS as e:
            logger.error(f"Error updating meeting status: {e}")
            raise RemoteOperationError("update meeting status", e) from e

        if updated is not None and self.scope.is_active:
            self._set_meetings(upsert(self.meetings, updated))
        return updated

    async def delete_meeting(self, meeting_id: UUID) -> bool:
        """Delete a meeting"""
        try:
            deleted = await self.scope.run(self.storage.delete(meeting_id))
        except STORAGE_ERRORS as e:
            logger.error(f"Error deleting meeting: {e}")
            raise RemoteOperationError("delete meeting", e) from e

        if self.scope.is_active:
            self._sequence.bump(meeting_id)
            self._set_meetings(remove(self.meetings, meeting_id))
        return deleted

    def apply_change(self, change: ChangeEvent):
        """
        Change-feed handler.

        Truncated rows are re-read; the returned coroutine is awaited by
        the change feed.
        """
        if not self.scope.is_active:
            return None
        meeting_id = as_uuid(change.record.get("id"))
        ticket = self._sequence.bump(meeting_id)
        if change.needs_reload:
            return self._reload(meeting_id, ticket)
        self._set_meetings(
            apply_change(
                self.meetings,
                change,
                parse=Meeting.from_dict,
                record_key=lambda r: as_uuid(r.get("id")),
            )
        )
        return None

    async def _reload(self, meeting_id: UUID, ticket: int):
        try:
            meeting = await self.scope.run(self.storage.get_by_id(meeting_id))
        except STORAGE_ERRORS as e:
            logger.warning(f"Could not reload pushed meeting {meeting_id}: {e}")
            return
        if meeting is None or not self.scope.is_active:
            return
        if not self._sequence.is_current(meeting_id, ticket):
            return
        self._set_meetings(upsert(self.meetings, meeting))
