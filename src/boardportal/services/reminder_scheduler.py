"""
Reminder Scheduler

Background asyncio task that watches the session's meeting mirror and
emits one "starting soon" reminder per upcoming meeting.
"""
from __future__ import annotations

import asyncio
import logging
import math
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Set, TYPE_CHECKING
from uuid import UUID
from zoneinfo import ZoneInfo

from ..models.meeting import Meeting, MeetingStatus
from ..models.notification import Reminder

if TYPE_CHECKING:
    from .context import SessionContext
    from .meeting_store import MeetingStore
    from .notification_service import NotificationService

logger = logging.getLogger("boardportal.services.reminders")


def minutes_until(meeting: Meeting, now: datetime, tz: ZoneInfo) -> Optional[float]:
    """Minutes from now until the meeting starts (negative once started)"""
    start = meeting.starts_at(tz)
    if start is None:
        return None
    return (start - now).total_seconds() / 60


def is_reminder_due(meeting: Meeting, now: datetime, tz: ZoneInfo, window: timedelta) -> bool:
    """Upcoming and starting within (0, window]"""
    if meeting.status != MeetingStatus.UPCOMING:
        return False
    start = meeting.starts_at(tz)
    if start is None:
        return False
    remaining = start - now
    return timedelta(0) < remaining <= window


def reminder_message(meeting: Meeting, minutes: float) -> str:
    return f'"{meeting.title}" starts in {math.ceil(minutes)} minutes.'


class ReminderScheduler:
    """
    Per-session reminder scheduler.

    Evaluates the meeting mirror once on start, then every poll_interval
    seconds, and again whenever the mirror changes. Meeting ids already
    reminded are kept in `notified`, so a meeting is reminded at most once
    however many evaluations run. The registry passes the same set to every
    scheduler it opens for a user.
    """

    def __init__(
        self,
        context: SessionContext,
        meeting_store: MeetingStore,
        notification_service: NotificationService,
        poll_interval: int = 60,
        window_minutes: int = 15,
        tz: Optional[ZoneInfo] = None,
        enabled: bool = True,
        notified: Optional[Set[UUID]] = None,
    ):
        self.context = context
        self.meeting_store = meeting_store
        self.notification_service = notification_service
        self.poll_interval = poll_interval
        self.window = timedelta(minutes=window_minutes)
        self.tz = tz or ZoneInfo("UTC")
        self.enabled = enabled
        self.notified: Set[UUID] = notified if notified is not None else set()
        self._task: Optional[asyncio.Task] = None
        self._running = False
        self._wakeup = asyncio.Event()

        meeting_store.add_listener(self.poke)

    @property
    def is_running(self) -> bool:
        return self._running

    def evaluate(self, now: datetime) -> List[Reminder]:
        """
        Collect the reminders due at `now` and mark their meetings notified.

        Synchronous on purpose: the notified-set check and insert must not
        be separated by a suspension point.
        """
        due: List[Reminder] = []
        for meeting in self.meeting_store.meetings:
            if meeting.id in self.notified:
                continue
            if not is_reminder_due(meeting, now, self.tz, self.window):
                continue
            self.notified.add(meeting.id)
            due.append(
                Reminder(
                    meeting_id=meeting.id,
                    user_id=self.context.user_id,
                    message=reminder_message(meeting, minutes_until(meeting, now, self.tz)),
                )
            )
        return due

    async def check_now(self, now: Optional[datetime] = None) -> List[Reminder]:
        """Evaluate once and deliver whatever is due"""
        due = self.evaluate(now or datetime.now(timezone.utc))
        for reminder in due:
            logger.info(f"Reminder for meeting {reminder.meeting_id}: {reminder.message}")
            await self.notification_service.send_reminder(self.context.profile, reminder)
        return due

    def poke(self):
        """Request an evaluation outside the regular interval"""
        if self._running:
            self._wakeup.set()

    async def start(self):
        """Start the reminder background task"""
        if not self.enabled:
            logger.info("Reminders are disabled (REMINDERS_ENABLED=false)")
            return

        if self._running:
            logger.warning("Reminder scheduler is already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._poll_loop())
        logger.info(
            f"Reminder scheduler started for user {self.context.user_id} "
            f"(poll_interval={self.poll_interval}s)"
        )

    async def stop(self):
        """Stop the reminder background task"""
        self._running = False
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info(f"Reminder scheduler stopped for user {self.context.user_id}")

    async def _poll_loop(self):
        """Main polling loop"""
        while self._running:
            self._wakeup.clear()
            try:
                await self.check_now()
            except Exception as e:
                logger.error(f"Reminder check error: {e}")

            try:
                await asyncio.wait_for(self._wakeup.wait(), timeout=self.poll_interval)
            except asyncio.TimeoutError:
                pass
            except asyncio.CancelledError:
                break
