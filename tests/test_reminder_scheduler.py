"""Tests for boardportal.services.reminder_scheduler."""

from __future__ import annotations

import asyncio
from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from boardportal.models import ChangeEvent, ChangeType, MeetingStatus
from boardportal.notifications.base_sender import BaseSender, SendResult
from boardportal.services.meeting_store import MeetingStore
from boardportal.services.reminder_scheduler import (
    ReminderScheduler,
    is_reminder_due,
    minutes_until,
    reminder_message,
)

from conftest import FakeMeetingStorage, make_meeting

UTC = ZoneInfo("UTC")
WINDOW = timedelta(minutes=15)


class FailingSender(BaseSender):
    def __init__(self):
        self.calls = 0

    async def send(self, config, title, content):
        self.calls += 1
        return SendResult(success=False, error="channel down")

    async def close(self):
        pass


async def make_scheduler(context, scope, notification_service, meetings, **kwargs):
    store = MeetingStore(context, FakeMeetingStorage(meetings), notification_service, scope)
    await store.fetch_meetings()
    scheduler = ReminderScheduler(context, store, notification_service, tz=UTC, **kwargs)
    return store, scheduler


class TestIsReminderDue:
    def test_ten_minutes_ahead(self, fixed_now):
        assert is_reminder_due(make_meeting(start=time(12, 10)), fixed_now, UTC, WINDOW)

    def test_exactly_fifteen_minutes(self, fixed_now):
        assert is_reminder_due(make_meeting(start=time(12, 15)), fixed_now, UTC, WINDOW)

    def test_sixteen_minutes_is_too_early(self, fixed_now):
        assert not is_reminder_due(make_meeting(start=time(12, 16)), fixed_now, UTC, WINDOW)

    def test_already_started(self, fixed_now):
        assert not is_reminder_due(make_meeting(start=time(11, 55)), fixed_now, UTC, WINDOW)

    def test_starting_right_now(self, fixed_now):
        assert not is_reminder_due(make_meeting(start=time(12, 0)), fixed_now, UTC, WINDOW)

    @pytest.mark.parametrize("status", [MeetingStatus.IN_PROGRESS, MeetingStatus.COMPLETED])
    def test_only_upcoming_meetings(self, fixed_now, status):
        meeting = make_meeting(start=time(12, 5), status=status)
        assert not is_reminder_due(meeting, fixed_now, UTC, WINDOW)

    def test_missing_start_time(self, fixed_now):
        meeting = make_meeting()
        meeting.start_time = None
        assert not is_reminder_due(meeting, fixed_now, UTC, WINDOW)
        assert minutes_until(meeting, fixed_now, UTC) is None

    def test_portal_timezone_applies_to_wall_clock(self):
        berlin = ZoneInfo("Europe/Berlin")
        # 12:10 in Berlin (CEST) is 10:10 UTC
        now = datetime(2024, 6, 15, 10, 0, tzinfo=timezone.utc)
        assert is_reminder_due(make_meeting(start=time(12, 10)), now, berlin, WINDOW)
        assert not is_reminder_due(make_meeting(start=time(12, 10)), now, UTC, WINDOW)


class TestReminderMessage:
    def test_rounds_remaining_minutes_up(self, fixed_now):
        meeting = make_meeting(title="Budget", start=time(12, 10))
        now = fixed_now + timedelta(seconds=30)
        assert reminder_message(meeting, minutes_until(meeting, now, UTC)) == (
            '"Budget" starts in 10 minutes.'
        )

    def test_whole_minutes(self, fixed_now):
        meeting = make_meeting(title="Budget", start=time(12, 15))
        assert reminder_message(meeting, minutes_until(meeting, fixed_now, UTC)) == (
            '"Budget" starts in 15 minutes.'
        )


class TestEvaluate:
    async def test_single_reminder_across_ticks(self, context, scope, notification_service, fixed_now):
        meeting = make_meeting(title="Quarterly Review", start=time(12, 10))
        _, scheduler = await make_scheduler(context, scope, notification_service, [meeting])

        first = scheduler.evaluate(fixed_now)
        later = [scheduler.evaluate(fixed_now + timedelta(minutes=m)) for m in range(1, 10)]

        assert len(first) == 1
        assert first[0].meeting_id == meeting.id
        assert first[0].user_id == context.user_id
        assert first[0].title == "Meeting Reminder"
        assert first[0].message == '"Quarterly Review" starts in 10 minutes.'
        assert all(r == [] for r in later)
        assert scheduler.notified == {meeting.id}

    async def test_meeting_entering_window_later(self, context, scope, notification_service, fixed_now):
        meeting = make_meeting(start=time(12, 30))
        _, scheduler = await make_scheduler(context, scope, notification_service, [meeting])

        assert scheduler.evaluate(fixed_now) == []
        assert len(scheduler.evaluate(fixed_now + timedelta(minutes=16))) == 1
        assert scheduler.evaluate(fixed_now + timedelta(minutes=17)) == []

    async def test_each_meeting_reminded_once(self, context, scope, notification_service, fixed_now):
        meetings = [
            make_meeting(title="A", start=time(12, 5)),
            make_meeting(title="B", start=time(12, 12)),
            make_meeting(title="C", start=time(12, 40)),
            make_meeting(title="D", start=time(12, 3), status=MeetingStatus.IN_PROGRESS),
        ]
        _, scheduler = await make_scheduler(context, scope, notification_service, meetings)

        due = scheduler.evaluate(fixed_now)
        assert sorted(r.message for r in due) == [
            '"A" starts in 5 minutes.',
            '"B" starts in 12 minutes.',
        ]


class TestCheckNow:
    async def test_delivers_to_inbox(self, context, scope, notification_service, inbox, fixed_now):
        meeting = make_meeting(start=time(12, 10))
        _, scheduler = await make_scheduler(context, scope, notification_service, [meeting])

        await scheduler.check_now(fixed_now)
        await scheduler.check_now(fixed_now + timedelta(minutes=1))

        queued = inbox.drain(context.user_id)
        assert [r.meeting_id for r in queued] == [meeting.id]
        assert inbox.drain(context.user_id) == []

    async def test_reminders_are_not_persisted(
        self, context, scope, notification_service, notification_storage, fixed_now
    ):
        _, scheduler = await make_scheduler(
            context, scope, notification_service, [make_meeting(start=time(12, 10))]
        )
        await scheduler.check_now(fixed_now)
        assert notification_storage.rows == []

    async def test_failed_delivery_is_not_retried(self, context, scope, notification_service, fixed_now):
        failing = FailingSender()
        notification_service.register_sender("broken", failing)
        _, scheduler = await make_scheduler(
            context, scope, notification_service, [make_meeting(start=time(12, 10))]
        )

        await scheduler.check_now(fixed_now)
        await scheduler.check_now(fixed_now + timedelta(minutes=1))

        assert failing.calls == 1


def _meeting_starting_in(minutes: int, **kwargs):
    start = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    return make_meeting(day=start.date(), start=start.time().replace(microsecond=0), **kwargs)


class TestBackgroundLoop:
    async def test_checks_immediately_on_start(self, context, scope, notification_service, inbox):
        meeting = _meeting_starting_in(10)
        _, scheduler = await make_scheduler(
            context, scope, notification_service, [meeting], poll_interval=3600
        )

        await scheduler.start()
        await asyncio.sleep(0.05)
        try:
            assert scheduler.is_running
            assert [r.meeting_id for r in inbox.pending(context.user_id)] == [meeting.id]
        finally:
            await scheduler.stop()
        assert not scheduler.is_running

    async def test_meeting_change_triggers_check(self, context, scope, notification_service, inbox):
        store, scheduler = await make_scheduler(
            context, scope, notification_service, [], poll_interval=3600
        )
        await scheduler.start()
        await asyncio.sleep(0.05)
        try:
            meeting = _meeting_starting_in(5, title="Pushed")
            store.apply_change(ChangeEvent("meetings", ChangeType.INSERT, new=meeting.to_dict()))
            await asyncio.sleep(0.05)
            assert [r.meeting_id for r in inbox.pending(context.user_id)] == [meeting.id]
        finally:
            await scheduler.stop()

    async def test_disabled_scheduler_does_not_start(self, context, scope, notification_service):
        _, scheduler = await make_scheduler(context, scope, notification_service, [], enabled=False)
        await scheduler.start()
        assert not scheduler.is_running
        await scheduler.stop()
