"""Tests for boardportal.services.session_service."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from boardportal.models import ChangeEvent, ChangeType, Notification, Profile, ProfileStatus
from boardportal.services.errors import RemoteOperationError, SessionDeniedError, SessionNotFoundError
from boardportal.services.session_service import SessionRegistry
from boardportal.storage.change_feed import ChangeFeed

from conftest import (
    FakeInviteStorage,
    FakeMeetingStorage,
    FakeProfileStorage,
    FakeTaskStorage,
    make_meeting,
)


@pytest.fixture
def change_feed() -> ChangeFeed:
    return ChangeFeed("postgresql://unused@localhost/none")


@pytest.fixture
def profile_storage(admin_profile, member_profile) -> FakeProfileStorage:
    suspended = Profile(full_name="Sam", email="sam@board.example", status=ProfileStatus.INACTIVE)
    return FakeProfileStorage([admin_profile, member_profile, suspended])


@pytest.fixture
def registry(
    profile_storage, change_feed, notification_storage, notification_service, audit_service, inbox
) -> SessionRegistry:
    return SessionRegistry(
        profile_storage=profile_storage,
        invite_storage=FakeInviteStorage(),
        meeting_storage=FakeMeetingStorage([make_meeting()]),
        task_storage=FakeTaskStorage(),
        notification_storage=notification_storage,
        change_feed=change_feed,
        notification_service=notification_service,
        audit_service=audit_service,
        inbox=inbox,
        reminders_enabled=False,
    )


class TestOpenSession:
    async def test_loads_everything_and_subscribes(self, registry, admin_profile, change_feed, profile_storage):
        session = await registry.open_session(admin_profile.id)

        assert session.profile.id == admin_profile.id
        assert len(session.meetings.meetings) == 1
        assert len(session.directory.profiles) == 3
        assert change_feed.subscription_count() == 5
        assert profile_storage.rows[admin_profile.id].last_active is not None
        assert registry.get(admin_profile.id) is session

    async def test_inactive_profile_refused(self, registry, profile_storage):
        suspended = next(p for p in profile_storage.rows.values() if p.full_name == "Sam")
        with pytest.raises(SessionDeniedError) as exc:
            await registry.open_session(suspended.id)
        assert "Inactive" in str(exc.value)
        assert registry.active_count == 0

    async def test_unknown_profile(self, registry):
        with pytest.raises(LookupError):
            await registry.open_session(uuid4())

    async def test_backend_unreachable(self, registry, profile_storage, admin_profile):
        profile_storage.error = OSError("refused")
        with pytest.raises(RemoteOperationError):
            await registry.open_session(admin_profile.id)

    async def test_reopening_replaces_previous_session(self, registry, admin_profile, change_feed):
        first = await registry.open_session(admin_profile.id)
        second = await registry.open_session(admin_profile.id)

        assert first.scope.is_active is False
        assert second.scope.is_active is True
        assert change_feed.subscription_count() == 5

    async def test_notifications_routed_to_owner_only(
        self, registry, admin_profile, member_profile, change_feed
    ):
        admin = await registry.open_session(admin_profile.id)
        member = await registry.open_session(member_profile.id)

        note = Notification(user_id=member_profile.id, title="For Ben")
        change_feed.dispatch(ChangeEvent("notifications", ChangeType.INSERT, new=note.to_dict()))

        assert [n.title for n in member.notifications.notifications] == ["For Ben"]
        assert admin.notifications.notifications == []


class TestCloseSession:
    async def test_close_tears_down(self, registry, admin_profile, change_feed, inbox):
        session = await registry.open_session(admin_profile.id)

        assert await registry.close_session(admin_profile.id) is True

        assert session.scope.is_active is False
        assert change_feed.subscription_count() == 0
        assert inbox.pending(admin_profile.id) == []
        with pytest.raises(SessionNotFoundError):
            registry.get(admin_profile.id)

    async def test_close_unknown(self, registry):
        assert await registry.close_session(uuid4()) is False

    async def test_late_events_ignored_after_close(self, registry, admin_profile, change_feed):
        session = await registry.open_session(admin_profile.id)
        await registry.close_session(admin_profile.id)

        change_feed.dispatch(ChangeEvent("meetings", ChangeType.INSERT, new=make_meeting().to_dict()))
        session.meetings.apply_change(ChangeEvent("meetings", ChangeType.INSERT, new=make_meeting().to_dict()))

        assert len(session.meetings.meetings) == 1

    async def test_scheduler_stopped_on_close(self, registry, admin_profile):
        registry.reminders_enabled = True
        registry.reminder_poll_interval = 3600
        session = await registry.open_session(admin_profile.id)
        assert session.reminders.is_running

        await registry.close_all()

        assert not session.reminders.is_running
        assert registry.active_count == 0


class SlowMeetingStorage(FakeMeetingStorage):
    """Yields to the event loop before answering, like a real round trip"""

    async def list_all(self):
        await asyncio.sleep(0)
        return await super().list_all()


def meeting_in(minutes: int):
    soon = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    return make_meeting(title="Audit Committee", day=soon.date(), start=soon.time().replace(microsecond=0))


class TestOverlappingOpens:
    @pytest.fixture
    def reminding_registry(self, registry) -> SessionRegistry:
        registry.meeting_storage = SlowMeetingStorage([meeting_in(10)])
        registry.reminders_enabled = True
        registry.reminder_poll_interval = 3600
        return registry

    async def test_concurrent_opens_leave_one_session(self, reminding_registry, admin_profile, change_feed):
        first, second = await asyncio.gather(
            reminding_registry.open_session(admin_profile.id),
            reminding_registry.open_session(admin_profile.id),
        )

        assert reminding_registry.active_count == 1
        assert reminding_registry.get(admin_profile.id) is second
        assert change_feed.subscription_count() == 5
        assert first.scope.is_active is False
        assert not first.reminders.is_running

        await reminding_registry.close_all()
        assert change_feed.subscription_count() == 0
        assert not second.reminders.is_running

    async def test_one_reminder_across_reopens(self, reminding_registry, admin_profile, inbox):
        await asyncio.gather(
            reminding_registry.open_session(admin_profile.id),
            reminding_registry.open_session(admin_profile.id),
        )
        await asyncio.sleep(0.05)
        await reminding_registry.open_session(admin_profile.id)
        await asyncio.sleep(0.05)

        assert [r.message for r in inbox.pending(admin_profile.id)] == [
            '"Audit Committee" starts in 10 minutes.'
        ]
        await reminding_registry.close_all()

    async def test_failed_load_unsubscribes(self, registry, admin_profile, change_feed):
        registry.task_storage.error = OSError("refused")

        with pytest.raises(RemoteOperationError):
            await registry.open_session(admin_profile.id)

        assert change_feed.subscription_count() == 0
        assert registry.active_count == 0
