"""Tests for boardportal.services.meeting_store."""

from __future__ import annotations

from datetime import date, time

import pytest

from boardportal.models import ChangeEvent, ChangeType, MeetingDraft, MeetingStatus, NotificationType
from boardportal.services.errors import RemoteOperationError
from boardportal.services.meeting_store import MeetingStore

from conftest import FakeMeetingStorage, make_meeting


@pytest.fixture
def meeting_storage() -> FakeMeetingStorage:
    return FakeMeetingStorage([
        make_meeting(title="Later", day=date(2024, 7, 1), start=time(9, 0)),
        make_meeting(title="Sooner", day=date(2024, 6, 20), start=time(15, 0)),
        make_meeting(title="Same day, earlier", day=date(2024, 6, 20), start=time(8, 30)),
    ])


@pytest.fixture
async def store(context, scope, meeting_storage, notification_service) -> MeetingStore:
    store = MeetingStore(context, meeting_storage, notification_service, scope)
    await store.fetch_meetings()
    return store


def _draft(attendees) -> MeetingDraft:
    return MeetingDraft(
        title="Audit Committee",
        date=date(2024, 6, 18),
        start_time=time(10, 0),
        end_time=time(11, 0),
        location="Room 4",
        category="Committee",
        attendee_list=attendees,
    )


class TestFetch:
    async def test_ordered_by_date_and_start_time(self, store):
        assert [m.title for m in store.meetings] == ["Same day, earlier", "Sooner", "Later"]

    async def test_failure_raises_and_keeps_mirror(self, store, meeting_storage):
        meeting_storage.error = OSError("refused")
        with pytest.raises(RemoteOperationError):
            await store.fetch_meetings()
        assert len(store.meetings) == 3
        assert store.loading is False


class TestScheduleMeeting:
    async def test_creates_upcoming_meeting_owned_by_user(self, store, context, member_profile):
        created = await store.schedule_meeting(_draft([context.user_id, member_profile.id]))

        assert created.status == MeetingStatus.UPCOMING
        assert created.owner_id == context.user_id
        assert created.attendees == 2
        assert store.get(created.id) is not None
        assert store.meetings[0].id == created.id

    async def test_notifies_owner_and_other_attendees(
        self, store, context, member_profile, notification_storage
    ):
        await store.schedule_meeting(_draft([context.user_id, member_profile.id]))

        owner_notes = notification_storage.for_user(context.user_id)
        invitee_notes = notification_storage.for_user(member_profile.id)
        assert [n.title for n in owner_notes] == ["Meeting Scheduled"]
        assert [n.title for n in invitee_notes] == ["New Meeting Invitation"]
        assert invitee_notes[0].message == 'You have been invited to "Audit Committee" on Jun 18, 2024.'
        assert invitee_notes[0].type == NotificationType.MEETING

    async def test_notification_failure_does_not_fail_scheduling(
        self, store, notification_storage, member_profile
    ):
        notification_storage.error = OSError("down")
        created = await store.schedule_meeting(_draft([member_profile.id]))
        assert store.get(created.id) is not None

    async def test_backend_failure(self, store, meeting_storage, context):
        meeting_storage.error = OSError("refused")
        with pytest.raises(RemoteOperationError) as exc:
            await store.schedule_meeting(_draft([context.user_id]))
        assert "schedule meeting" in str(exc.value)
        assert len(store.meetings) == 3


class TestStatusAndDelete:
    async def test_update_status(self, store):
        target = store.meetings[0]
        updated = await store.update_meeting_status(target.id, MeetingStatus.IN_PROGRESS)
        assert updated.status == MeetingStatus.IN_PROGRESS
        assert store.get(target.id).status == MeetingStatus.IN_PROGRESS
        assert store.upcoming() == store.meetings[1:]

    async def test_delete(self, store):
        target = store.meetings[1]
        assert await store.delete_meeting(target.id) is True
        assert store.get(target.id) is None


class TestChangeFeed:
    async def test_insert_update_delete(self, store):
        pushed = make_meeting(title="Pushed", day=date(2024, 6, 1), start=time(9, 0))

        store.apply_change(ChangeEvent("meetings", ChangeType.INSERT, new=pushed.to_dict()))
        assert store.meetings[0].title == "Pushed"

        renamed = {**pushed.to_dict(), "title": "Renamed"}
        store.apply_change(ChangeEvent("meetings", ChangeType.UPDATE, new=renamed))
        store.apply_change(ChangeEvent("meetings", ChangeType.UPDATE, new=renamed))
        assert [m.title for m in store.meetings].count("Renamed") == 1
        assert len(store.meetings) == 4

        store.apply_change(ChangeEvent("meetings", ChangeType.DELETE, old={"id": str(pushed.id)}))
        assert store.get(pushed.id) is None

    async def test_listener_called_on_change(self, store):
        calls = []
        store.add_listener(lambda: calls.append(len(store.meetings)))

        store.apply_change(ChangeEvent("meetings", ChangeType.INSERT, new=make_meeting().to_dict()))

        assert calls == [4]

    async def test_truncated_row_is_reread(self, store, meeting_storage):
        offsite = make_meeting(title="Strategy Offsite", description="Agenda " * 1500)
        meeting_storage.rows[offsite.id] = offsite
        event = ChangeEvent("meetings", ChangeType.INSERT, new={"id": str(offsite.id)}, truncated=True)

        await store.apply_change(event)

        assert store.get(offsite.id).description == offsite.description
        assert len(store.meetings) == 4

    async def test_truncated_delete_applied_directly(self, store):
        target = store.meetings[0]
        event = ChangeEvent("meetings", ChangeType.DELETE, old={"id": str(target.id)}, truncated=True)

        assert store.apply_change(event) is None
        assert store.get(target.id) is None

    async def test_local_delete_beats_pending_reread(self, store, meeting_storage):
        target = store.meetings[0]
        pending = store.apply_change(
            ChangeEvent("meetings", ChangeType.UPDATE, new={"id": str(target.id)}, truncated=True)
        )

        await store.delete_meeting(target.id)
        meeting_storage.rows[target.id] = target
        await pending

        assert store.get(target.id) is None
