"""Shared fixtures for board portal tests: in-memory storages with the real storage APIs."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time, timezone
from typing import Dict, List, Optional
from uuid import UUID, uuid4

import pytest

from boardportal.models import (
    AuditLog,
    Invite,
    Meeting,
    MeetingStatus,
    MemberRole,
    Notification,
    Profile,
    ProfileStatus,
    Task,
    TaskStatus,
)
from boardportal.notifications import InAppSender
from boardportal.services.audit_service import AuditService
from boardportal.services.context import SessionContext
from boardportal.services.notification_service import NotificationService
from boardportal.services.scope import OperationScope


class FakeStorage:
    """Raises `error` from every call while it is set"""

    def __init__(self):
        self.error: Optional[Exception] = None
        self.calls: List[str] = []

    def _call(self, name: str):
        self.calls.append(name)
        if self.error is not None:
            raise self.error

    async def init(self):
        pass

    async def close(self):
        pass


class FakeMeetingStorage(FakeStorage):
    def __init__(self, meetings: Optional[List[Meeting]] = None):
        super().__init__()
        self.rows: Dict[UUID, Meeting] = {m.id: m for m in meetings or []}

    async def list_all(self) -> List[Meeting]:
        self._call("list_all")
        return list(self.rows.values())

    async def get_by_id(self, meeting_id: UUID) -> Optional[Meeting]:
        self._call("get_by_id")
        return self.rows.get(meeting_id)

    async def create(self, meeting: Meeting) -> Meeting:
        self._call("create")
        self.rows[meeting.id] = meeting
        return meeting

    async def update_status(self, meeting_id: UUID, status: MeetingStatus) -> Optional[Meeting]:
        self._call("update_status")
        if meeting_id not in self.rows:
            return None
        self.rows[meeting_id] = replace(self.rows[meeting_id], status=status)
        return self.rows[meeting_id]

    async def delete(self, meeting_id: UUID) -> bool:
        self._call("delete")
        return self.rows.pop(meeting_id, None) is not None


class FakeTaskStorage(FakeStorage):
    def __init__(self, tasks: Optional[List[Task]] = None, names: Optional[Dict[UUID, str]] = None):
        super().__init__()
        self.rows: Dict[UUID, Task] = {t.id: t for t in tasks or []}
        self.names = names or {}

    def _hydrate(self, task: Task) -> Task:
        return replace(
            task,
            assignee_name=self.names.get(task.assignee_id),
            creator_name=self.names.get(task.created_by),
        )

    async def list_all(self) -> List[Task]:
        self._call("list_all")
        return [self._hydrate(t) for t in self.rows.values()]

    async def get_by_id(self, task_id: UUID) -> Optional[Task]:
        self._call("get_by_id")
        task = self.rows.get(task_id)
        return self._hydrate(task) if task else None

    async def create(self, task: Task) -> Task:
        self._call("create")
        self.rows[task.id] = task
        return self._hydrate(task)

    async def update_status(self, task_id: UUID, status: TaskStatus) -> bool:
        self._call("update_status")
        if task_id not in self.rows:
            return False
        self.rows[task_id] = replace(self.rows[task_id], status=status)
        return True

    async def assign(self, task_id: UUID, assignee_id: Optional[UUID]) -> bool:
        self._call("assign")
        if task_id not in self.rows:
            return False
        self.rows[task_id] = replace(self.rows[task_id], assignee_id=assignee_id)
        return True

    async def delete(self, task_id: UUID) -> bool:
        self._call("delete")
        return self.rows.pop(task_id, None) is not None


class FakeNotificationStorage(FakeStorage):
    def __init__(self, notifications: Optional[List[Notification]] = None):
        super().__init__()
        self.rows: List[Notification] = list(notifications or [])

    async def create(self, notification: Notification) -> Notification:
        self._call("create")
        self.rows.append(notification)
        return notification

    async def list_by_user(self, user_id: UUID) -> List[Notification]:
        self._call("list_by_user")
        rows = [n for n in self.rows if n.user_id == user_id]
        return sorted(rows, key=lambda n: n.created_at, reverse=True)

    async def get_by_id(self, notification_id: UUID, user_id: UUID) -> Optional[Notification]:
        self._call("get_by_id")
        return next(
            (n for n in self.rows if n.id == notification_id and n.user_id == user_id), None
        )

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> bool:
        self._call("mark_read")
        for index, n in enumerate(self.rows):
            if n.id == notification_id and n.user_id == user_id:
                self.rows[index] = replace(n, is_read=True)
                return True
        return False

    async def mark_all_read(self, user_id: UUID) -> int:
        self._call("mark_all_read")
        count = 0
        for index, n in enumerate(self.rows):
            if n.user_id == user_id and not n.is_read:
                self.rows[index] = replace(n, is_read=True)
                count += 1
        return count

    def for_user(self, user_id: UUID) -> List[Notification]:
        return [n for n in self.rows if n.user_id == user_id]


class FakeProfileStorage(FakeStorage):
    def __init__(self, profiles: Optional[List[Profile]] = None):
        super().__init__()
        self.rows: Dict[UUID, Profile] = {p.id: p for p in profiles or []}

    async def list_all(self) -> List[Profile]:
        self._call("list_all")
        return sorted(self.rows.values(), key=lambda p: p.full_name)

    async def get_by_id(self, profile_id: UUID) -> Optional[Profile]:
        self._call("get_by_id")
        return self.rows.get(profile_id)

    async def update(self, profile_id: UUID, fields: dict) -> Optional[Profile]:
        self._call("update")
        if profile_id not in self.rows:
            return None
        changes = {k: v for k, v in fields.items() if v is not None}
        self.rows[profile_id] = replace(self.rows[profile_id], **changes)
        return self.rows[profile_id]

    async def set_status(self, profile_id: UUID, status: ProfileStatus) -> bool:
        self._call("set_status")
        if profile_id not in self.rows:
            return False
        self.rows[profile_id] = replace(self.rows[profile_id], status=status)
        return True

    async def touch_last_active(self, profile_id: UUID) -> None:
        self._call("touch_last_active")
        if profile_id in self.rows:
            self.rows[profile_id] = replace(
                self.rows[profile_id], last_active=datetime.now(timezone.utc)
            )


class FakeInviteStorage(FakeStorage):
    def __init__(self, invites: Optional[List[Invite]] = None):
        super().__init__()
        self.rows: Dict[str, Invite] = {i.email: i for i in invites or []}

    async def list_all(self) -> List[Invite]:
        self._call("list_all")
        return list(self.rows.values())

    async def get_by_email(self, email: str) -> Optional[Invite]:
        self._call("get_by_email")
        return self.rows.get(email)

    async def upsert(self, invite: Invite) -> Invite:
        self._call("upsert")
        self.rows[invite.email] = invite
        return invite

    async def delete_by_email(self, email: str) -> bool:
        self._call("delete_by_email")
        return self.rows.pop(email, None) is not None


class FakeAuditLogStorage(FakeStorage):
    def __init__(self):
        super().__init__()
        self.rows: List[AuditLog] = []

    async def create(self, entry: AuditLog) -> None:
        self._call("create")
        self.rows.append(entry)

    async def list_recent(self, limit: int = 50, user_id: Optional[UUID] = None) -> List[AuditLog]:
        self._call("list_recent")
        rows = [e for e in self.rows if user_id is None or e.user_id == user_id]
        rows.sort(key=lambda e: e.created_at, reverse=True)
        return rows[:limit]

    def actions(self) -> List[str]:
        return [e.action for e in self.rows]


# ============================================
# Fixtures
# ============================================

@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def admin_profile() -> Profile:
    return Profile(
        full_name="Ada Admin",
        email="ada@board.example",
        department="Governance",
        role=MemberRole.ADMIN,
        status=ProfileStatus.ACTIVE,
    )


@pytest.fixture
def member_profile() -> Profile:
    return Profile(
        full_name="Ben Member",
        email="ben@board.example",
        department="Finance",
        role=MemberRole.BOARD_MEMBER,
        status=ProfileStatus.ACTIVE,
    )


@pytest.fixture
def context(admin_profile: Profile) -> SessionContext:
    return SessionContext(profile=admin_profile)


@pytest.fixture
def scope() -> OperationScope:
    return OperationScope("test")


@pytest.fixture
def notification_storage() -> FakeNotificationStorage:
    return FakeNotificationStorage()


@pytest.fixture
def inbox() -> InAppSender:
    return InAppSender()


@pytest.fixture
def notification_service(notification_storage, inbox) -> NotificationService:
    return NotificationService(notification_storage, {"in_app": inbox})


@pytest.fixture
def audit_storage() -> FakeAuditLogStorage:
    return FakeAuditLogStorage()


@pytest.fixture
def audit_service(audit_storage) -> AuditService:
    return AuditService(audit_storage)


def make_meeting(
    title: str = "Quarterly Review",
    day: date = date(2024, 6, 15),
    start: time = time(12, 10),
    status: MeetingStatus = MeetingStatus.UPCOMING,
    **kwargs,
) -> Meeting:
    return Meeting(
        id=kwargs.pop("id", uuid4()),
        title=title,
        date=day,
        start_time=start,
        end_time=kwargs.pop("end_time", time(13, 0)),
        status=status,
        **kwargs,
    )
