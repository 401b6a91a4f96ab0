"""
Notification Models

Notification: persisted in-app notification for one user.
Reminder: session-only "starting soon" notice, never written as a row.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable
from uuid import UUID, uuid4

from .fields import as_datetime, as_uuid


class NotificationType(str, Enum):
    """Closed set of notification kinds"""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    FILE = "file"
    MEETING = "meeting"
    COMMENT = "comment"


@dataclass
class Notification:
    """
    In-app notification entity.

    Rows are always addressed to a single user (user_id); the read flag
    is the only field mutated after creation.
    """
    id: UUID = field(default_factory=uuid4)
    user_id: UUID = field(default_factory=uuid4)
    title: str = ""
    message: str = ""
    type: NotificationType = NotificationType.INFO
    is_read: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        """Convert to dictionary for API response"""
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "title": self.title,
            "message": self.message,
            "type": self.type.value,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Notification":
        return cls(
            id=as_uuid(data["id"]),
            user_id=as_uuid(data["user_id"]),
            title=data.get("title") or "",
            message=data.get("message") or "",
            type=NotificationType(data.get("type") or NotificationType.INFO.value),
            is_read=bool(data.get("is_read")),
            created_at=as_datetime(data.get("created_at")) or datetime.utcnow(),
        )


def count_unread(notifications: Iterable[Notification]) -> int:
    """Unread count is always derived from the flags, never stored"""
    return sum(1 for n in notifications if not n.is_read)


@dataclass
class Reminder:
    """A 'meeting starts soon' notice delivered to the current session"""
    meeting_id: UUID
    user_id: UUID
    message: str
    title: str = "Meeting Reminder"
    type: NotificationType = NotificationType.MEETING
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "meeting_id": str(self.meeting_id),
            "user_id": str(self.user_id),
            "title": self.title,
            "message": self.message,
            "type": self.type.value,
            "created_at": self.created_at.isoformat(),
        }
