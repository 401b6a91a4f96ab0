"""
Task Model

Action items raised in (or outside of) board meetings.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from .fields import as_date, as_datetime, as_uuid


class TaskPriority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TaskStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


@dataclass
class Task:
    """
    Action item entity (mirror of an `action_items` row).

    assignee_name / creator_name are joined from profiles on read and are
    not stored on the row itself.
    """
    id: UUID = field(default_factory=uuid4)
    title: str = ""
    description: Optional[str] = None
    assignee_id: Optional[UUID] = None
    meeting_id: Optional[UUID] = None
    due_date: Optional[date] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    created_by: Optional[UUID] = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    assignee_name: Optional[str] = None
    creator_name: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for API response"""
        return {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "assignee_id": str(self.assignee_id) if self.assignee_id else None,
            "meeting_id": str(self.meeting_id) if self.meeting_id else None,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "priority": self.priority.value,
            "status": self.status.value,
            "created_by": str(self.created_by) if self.created_by else None,
            "created_at": self.created_at.isoformat(),
            "assignee_name": self.assignee_name,
            "creator_name": self.creator_name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        return cls(
            id=as_uuid(data["id"]),
            title=data.get("title") or "",
            description=data.get("description"),
            assignee_id=as_uuid(data.get("assignee_id")),
            meeting_id=as_uuid(data.get("meeting_id")),
            due_date=as_date(data.get("due_date")),
            priority=TaskPriority(data.get("priority") or TaskPriority.MEDIUM.value),
            status=TaskStatus(data.get("status") or TaskStatus.PENDING.value),
            created_by=as_uuid(data.get("created_by")),
            created_at=as_datetime(data.get("created_at")) or datetime.utcnow(),
            assignee_name=data.get("assignee_name"),
            creator_name=data.get("creator_name"),
        )


@dataclass
class TaskDraft:
    """Fields supplied by the user when creating an action item"""
    title: str
    description: Optional[str] = None
    assignee_id: Optional[UUID] = None
    meeting_id: Optional[UUID] = None
    due_date: Optional[date] = None
    priority: TaskPriority = TaskPriority.MEDIUM
