"""
Meeting Model

Represents a board meeting scheduled through the portal.
Status is driven externally (Upcoming -> In Progress -> Completed);
the engine reads it, it never computes it.
"""
from dataclasses import dataclass, field
from datetime import date as Date, datetime, time as Time
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4
from zoneinfo import ZoneInfo

from .fields import as_date, as_datetime, as_json, as_time, as_uuid, as_uuid_list


class MeetingStatus(str, Enum):
    """Meeting lifecycle status"""
    UPCOMING = "Upcoming"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


@dataclass
class AttachedDoc:
    """Reference to a document attached to a meeting"""
    name: str
    url: str

    def to_dict(self) -> dict:
        return {"name": self.name, "url": self.url}


@dataclass
class Meeting:
    """
    Meeting entity (mirror of a `meetings` row).

    `attendees` is the attendee count stored alongside `attendee_list`
    (profile ids of invited members).
    """
    id: UUID = field(default_factory=uuid4)
    title: str = ""
    date: Optional[Date] = None
    start_time: Optional[Time] = None
    end_time: Optional[Time] = None
    location: str = ""
    link: Optional[str] = None
    description: Optional[str] = None
    category: str = ""
    status: MeetingStatus = MeetingStatus.UPCOMING
    attendees: int = 0
    attendee_list: List[UUID] = field(default_factory=list)
    attached_docs: List[AttachedDoc] = field(default_factory=list)
    owner_id: Optional[UUID] = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    def starts_at(self, tz: ZoneInfo) -> Optional[datetime]:
        """Start of the meeting as an aware datetime in the portal timezone"""
        if self.date is None or self.start_time is None:
            return None
        return datetime.combine(self.date, self.start_time, tzinfo=tz)

    def to_dict(self) -> dict:
        """Convert to dictionary for API response"""
        return {
            "id": str(self.id),
            "title": self.title,
            "date": self.date.isoformat() if self.date else None,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "location": self.location,
            "link": self.link,
            "description": self.description,
            "category": self.category,
            "status": self.status.value,
            "attendees": self.attendees,
            "attendee_list": [str(a) for a in self.attendee_list],
            "attached_docs": [d.to_dict() for d in self.attached_docs],
            "owner_id": str(self.owner_id) if self.owner_id else None,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Meeting":
        """Create from a database row or change-feed record"""
        docs = as_json(data.get("attached_docs"), [])
        return cls(
            id=as_uuid(data["id"]),
            title=data.get("title") or "",
            date=as_date(data.get("date")),
            start_time=as_time(data.get("start_time")),
            end_time=as_time(data.get("end_time")),
            location=data.get("location") or "",
            link=data.get("link"),
            description=data.get("description"),
            category=data.get("category") or "",
            status=MeetingStatus(data.get("status") or MeetingStatus.UPCOMING.value),
            attendees=data.get("attendees") or 0,
            attendee_list=as_uuid_list(data.get("attendee_list")),
            attached_docs=[AttachedDoc(name=d.get("name", ""), url=d.get("url", "")) for d in docs],
            owner_id=as_uuid(data.get("owner_id")),
            created_at=as_datetime(data.get("created_at")) or datetime.utcnow(),
        )


@dataclass
class MeetingDraft:
    """Fields supplied by the user when scheduling a meeting"""
    title: str
    date: Date
    start_time: Time
    end_time: Time
    location: str = ""
    category: str = ""
    link: Optional[str] = None
    description: Optional[str] = None
    attendee_list: List[UUID] = field(default_factory=list)
    attached_docs: List[AttachedDoc] = field(default_factory=list)
