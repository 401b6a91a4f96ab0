"""
Directory Models

Profile: an onboarded account.
Invite: a pending invitation for a member who has not joined yet.
DirectoryEntry: tagged union (ProfileEntry | InviteEntry) used for the
merged member list.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional, Union
from uuid import UUID, uuid4

from .fields import as_datetime, as_uuid


INVITE_ID_PREFIX = "invite-"
PENDING_DEPARTMENT = "Pending Join"
INVITED_STATUS = "Invited"


class MemberRole(str, Enum):
    ADMIN = "Admin"
    BOARD_MEMBER = "Board Member"
    VIEWER = "Viewer"
    GUEST = "Guest"
    SECRETARY = "Secretary"


class ProfileStatus(str, Enum):
    ACTIVE = "Active"
    REJECTED = "Rejected"
    INACTIVE = "Inactive"
    PENDING = "Pending"


@dataclass
class Profile:
    """
    Profile entity (mirror of a `profiles` row).

    The id is the auth user id issued by the backend.
    """
    id: UUID = field(default_factory=uuid4)
    full_name: str = ""
    email: str = ""
    department: str = ""
    role: MemberRole = MemberRole.BOARD_MEMBER
    status: ProfileStatus = ProfileStatus.PENDING
    avatar_url: Optional[str] = None
    last_active: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == MemberRole.ADMIN

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "full_name": self.full_name,
            "email": self.email,
            "department": self.department,
            "role": self.role.value,
            "status": self.status.value,
            "avatar_url": self.avatar_url,
            "last_active": self.last_active.isoformat() if self.last_active else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Profile":
        return cls(
            id=as_uuid(data["id"]),
            full_name=data.get("full_name") or "",
            email=data.get("email") or "",
            department=data.get("department") or "",
            role=MemberRole(data.get("role") or MemberRole.BOARD_MEMBER.value),
            status=ProfileStatus(data.get("status") or ProfileStatus.PENDING.value),
            avatar_url=data.get("avatar_url"),
            last_active=as_datetime(data.get("last_active")),
        )


@dataclass
class Invite:
    """Pending invitation (mirror of a `user_invites` row, keyed by email)"""
    email: str = ""
    role: MemberRole = MemberRole.BOARD_MEMBER
    department: Optional[str] = None
    invited_by: Optional[UUID] = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "email": self.email,
            "role": self.role.value,
            "department": self.department,
            "invited_by": str(self.invited_by) if self.invited_by else None,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Invite":
        return cls(
            email=data.get("email") or "",
            role=MemberRole(data.get("role") or MemberRole.BOARD_MEMBER.value),
            department=data.get("department"),
            invited_by=as_uuid(data.get("invited_by")),
            created_at=as_datetime(data.get("created_at")) or datetime.utcnow(),
        )


def invite_entry_id(email: str) -> str:
    """Synthetic directory id for an invitation; never a valid profile UUID"""
    return f"{INVITE_ID_PREFIX}{email}"


def is_invite_entry_id(entry_id: str) -> bool:
    return entry_id.startswith(INVITE_ID_PREFIX)


@dataclass
class ProfileEntry:
    """Directory entry backed by an onboarded profile"""
    kind: ClassVar[str] = "profile"
    profile: Profile

    @property
    def id(self) -> str:
        return str(self.profile.id)

    @property
    def display_name(self) -> str:
        return self.profile.full_name or self.profile.email

    @property
    def email(self) -> str:
        return self.profile.email

    @property
    def department(self) -> str:
        return self.profile.department

    @property
    def role(self) -> str:
        return self.profile.role.value

    @property
    def status(self) -> str:
        return self.profile.status.value

    @property
    def last_active(self) -> Optional[datetime]:
        return self.profile.last_active

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind,
            "full_name": self.display_name,
            "email": self.email,
            "department": self.department,
            "role": self.role,
            "status": self.status,
            "last_active": self.last_active.isoformat() if self.last_active else None,
        }


@dataclass
class InviteEntry:
    """Directory entry projected from a pending invitation"""
    kind: ClassVar[str] = "invite"
    invite: Invite

    @property
    def id(self) -> str:
        return invite_entry_id(self.invite.email)

    @property
    def display_name(self) -> str:
        return self.invite.email

    @property
    def email(self) -> str:
        return self.invite.email

    @property
    def department(self) -> str:
        return self.invite.department or PENDING_DEPARTMENT

    @property
    def role(self) -> str:
        return self.invite.role.value

    @property
    def status(self) -> str:
        return INVITED_STATUS

    @property
    def last_active(self) -> Optional[datetime]:
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind,
            "full_name": self.display_name,
            "email": self.email,
            "department": self.department,
            "role": self.role,
            "status": self.status,
            "last_active": None,
        }


DirectoryEntry = Union[ProfileEntry, InviteEntry]


@dataclass
class DirectoryStats:
    """Headline counters shown above the member list"""
    active_members: int = 0
    active_now: int = 0
    pending_approvals: int = 0

    def to_dict(self) -> dict:
        return {
            "active_members": self.active_members,
            "active_now": self.active_now,
            "pending_approvals": self.pending_approvals,
        }
