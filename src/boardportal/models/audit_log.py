"""
Audit Log Model

Append-only record of administrative and account actions.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from .fields import as_datetime, as_json, as_uuid


@dataclass
class AuditLog:
    """
    Audit log entry.

    actor_name / actor_email are joined from profiles when listing.
    """
    id: UUID = field(default_factory=uuid4)
    user_id: Optional[UUID] = None
    action: str = ""                                   # 'ACCESS_REVOKED', 'USER_APPROVAL', ...
    entity_type: Optional[str] = None                  # 'user', 'meeting', 'task'
    entity_id: Optional[str] = None
    details: dict = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.utcnow)

    actor_name: Optional[str] = None
    actor_email: Optional[str] = None

    @property
    def summary(self) -> str:
        """One-line description for the audit trail view"""
        return (
            self.details.get("filename")
            or self.details.get("reason")
            or self.entity_type
            or "System Action"
        )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id) if self.user_id else None,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "details": self.details,
            "summary": self.summary,
            "actor": self.actor_name or self.actor_email or "System",
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AuditLog":
        return cls(
            id=as_uuid(data["id"]),
            user_id=as_uuid(data.get("user_id")),
            action=data.get("action") or "",
            entity_type=data.get("entity_type"),
            entity_id=data.get("entity_id"),
            details=as_json(data.get("details"), {}) or {},
            created_at=as_datetime(data.get("created_at")) or datetime.utcnow(),
            actor_name=data.get("actor_name"),
            actor_email=data.get("actor_email"),
        )
