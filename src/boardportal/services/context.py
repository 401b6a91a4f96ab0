"""
Session Context

Identity of the signed-in member, handed explicitly to every store of a
portal session.
"""
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from ..models.directory import Profile


@dataclass
class SessionContext:
    """Current user for one portal session"""
    profile: Profile
    session_id: UUID = field(default_factory=uuid4)

    @property
    def user_id(self) -> UUID:
        return self.profile.id

    @property
    def owner_key(self) -> str:
        """Owner tag for this session's change-feed subscriptions"""
        return f"session:{self.session_id}"
