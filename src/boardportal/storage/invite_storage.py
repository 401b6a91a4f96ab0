"""
Invite Storage

PostgreSQL storage for pending member invitations (keyed by email).
"""
import logging
from typing import List, Optional

from .base import BaseStorage
from ..models.directory import Invite

logger = logging.getLogger("boardportal.storage.invite")


class InviteStorage(BaseStorage):
    """Storage for Invite entities"""

    async def list_all(self) -> List[Invite]:
        """List pending invitations"""
        rows = await self.fetch("SELECT * FROM user_invites ORDER BY email ASC")
        return [self._row_to_invite(row) for row in rows]

    async def get_by_email(self, email: str) -> Optional[Invite]:
        row = await self.fetchrow("SELECT * FROM user_invites WHERE email = $1", email)
        return self._row_to_invite(row) if row else None

    async def upsert(self, invite: Invite) -> Invite:
        """Create an invitation, or update role/department of an existing one"""
        query = """
            INSERT INTO user_invites (email, role, department, invited_by, created_at)
            VALUES ($1, $2, $3, $4, $5)
            ON CONFLICT (email) DO UPDATE
            SET role = EXCLUDED.role,
                department = EXCLUDED.department,
                invited_by = EXCLUDED.invited_by
            RETURNING *
        """
        row = await self.fetchrow(
            query,
            invite.email, invite.role.value, invite.department,
            invite.invited_by, invite.created_at
        )
        return self._row_to_invite(row)

    async def delete_by_email(self, email: str) -> bool:
        """Withdraw an invitation"""
        result = await self.execute("DELETE FROM user_invites WHERE email = $1", email)
        return self.affected_rows(result) > 0

    def _row_to_invite(self, row) -> Invite:
        """Convert database row to Invite"""
        return Invite.from_dict(dict(row))
