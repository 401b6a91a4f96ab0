"""
Profile Storage

PostgreSQL storage for member profiles.
"""
import logging
from datetime import datetime, timezone
from typing import Optional, List
from uuid import UUID

from .base import BaseStorage
from ..models.directory import Profile, ProfileStatus

logger = logging.getLogger("boardportal.storage.profile")

# Columns an admin may change from the directory
UPDATABLE_COLUMNS = ("full_name", "role", "department", "status")


class ProfileStorage(BaseStorage):
    """Storage for Profile entities"""

    async def list_all(self) -> List[Profile]:
        """List profiles ordered by name"""
        query = "SELECT * FROM profiles ORDER BY full_name ASC"
        rows = await self.fetch(query)
        return [self._row_to_profile(row) for row in rows]

    async def get_by_id(self, profile_id: UUID) -> Optional[Profile]:
        """Get profile by ID"""
        row = await self.fetchrow("SELECT * FROM profiles WHERE id = $1", profile_id)
        return self._row_to_profile(row) if row else None

    async def update(self, profile_id: UUID, fields: dict) -> Optional[Profile]:
        """Update a subset of the admin-editable columns"""
        changes = {k: v for k, v in fields.items() if k in UPDATABLE_COLUMNS and v is not None}
        if not changes:
            return await self.get_by_id(profile_id)

        assignments = ", ".join(
            f"{column} = ${index}" for index, column in enumerate(changes, start=2)
        )
        query = f"UPDATE profiles SET {assignments} WHERE id = $1 RETURNING *"
        values = [getattr(v, "value", v) for v in changes.values()]
        row = await self.fetchrow(query, profile_id, *values)
        return self._row_to_profile(row) if row else None

    async def set_status(self, profile_id: UUID, status: ProfileStatus) -> bool:
        """Set account status (Active / Inactive / ...)"""
        query = "UPDATE profiles SET status = $2 WHERE id = $1"
        result = await self.execute(query, profile_id, status.value)
        return self.affected_rows(result) > 0

    async def touch_last_active(self, profile_id: UUID) -> None:
        """Update the profile's last activity timestamp"""
        query = "UPDATE profiles SET last_active = $2 WHERE id = $1"
        await self.execute(query, profile_id, datetime.now(timezone.utc))

    def _row_to_profile(self, row) -> Profile:
        """Convert database row to Profile"""
        return Profile.from_dict(dict(row))
