"""
Audit Log Storage

PostgreSQL storage for the audit trail.
"""
import json
import logging
from typing import Optional, List
from uuid import UUID

from .base import BaseStorage
from ..models.audit_log import AuditLog

logger = logging.getLogger("boardportal.storage.audit_log")


class AuditLogStorage(BaseStorage):
    """Storage for AuditLog entities"""

    async def create(self, entry: AuditLog) -> None:
        """Append an audit entry"""
        query = """
            INSERT INTO audit_logs (
                id, user_id, action, entity_type, entity_id, details, created_at
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7)
        """
        await self.execute(
            query,
            entry.id, entry.user_id, entry.action, entry.entity_type,
            entry.entity_id, json.dumps(entry.details, default=str), entry.created_at
        )

    async def list_recent(self, limit: int = 50, user_id: Optional[UUID] = None) -> List[AuditLog]:
        """List latest entries, optionally only those of one actor"""
        query = """
            SELECT l.*, p.full_name AS actor_name, p.email AS actor_email
            FROM audit_logs l
            LEFT JOIN profiles p ON p.id = l.user_id
        """
        if user_id is not None:
            query += " WHERE l.user_id = $2"
        query += " ORDER BY l.created_at DESC LIMIT $1"

        if user_id is not None:
            rows = await self.fetch(query, limit, user_id)
        else:
            rows = await self.fetch(query, limit)
        return [self._row_to_log(row) for row in rows]

    def _row_to_log(self, row) -> AuditLog:
        """Convert database row to AuditLog"""
        return AuditLog.from_dict(dict(row))
