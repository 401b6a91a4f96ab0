"""
Audit Service

Fire-and-forget audit trail writes and the audit trail listing.
"""
import logging
from typing import List, Optional
from uuid import UUID

from ..models.audit_log import AuditLog
from ..models.directory import Profile
from ..storage.audit_log_storage import AuditLogStorage
from ..storage.base import STORAGE_ERRORS

logger = logging.getLogger("boardportal.services.audit")


class AuditService:
    """Service for audit log operations"""

    def __init__(self, storage: AuditLogStorage, default_limit: int = 50):
        self.storage = storage
        self.default_limit = default_limit

    async def log_action(
        self,
        user_id: UUID,
        action: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> bool:
        """
        Record an action.

        Never raises: a failed write is logged and dropped, without retry.
        """
        entry = AuditLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            details=details or {},
        )
        try:
            await self.storage.create(entry)
            return True
        except STORAGE_ERRORS as e:
            logger.error(f"Failed to log action {action}: {e}")
            return False

    async def list_logs(self, viewer: Profile, limit: Optional[int] = None) -> List[AuditLog]:
        """Latest entries; admins see everyone's, members only their own"""
        limit = limit or self.default_limit
        if viewer.is_admin:
            return await self.storage.list_recent(limit)
        return await self.storage.list_recent(limit, user_id=viewer.id)
