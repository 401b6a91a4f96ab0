"""
Audit Routes

Audit trail listing.
"""
import logging
from typing import Optional, List

from fastapi import APIRouter, HTTPException, Depends, Query
from pydantic import BaseModel

from ..services.engine_service import get_engine_service
from ..services.session_service import PortalSession
from ..storage.base import STORAGE_ERRORS
from .auth import get_portal_session

logger = logging.getLogger("boardportal.routes.audit")
router = APIRouter(prefix="/audit", tags=["audit"])


class AuditLogResponse(BaseModel):
    """Audit trail entry"""
    id: str
    user_id: Optional[str]
    action: str
    entity_type: Optional[str]
    entity_id: Optional[str]
    details: dict
    summary: str
    actor: str
    created_at: str


@router.get("", response_model=List[AuditLogResponse])
async def list_audit_logs(
    limit: Optional[int] = Query(None, ge=1, le=500),
    session: PortalSession = Depends(get_portal_session),
):
    """Latest audit entries; members see only their own actions"""
    engine = get_engine_service()
    try:
        logs = await engine.audit_service.list_logs(session.profile, limit)
    except STORAGE_ERRORS as e:
        logger.error(f"Error fetching audit logs: {e}")
        raise HTTPException(status_code=502, detail="Failed to load audit trail")
    return [AuditLogResponse(**log.to_dict()) for log in logs]
