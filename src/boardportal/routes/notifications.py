"""
Notification Routes

Persisted notifications with read-state, and the session reminder inbox.
"""
import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel

from ..services.engine_service import get_engine_service
from ..services.errors import RemoteOperationError
from ..services.session_service import PortalSession
from .auth import get_portal_session

logger = logging.getLogger("boardportal.routes.notifications")
router = APIRouter(prefix="/notifications", tags=["notifications"])


# ============================================
# Request/Response Models
# ============================================

class NotificationResponse(BaseModel):
    """Notification response"""
    id: str
    user_id: str
    title: str
    message: str
    type: str
    is_read: bool
    created_at: str


class ReminderResponse(BaseModel):
    """Meeting reminder"""
    meeting_id: str
    user_id: str
    title: str
    message: str
    type: str
    created_at: str


# ============================================
# Routes
# ============================================

@router.get("", response_model=List[NotificationResponse])
async def list_notifications(session: PortalSession = Depends(get_portal_session)):
    """Current user's notifications, newest first"""
    return [NotificationResponse(**n.to_dict()) for n in session.notifications.notifications]


@router.post("/refresh", response_model=List[NotificationResponse])
async def refresh_notifications(session: PortalSession = Depends(get_portal_session)):
    try:
        notifications = await session.notifications.refresh_notifications()
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return [NotificationResponse(**n.to_dict()) for n in notifications]


@router.get("/unread-count")
async def unread_count(session: PortalSession = Depends(get_portal_session)):
    return {"unread_count": session.notifications.unread_count}


@router.post("/read-all")
async def mark_all_as_read(session: PortalSession = Depends(get_portal_session)):
    try:
        count = await session.notifications.mark_all_as_read()
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"success": True, "updated": count, "unread_count": session.notifications.unread_count}


@router.post("/{notification_id}/read")
async def mark_as_read(
    notification_id: UUID,
    session: PortalSession = Depends(get_portal_session),
):
    try:
        updated = await session.notifications.mark_as_read(notification_id)
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    if not updated:
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"success": True, "unread_count": session.notifications.unread_count}


@router.get("/reminders", response_model=List[ReminderResponse])
async def drain_reminders(session: PortalSession = Depends(get_portal_session)):
    """Meeting reminders queued since the last call (consumed on read)"""
    engine = get_engine_service()
    reminders = engine.inapp_sender.drain(session.user_id)
    return [ReminderResponse(**r.to_dict()) for r in reminders]
