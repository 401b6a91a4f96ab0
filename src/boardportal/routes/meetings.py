"""
Meeting Routes

Endpoints over the session's meeting mirror.
"""
import logging
from datetime import date, time
from typing import Optional, List
from uuid import UUID

from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel

from ..models.meeting import AttachedDoc, MeetingDraft, MeetingStatus
from ..services.errors import RemoteOperationError
from ..services.session_service import PortalSession
from .auth import get_portal_session

logger = logging.getLogger("boardportal.routes.meetings")
router = APIRouter(prefix="/meetings", tags=["meetings"])


# ============================================
# Request/Response Models
# ============================================

class AttachedDocModel(BaseModel):
    name: str
    url: str


class ScheduleMeetingRequest(BaseModel):
    """Schedule meeting request"""
    title: str
    date: date
    start_time: time
    end_time: time
    location: str = ""
    category: str = ""
    link: Optional[str] = None
    description: Optional[str] = None
    attendee_list: List[UUID] = []
    attached_docs: List[AttachedDocModel] = []


class UpdateStatusRequest(BaseModel):
    status: MeetingStatus


class MeetingResponse(BaseModel):
    """Meeting response"""
    id: str
    title: str
    date: Optional[str]
    start_time: Optional[str]
    end_time: Optional[str]
    location: str
    link: Optional[str]
    description: Optional[str]
    category: str
    status: str
    attendees: int
    attendee_list: List[str]
    attached_docs: List[AttachedDocModel]
    owner_id: Optional[str]
    created_at: str


# ============================================
# Routes
# ============================================

@router.get("", response_model=List[MeetingResponse])
async def list_meetings(
    status: Optional[MeetingStatus] = None,
    session: PortalSession = Depends(get_portal_session),
):
    """List meetings ordered by date and start time"""
    meetings = session.meetings.meetings
    if status is not None:
        meetings = [m for m in meetings if m.status == status]
    return [MeetingResponse(**m.to_dict()) for m in meetings]


@router.post("/refresh", response_model=List[MeetingResponse])
async def refresh_meetings(session: PortalSession = Depends(get_portal_session)):
    """Reload meetings from the backend"""
    try:
        meetings = await session.meetings.fetch_meetings()
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return [MeetingResponse(**m.to_dict()) for m in meetings]


@router.get("/{meeting_id}", response_model=MeetingResponse)
async def get_meeting(meeting_id: UUID, session: PortalSession = Depends(get_portal_session)):
    meeting = session.meetings.get(meeting_id)
    if not meeting:
        raise HTTPException(status_code=404, detail="Meeting not found")
    return MeetingResponse(**meeting.to_dict())


@router.post("", response_model=MeetingResponse)
async def schedule_meeting(
    request: ScheduleMeetingRequest,
    session: PortalSession = Depends(get_portal_session),
):
    """Schedule a meeting; attendees are notified"""
    if not request.title.strip():
        raise HTTPException(status_code=400, detail="Title is required")
    if request.end_time <= request.start_time:
        raise HTTPException(status_code=400, detail="end_time must be after start_time")

    draft = MeetingDraft(
        title=request.title.strip(),
        date=request.date,
        start_time=request.start_time,
        end_time=request.end_time,
        location=request.location,
        category=request.category,
        link=request.link,
        description=request.description,
        attendee_list=list(request.attendee_list),
        attached_docs=[AttachedDoc(name=d.name, url=d.url) for d in request.attached_docs],
    )
    try:
        meeting = await session.meetings.schedule_meeting(draft)
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return MeetingResponse(**meeting.to_dict())


@router.patch("/{meeting_id}/status", response_model=MeetingResponse)
async def update_meeting_status(
    meeting_id: UUID,
    request: UpdateStatusRequest,
    session: PortalSession = Depends(get_portal_session),
):
    try:
        meeting = await session.meetings.update_meeting_status(meeting_id, request.status)
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    if not meeting:
        raise HTTPException(status_code=404, detail="Meeting not found")
    return MeetingResponse(**meeting.to_dict())


@router.delete("/{meeting_id}")
async def delete_meeting(meeting_id: UUID, session: PortalSession = Depends(get_portal_session)):
    try:
        deleted = await session.meetings.delete_meeting(meeting_id)
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Meeting not found")
    return {"success": True}
