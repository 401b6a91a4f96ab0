"""
Directory Routes

Member directory: merged profiles and pending invitations, plus the
administrative actions on them.
"""
import logging
from datetime import datetime, timezone
from typing import Optional, List

from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel, EmailStr

from ..models.directory import MemberRole, ProfileStatus
from ..services.errors import RemoteOperationError
from ..services.session_service import PortalSession
from .auth import get_portal_session, require_admin

logger = logging.getLogger("boardportal.routes.directory")
router = APIRouter(prefix="/directory", tags=["directory"])


# ============================================
# Request/Response Models
# ============================================

class InviteRequest(BaseModel):
    """Invite member request"""
    email: EmailStr
    role: MemberRole = MemberRole.BOARD_MEMBER
    department: Optional[str] = None


class UpdateEntryRequest(BaseModel):
    """Edit member request; only provided fields change"""
    full_name: Optional[str] = None
    role: Optional[MemberRole] = None
    department: Optional[str] = None
    status: Optional[ProfileStatus] = None


class DirectoryEntryResponse(BaseModel):
    """Profile or invitation in the member list"""
    id: str
    kind: str
    full_name: str
    email: str
    department: str
    role: str
    status: str
    last_active: Optional[str]


class DirectoryStatsResponse(BaseModel):
    active_members: int
    active_now: int
    pending_approvals: int


# ============================================
# Routes
# ============================================

@router.get("", response_model=List[DirectoryEntryResponse])
async def list_directory(
    q: str = "",
    role: Optional[str] = None,
    status: Optional[str] = None,
    session: PortalSession = Depends(get_portal_session),
):
    """
    Search the member list.

    q matches name, email or department; role "Invited" lists pending
    invitations; "All Roles" (or no role) lists everyone.
    """
    entries = session.directory.search(q, role, status)
    return [DirectoryEntryResponse(**e.to_dict()) for e in entries]


@router.get("/stats", response_model=DirectoryStatsResponse)
async def directory_stats(session: PortalSession = Depends(get_portal_session)):
    stats = session.directory.stats(datetime.now(timezone.utc))
    return DirectoryStatsResponse(**stats.to_dict())


@router.post("/refresh", response_model=List[DirectoryEntryResponse])
async def refresh_directory(session: PortalSession = Depends(get_portal_session)):
    try:
        entries = await session.directory.fetch_directory()
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return [DirectoryEntryResponse(**e.to_dict()) for e in entries]


@router.post("/invites", response_model=DirectoryEntryResponse)
async def invite_member(request: InviteRequest, session: PortalSession = Depends(require_admin)):
    """Invite a member by e-mail (re-inviting updates role and department)"""
    try:
        entry = await session.directory.invite_member(request.email, request.role, request.department)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return DirectoryEntryResponse(**entry.to_dict())


@router.patch("/{entry_id}", response_model=DirectoryEntryResponse)
async def update_entry(
    entry_id: str,
    request: UpdateEntryRequest,
    session: PortalSession = Depends(require_admin),
):
    try:
        entry = await session.directory.update_entry(
            entry_id,
            full_name=request.full_name,
            role=request.role,
            department=request.department,
            status=request.status,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    if not entry:
        raise HTTPException(status_code=404, detail="Member not found")
    return DirectoryEntryResponse(**entry.to_dict())


@router.delete("/{entry_id}", response_model=DirectoryEntryResponse)
async def revoke_access(entry_id: str, session: PortalSession = Depends(require_admin)):
    """
    Revoke a member (status becomes Inactive) or withdraw an invitation
    (the invitation is deleted).
    """
    try:
        entry = await session.directory.revoke_access(entry_id)
    except LookupError:
        raise HTTPException(status_code=404, detail="Member not found")
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return DirectoryEntryResponse(**entry.to_dict())


@router.post("/{entry_id}/approve", response_model=DirectoryEntryResponse)
async def approve_member(entry_id: str, session: PortalSession = Depends(require_admin)):
    try:
        entry = await session.directory.approve_member(entry_id)
    except LookupError:
        raise HTTPException(status_code=404, detail="Member not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return DirectoryEntryResponse(**entry.to_dict())
