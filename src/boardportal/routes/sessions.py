"""
Session Routes

Open, inspect and close the caller's portal session.
"""
import logging

from fastapi import APIRouter, HTTPException, Depends

from ..services.engine_service import get_engine_service
from ..services.errors import RemoteOperationError, SessionDeniedError
from ..services.session_service import PortalSession
from .auth import get_current_user, get_portal_session

logger = logging.getLogger("boardportal.routes.sessions")
router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("")
async def open_session(current_user: dict = Depends(get_current_user)):
    """
    Open a portal session.

    Loads the member's meetings, tasks, notifications and directory,
    subscribes to live changes and starts meeting reminders.
    """
    engine = get_engine_service()
    try:
        session = await engine.sessions.open_session(current_user["user_id"])
    except LookupError:
        raise HTTPException(status_code=404, detail="Profile not found")
    except SessionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return session.to_dict()


@router.get("/current")
async def current_session(session: PortalSession = Depends(get_portal_session)):
    """Summary of the open session"""
    return session.to_dict()


@router.delete("")
async def close_session(current_user: dict = Depends(get_current_user)):
    """Close the caller's session (sign-out)"""
    engine = get_engine_service()
    closed = await engine.sessions.close_session(current_user["user_id"])
    if not closed:
        raise HTTPException(status_code=409, detail="No open portal session")
    return {"success": True}
