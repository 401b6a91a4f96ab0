"""
Task Routes

Endpoints over the session's action items.
"""
import logging
from datetime import date
from typing import Optional, List
from uuid import UUID

from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel

from ..models.task import TaskDraft, TaskPriority, TaskStatus
from ..services.errors import RemoteOperationError
from ..services.session_service import PortalSession
from .auth import get_portal_session

logger = logging.getLogger("boardportal.routes.tasks")
router = APIRouter(prefix="/tasks", tags=["tasks"])


# ============================================
# Request/Response Models
# ============================================

class CreateTaskRequest(BaseModel):
    """Create action item request"""
    title: str
    description: Optional[str] = None
    assignee_id: Optional[UUID] = None
    meeting_id: Optional[UUID] = None
    due_date: Optional[date] = None
    priority: TaskPriority = TaskPriority.MEDIUM


class UpdateTaskStatusRequest(BaseModel):
    status: TaskStatus


class AssignTaskRequest(BaseModel):
    assignee_id: Optional[UUID] = None


class TaskResponse(BaseModel):
    """Action item response"""
    id: str
    title: str
    description: Optional[str]
    assignee_id: Optional[str]
    meeting_id: Optional[str]
    due_date: Optional[str]
    priority: str
    status: str
    created_by: Optional[str]
    created_at: str
    assignee_name: Optional[str]
    creator_name: Optional[str]


# ============================================
# Routes
# ============================================

@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    status: Optional[TaskStatus] = None,
    mine: bool = False,
    session: PortalSession = Depends(get_portal_session),
):
    """List action items ordered by due date"""
    tasks = session.tasks.tasks
    if status is not None:
        tasks = [t for t in tasks if t.status == status]
    if mine:
        tasks = [t for t in tasks if t.assignee_id == session.user_id]
    return [TaskResponse(**t.to_dict()) for t in tasks]


@router.post("", response_model=TaskResponse)
async def create_task(
    request: CreateTaskRequest,
    session: PortalSession = Depends(get_portal_session),
):
    """Create an action item; the assignee is notified"""
    if not request.title.strip():
        raise HTTPException(status_code=400, detail="Title is required")

    draft = TaskDraft(
        title=request.title.strip(),
        description=request.description,
        assignee_id=request.assignee_id,
        meeting_id=request.meeting_id,
        due_date=request.due_date,
        priority=request.priority,
    )
    try:
        task = await session.tasks.create_task(draft)
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return TaskResponse(**task.to_dict())


@router.patch("/{task_id}/status")
async def update_task_status(
    task_id: UUID,
    request: UpdateTaskStatusRequest,
    session: PortalSession = Depends(get_portal_session),
):
    try:
        updated = await session.tasks.update_task_status(task_id, request.status)
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    if not updated:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"success": True, "status": request.status.value}


@router.patch("/{task_id}/assignee", response_model=TaskResponse)
async def assign_task(
    task_id: UUID,
    request: AssignTaskRequest,
    session: PortalSession = Depends(get_portal_session),
):
    try:
        task = await session.tasks.assign_task(task_id, request.assignee_id)
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return TaskResponse(**task.to_dict())


@router.delete("/{task_id}")
async def delete_task(task_id: UUID, session: PortalSession = Depends(get_portal_session)):
    try:
        deleted = await session.tasks.delete_task(task_id)
    except RemoteOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"success": True}
