"""
Task Store

In-memory mirror of action items for one portal session.
"""
import logging
from dataclasses import replace
from typing import List, Optional
from uuid import UUID

from ..models.change_event import ChangeEvent, ChangeType
from ..models.fields import as_uuid
from ..models.notification import NotificationType
from ..models.task import Task, TaskDraft, TaskStatus
from ..storage.base import STORAGE_ERRORS
from ..storage.task_storage import TaskStorage
from .context import SessionContext
from .errors import RemoteOperationError
from .notification_service import NotificationService
from .reducers import ChangeSequence, patch, remove, upsert
from .scope import OperationScope

logger = logging.getLogger("boardportal.services.task_store")


class TaskStore:
    """Mirror of `action_items` rows with joined assignee/creator names"""

    table = "action_items"

    def __init__(
        self,
        context: SessionContext,
        storage: TaskStorage,
        notification_service: NotificationService,
        scope: OperationScope,
    ):
        self.context = context
        self.storage = storage
        self.notification_service = notification_service
        self.scope = scope
        self.tasks: List[Task] = []
        self.loading = False
        self._sequence = ChangeSequence()

    def get(self, task_id: UUID) -> Optional[Task]:
        return next((t for t in self.tasks if t.id == task_id), None)

    async def fetch_tasks(self) -> List[Task]:
        """Load all visible action items"""
        self.loading = True
        try:
            rows = await self.scope.run(self.storage.list_all())
        except STORAGE_ERRORS as e:
            logger.error(f"Error fetching tasks: {e}")
            raise RemoteOperationError("load tasks", e) from e
        finally:
            self.loading = False

        if self.scope.is_active:
            self.tasks = rows
        return self.tasks

    async def create_task(self, draft: TaskDraft) -> Task:
        """Create a Pending action item; the assignee is notified"""
        task = Task(
            title=draft.title,
            description=draft.description,
            assignee_id=draft.assignee_id,
            meeting_id=draft.meeting_id,
            due_date=draft.due_date,
            priority=draft.priority,
            status=TaskStatus.PENDING,
            created_by=self.context.user_id,
        )
        try:
            created = await self.scope.run(self.storage.create(task))
        except STORAGE_ERRORS as e:
            logger.error(f"Error creating task: {e}")
            raise RemoteOperationError("create task", e) from e

        if not self.scope.is_active:
            return created

        self.tasks = upsert(self.tasks, created, prepend=True)
        logger.info(f"Created task '{created.title}'")

        if created.assignee_id and created.assignee_id != self.context.user_id:
            await self.notification_service.create_notification(
                created.assignee_id,
                "New Task Assigned",
                f'You have been assigned a new task: "{created.title}"',
                NotificationType.INFO,
            )
        return created

    async def update_task_status(self, task_id: UUID, status: TaskStatus) -> bool:
        try:
            updated = await self.scope.run(self.storage.update_status(task_id, TaskStatus(status)))
        except STORAGE_ERRORS as e:
            logger.error(f"Error updating task status: {e}")
            raise RemoteOperationError("update task status", e) from e

        if updated and self.scope.is_active:
            self.tasks = patch(self.tasks, task_id, lambda t: replace(t, status=TaskStatus(status)))
        return updated

    async def assign_task(self, task_id: UUID, assignee_id: Optional[UUID]) -> Optional[Task]:
        """Reassign an action item and re-read it for the new assignee name"""
        try:
            assigned = await self.scope.run(self.storage.assign(task_id, assignee_id))
            task = await self.scope.run(self.storage.get_by_id(task_id)) if assigned else None
        except STORAGE_ERRORS as e:
            logger.error(f"Error assigning task: {e}")
            raise RemoteOperationError("assign task", e) from e

        if task is not None and self.scope.is_active:
            self.tasks = upsert(self.tasks, task)
        return task

    async def delete_task(self, task_id: UUID) -> bool:
        try:
            deleted = await self.scope.run(self.storage.delete(task_id))
        except STORAGE_ERRORS as e:
            logger.error(f"Error deleting task: {e}")
            raise RemoteOperationError("delete task", e) from e

        if self.scope.is_active:
            self._sequence.bump(task_id)
            self.tasks = remove(self.tasks, task_id)
        return deleted

    async def apply_change(self, change: ChangeEvent):
        """
        Change-feed handler.

        Pushed rows lack the joined names, so inserts and updates are
        re-read before being applied by identity. A read overtaken by a
        later change to the same task is dropped.
        """
        if not self.scope.is_active:
            return
        task_id = as_uuid(change.record.get("id"))
        if task_id is None:
            return

        ticket = self._sequence.bump(task_id)
        if change.type == ChangeType.DELETE:
            self.tasks = remove(self.tasks, task_id)
            return

        try:
            task = await self.scope.run(self.storage.get_by_id(task_id))
        except STORAGE_ERRORS as e:
            logger.warning(f"Could not hydrate pushed task {task_id}: {e}")
            task = None if change.truncated else Task.from_dict(change.new or {})

        if task is None or not self.scope.is_active:
            return
        if not self._sequence.is_current(task_id, ticket):
            return
        self.tasks = upsert(self.tasks, task)
