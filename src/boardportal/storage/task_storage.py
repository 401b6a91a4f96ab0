"""
Task Storage

PostgreSQL storage for action items. Reads join assignee and creator
names from profiles.
"""
import logging
from typing import Optional, List
from uuid import UUID

from .base import BaseStorage
from ..models.task import Task, TaskStatus

logger = logging.getLogger("boardportal.storage.task")

_SELECT_WITH_NAMES = """
    SELECT t.*,
           a.full_name AS assignee_name,
           c.full_name AS creator_name
    FROM action_items t
    LEFT JOIN profiles a ON a.id = t.assignee_id
    LEFT JOIN profiles c ON c.id = t.created_by
"""


class TaskStorage(BaseStorage):
    """Storage for Task entities"""

    async def list_all(self) -> List[Task]:
        """List action items ordered by due date (undated last)"""
        query = _SELECT_WITH_NAMES + " ORDER BY t.due_date ASC NULLS LAST, t.created_at DESC"
        rows = await self.fetch(query)
        return [self._row_to_task(row) for row in rows]

    async def get_by_id(self, task_id: UUID) -> Optional[Task]:
        """Get action item by ID, with joined names"""
        query = _SELECT_WITH_NAMES + " WHERE t.id = $1"
        row = await self.fetchrow(query, task_id)
        return self._row_to_task(row) if row else None

    async def create(self, task: Task) -> Task:
        """Create a new action item and return it with joined names"""
        query = """
            INSERT INTO action_items (
                id, title, description, assignee_id, meeting_id, due_date,
                priority, status, created_by, created_at
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
        """
        await self.execute(
            query,
            task.id, task.title, task.description, task.assignee_id,
            task.meeting_id, task.due_date, task.priority.value,
            task.status.value, task.created_by, task.created_at
        )
        return await self.get_by_id(task.id)

    async def update_status(self, task_id: UUID, status: TaskStatus) -> bool:
        """Set action item status"""
        query = "UPDATE action_items SET status = $2 WHERE id = $1"
        result = await self.execute(query, task_id, status.value)
        return self.affected_rows(result) > 0

    async def assign(self, task_id: UUID, assignee_id: Optional[UUID]) -> bool:
        """Assign or unassign an action item"""
        query = "UPDATE action_items SET assignee_id = $2 WHERE id = $1"
        result = await self.execute(query, task_id, assignee_id)
        return self.affected_rows(result) > 0

    async def delete(self, task_id: UUID) -> bool:
        """Delete action item"""
        result = await self.execute("DELETE FROM action_items WHERE id = $1", task_id)
        return self.affected_rows(result) > 0

    def _row_to_task(self, row) -> Task:
        """Convert database row to Task"""
        return Task.from_dict(dict(row))
