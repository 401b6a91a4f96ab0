"""
Meeting Storage

PostgreSQL storage for meetings.
"""
import json
import logging
from typing import Optional, List
from uuid import UUID

from .base import BaseStorage
from ..models.meeting import Meeting, MeetingStatus

logger = logging.getLogger("boardportal.storage.meeting")


class MeetingStorage(BaseStorage):
    """Storage for Meeting entities"""

    async def list_all(self) -> List[Meeting]:
        """List meetings ordered by date, then start time"""
        query = "SELECT * FROM meetings ORDER BY date ASC, start_time ASC"
        rows = await self.fetch(query)
        return [self._row_to_meeting(row) for row in rows]

    async def get_by_id(self, meeting_id: UUID) -> Optional[Meeting]:
        """Get meeting by ID"""
        query = "SELECT * FROM meetings WHERE id = $1"
        row = await self.fetchrow(query, meeting_id)
        return self._row_to_meeting(row) if row else None

    async def create(self, meeting: Meeting) -> Meeting:
        """Create a new meeting"""
        query = """
            INSERT INTO meetings (
                id, title, date, start_time, end_time, location, link,
                description, category, status, attendees, attendee_list,
                attached_docs, owner_id, created_at
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15)
            RETURNING *
        """
        row = await self.fetchrow(
            query,
            meeting.id, meeting.title, meeting.date, meeting.start_time,
            meeting.end_time, meeting.location, meeting.link,
            meeting.description, meeting.category, meeting.status.value,
            meeting.attendees, meeting.attendee_list,
            json.dumps([d.to_dict() for d in meeting.attached_docs]),
            meeting.owner_id, meeting.created_at
        )
        return self._row_to_meeting(row)

    async def update_status(self, meeting_id: UUID, status: MeetingStatus) -> Optional[Meeting]:
        """Set meeting status"""
        query = "UPDATE meetings SET status = $2 WHERE id = $1 RETURNING *"
        row = await self.fetchrow(query, meeting_id, status.value)
        return self._row_to_meeting(row) if row else None

    async def delete(self, meeting_id: UUID) -> bool:
        """Delete meeting"""
        result = await self.execute("DELETE FROM meetings WHERE id = $1", meeting_id)
        return self.affected_rows(result) > 0

    def _row_to_meeting(self, row) -> Meeting:
        """Convert database row to Meeting"""
        return Meeting.from_dict(dict(row))
