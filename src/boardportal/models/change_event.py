"""
Change Event Model

A single row change published by the backend's change feed.
"""
import json
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from .fields import as_datetime


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass
class ChangeEvent:
    """
    Row change.

    new: the row after the change (None on DELETE)
    old: the row before the change (None on INSERT)
    truncated: the row was too large to publish; new/old carry only the
        identity and filter columns and must be re-read
    """
    table: str
    type: ChangeType
    new: Optional[dict] = None
    old: Optional[dict] = None
    commit_timestamp: Optional[datetime] = None
    truncated: bool = False

    @property
    def record(self) -> dict:
        """The row the event is about (new row, or old row for deletes)"""
        return self.new if self.new is not None else (self.old or {})

    @property
    def needs_reload(self) -> bool:
        return self.truncated and self.type != ChangeType.DELETE

    @classmethod
    def from_payload(cls, payload: str) -> "ChangeEvent":
        """Parse a NOTIFY payload produced by the notify_row_change() trigger"""
        data = json.loads(payload)
        return cls(
            table=data["table"],
            type=ChangeType(data["type"].upper()),
            new=data.get("record"),
            old=data.get("old_record"),
            commit_timestamp=as_datetime(data.get("commit_timestamp")),
            truncated=bool(data.get("truncated", False)),
        )
