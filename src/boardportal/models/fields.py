"""
Field Coercion Helpers

Rows arrive either from asyncpg (native Python types) or from change-feed
payloads (JSON: strings for UUIDs, dates and times). These helpers accept both.
"""
import json
from datetime import date, datetime, time
from typing import Any, List, Optional
from uuid import UUID


def as_uuid(value: Any) -> Optional[UUID]:
    if value is None or value == "":
        return None
    if isinstance(value, UUID):
        return value
    return UUID(str(value))


def as_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    # Postgres JSON renders "2024-05-01T10:00:00.123+00:00" or a trailing Z
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def as_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def as_time(value: Any) -> Optional[time]:
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    return time.fromisoformat(str(value))


def as_json(value: Any, default: Any) -> Any:
    """Decode a json/jsonb column; asyncpg returns jsonb as text"""
    if value is None:
        return default
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


def as_uuid_list(value: Any) -> List[UUID]:
    if not value:
        return []
    return [as_uuid(v) for v in value if v]
