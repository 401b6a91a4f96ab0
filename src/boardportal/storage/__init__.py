"""
Board Portal Storage Layer

Request/response and push access to the managed PostgreSQL backend.
"""
from .base import BaseStorage, STORAGE_ERRORS
from .change_feed import ChangeFeed, Subscription
from .meeting_storage import MeetingStorage
from .task_storage import TaskStorage
from .notification_storage import NotificationStorage
from .profile_storage import ProfileStorage
from .invite_storage import InviteStorage
from .audit_log_storage import AuditLogStorage

__all__ = [
    'BaseStorage',
    'STORAGE_ERRORS',
    'ChangeFeed',
    'Subscription',
    'MeetingStorage',
    'TaskStorage',
    'NotificationStorage',
    'ProfileStorage',
    'InviteStorage',
    'AuditLogStorage',
]
