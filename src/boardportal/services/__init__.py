"""
Board Portal Services

Session stores, reminder scheduling and side-channel services.
"""
from .errors import RemoteOperationError, SessionDeniedError, SessionNotFoundError
from .scope import OperationScope
from .context import SessionContext
from .notification_service import NotificationService
from .audit_service import AuditService
from .meeting_store import MeetingStore
from .task_store import TaskStore
from .notification_store import NotificationStore
from .user_directory import UserDirectory, merge_directory
from .reminder_scheduler import ReminderScheduler, is_reminder_due
from .session_service import PortalSession, SessionRegistry
from .engine_service import EngineService

__all__ = [
    'RemoteOperationError',
    'SessionDeniedError',
    'SessionNotFoundError',
    'OperationScope',
    'SessionContext',
    'NotificationService',
    'AuditService',
    'MeetingStore',
    'TaskStore',
    'NotificationStore',
    'UserDirectory',
    'merge_directory',
    'ReminderScheduler',
    'is_reminder_due',
    'PortalSession',
    'SessionRegistry',
    'EngineService',
]
