"""
Board Portal Data Models

Domain models mirrored from the managed backend.
"""
from .meeting import Meeting, MeetingDraft, MeetingStatus, AttachedDoc
from .notification import Notification, NotificationType, Reminder, count_unread
from .task import Task, TaskDraft, TaskPriority, TaskStatus
from .directory import (
    Profile,
    ProfileStatus,
    MemberRole,
    Invite,
    ProfileEntry,
    InviteEntry,
    DirectoryEntry,
    DirectoryStats,
)
from .audit_log import AuditLog
from .change_event import ChangeEvent, ChangeType

__all__ = [
    'Meeting',
    'MeetingDraft',
    'MeetingStatus',
    'AttachedDoc',
    'Notification',
    'NotificationType',
    'Reminder',
    'count_unread',
    'Task',
    'TaskDraft',
    'TaskPriority',
    'TaskStatus',
    'Profile',
    'ProfileStatus',
    'MemberRole',
    'Invite',
    'ProfileEntry',
    'InviteEntry',
    'DirectoryEntry',
    'DirectoryStats',
    'AuditLog',
    'ChangeEvent',
    'ChangeType',
]
