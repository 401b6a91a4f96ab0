"""
Engine Service

Main composite service that manages all storages, the change feed and the
session registry.
Singleton pattern - one instance per process.
"""
import logging
from typing import Optional

from ..config import Config
from ..storage.audit_log_storage import AuditLogStorage
from ..storage.change_feed import ChangeFeed
from ..storage.invite_storage import InviteStorage
from ..storage.meeting_storage import MeetingStorage
from ..storage.notification_storage import NotificationStorage
from ..storage.profile_storage import ProfileStorage
from ..storage.task_storage import TaskStorage
from ..notifications.email_sender import EmailSender
from ..notifications.inapp_sender import InAppSender
from .audit_service import AuditService
from .notification_service import NotificationService
from .session_service import SessionRegistry

logger = logging.getLogger("boardportal.services.engine")

# Singleton instance
_engine_service: Optional["EngineService"] = None


class EngineService:
    """
    Composite engine service.

    Manages:
    - All storage connections (PostgreSQL)
    - The change-feed listener
    - Portal sessions
    - Graceful shutdown
    """

    def __init__(self):
        """Initialize engine service with all storages"""
        self.postgres_dsn = Config.get_postgres_dsn()

        # Initialize storages
        self.profile_storage = ProfileStorage(self.postgres_dsn)
        self.invite_storage = InviteStorage(self.postgres_dsn)
        self.meeting_storage = MeetingStorage(self.postgres_dsn)
        self.task_storage = TaskStorage(self.postgres_dsn)
        self.notification_storage = NotificationStorage(self.postgres_dsn)
        self.audit_log_storage = AuditLogStorage(self.postgres_dsn)

        self.change_feed = ChangeFeed(self.postgres_dsn, Config.CHANGE_FEED_CHANNEL)

        # Initialize notification service
        self.notification_service = NotificationService(self.notification_storage)

        # Register reminder senders
        self.inapp_sender = InAppSender()
        self.notification_service.register_sender("in_app", self.inapp_sender)

        if Config.SMTP_HOST:
            self.email_sender = EmailSender(
                smtp_host=Config.SMTP_HOST,
                smtp_port=Config.SMTP_PORT,
                smtp_user=Config.SMTP_USER,
                smtp_password=Config.SMTP_PASSWORD,
            )
            self.notification_service.register_sender("email", self.email_sender)
        else:
            self.email_sender = None
            logger.info("Email reminders disabled (no SMTP_HOST)")

        self.audit_service = AuditService(self.audit_log_storage, Config.AUDIT_LOG_LIMIT)

        self.sessions = SessionRegistry(
            profile_storage=self.profile_storage,
            invite_storage=self.invite_storage,
            meeting_storage=self.meeting_storage,
            task_storage=self.task_storage,
            notification_storage=self.notification_storage,
            change_feed=self.change_feed,
            notification_service=self.notification_service,
            audit_service=self.audit_service,
            inbox=self.inapp_sender,
            reminder_poll_interval=Config.REMINDER_POLL_INTERVAL,
            reminder_window_minutes=Config.REMINDER_WINDOW_MINUTES,
            timezone=Config.PORTAL_TIMEZONE,
            reminders_enabled=Config.REMINDERS_ENABLED,
        )

        self._initialized = False
        logger.info("EngineService created")

    async def initialize(self):
        """Initialize all storages and start listening for changes"""
        if self._initialized:
            logger.info("EngineService already initialized")
            return

        logger.info("Initializing EngineService...")

        await self.profile_storage.init()
        await self.invite_storage.init()
        await self.meeting_storage.init()
        await self.task_storage.init()
        await self.notification_storage.init()
        await self.audit_log_storage.init()

        await self.change_feed.connect()

        self._initialized = True
        logger.info("EngineService initialized successfully")

    async def close(self):
        """Close all sessions and connections"""
        logger.info("Closing EngineService...")

        await self.sessions.close_all()
        await self.change_feed.close()

        await self.profile_storage.close()
        await self.invite_storage.close()
        await self.meeting_storage.close()
        await self.task_storage.close()
        await self.notification_storage.close()
        await self.audit_log_storage.close()
        await self.notification_service.close()

        self._initialized = False
        logger.info("EngineService closed")

    @property
    def is_initialized(self) -> bool:
        """Check if service is initialized"""
        return self._initialized


def get_engine_service() -> EngineService:
    """Get or create engine service singleton"""
    global _engine_service
    if _engine_service is None:
        _engine_service = EngineService()
    return _engine_service


async def init_engine_service() -> EngineService:
    """Initialize and return engine service"""
    service = get_engine_service()
    await service.initialize()
    return service
