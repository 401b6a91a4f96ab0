"""
Board Portal Configuration

Configuration class for the board portal engine.
"""
import os
from pathlib import Path
from urllib.parse import quote_plus
from dotenv import load_dotenv

# Load .env file from project root
_env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_path)


class Config:
    """Configuration class for the Board Portal API"""

    # Base paths
    BASE_DIR = Path(__file__).parent.parent.parent

    # Database settings (managed PostgreSQL backend)
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = os.getenv("DB_PORT", "5432")
    DB_NAME = os.getenv("DB_NAME", "boardportal")
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")
    POSTGRES_DSN = os.getenv("POSTGRES_DSN", "")

    # Connection pool used by every storage
    DB_POOL_MIN_SIZE = int(os.getenv("DB_POOL_MIN_SIZE", "1"))
    DB_POOL_MAX_SIZE = int(os.getenv("DB_POOL_MAX_SIZE", "5"))
    DB_COMMAND_TIMEOUT = float(os.getenv("DB_COMMAND_TIMEOUT", "30"))
    DB_CONNECT_RETRIES = int(os.getenv("DB_CONNECT_RETRIES", "3"))

    # Channel the change-feed triggers publish on
    CHANGE_FEED_CHANNEL = os.getenv("CHANGE_FEED_CHANNEL", "row_changes")

    # API settings
    API_HOST = os.getenv("API_HOST", "127.0.0.1")
    API_PORT = int(os.getenv("API_PORT", "8100"))

    # JWT settings (tokens are issued by the backend's auth service)
    JWT_SECRET = os.getenv("JWT_SECRET", "boardportal-secret-key-change-in-production")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "")

    # Meeting dates/times are stored as local wall-clock values
    PORTAL_TIMEZONE = os.getenv("PORTAL_TIMEZONE", "UTC")

    # Reminder settings
    REMINDER_WINDOW_MINUTES = int(os.getenv("REMINDER_WINDOW_MINUTES", "15"))
    REMINDER_POLL_INTERVAL = int(os.getenv("REMINDER_POLL_INTERVAL", "60"))
    REMINDERS_ENABLED = os.getenv("REMINDERS_ENABLED", "true").lower() == "true"

    # Audit trail
    AUDIT_LOG_LIMIT = int(os.getenv("AUDIT_LOG_LIMIT", "50"))

    # SMTP (e-mail reminders)
    SMTP_HOST = os.getenv("SMTP_HOST", "")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER = os.getenv("SMTP_USER", "")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")

    @staticmethod
    def get_postgres_dsn() -> str:
        """Get PostgreSQL DSN with password handling"""
        if Config.POSTGRES_DSN:
            return Config.POSTGRES_DSN
        if Config.DB_PASSWORD:
            password = quote_plus(Config.DB_PASSWORD)
            return f"postgresql://{Config.DB_USER}:{password}@{Config.DB_HOST}:{Config.DB_PORT}/{Config.DB_NAME}"
        return f"postgresql://{Config.DB_USER}@{Config.DB_HOST}:{Config.DB_PORT}/{Config.DB_NAME}"
