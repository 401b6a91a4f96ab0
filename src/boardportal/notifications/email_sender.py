"""
Email Sender

Sends meeting reminders via SMTP using aiosmtplib.
"""
import logging
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart

import aiosmtplib

from .base_sender import BaseSender, SendResult

logger = logging.getLogger("boardportal.notifications.email")


class EmailSender(BaseSender):
    """Send reminders via SMTP"""

    def __init__(
        self,
        smtp_host: str = "",
        smtp_port: int = 587,
        smtp_user: str = "",
        smtp_password: str = "",
        from_name: str = "Board Portal",
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.from_name = from_name

    def build_message(self, email_to: str, title: str, content: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = f"{self.from_name} <{self.smtp_user}>"
        msg["To"] = email_to
        msg["Subject"] = title
        msg.attach(MIMEText(content, "plain", "utf-8"))
        return msg

    async def send(self, config: dict, title: str, content: str) -> SendResult:
        """
        Send email reminder.

        config must contain 'email'.
        """
        email_to = config.get("email")
        if not email_to:
            return SendResult(success=False, error="No email for recipient")

        if not self.smtp_host or not self.smtp_user:
            return SendResult(success=False, error="SMTP not configured")

        try:
            await aiosmtplib.send(
                self.build_message(email_to, title, content),
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_user,
                password=self.smtp_password,
                use_tls=False,
                start_tls=True,
            )

            logger.info(f"Email sent to {email_to}")
            return SendResult(success=True)

        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"Email send error: {e}")
            return SendResult(success=False, error=str(e))

    async def close(self):
        pass
