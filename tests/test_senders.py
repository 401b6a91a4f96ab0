"""Tests for boardportal.notifications senders."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import aiosmtplib

from boardportal.models import Reminder
from boardportal.notifications import EmailSender, InAppSender


class TestInAppSender:
    async def test_queue_and_drain(self):
        sender = InAppSender()
        user_id, meeting_id = uuid4(), uuid4()

        result = await sender.send(
            {"user_id": str(user_id), "meeting_id": str(meeting_id)},
            "Meeting Reminder",
            '"Budget" starts in 5 minutes.',
        )

        assert result.success
        assert [r.meeting_id for r in sender.pending(user_id)] == [meeting_id]
        drained = sender.drain(user_id)
        assert drained[0].message == '"Budget" starts in 5 minutes.'
        assert sender.drain(user_id) == []

    async def test_requires_recipient(self):
        result = await InAppSender().send({"meeting_id": str(uuid4())}, "t", "c")
        assert not result.success

    async def test_bounded_inbox(self):
        sender = InAppSender(max_pending=2)
        user_id = uuid4()
        for _ in range(3):
            await sender.send({"user_id": str(user_id), "meeting_id": str(uuid4())}, "t", "c")
        assert len(sender.pending(user_id)) == 2


class TestEmailSender:
    async def test_not_configured(self):
        result = await EmailSender().send({"email": "a@b.example"}, "t", "c")
        assert not result.success
        assert result.error == "SMTP not configured"

    async def test_missing_address(self):
        sender = EmailSender(smtp_host="smtp.example", smtp_user="portal@example")
        result = await sender.send({}, "t", "c")
        assert not result.success

    async def test_sends_via_smtp(self):
        sender = EmailSender(smtp_host="smtp.example", smtp_user="portal@example", smtp_password="pw")
        with patch("boardportal.notifications.email_sender.aiosmtplib.send", new=AsyncMock()) as send:
            result = await sender.send({"email": "a@b.example"}, "Meeting Reminder", "soon")

        assert result.success
        message = send.call_args.args[0]
        assert message["To"] == "a@b.example"
        assert message["Subject"] == "Meeting Reminder"
        assert send.call_args.kwargs["hostname"] == "smtp.example"

    async def test_smtp_error_reported(self):
        sender = EmailSender(smtp_host="smtp.example", smtp_user="portal@example")
        failing = AsyncMock(side_effect=aiosmtplib.SMTPException("rejected"))
        with patch("boardportal.notifications.email_sender.aiosmtplib.send", new=failing):
            result = await sender.send({"email": "a@b.example"}, "t", "c")

        assert not result.success
        assert "rejected" in result.error


class TestSendReminder:
    async def test_counts_delivering_channels(self, notification_service, admin_profile):
        reminder = Reminder(meeting_id=uuid4(), user_id=admin_profile.id, message="soon")
        notification_service.register_sender("email", EmailSender())

        delivered = await notification_service.send_reminder(admin_profile, reminder)

        assert delivered == 1
        assert notification_service.get_sender("in_app").pending(admin_profile.id)[0].message == "soon"
