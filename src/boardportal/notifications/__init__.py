"""
Board Portal Reminder Senders

Delivery channels: in-app inbox, Email.
"""
from .base_sender import BaseSender, SendResult
from .inapp_sender import InAppSender
from .email_sender import EmailSender

__all__ = [
    'BaseSender',
    'SendResult',
    'InAppSender',
    'EmailSender',
]
