"""Notification senders for lawn advisories."""

from lawn_advisor.config import Settings
from lawn_advisor.errors import DeliveryFailed
from lawn_advisor.notifications.base import DeliveryReceipt, NotificationSender
from lawn_advisor.notifications.smtp import SmtpEmailSender
from lawn_advisor.notifications.log import LogNotificationSender


def create_sender(settings: Settings) -> NotificationSender:
    """Build the sender described by settings.

    Falls back to the logging sender when dry-run is enabled or no SMTP host
    is configured.
    """
    if settings.notifications_dry_run or not settings.smtp_configured:
        return LogNotificationSender()
    return SmtpEmailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        use_tls=settings.smtp_use_tls,
        sender=settings.email_from,
        timeout=settings.notify_timeout_seconds,
        max_connections=settings.max_concurrency,
    )


__all__ = [
    "DeliveryFailed",
    "DeliveryReceipt",
    "NotificationSender",
    "SmtpEmailSender",
    "LogNotificationSender",
    "create_sender",
]
