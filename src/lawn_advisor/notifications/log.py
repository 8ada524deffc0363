"""Dry-run sender that logs advisories instead of emailing them."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from lawn_advisor.notifications.base import DeliveryReceipt, NotificationSender

logger = logging.getLogger(__name__)


class LogNotificationSender(NotificationSender):
    name = "log"

    async def send(self, target: str, subject: str, body: str) -> DeliveryReceipt:
        logger.info(f"[dry-run] To: {target} | {subject} | {body}")
        return DeliveryReceipt(target=target, sent_at=datetime.now(timezone.utc))
