"""Notification sender abstraction."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from pydantic import BaseModel, Field


class DeliveryReceipt(BaseModel):
    """Confirmation that a notification was handed off for delivery."""

    target: str
    sent_at: datetime
    message_id: str | None = Field(default=None, description="Transport message id")


class NotificationSender(ABC):
    """Delivers advisory messages to plan owners.

    Implementations raise `DeliveryFailed` when a message cannot be handed
    off; they must not retry on their own.
    """

    name: str

    @abstractmethod
    async def send(self, target: str, subject: str, body: str) -> DeliveryReceipt:
        """Send one message.

        Args:
            target: Recipient address
            subject: Subject line
            body: Plain text body

        Returns:
            DeliveryReceipt for the hand-off

        Raises:
            DeliveryFailed: If the message could not be delivered
        """

    async def aclose(self) -> None:
        """Release any transport resources."""
