"""SMTP email notifications for lawn advisories."""

from __future__ import annotations

import asyncio
import html
import logging
import smtplib
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid

from lawn_advisor.errors import DeliveryFailed
from lawn_advisor.notifications.base import DeliveryReceipt, NotificationSender

logger = logging.getLogger(__name__)


def render_html(subject: str, body: str) -> str:
    """Wrap a plain text advisory in a simple HTML layout."""
    paragraphs = "".join(
        f'<p style="margin:0 0 12px">{html.escape(line)}</p>'
        for line in body.splitlines()
        if line.strip()
    )
    return f"""
    <div style="font-family:sans-serif;max-width:600px">
        <div style="background:#2d7a2d;color:white;padding:12px 16px;border-radius:8px 8px 0 0">
            <h2 style="margin:0">{html.escape(subject)}</h2>
        </div>
        <div style="padding:16px;border:1px solid #ddd;border-top:none;border-radius:0 0 8px 8px">
            {paragraphs}
        </div>
    </div>
    """


class SmtpEmailSender(NotificationSender):
    """Send advisories through an SMTP server.

    smtplib is blocking, so each send runs on a worker thread to keep the
    event loop free. Workers come from a private pool of `max_connections`
    threads, which caps the open connections to the mail server.

    A cancelled send (for example a timeout around `send()`) cannot stop its
    thread. The message may still be delivered after the caller gave up on
    it, and its worker stays busy until the SMTP conversation ends, so
    later sends queue behind it instead of opening extra connections.
    """

    name = "smtp"

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        sender: str = "Lawn Advisor <no-reply@lawn-advisor.local>",
        timeout: float = 30.0,
        max_connections: int = 4,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender = sender
        self.timeout = timeout
        self.max_connections = max_connections
        self._executor = ThreadPoolExecutor(
            max_workers=max_connections, thread_name_prefix="smtp-send"
        )

    def build_message(self, target: str, subject: str, body: str) -> MIMEMultipart:
        """Build a multipart message with plain text and HTML alternatives."""
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = target
        msg["Message-ID"] = make_msgid(domain="lawn-advisor")

        msg.attach(MIMEText(body, "plain"))
        msg.attach(MIMEText(render_html(subject, body), "html"))
        return msg

    def _send_blocking(self, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(msg)

    async def send(self, target: str, subject: str, body: str) -> DeliveryReceipt:
        msg = self.build_message(target, subject, body)

        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(self._executor, self._send_blocking, msg)
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP authentication failed for {self.host}:{self.port}: {e}")
            raise DeliveryFailed(f"SMTP authentication failed: {e}", target=target) from e
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryFailed(f"SMTP error: {e}", target=target) from e

        logger.info(f"Email sent to {target}: {subject}")
        return DeliveryReceipt(
            target=target,
            sent_at=datetime.now(timezone.utc),
            message_id=msg["Message-ID"],
        )

    async def aclose(self) -> None:
        # Sends already handed to a worker are left to finish
        self._executor.shutdown(wait=False)
