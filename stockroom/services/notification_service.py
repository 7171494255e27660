"""Email notification helpers for replenishment alerts."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from typing import Iterable, List, Optional, Sequence

from stockroom.core.config import Settings

logger = logging.getLogger(__name__)


class EmailNotificationService:
    """Lightweight SMTP helper for stock alerts."""

    def __init__(self, settings: Settings):
        self._settings = settings

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def send_replenishment_alert(
        self,
        *,
        entry,
        notification,
        recipients: Optional[Sequence[str]] = None,
    ) -> bool:
        """Send a low-stock email for a freshly raised notification.

        Args:
            entry: StockEntry model (``product_id``/``color``/``size``/``quantity``/``reorder_threshold``).
            notification: The ReplenishmentNotification just created.
            recipients: Override the default notification list.

        Returns:
            True when the message was handed to the SMTP server. Failures are
            logged and reported as False; they never interrupt the stock update.
        """

        if not self._ready():
            logger.debug("SMTP configuration incomplete; replenishment alert skipped for stock %s", entry.id)
            return False

        to_addresses = self._resolve_recipients(recipients)
        if not to_addresses:
            logger.warning("No recipients configured for replenishment alert; skipping email")
            return False

        subject = f"Reorder needed: product {entry.product_id} ({entry.color}/{entry.size})"
        lines: List[str] = [
            f"Stock entry: {entry.id}",
            f"Product: {entry.product_id}",
            f"Variant: {entry.color} / {entry.size}",
            f"Quantity on hand: {entry.quantity}",
            f"Reorder threshold: {entry.reorder_threshold}",
            f"Notification: {notification.id}",
        ]
        if notification.created_at is not None:
            lines.append(f"Raised at: {notification.created_at.isoformat()}")

        lines.append("\nSent automatically by Stock Replenishment Service")

        body_text = "\n".join(lines)
        body_html = "".join(
            ["<p><strong>Replenishment needed</strong></p>"]
            + [f"<p>{line}</p>" for line in lines[:-1]]
            + ["<p><em>Sent automatically by Stock Replenishment Service</em></p>"]
        )

        message = self._build_message(subject, to_addresses, body_text, body_html)
        return await self._dispatch(message)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _ready(self) -> bool:
        settings = self._settings
        return bool(settings.SMTP_HOST and settings.SMTP_USERNAME and settings.SMTP_PASSWORD)

    def _resolve_recipients(self, override: Optional[Sequence[str]]) -> List[str]:
        recipients: Iterable[str] = override if override else self._settings.NOTIFICATION_EMAILS
        return [email.strip() for email in recipients if email]

    def _build_message(
        self,
        subject: str,
        to_addresses: Sequence[str],
        body_text: str,
        body_html: Optional[str] = None,
    ) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self._formatted_from_address
        message["To"] = ", ".join(sorted(set(to_addresses)))
        message.set_content(body_text)
        if body_html:
            message.add_alternative(body_html, subtype="html")
        return message

    @property
    def _formatted_from_address(self) -> str:
        from_email = self._settings.SMTP_FROM_EMAIL or self._settings.SMTP_USERNAME
        from_name = self._settings.SMTP_FROM_NAME or "Inventory Alerts"
        return formataddr((from_name, from_email))

    async def _dispatch(self, message: EmailMessage) -> bool:
        try:
            await asyncio.to_thread(self._send_sync, message)
            logger.info("Replenishment alert email sent to %s", message["To"])
            return True
        except Exception as exc:  # pragma: no cover - logged for observability
            logger.error("Failed to send replenishment alert email: %s", exc, exc_info=True)
            return False

    def _send_sync(self, message: EmailMessage) -> None:
        settings = self._settings
        host = settings.SMTP_HOST
        port = settings.SMTP_PORT or (465 if settings.SMTP_USE_SSL else 587)
        timeout = settings.SMTP_TIMEOUT

        if settings.SMTP_USE_SSL:
            smtp = smtplib.SMTP_SSL(host=host, port=port, timeout=timeout)
        else:
            smtp = smtplib.SMTP(host=host, port=port, timeout=timeout)
        try:
            if settings.SMTP_USE_TLS and not settings.SMTP_USE_SSL:
                smtp.starttls()

            smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            smtp.send_message(message)
        finally:
            try:
                smtp.quit()
            except smtplib.SMTPException:
                smtp.close()
