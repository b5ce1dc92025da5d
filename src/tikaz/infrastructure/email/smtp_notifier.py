from __future__ import annotations

import logging
import os
import smtplib
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from email.message import EmailMessage
from functools import lru_cache

from tikaz.application.metrics.order_lifecycle import record_notification_failure
from tikaz.application.ports.notifier import ContactNotifier, OrderNotifier
from tikaz.domain.contact.entities import ContactMessage
from tikaz.domain.order.entities import Order, OrderStatus
from tikaz.infrastructure.email import templates

logger = logging.getLogger(__name__)

DEFAULT_FROM = "TiKaz Livré <noreply@tikaz-livre.re>"
DEFAULT_ADMIN_EMAIL = "admin@tikaz-livre.re"


@dataclass(frozen=True)
class SmtpSettings:
    host: str | None
    port: int
    username: str | None
    password: str | None
    starttls: bool
    sender: str
    admin_email: str
    timeout_seconds: float = 10.0

    @property
    def enabled(self) -> bool:
        return bool(self.host)


def smtp_settings_from_env() -> SmtpSettings:
    return SmtpSettings(
        host=os.getenv("SMTP_HOST") or None,
        port=int(os.getenv("SMTP_PORT", "587")),
        username=os.getenv("SMTP_USERNAME") or None,
        password=os.getenv("SMTP_PASSWORD") or None,
        starttls=os.getenv("SMTP_STARTTLS", "true").strip().lower() in {"1", "true", "yes"},
        sender=os.getenv("EMAIL_FROM", DEFAULT_FROM),
        admin_email=os.getenv("ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL),
    )


@lru_cache(maxsize=1)
def _executor() -> ThreadPoolExecutor:
    return ThreadPoolExecutor(max_workers=2, thread_name_prefix="smtp")


class SmtpNotifier(OrderNotifier, ContactNotifier):
    """Renders emails and hands them to a background pool.

    Each notify method returns as soon as the message is queued. Delivery errors are
    logged and counted from the worker thread, never raised to the caller.
    """

    def __init__(
        self,
        settings: SmtpSettings | None = None,
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        self._settings = settings or smtp_settings_from_env()
        self._executor = executor

    def notify_order_placed(self, order: Order) -> None:
        subject, html_body = templates.render_order_placed(order)
        self._submit(order.customer.email, subject, html_body, template="order_placed")

    def notify_status_changed(self, order: Order, new_status: OrderStatus) -> None:
        subject, html_body = templates.render_status_changed(order, new_status)
        self._submit(order.customer.email, subject, html_body, template="order_status_changed")

    def notify_contact_received(self, contact: ContactMessage) -> None:
        subject, html_body = templates.render_contact_received(contact)
        self._submit(contact.email, subject, html_body, template="contact_received")

    def notify_admin_new_contact(self, contact: ContactMessage) -> None:
        subject, html_body = templates.render_admin_new_contact(contact)
        self._submit(self._settings.admin_email, subject, html_body, template="admin_new_contact")

    def notify_contact_response(self, contact: ContactMessage) -> None:
        subject, html_body = templates.render_contact_response(contact)
        self._submit(contact.email, subject, html_body, template="contact_response")

    def build_message(self, recipient: str, subject: str, html_body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._settings.sender
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content("Ce message nécessite un client email compatible HTML.")
        message.add_alternative(html_body, subtype="html")
        return message

    def _submit(self, recipient: str, subject: str, html_body: str, template: str) -> Future | None:
        if not self._settings.enabled:
            logger.debug("email_skipped", extra={"template": template, "reason": "SMTP_HOST missing"})
            return None
        message = self.build_message(recipient, subject, html_body)
        executor = self._executor or _executor()
        return executor.submit(self._deliver, message, template)

    def _deliver(self, message: EmailMessage, template: str) -> None:
        settings = self._settings
        try:
            with smtplib.SMTP(settings.host, settings.port, timeout=settings.timeout_seconds) as smtp:
                if settings.starttls:
                    smtp.starttls()
                if settings.username:
                    smtp.login(settings.username, settings.password or "")
                smtp.send_message(message)
        except Exception:
            record_notification_failure(channel="email", kind=template)
            logger.warning(
                "email_delivery_failed",
                extra={"template": template, "recipient": message["To"]},
                exc_info=True,
            )
            return
        logger.info("email_sent", extra={"template": template, "recipient": message["To"]})
