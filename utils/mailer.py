"""
Outbound email for MFA codes and password-reset links.

SMTP settings come from the app config (SMTP_HOST, SMTP_PORT, SMTP_USER,
SMTP_PASSWORD, SMTP_USE_TLS, MAIL_FROM). Without SMTP_HOST a sender built for a
DEBUG or TESTING app only logs that a message would have gone out; in any
other app every send fails with NotificationError.
"""
from __future__ import annotations

import logging
import smtplib
import socket
import ssl
from email.message import EmailMessage
from typing import Optional

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """Delivery failed; callers decide whether the failure is fatal."""


def redact_email(addr: str) -> str:
    """Keep enough of an address to correlate logs without storing it."""
    if not addr or "@" not in addr:
        return "redacted"
    local, domain = addr.split("@", 1)
    return f"{local[:2]}***@{domain}"


class EmailSender:
    def __init__(
        self,
        *,
        host: Optional[str] = None,
        port: int = 587,
        user: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        mail_from: str = "no-reply@example.com",
        timeout: int = 20,
        log_only: bool = False,
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.mail_from = mail_from
        self.timeout = timeout
        self.log_only = log_only

    @classmethod
    def from_config(cls, config) -> "EmailSender":
        return cls(
            host=config.get("SMTP_HOST"),
            port=config.get("SMTP_PORT", 587),
            user=config.get("SMTP_USER"),
            password=config.get("SMTP_PASSWORD"),
            use_tls=config.get("SMTP_USE_TLS", True),
            mail_from=config.get("MAIL_FROM", "no-reply@example.com"),
            log_only=bool(config.get("DEBUG") or config.get("TESTING")),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.host)

    def send(self, to: str, subject: str, text: str, html: str | None = None) -> None:
        """Deliver one message. Raises NotificationError if the relay refuses or is unreachable."""
        if not self.is_configured:
            if not self.log_only:
                logger.error("email not sent, SMTP_HOST is not set: to=%s", redact_email(to))
                raise NotificationError("no SMTP relay configured")
            # Never log the body, it carries codes and reset links
            logger.info("email not sent (no SMTP_HOST): to=%s subject=%r", redact_email(to), subject)
            return

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.mail_from
        msg["To"] = to
        msg.set_content(text)
        if html:
            msg.add_alternative(html, subtype="html")

        ctx = ssl.create_default_context()
        try:
            if self.use_tls:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as s:
                    s.starttls(context=ctx)
                    if self.user and self.password:
                        s.login(self.user, self.password)
                    s.send_message(msg)
            else:
                with smtplib.SMTP_SSL(self.host, self.port, context=ctx, timeout=self.timeout) as s:
                    if self.user and self.password:
                        s.login(self.user, self.password)
                    s.send_message(msg)
        except (smtplib.SMTPException, OSError, socket.timeout) as exc:
            logger.error("email send failed via %s:%s to=%s: %r", self.host, self.port, redact_email(to), exc)
            raise NotificationError(f"email delivery failed: {exc}") from exc

        logger.info("email sent to=%s subject=%r", redact_email(to), subject)
