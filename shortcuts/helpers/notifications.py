"""Failure notifications sent over SMTP."""

from __future__ import annotations

import logging
import os
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional

logger = logging.getLogger(__name__)

SUBJECT_PREFIX = "[ShortCuts]"


@dataclass(frozen=True)
class SmtpConfig:
    host: str
    port: int
    to_addr: str
    from_addr: str
    username: Optional[str] = None
    password: Optional[str] = None

    @classmethod
    def from_env(cls) -> Optional["SmtpConfig"]:
        """Read ``SMTP_*`` and ``ALERT_EMAIL_*`` variables; ``None`` when unset."""

        host = os.getenv("SMTP_HOST")
        to_addr = os.getenv("ALERT_EMAIL_TO")
        if not host or not to_addr:
            return None
        username = os.getenv("SMTP_USERNAME")
        return cls(
            host=host,
            port=int(os.getenv("SMTP_PORT", "587")),
            to_addr=to_addr,
            from_addr=os.getenv("ALERT_EMAIL_FROM") or username or "",
            username=username,
            password=os.getenv("SMTP_PASSWORD"),
        )


def build_message(config: SmtpConfig, subject: str, body: str) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = f"{SUBJECT_PREFIX} {subject}"
    msg["From"] = config.from_addr
    msg["To"] = config.to_addr
    msg.set_content(body)
    return msg


def send_failure_email(subject: str, body: str, *, config: SmtpConfig | None = None) -> bool:
    """E-mail a failure report; returns whether a message was handed to SMTP.

    Nothing is sent when SMTP is not configured. Delivery errors are logged,
    not raised.
    """

    config = config or SmtpConfig.from_env()
    if config is None:
        return False

    msg = build_message(config, subject, body)
    try:
        with smtplib.SMTP(config.host, config.port) as server:
            server.starttls()
            if config.username and config.password:
                server.login(config.username, config.password)
            server.send_message(msg)
    except (OSError, smtplib.SMTPException) as exc:
        logger.warning("Failed to send failure notification: %s", exc)
        return False
    return True


__all__ = ["SmtpConfig", "build_message", "send_failure_email"]
