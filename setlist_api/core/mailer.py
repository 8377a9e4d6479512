"""
Outgoing mail over SMTP.

Delivery never raises: callers get ``True`` when the server accepted the
message and ``False`` when SMTP is not configured or the transport failed.
"""

from contextlib import contextmanager
from email.message import EmailMessage
import logging
import smtplib
import ssl
from typing import Iterator

from .config import Settings, get_settings

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465


def smtp_configured(settings: Settings) -> bool:
    return bool(settings.smtp_host and settings.smtp_user and settings.smtp_password and settings.smtp_from)


def build_message(settings: Settings, subject: str, to_email: str, html_body: str, text_body: str | None) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.smtp_from
    msg["To"] = to_email
    msg.set_content(text_body or html_body)
    msg.add_alternative(html_body, subtype="html")
    return msg


@contextmanager
def _connect(settings: Settings) -> Iterator[smtplib.SMTP]:
    context = ssl.create_default_context()
    timeout = settings.smtp_timeout_seconds
    if settings.smtp_port == IMPLICIT_TLS_PORT:
        server: smtplib.SMTP = smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, context=context, timeout=timeout)
    else:
        server = smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=timeout)
    with server:
        if settings.smtp_port != IMPLICIT_TLS_PORT:
            server.starttls(context=context)
        server.login(settings.smtp_user, settings.smtp_password)
        yield server


def send_email(subject: str, to_email: str, html_body: str, text_body: str | None = None) -> bool:
    settings = get_settings()
    if not smtp_configured(settings):
        logger.info("SMTP not configured; skipping email %r to %s", subject, to_email)
        return False
    msg = build_message(settings, subject, to_email, html_body, text_body)
    try:
        with _connect(settings) as server:
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("Failed to send email %r to %s: %s", subject, to_email, exc)
        return False
    logger.info("Email %r sent to %s", subject, to_email)
    return True
