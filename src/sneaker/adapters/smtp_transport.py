"""SMTP mail transport adapter.

Sends the rendered notification as an HTML email. Delivery is a single
attempt; failures surface as TransportError for the notifier to log.
"""

from __future__ import annotations

import os
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Iterable, Mapping, Optional

from dotenv import load_dotenv

from sneaker.core.errors import ConfigurationError, TransportError

DEFAULT_SMTP_PORT = 587
DEFAULT_TIMEOUT_SECONDS = 10


class SmtpMailTransport:
    """MailTransport adapter delivering through an SMTP relay."""

    def __init__(
        self,
        host: str,
        from_email: str,
        port: int = DEFAULT_SMTP_PORT,
        username: Optional[str] = None,
        password: Optional[str] = None,
        from_name: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._from_email = from_email
        self._from_name = from_name
        self._use_tls = use_tls
        self._timeout = timeout

    def _sender(self) -> str:
        if self._from_name:
            return f"{self._from_name} <{self._from_email}>"
        return self._from_email

    def build_message(self, recipients: Iterable[str], subject: str, body: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self._sender()
        msg["To"] = ", ".join(recipients)
        msg.attach(MIMEText(body, "html", "utf-8"))
        return msg

    def deliver(self, recipients: Iterable[str], subject: str, body: str) -> None:
        """Send one HTML message to all recipients."""

        recipients = list(recipients)
        if not recipients:
            raise TransportError("No recipients to deliver to")

        msg = self.build_message(recipients, subject, body)
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                if self._use_tls:
                    server.starttls()
                if self._username and self._password:
                    server.login(self._username, self._password)
                server.send_message(msg, to_addrs=recipients)
        except (smtplib.SMTPException, OSError) as exc:
            raise TransportError(f"SMTP delivery via {self._host}:{self._port} failed: {exc}") from exc


def build_smtp_transport(settings: Optional[Mapping[str, Any]] = None) -> SmtpMailTransport:
    """Create an SMTP transport from the ``smtp`` config section and environment.

    Credentials are read via python-dotenv to keep secrets out of the config
    file; environment values override the config section.
    """

    load_dotenv()
    settings = settings or {}

    host = os.getenv("SNEAKER_SMTP_HOST") or settings.get("host")
    from_email = os.getenv("SNEAKER_SMTP_FROM") or settings.get("from_email")
    if not host or not from_email:
        raise ConfigurationError("SMTP transport requires a host and a from_email")

    try:
        port = int(os.getenv("SNEAKER_SMTP_PORT") or settings.get("port", DEFAULT_SMTP_PORT))
        timeout = float(settings.get("timeout", DEFAULT_TIMEOUT_SECONDS))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid SMTP port or timeout: {exc}") from exc

    return SmtpMailTransport(
        host=host,
        port=port,
        username=os.getenv("SNEAKER_SMTP_USERNAME") or settings.get("username"),
        password=os.getenv("SNEAKER_SMTP_PASSWORD"),
        from_email=from_email,
        from_name=settings.get("from_name"),
        use_tls=bool(settings.get("use_tls", True)),
        timeout=timeout,
    )
