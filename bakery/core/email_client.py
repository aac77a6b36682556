# bakery/core/email_client.py
"""
Outgoing mail (new-order notifications to the bakery inbox).

SMTP settings come from the environment, not from Settings, so the mail
account can be rotated without touching the rest of the configuration:

    SMTP_HOST=smtp.gmail.com
    SMTP_PORT=465
    SMTP_USERNAME=orders@example.com
    SMTP_PASSWORD=<app password>
    SMTP_FROM_EMAIL=orders@example.com      (defaults to SMTP_USERNAME)
    SMTP_FROM_NAME=Sourdough Bakery
    SMTP_USE_SSL=true                       (port 465)
    SMTP_USE_TLS=false                      (STARTTLS, port 587)

Settings are read on every send so tests and long-running workers pick up
changes to the environment.
"""

import os
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr

_TRUTHY = {"1", "true", "yes", "y"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class SmtpConfig:
    host: str | None
    port: int
    username: str | None
    password: str | None
    from_email: str
    from_name: str
    use_tls: bool
    use_ssl: bool

    @classmethod
    def from_env(cls) -> "SmtpConfig":
        username = os.getenv("SMTP_USERNAME")
        return cls(
            host=os.getenv("SMTP_HOST"),
            port=int(os.getenv("SMTP_PORT", "587")),
            username=username,
            password=os.getenv("SMTP_PASSWORD"),
            from_email=os.getenv("SMTP_FROM_EMAIL", username or ""),
            from_name=os.getenv("SMTP_FROM_NAME", "Sourdough Bakery"),
            use_tls=_env_flag("SMTP_USE_TLS", True),
            use_ssl=_env_flag("SMTP_USE_SSL", False),
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.host and self.username and self.password)

    @property
    def sender(self) -> str:
        if self.from_email:
            return formataddr((self.from_name, self.from_email))
        return self.username or ""


def build_message(
    config: SmtpConfig,
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str | None = None,
    reply_to: str | None = None,
) -> EmailMessage:
    """
    Plain-text message with an optional HTML alternative part.
    """
    msg = EmailMessage()
    msg["From"] = config.sender
    msg["To"] = to_email
    msg["Subject"] = subject
    if reply_to:
        msg["Reply-To"] = reply_to

    msg.set_content(text_body)
    if html_body:
        msg.add_alternative(html_body, subtype="html")
    return msg


def _connect(config: SmtpConfig) -> smtplib.SMTP:
    # SSL wins if both flags are set
    if config.use_ssl:
        return smtplib.SMTP_SSL(config.host, config.port, timeout=30)

    server = smtplib.SMTP(config.host, config.port, timeout=30)
    if config.use_tls:
        server.starttls()
    return server


def send_email(
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str | None = None,
    reply_to: str | None = None,
    config: SmtpConfig | None = None,
) -> None:
    """
    Send one message to a single recipient.

    Raises:
        RuntimeError: SMTP_HOST / SMTP_USERNAME / SMTP_PASSWORD missing.
        smtplib.SMTPException, OSError: connection, login or send failed.
    """
    config = config or SmtpConfig.from_env()
    if not config.is_complete:
        raise RuntimeError(
            "SMTP is not configured. Set SMTP_HOST, SMTP_USERNAME and SMTP_PASSWORD."
        )

    msg = build_message(config, to_email, subject, text_body, html_body, reply_to)

    server = _connect(config)
    try:
        server.login(config.username, config.password)
        server.send_message(msg)
    finally:
        try:
            server.quit()
        except smtplib.SMTPException:
            pass
