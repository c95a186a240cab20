# orderdesk/core/email_client.py
"""
Outgoing email over SMTP.

Configuration comes from the environment (or .env loaded by the process
manager) and is read on every send, so a restart is not needed after
changing it:

    SMTP_HOST=smtp.example.com
    SMTP_PORT=587
    SMTP_USERNAME=pedidos@example.com
    SMTP_PASSWORD=<app password>
    SMTP_FROM_EMAIL=pedidos@example.com     # defaults to SMTP_USERNAME
    SMTP_FROM_NAME=OrderDesk
    SMTP_USE_TLS=true                       # STARTTLS, usually port 587
    SMTP_USE_SSL=false                      # implicit TLS, usually port 465
"""
import os
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage

TRUTHY = {"1", "true", "yes", "y"}


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

    @property
    def sender(self) -> str:
        if self.from_email:
            return f"{self.from_name} <{self.from_email}>"
        return self.username or ""


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in TRUTHY


def load_config() -> SmtpConfig:
    username = os.getenv("SMTP_USERNAME")
    return SmtpConfig(
        host=os.getenv("SMTP_HOST"),
        port=int(os.getenv("SMTP_PORT", "587")),
        username=username,
        password=os.getenv("SMTP_PASSWORD"),
        from_email=os.getenv("SMTP_FROM_EMAIL", username or ""),
        from_name=os.getenv("SMTP_FROM_NAME", "OrderDesk"),
        use_tls=_env_flag("SMTP_USE_TLS", True),
        use_ssl=_env_flag("SMTP_USE_SSL", False),
    )


def is_configured() -> bool:
    config = load_config()
    return bool(config.host and config.username and config.password)


def _connect(config: SmtpConfig) -> smtplib.SMTP:
    if config.use_ssl:
        return smtplib.SMTP_SSL(config.host, config.port, timeout=30)

    server = smtplib.SMTP(config.host, config.port, timeout=30)
    if config.use_tls:
        server.starttls()
    return server


def send_email(
    to_emails: list[str],
    subject: str,
    text_body: str,
    html_body: str | None = None,
) -> None:
    """
    Send one message to all `to_emails`.

    Raises:
        RuntimeError: SMTP settings are incomplete.
        smtplib.SMTPException / OSError: connection or delivery failed.
    """
    config = load_config()
    if not (config.host and config.username and config.password):
        raise RuntimeError("SMTP_HOST, SMTP_USERNAME and SMTP_PASSWORD must be set")
    if not to_emails:
        raise ValueError("to_emails cannot be empty")

    msg = EmailMessage()
    msg["From"] = config.sender
    msg["To"] = ", ".join(to_emails)
    msg["Subject"] = subject
    msg.set_content(text_body)
    if html_body:
        msg.add_alternative(html_body, subtype="html")

    server = _connect(config)
    try:
        server.login(config.username, config.password)
        server.send_message(msg)
    finally:
        try:
            server.quit()
        except smtplib.SMTPException:
            # Connection is being torn down anyway.
            pass
