"""
Email service for sending transactional emails.

Supports SMTP and console logging modes. Messages are rendered from Jinja2
templates with strings taken from JSON locale files.
"""

import json
import logging
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from functools import lru_cache
from pathlib import Path

import aiosmtplib
from jinja2 import Environment, FileSystemLoader, select_autoescape

from portal_auth.config import get_settings

logger = logging.getLogger("portal_auth")

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"
LOCALES_DIR = TEMPLATES_DIR / "locales"

SUPPORTED_LANGUAGES = ("en", "es", "fr")
DEFAULT_LANGUAGE = "en"

_templates = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
    keep_trailing_newline=True,
)


@dataclass
class RenderedEmail:
    subject: str
    text: str
    html: str


@lru_cache
def _load_locale(language: str) -> dict:
    with open(LOCALES_DIR / f"{language}.json", encoding="utf-8") as f:
        return json.load(f)


def _get_translations(language: str | None, email_type: str, variables: dict) -> dict:
    """Strings for one email type with ``{{name}}`` placeholders filled in."""
    if language not in SUPPORTED_LANGUAGES:
        language = DEFAULT_LANGUAGE

    result = {}
    for key, value in _load_locale(language).get(email_type, {}).items():
        for var_name, var_value in variables.items():
            value = value.replace(f"{{{{{var_name}}}}}", str(var_value))
        result[key] = value
    return result


def render_password_reset_email(language: str | None, first_name: str, reset_link: str) -> RenderedEmail:
    """Render the password reset email, falling back to English for unsupported languages."""
    t = _get_translations(language, "password_reset", {"app_name": get_settings().APP_NAME})
    context = {"t": t, "first_name": first_name, "reset_link": reset_link}
    return RenderedEmail(
        subject=t["subject"],
        text=_templates.get_template("password_reset.txt").render(context),
        html=_templates.get_template("password_reset.html").render(context),
    )


class EmailService:
    """
    Outbound email with two modes.

    Modes:
        - console: Log emails (development)
        - smtp: Send through an SMTP server
    """

    def __init__(
        self,
        mode: str = "console",
        from_email: str = "noreply@example.com",
        smtp_host: str | None = None,
        smtp_port: int = 465,
        smtp_user: str | None = None,
        smtp_password: str | None = None,
    ) -> None:
        self._mode = mode
        self._from_email = from_email
        self._smtp_host = smtp_host
        self._smtp_port = smtp_port
        self._smtp_user = smtp_user
        self._smtp_password = smtp_password

        if self._mode == "smtp" and not self._smtp_host:
            logger.warning("SMTP host not configured, falling back to console mode")
            self._mode = "console"
        elif self._mode not in ("console", "smtp"):
            logger.warning("Unknown EMAIL_MODE %r, falling back to console mode", mode)
            self._mode = "console"

        logger.info("Email service initialized in %s mode", self._mode)

    @property
    def mode(self) -> str:
        return self._mode

    async def send_mail(self, to: str, subject: str, text: str, html: str) -> bool:
        """Deliver one message. Returns False if delivery failed."""
        if self._mode == "console":
            logger.info("EMAIL to=%s subject=%r\n%s", to, subject, text)
            return True

        message = MIMEMultipart("alternative")
        message["From"] = self._from_email
        message["To"] = to
        message["Subject"] = subject
        message.attach(MIMEText(text, "plain", "utf-8"))
        message.attach(MIMEText(html, "html", "utf-8"))

        try:
            await aiosmtplib.send(
                message,
                hostname=self._smtp_host,
                port=self._smtp_port,
                username=self._smtp_user,
                password=self._smtp_password,
                use_tls=self._smtp_port == 465,
                start_tls=self._smtp_port != 465,
            )
        except (aiosmtplib.SMTPException, OSError):
            logger.exception("Failed to send email to %s", to)
            return False

        logger.info("Email sent to %s", to)
        return True


_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    """Get singleton email service instance."""
    global _email_service
    if _email_service is None:
        settings = get_settings()
        _email_service = EmailService(
            mode=settings.EMAIL_MODE,
            from_email=settings.SMTP_FROM_EMAIL,
            smtp_host=settings.SMTP_HOST,
            smtp_port=settings.SMTP_PORT,
            smtp_user=settings.SMTP_USER,
            smtp_password=settings.SMTP_PASSWORD,
        )
    return _email_service
