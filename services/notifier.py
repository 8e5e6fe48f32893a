"""Outbound email transports.

One ``Notifier`` interface with three variants, chosen once at start-up by
``create_notifier``:

- ``ConsoleNotifier`` logs a preview of every message and sends nothing
- ``TestNotifier`` delivers through an SMTP sandbox such as Ethereal
- ``ProviderNotifier`` delivers through the SendGrid v3 HTTP API
"""

from __future__ import annotations

import asyncio
import re
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate, make_msgid
from typing import TYPE_CHECKING, Deque, Optional

import aiosmtplib
import requests

from core import get_logger, NotificationDefaults, NotifierKind
from core.exceptions import ConfigurationError, NotificationFailure

if TYPE_CHECKING:
    from config import Config

logger = get_logger(__name__)


# Ethereal answers DATA with "250 Accepted [STATUS=new MSGID=...]"
ETHEREAL_MSGID_RE = re.compile(r"MSGID=([^\s\]]+)")


@dataclass(frozen=True)
class Receipt:
    """What a transport learned about an accepted message."""
    message_id: Optional[str] = None
    preview_url: Optional[str] = None


@dataclass(frozen=True)
class DeliveryResult:
    recipient: str
    delivered: bool
    service: str
    error: Optional[str] = None
    message_id: Optional[str] = None
    preview_url: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"to": self.recipient, "success": self.delivered, "service": self.service}
        if self.error:
            data["error"] = self.error
        if self.message_id:
            data["messageId"] = self.message_id
        if self.preview_url:
            data["previewUrl"] = self.preview_url
        return data


@dataclass(frozen=True)
class OutgoingMessage:
    to: str
    subject: str
    html: str


class Notifier(ABC):
    """Sends one HTML email to one recipient.

    Subclasses implement ``_deliver`` and raise ``NotificationFailure`` (or
    let a transport exception escape); ``send`` turns every failure into an
    undelivered ``DeliveryResult``.
    """

    kind: NotifierKind = NotifierKind.CONSOLE

    @property
    def service(self) -> str:
        return self.kind.value

    def send(self, to: str, subject: str, html: str) -> DeliveryResult:
        try:
            receipt = self._deliver(OutgoingMessage(to=to, subject=subject, html=html)) or Receipt()
        except NotificationFailure as e:
            logger.error("Error sending email to %s via %s: %s", to, self.service, e.reason)
            return DeliveryResult(recipient=to, delivered=False, service=self.service, error=e.reason)
        except Exception as e:
            logger.error("Error sending email to %s via %s: %s", to, self.service, e, exc_info=True)
            return DeliveryResult(recipient=to, delivered=False, service=self.service, error=str(e))
        return DeliveryResult(
            recipient=to,
            delivered=True,
            service=self.service,
            message_id=receipt.message_id,
            preview_url=receipt.preview_url,
        )

    @abstractmethod
    def _deliver(self, message: OutgoingMessage) -> Optional[Receipt]:
        """Hand one message to the transport."""


class ConsoleNotifier(Notifier):
    """Logs messages instead of sending them; keeps the latest in ``outbox``."""

    kind = NotifierKind.CONSOLE

    def __init__(self, outbox_size: int = NotificationDefaults.CONSOLE_OUTBOX_SIZE) -> None:
        self.outbox: Deque[OutgoingMessage] = deque(maxlen=outbox_size)

    def _deliver(self, message: OutgoingMessage) -> Optional[Receipt]:
        preview = message.html.strip()[:NotificationDefaults.PREVIEW_LENGTH]
        logger.info("[EMAIL PREVIEW] To: %s | Subject: %s | Content: %s...", message.to, message.subject, preview)
        self.outbox.append(message)
        return None


class TestNotifier(Notifier):
    """SMTP delivery to a sandbox account (Ethereal by default).

    Each message opens its own ``aiosmtplib`` connection, driven to
    completion on a private event loop in the calling request thread.
    """

    kind = NotifierKind.TEST
    __test__ = False  # not a pytest test class

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: str = NotificationDefaults.FROM_ADDRESS,
        sender_name: str = NotificationDefaults.FROM_NAME,
        timeout: float = NotificationDefaults.SMTP_TIMEOUT,
        preview_base_url: Optional[str] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.sender_name = sender_name
        self.timeout = timeout
        if preview_base_url is None and host == NotificationDefaults.TEST_SMTP_HOST:
            preview_base_url = NotificationDefaults.ETHEREAL_PREVIEW_URL
        self.preview_base_url = preview_base_url

    def _build_message(self, message: OutgoingMessage) -> MIMEMultipart:
        mime = MIMEMultipart("alternative")
        mime["From"] = formataddr((self.sender_name, self.sender))
        mime["To"] = message.to
        mime["Subject"] = message.subject
        mime["Date"] = formatdate(localtime=True)
        mime["Message-ID"] = make_msgid(domain=self.sender.rpartition("@")[2] or None)
        mime.attach(MIMEText(message.html, "html", "utf-8"))
        return mime

    async def _send_smtp(self, mime: MIMEMultipart) -> tuple:
        smtp = aiosmtplib.SMTP(
            hostname=self.host,
            port=self.port,
            timeout=self.timeout,
            use_tls=self.port == 465,  # Implicit TLS for port 465
            start_tls=False,
        )
        await smtp.connect()
        try:
            if self.port != 465:
                await smtp.starttls()
            await smtp.login(self.username, self.password)
            result = await smtp.send_message(mime)
            await smtp.quit()
            return result
        finally:
            if smtp.is_connected:
                smtp.close()

    def _preview_url(self, server_response: str) -> Optional[str]:
        if not self.preview_base_url:
            return None
        match = ETHEREAL_MSGID_RE.search(server_response or "")
        return f"{self.preview_base_url}/{match.group(1)}" if match else None

    def _deliver(self, message: OutgoingMessage) -> Optional[Receipt]:
        mime = self._build_message(message)
        try:
            refused, server_response = asyncio.run(self._send_smtp(mime))
        except (aiosmtplib.SMTPException, OSError) as e:
            raise NotificationFailure(message.to, f"SMTP error: {e}") from e
        if refused:
            raise NotificationFailure(message.to, f"Recipient refused: {refused}")

        preview_url = self._preview_url(server_response)
        logger.info("Test email sent to %s via %s", message.to, self.host)
        if preview_url:
            logger.info("Preview URL: %s", preview_url)
        return Receipt(message_id=mime["Message-ID"], preview_url=preview_url)


class ProviderNotifier(Notifier):
    """Delivery through the SendGrid v3 mail/send endpoint."""

    kind = NotifierKind.PROVIDER

    def __init__(
        self,
        api_key: str,
        sender: str = NotificationDefaults.FROM_ADDRESS,
        url: str = NotificationDefaults.SENDGRID_URL,
        timeout: float = NotificationDefaults.HTTP_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.sender = sender
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _deliver(self, message: OutgoingMessage) -> Optional[Receipt]:
        payload = {
            "personalizations": [{"to": [{"email": message.to}]}],
            "from": {"email": self.sender},
            "subject": message.subject,
            "content": [{"type": "text/html", "value": message.html}],
        }
        try:
            response = self.session.post(
                self.url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NotificationFailure(message.to, f"HTTP error: {e}") from e
        if response.status_code >= 400:
            raise NotificationFailure(message.to, f"Provider returned {response.status_code}: {response.text[:200]}")
        logger.info("Provider email sent to %s", message.to)
        return Receipt(message_id=response.headers.get("X-Message-Id"))


def create_notifier(config: Config) -> Notifier:
    """Select the email transport for this process.

    ``EMAIL_SERVICE`` wins when set; otherwise a SendGrid key selects the
    provider, SMTP credentials select the sandbox, and the console is the
    fallback.
    """
    kind = config.email_service
    if kind is None:
        if config.sendgrid_api_key:
            kind = NotifierKind.PROVIDER.value
        elif config.smtp_user and config.smtp_pass:
            kind = NotifierKind.TEST.value
        else:
            kind = NotifierKind.CONSOLE.value

    try:
        kind = NotifierKind(kind.lower())
    except ValueError:
        raise ConfigurationError(f"Unknown EMAIL_SERVICE '{kind}'") from None

    if kind is NotifierKind.PROVIDER:
        if not config.sendgrid_api_key:
            raise ConfigurationError("EMAIL_SERVICE=provider requires SENDGRID_API_KEY")
        notifier: Notifier = ProviderNotifier(api_key=config.sendgrid_api_key, sender=config.sendgrid_from_email)
    elif kind is NotifierKind.TEST:
        if not (config.smtp_user and config.smtp_pass):
            raise ConfigurationError("EMAIL_SERVICE=test requires SMTP_USER and SMTP_PASS")
        notifier = TestNotifier(
            host=config.smtp_host,
            port=config.smtp_port,
            username=config.smtp_user,
            password=config.smtp_pass,
            sender=config.email_from,
        )
    else:
        notifier = ConsoleNotifier()
        logger.info("Email service: console logging (no actual emails sent)")

    logger.info("Email service initialized: %s", notifier.service)
    return notifier
