"""Outbound applicant notifications over an SMTP relay."""
import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Protocol

from tenacity import (
    Retrying,
    RetryError,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from app.core.config import Settings, settings as default_settings
from app.core.errors import NotificationFailed

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (
    smtplib.SMTPServerDisconnected,
    smtplib.SMTPConnectError,
    ConnectionError,
    TimeoutError,
)


class Notifier(Protocol):
    def send(self, to: str, subject: str, html: str) -> None:
        ...


class SmtpMailer:
    """Sends one HTML message per call from the configured sender address.

    Every message is copied to ``CC_EMAIL_ADDRESS`` when that is set.
    Transient SMTP/socket errors are retried a bounded number of times;
    the final failure is raised as ``NotificationFailed``.
    """

    def __init__(self, config: Settings = default_settings, wait=None):
        self.config = config
        self.wait = wait or wait_exponential(multiplier=1, min=1, max=10)

    @property
    def configured(self) -> bool:
        return bool(self.config.SMTP_HOST and self.config.EMAIL_ADDRESS and self.config.EMAIL_PASSWORD)

    def build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.config.EMAIL_ADDRESS
        msg["To"] = to
        if self.config.CC_EMAIL_ADDRESS:
            msg["Cc"] = self.config.CC_EMAIL_ADDRESS
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html, subtype="html")
        return msg

    def _connect(self) -> smtplib.SMTP:
        cfg = self.config
        if cfg.SMTP_USE_SSL:
            return smtplib.SMTP_SSL(
                cfg.SMTP_HOST, cfg.SMTP_PORT, timeout=cfg.SMTP_TIMEOUT,
                context=ssl.create_default_context(),
            )
        server = smtplib.SMTP(cfg.SMTP_HOST, cfg.SMTP_PORT, timeout=cfg.SMTP_TIMEOUT)
        server.starttls(context=ssl.create_default_context())
        return server

    def _deliver(self, msg: EmailMessage) -> None:
        with self._connect() as server:
            server.login(self.config.EMAIL_ADDRESS, self.config.EMAIL_PASSWORD)
            server.send_message(msg)

    def send(self, to: str, subject: str, html: str) -> None:
        if not self.configured:
            logger.error("Email delivery requested but SMTP credentials are not set")
            raise NotificationFailed("Email delivery is not configured")

        msg = self.build_message(to, subject, html)
        retrying = Retrying(
            stop=stop_after_attempt(max(1, self.config.SMTP_MAX_ATTEMPTS)),
            wait=self.wait,
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            reraise=False,
        )
        try:
            for attempt in retrying:
                with attempt:
                    self._deliver(msg)
        except RetryError as e:
            cause = e.last_attempt.exception()
            logger.error("Sending '%s' to %s failed after retries: %s", subject, to, cause)
            raise NotificationFailed() from cause
        except OSError as e:
            logger.error("Sending '%s' to %s failed: %s", subject, to, e)
            raise NotificationFailed() from e

        logger.info("Sent '%s' to %s", subject, to)
