"""Notification transports: Slack, Teams, Telegram, generic webhook and email."""

from __future__ import annotations

import logging
import random
import smtplib
import ssl
import time
from email.message import EmailMessage
from typing import Any, Callable, Protocol

import requests

from argazer.config.settings import Settings
from argazer.core.backends import REQUEST_TIMEOUT, new_session
from argazer.core.errors import NotificationError
from argazer.models import NotificationChannel
from argazer.models.result import ApplicationCheckResult
from argazer.notification.messages import build_messages, notification_subject

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
INITIAL_RETRY_DELAY = 1.0


class Notifier(Protocol):
    def send(self, subject: str, message: str) -> None:
        ...


class HttpNotifier:
    """POSTs JSON payloads with retries on network errors, 5xx and 429."""

    def __init__(
        self,
        webhook_url: str,
        session: requests.Session | None = None,
        max_retries: int = MAX_RETRIES,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.webhook_url = webhook_url
        self.session = session or new_session()
        self.max_retries = max_retries
        self._sleep = sleep

    def _backoff(self, attempt: int) -> float:
        delay = INITIAL_RETRY_DELAY * (2 ** (attempt - 1))
        return delay + delay * 0.2 * random.random()

    def send_json(self, payload: dict[str, Any]) -> None:
        last_error = ""
        for attempt in range(self.max_retries):
            if attempt:
                delay = self._backoff(attempt)
                logger.debug("Retrying notification (attempt %d) after %.1fs", attempt + 1, delay)
                self._sleep(delay)

            try:
                response = self.session.post(self.webhook_url, json=payload, timeout=REQUEST_TIMEOUT)
            except requests.RequestException as exc:
                last_error = f"failed to send request: {exc}"
                logger.warning("Notification request failed (attempt %d): %s", attempt + 1, exc)
                continue

            if 200 <= response.status_code < 300:
                if attempt:
                    logger.info("Notification succeeded after %d attempts", attempt + 1)
                return
            if response.status_code >= 500 or response.status_code == 429:
                last_error = f"server returned retryable status {response.status_code}"
                logger.warning(
                    "Notification endpoint returned %s (attempt %d)", response.status_code, attempt + 1
                )
                continue
            raise NotificationError(f"failed to send message: status {response.status_code}")

        raise NotificationError(f"failed after {self.max_retries} attempts: {last_error}")


class SlackNotifier(HttpNotifier):
    def send(self, subject: str, message: str) -> None:
        text = f"*{subject}*\n\n{message}" if subject else message
        self.send_json({"text": text})
        logger.info("Sent Slack notification")


class TeamsNotifier(HttpNotifier):
    def send(self, subject: str, message: str) -> None:
        self.send_json({
            "@type": "MessageCard",
            "@context": "https://schema.org/extensions",
            "summary": subject,
            "themeColor": "0078D7",
            "title": subject,
            "text": message,
        })
        logger.info("Sent Microsoft Teams notification")


class WebhookNotifier(HttpNotifier):
    def send(self, subject: str, message: str) -> None:
        self.send_json({"subject": subject, "message": message})
        logger.info("Sent webhook notification")


class TelegramNotifier(HttpNotifier):
    def __init__(self, webhook_url: str, chat_id: str, **kwargs):
        kwargs.setdefault("max_retries", 1)
        super().__init__(webhook_url, **kwargs)
        self.chat_id = chat_id

    def send(self, subject: str, message: str) -> None:
        text = f"*{subject}*\n\n{message}" if subject else message
        self.send_json({"chat_id": self.chat_id, "text": text, "parse_mode": "Markdown"})
        logger.info("Sent Telegram notification to chat %s", self.chat_id)


class EmailNotifier:
    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        username: str,
        password: str,
        sender: str,
        recipients: list[str],
        use_tls: bool = True,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.username = username
        self.password = password
        self.sender = sender
        self.recipients = recipients
        self.use_tls = use_tls

    def build_message(self, subject: str, message: str) -> EmailMessage:
        email = EmailMessage()
        email["From"] = self.sender
        email["To"] = ", ".join(self.recipients)
        email["Subject"] = subject
        email.set_content(message)
        return email

    def send(self, subject: str, message: str) -> None:
        email = self.build_message(subject, message)
        logger.debug("Sending email via %s:%s to %s", self.smtp_host, self.smtp_port, self.recipients)
        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=REQUEST_TIMEOUT) as smtp:
                if self.use_tls:
                    smtp.starttls(context=ssl.create_default_context())
                if self.username and self.password:
                    smtp.login(self.username, self.password)
                smtp.send_message(email)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f"failed to send email: {exc}") from exc
        logger.info("Sent email notification to %s", ", ".join(self.recipients))


def create_notifier(settings: Settings) -> Notifier | None:
    channel = settings.channel
    if channel is None:
        return None
    if channel is NotificationChannel.TELEGRAM:
        return TelegramNotifier(settings.telegram_webhook, settings.telegram_chat_id)
    if channel is NotificationChannel.EMAIL:
        return EmailNotifier(
            settings.email_smtp_host,
            settings.email_smtp_port,
            settings.email_smtp_username,
            settings.email_smtp_password,
            settings.email_from,
            settings.email_to,
            settings.email_use_tls,
        )
    if channel is NotificationChannel.SLACK:
        return SlackNotifier(settings.slack_webhook)
    if channel is NotificationChannel.TEAMS:
        return TeamsNotifier(settings.teams_webhook)
    return WebhookNotifier(settings.webhook_url)


def send_notifications(notifier: Notifier, results: list[ApplicationCheckResult]) -> int:
    """Send one notification per message chunk; returns the number sent."""
    updates = [r for r in results if r.has_update and not r.is_sentinel]
    if not updates:
        logger.info("No updates available, skipping notification")
        return 0

    messages = build_messages(updates)
    logger.info("Sending %d notification message(s)", len(messages))
    for i, message in enumerate(messages, 1):
        subject = notification_subject(i, len(messages), len(updates))
        try:
            notifier.send(subject, message)
        except NotificationError as exc:
            raise NotificationError(f"failed to send notification {i}/{len(messages)}: {exc}") from exc
    return len(messages)
