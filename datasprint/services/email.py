from __future__ import annotations

import json
import logging
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from datasprint.config import settings

LOGGER = logging.getLogger(__name__)

BREVO_SEND_ENDPOINT = "https://api.brevo.com/v3/smtp/email"


class EmailSendError(RuntimeError):
    pass


class EmailDispatcher:
    """Sends plain-text transactional mail through the Brevo HTTP API."""

    def __init__(
        self,
        api_key: str,
        sender: str,
        sender_name: str,
        event_name: str,
        endpoint: str = BREVO_SEND_ENDPOINT,
        timeout: float = 10,
    ) -> None:
        self._api_key = api_key
        self._sender = sender
        self._sender_name = sender_name
        self._event_name = event_name
        self._endpoint = endpoint
        self._timeout = timeout

    def send_email(
        self, to: str, subject: str, text: str, html: Optional[str] = None
    ) -> Optional[str]:
        if not self._api_key:
            raise EmailSendError("Email API key is not configured")
        if not self._sender:
            raise EmailSendError("Email sender is not configured")

        message: dict[str, Any] = {
            "sender": {"email": self._sender, "name": self._sender_name},
            "to": [{"email": to}],
            "subject": subject,
            "textContent": text,
        }
        if html:
            message["htmlContent"] = html

        request = Request(
            self._endpoint,
            data=json.dumps(message).encode("utf-8"),
            headers={
                "api-key": self._api_key,
                "accept": "application/json",
                "content-type": "application/json",
            },
            method="POST",
        )
        try:
            with urlopen(request, timeout=self._timeout) as response:
                body = response.read().decode("utf-8") or "{}"
        except HTTPError as exc:
            error_body = exc.read().decode("utf-8", errors="replace")
            LOGGER.error("Brevo API error (%s): %s", exc.code, error_body)
            raise EmailSendError("Failed to send email") from exc
        except URLError as exc:
            LOGGER.error("Brevo API unreachable: %s", exc.reason)
            raise EmailSendError("Failed to reach email provider") from exc

        message_id = _parse_message_id(body)
        LOGGER.info("Email '%s' sent to %s (message id %s)", subject, to, message_id)
        return message_id

    def send_registration_otp(self, to: str, code: str, ttl_seconds: int) -> None:
        self.send_email(
            to,
            f"Email Verification OTP - {self._event_name}",
            f"Your verification code is: {code}. "
            f"Valid for {_describe_ttl(ttl_seconds)}.",
        )

    def send_password_reset_otp(self, to: str, code: str, ttl_seconds: int) -> None:
        self.send_email(
            to,
            f"Password Reset OTP - {self._event_name}",
            f"Your OTP for password reset is: {code}. "
            f"Valid for {_describe_ttl(ttl_seconds)}.\n\n"
            "If you did not request this, you can ignore this email.",
        )

    def send_password_change_otp(self, to: str, code: str, ttl_seconds: int) -> None:
        self.send_email(
            to,
            f"Security Verification Code - {self._event_name}",
            f"Your verification code is: {code}. "
            f"Valid for {_describe_ttl(ttl_seconds)}.",
        )

    def send_registration_confirmation(self, to: str, team_name: str) -> None:
        self.send_email(
            to,
            f"Registration Confirmed - {self._event_name}",
            f"Welcome Team {team_name}! "
            f"Your registration for {self._event_name} is confirmed.",
        )


def _describe_ttl(ttl_seconds: int) -> str:
    minutes = max(1, ttl_seconds // 60)
    return f"{minutes} minute{'s' if minutes != 1 else ''}"


def _parse_message_id(body: str) -> Optional[str]:
    try:
        return json.loads(body).get("messageId")
    except (ValueError, AttributeError):
        return None


email_dispatcher = EmailDispatcher(
    api_key=settings.brevo_api_key,
    sender=settings.email_sender,
    sender_name=settings.email_sender_name,
    event_name=settings.event_name,
)
