"""Outbound WhatsApp messages through an Evolution API instance."""
import json
from dataclasses import dataclass

import requests

from meusaldo.models.settings import MessagingSettings
from meusaldo.utils.constants import MESSAGE_TIMEOUT_SECONDS, TEST_MESSAGE_TEXT
from meusaldo.utils.logging_setup import get_logger

logger = get_logger(__name__)


@dataclass
class SendResult:
    success: bool
    message: str


class NotificationService:
    def __init__(
        self,
        settings: MessagingSettings,
        session: requests.Session | None = None,
        timeout: float = MESSAGE_TIMEOUT_SECONDS,
    ):
        self._settings = settings
        self._session = session or requests.Session()
        self._timeout = timeout

    @property
    def settings(self) -> MessagingSettings:
        return self._settings

    def send_text(self, number: str, text: str) -> SendResult:
        """POST one text message. Transport and HTTP errors come back as a failed result."""
        if not self._settings.is_configured:
            return SendResult(False, "Messaging API is not configured.")
        if not number:
            return SendResult(False, "No destination phone number.")

        try:
            response = self._session.post(
                self._settings.send_text_url,
                headers={"Content-Type": "application/json", "apikey": self._settings.api_key},
                json={"number": number, "text": text},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.error("Error sending message to %s: %s", number, e)
            return SendResult(
                False,
                "Could not reach the messaging server. Check that the server URL is correct.",
            )

        if response.ok:
            logger.info("Message sent to %s", number)
            return SendResult(True, "Message sent.")

        error_message = self._extract_error(response)
        logger.error("Failed to send message to %s: %s", number, error_message)
        return SendResult(False, f"Failed to send message: {error_message}")

    def send_test_message(self, number: str) -> SendResult:
        return self.send_text(number, TEST_MESSAGE_TEXT)

    @staticmethod
    def _extract_error(response: requests.Response) -> str:
        fallback = f"Error {response.status_code}: {response.reason}"
        try:
            data = response.json()
        except ValueError:
            return fallback
        if not isinstance(data, dict):
            return json.dumps(data)
        if data.get("message"):
            return str(data["message"])
        if data.get("error"):
            return str(data["error"])
        nested = data.get("response")
        if isinstance(nested, dict) and nested.get("message"):
            return str(nested["message"])
        return json.dumps(data)
