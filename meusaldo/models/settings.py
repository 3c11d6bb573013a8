from dataclasses import dataclass

from meusaldo.utils.constants import DEFAULT_REMINDER_DAYS_BEFORE, DEFAULT_REMINDER_TEMPLATE


@dataclass
class ReminderSettings:
    is_enabled: bool = False
    days_before: int = DEFAULT_REMINDER_DAYS_BEFORE
    message_template: str = DEFAULT_REMINDER_TEMPLATE


@dataclass
class MessagingSettings:
    """Connection details for the Evolution API WhatsApp gateway."""
    server_url: str = ""
    instance_name: str = ""
    api_key: str = ""
    notification_phone_number: str = ""
    pix_key: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.server_url and self.instance_name and self.api_key)

    @property
    def send_text_url(self) -> str:
        return f"{self.server_url.rstrip('/')}/message/sendText/{self.instance_name}"
