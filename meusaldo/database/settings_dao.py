import json
from dataclasses import asdict, fields
from meusaldo.database.db_manager import DatabaseManager
from meusaldo.models.settings import MessagingSettings, ReminderSettings
from meusaldo.utils.constants import DEFAULT_REMINDER_DAYS_BEFORE
from meusaldo.utils.logging_setup import get_logger

logger = get_logger(__name__)

REMINDERS_KEY = "reminders"
MESSAGING_KEY = "messaging"
LAST_DUE_DATE_CHECK_KEY = "last_due_date_check"


class SettingsDAO:
    """Persists per-user reminder and messaging settings as JSON in app_settings."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    def _load(self, key: str) -> dict:
        raw = self._db.get_setting(key, "")
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring unreadable %s settings", key)
            return {}
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _known(cls, data: dict) -> dict:
        names = {f.name for f in fields(cls)}
        return {k: v for k, v in data.items() if k in names}

    def get_reminder_settings(self) -> ReminderSettings:
        settings = ReminderSettings(**self._known(ReminderSettings, self._load(REMINDERS_KEY)))
        try:
            settings.days_before = int(settings.days_before)
        except (TypeError, ValueError):
            settings.days_before = DEFAULT_REMINDER_DAYS_BEFORE
        return settings

    def set_reminder_settings(self, settings: ReminderSettings) -> None:
        data = asdict(settings)
        data["days_before"] = int(settings.days_before)
        self._db.set_setting(REMINDERS_KEY, json.dumps(data))

    def get_messaging_settings(self) -> MessagingSettings:
        return MessagingSettings(**self._known(MessagingSettings, self._load(MESSAGING_KEY)))

    def set_messaging_settings(self, settings: MessagingSettings) -> None:
        """Merge the given settings over what is stored."""
        data = self._load(MESSAGING_KEY)
        data.update(asdict(settings))
        self._db.set_setting(MESSAGING_KEY, json.dumps(data))

    def get_last_due_date_check(self) -> str:
        return self._db.get_setting(LAST_DUE_DATE_CHECK_KEY, "")

    def set_last_due_date_check(self, date_str: str) -> None:
        self._db.set_setting(LAST_DUE_DATE_CHECK_KEY, date_str)
