from dataclasses import dataclass, field
from typing import Iterable
from meusaldo.database.settings_dao import SettingsDAO
from meusaldo.database.transaction_dao import TransactionDAO
from meusaldo.models.settings import ReminderSettings
from meusaldo.models.transaction import Transaction
from meusaldo.services.notification_service import NotificationService, SendResult
from meusaldo.services.report_service import effective_date
from meusaldo.utils.constants import CREDIT, DEBIT, PIX_KEY_FALLBACK
from meusaldo.utils.currency import format_currency
from meusaldo.utils.date_helpers import add_days_str, today_str
from meusaldo.utils.logging_setup import get_logger

logger = get_logger(__name__)


def due_on(
    transactions: Iterable[Transaction], type_: str, target_date: str
) -> list[Transaction]:
    """Unpaid transactions of type_ whose effective date is exactly target_date."""
    return [
        t for t in transactions
        if t.type == type_ and not t.is_paid and effective_date(t) == target_date
    ]


def debits_due_tomorrow(transactions: Iterable[Transaction], today: str) -> list[Transaction]:
    return due_on(transactions, DEBIT, add_days_str(today, 1))


def creditor_reminders_due(
    transactions: Iterable[Transaction], today: str, settings: ReminderSettings
) -> list[Transaction]:
    """Credits owed to us that fall due `days_before` days from today and have a phone."""
    if not settings.is_enabled:
        return []
    days_before = int(settings.days_before or 1)
    return [
        t for t in due_on(transactions, CREDIT, add_days_str(today, days_before))
        if t.creditor_phone
    ]


def build_due_summary(transactions: list[Transaction]) -> str:
    text = (
        "*Lembrete de Vencimento!*\n\n"
        f"Você tem {len(transactions)} débito(s) com vencimento amanhã:\n"
    )
    for t in transactions:
        text += f"\n- *{t.description}*"
        text += "\n  Vencimento: amanhã"
        text += f"\n  Valor: {format_currency(t.amount)}\n"
    return text


def render_payment_reminder(template: str, tx: Transaction, pix_key: str = "") -> str:
    """Fill {nome}, {valor} and {pix} in a reminder template."""
    return (
        template
        .replace("{nome}", tx.creditor_name or "")
        .replace("{valor}", format_currency(tx.amount))
        .replace("{pix}", pix_key or PIX_KEY_FALLBACK)
    )


@dataclass
class DueDateCheckResult:
    ran: bool
    date: str
    user_summary: SendResult | None = None
    creditor_results: list[SendResult] = field(default_factory=list)


class ReminderService:
    def __init__(
        self,
        tx_dao: TransactionDAO,
        settings_dao: SettingsDAO,
        notifier: NotificationService,
    ):
        self._tx_dao = tx_dao
        self._settings_dao = settings_dao
        self._notifier = notifier

    def send_due_summary(self, transactions: list[Transaction]) -> SendResult:
        number = self._notifier.settings.notification_phone_number
        if not number:
            return SendResult(False, "No notification phone number configured.")
        return self._notifier.send_text(number, build_due_summary(transactions))

    def send_payment_reminder(self, tx: Transaction, settings: ReminderSettings) -> SendResult:
        if not tx.creditor_phone or not tx.creditor_name:
            logger.info("Skipping payment reminder for %s: creditor data incomplete", tx.description)
            return SendResult(False, "Creditor name or phone missing.")
        text = render_payment_reminder(
            settings.message_template, tx, self._notifier.settings.pix_key
        )
        return self._notifier.send_text(tx.creditor_phone, text)

    def run_daily_check(self, today: str | None = None, force: bool = False) -> DueDateCheckResult:
        """Send today's due-date reminders, at most once per calendar day."""
        ref = today or today_str()
        if not force and self._settings_dao.get_last_due_date_check() == ref:
            logger.info("Due date check already performed for %s", ref)
            return DueDateCheckResult(ran=False, date=ref)

        transactions = self._tx_dao.get_all()
        result = DueDateCheckResult(ran=True, date=ref)

        debits = debits_due_tomorrow(transactions, ref)
        if debits and self._notifier.settings.notification_phone_number:
            logger.info("Sending user reminder for %d debit(s) due tomorrow", len(debits))
            result.user_summary = self.send_due_summary(debits)

        settings = self._settings_dao.get_reminder_settings()
        for tx in creditor_reminders_due(transactions, ref, settings):
            result.creditor_results.append(self.send_payment_reminder(tx, settings))

        self._settings_dao.set_last_due_date_check(ref)
        return result
