import pytest

from meusaldo.models.settings import MessagingSettings, ReminderSettings
from meusaldo.services.notification_service import SendResult
from meusaldo.services.reminder_service import (
    ReminderService,
    build_due_summary,
    creditor_reminders_due,
    debits_due_tomorrow,
    render_payment_reminder,
)


class FakeNotifier:
    def __init__(self, settings=None):
        self.settings = settings or MessagingSettings(
            server_url="http://evo.local",
            instance_name="main",
            api_key="secret",
            notification_phone_number="5511900000000",
            pix_key="pix@example.com",
        )
        self.sent = []

    def send_text(self, number, text):
        self.sent.append((number, text))
        return SendResult(True, "Message sent.")


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def reminders(services, notifier):
    return ReminderService(services.tx_dao, services.settings_dao, notifier)


def test_only_unpaid_debits_due_tomorrow_are_selected(make_tx):
    hit = make_tx(description="hit", date="2024-03-01", due_date="2024-03-11")
    txs = [
        hit,
        make_tx(description="paid", date="2024-03-11", is_paid=True),
        make_tx(description="credit", date="2024-03-11", type="CREDIT"),
        make_tx(description="today", date="2024-03-10"),
        make_tx(description="moved", date="2024-03-11", due_date="2024-03-20"),
    ]
    assert debits_due_tomorrow(txs, "2024-03-10") == [hit]


def test_tomorrow_crosses_month_end(make_tx):
    tx = make_tx(date="2024-03-01")
    assert debits_due_tomorrow([tx], "2024-02-29") == [tx]


def test_creditor_reminders_respect_lead_time_and_phone(make_tx):
    settings = ReminderSettings(is_enabled=True, days_before=3)
    hit = make_tx(type="CREDIT", date="2024-05-13", creditor_name="Ana", creditor_phone="5511")
    txs = [
        hit,
        make_tx(type="CREDIT", date="2024-05-13", creditor_name="Bia"),
        make_tx(type="CREDIT", date="2024-05-11", creditor_phone="5522"),
        make_tx(type="CREDIT", date="2024-05-13", creditor_phone="5533", is_paid=True),
    ]
    assert creditor_reminders_due(txs, "2024-05-10", settings) == [hit]


def test_disabled_creditor_reminders_select_nothing(make_tx):
    tx = make_tx(type="CREDIT", date="2024-05-11", creditor_phone="5511")
    assert creditor_reminders_due([tx], "2024-05-10", ReminderSettings(is_enabled=False)) == []


def test_render_payment_reminder_fills_placeholders(make_tx):
    tx = make_tx(amount=1234.5, creditor_name="Ana")
    text = render_payment_reminder("Oi {nome}, {valor}. PIX: {pix}", tx, "chave-1")
    assert text == "Oi Ana, R$ 1.234,50. PIX: chave-1"


def test_render_payment_reminder_without_pix_key(make_tx):
    text = render_payment_reminder("{pix}", make_tx(creditor_name="Ana"), "")
    assert text == "Não informada"


def test_due_summary_lists_each_debit(make_tx):
    text = build_due_summary([make_tx(description="Luz", amount=80.0), make_tx(description="Água")])
    assert "2 débito(s)" in text
    assert "*Luz*" in text
    assert "R$ 80,00" in text
    assert "*Água*" in text


def test_daily_check_sends_summary_and_creditor_reminders(services, reminders, notifier, make_tx):
    services.settings_dao.set_reminder_settings(
        ReminderSettings(is_enabled=True, days_before=2, message_template="{nome}: {valor} ({pix})")
    )
    services.transactions.create(make_tx(description="Rent", date="2024-06-11", amount=900.0))
    services.transactions.create(
        make_tx(type="CREDIT", date="2024-06-12", amount=50.0,
                creditor_name="Ana", creditor_phone="5511988887777")
    )

    result = reminders.run_daily_check("2024-06-10")

    assert result.ran is True
    assert result.user_summary.success is True
    assert [r.success for r in result.creditor_results] == [True]
    numbers = [number for number, _ in notifier.sent]
    assert numbers == ["5511900000000", "5511988887777"]
    assert notifier.sent[1][1] == "Ana: R$ 50,00 (pix@example.com)"
    assert services.settings_dao.get_last_due_date_check() == "2024-06-10"


def test_daily_check_runs_once_per_day(services, reminders, notifier, make_tx):
    services.transactions.create(make_tx(date="2024-06-11"))

    first = reminders.run_daily_check("2024-06-10")
    second = reminders.run_daily_check("2024-06-10")

    assert first.ran is True
    assert second.ran is False
    assert len(notifier.sent) == 1


def test_forced_check_runs_again(services, reminders, notifier, make_tx):
    services.transactions.create(make_tx(date="2024-06-11"))
    reminders.run_daily_check("2024-06-10")
    reminders.run_daily_check("2024-06-10", force=True)
    assert len(notifier.sent) == 2


def test_next_day_runs_again(services, reminders):
    reminders.run_daily_check("2024-06-10")
    assert reminders.run_daily_check("2024-06-11").ran is True


def test_nothing_due_sends_nothing_but_marks_day(services, reminders, notifier):
    result = reminders.run_daily_check("2024-06-10")
    assert result.user_summary is None
    assert result.creditor_results == []
    assert notifier.sent == []
    assert services.settings_dao.get_last_due_date_check() == "2024-06-10"


def test_summary_skipped_without_notification_number(services, make_tx):
    notifier = FakeNotifier(MessagingSettings(server_url="http://x", instance_name="i", api_key="k"))
    reminders = ReminderService(services.tx_dao, services.settings_dao, notifier)
    services.transactions.create(make_tx(date="2024-06-11"))

    result = reminders.run_daily_check("2024-06-10")

    assert result.user_summary is None
    assert notifier.sent == []
