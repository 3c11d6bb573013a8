"""Command-line entry point: wires storage and services, then dispatches commands."""
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape

from meusaldo.database.db_manager import DatabaseManager
from meusaldo.database.account_dao import AccountDAO
from meusaldo.database.category_dao import CategoryDAO
from meusaldo.database.settings_dao import SettingsDAO
from meusaldo.database.transaction_dao import TransactionDAO

from meusaldo.services.account_service import AccountService
from meusaldo.services.category_service import CategoryService
from meusaldo.services.data_service import DataService
from meusaldo.services.notification_service import NotificationService
from meusaldo.services.recurring_service import RecurringService
from meusaldo.services.reminder_service import ReminderService
from meusaldo.services.report_service import ReportService
from meusaldo.services.transaction_service import TransactionService

from meusaldo.models.transaction import Transaction
from meusaldo.ui.views import render_dashboard, render_report, transactions_table
from meusaldo.utils.app_config import get_db_folder, get_log_level, set_db_folder
from meusaldo.utils.constants import APP_NAME, DEBIT, DEFAULT_USER, TRANSACTION_TYPES
from meusaldo.utils.date_helpers import split_date, today_str
from meusaldo.utils.logging_setup import configure_logging, get_logger

logger = get_logger(__name__)

app = typer.Typer(name="meusaldo", help=f"{APP_NAME}: personal finance tracker", no_args_is_help=True)
console = Console()


@dataclass
class Services:
    db: DatabaseManager
    accounts: AccountService
    categories: CategoryService
    transactions: TransactionService
    recurring: RecurringService
    reports: ReportService
    reminders: ReminderService
    notifier: NotificationService
    data: DataService
    tx_dao: TransactionDAO
    settings_dao: SettingsDAO


def build_services(db: DatabaseManager) -> Services:
    # ── DAOs ─────────────────────────────────────────────────────────────────
    account_dao = AccountDAO(db)
    category_dao = CategoryDAO(db)
    tx_dao = TransactionDAO(db)
    settings_dao = SettingsDAO(db)

    # ── Services ─────────────────────────────────────────────────────────────
    recurring_svc = RecurringService(tx_dao)
    notifier = NotificationService(settings_dao.get_messaging_settings())
    return Services(
        db=db,
        accounts=AccountService(account_dao, tx_dao),
        categories=CategoryService(category_dao, tx_dao),
        transactions=TransactionService(tx_dao, recurring_svc),
        recurring=recurring_svc,
        reports=ReportService(tx_dao, account_dao, category_dao),
        reminders=ReminderService(tx_dao, settings_dao, notifier),
        notifier=notifier,
        data=DataService(account_dao, category_dao, tx_dao),
        tx_dao=tx_dao,
        settings_dao=settings_dao,
    )


# Commands that only touch the bootstrap config and never open a database
_NO_DB_COMMANDS = {"set-db-folder"}


def _services(ctx: typer.Context) -> Services:
    return ctx.obj


def _fail(message: str):
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(1)


@contextmanager
def _reported_errors():
    """Turn validation and storage errors into a failed command."""
    try:
        yield
    except ValueError as e:
        _fail(str(e))
    except sqlite3.Error as e:
        logger.error("Storage error: %s", e)
        _fail(f"Storage error: {e}")


def _year_month(date_str: str) -> tuple[int, int]:
    parts = split_date(date_str)
    if parts is None:
        _fail(f"Invalid date: {date_str}")
    return parts[0], parts[1]


@app.callback()
def main(
    ctx: typer.Context,
    user: Annotated[str, typer.Option(envvar="MEUSALDO_USER", help="Owner of the data set")] = DEFAULT_USER,
    db_folder: Annotated[Optional[str], typer.Option(help="Folder holding the database files")] = None,
    log_level: Annotated[Optional[str], typer.Option(help="DEBUG, INFO, WARNING...")] = None,
):
    configure_logging(log_level or get_log_level())
    if ctx.invoked_subcommand in _NO_DB_COMMANDS:
        return
    with _reported_errors():
        db = DatabaseManager.open_for_user(user, db_folder=db_folder or get_db_folder())
    ctx.obj = build_services(db)
    ctx.call_on_close(db.close)


# ── Reports ──────────────────────────────────────────────────────────────────

@app.command()
def dashboard(
    ctx: typer.Context,
    as_of: Annotated[Optional[str], typer.Option(help="Reference date YYYY-MM-DD")] = None,
    limit: Annotated[int, typer.Option(help="Recent transactions to show")] = 5,
):
    """Balance, this month's totals and the latest transactions."""
    ref = as_of or today_str()
    year, month = _year_month(ref)
    with _reported_errors():
        data = _services(ctx).reports.get_dashboard(ref, limit)
    render_dashboard(console, data, year, month)


@app.command()
def report(
    ctx: typer.Context,
    year: Annotated[int, typer.Argument()],
    month: Annotated[int, typer.Argument(min=1, max=12)],
):
    """Income, expenses and category breakdown for one month."""
    with _reported_errors():
        data = _services(ctx).reports.get_monthly_report(year, month)
    render_report(console, data, year, month)


# ── Transactions ─────────────────────────────────────────────────────────────

@app.command("list")
def list_transactions(
    ctx: typer.Context,
    year: Annotated[int, typer.Argument()],
    month: Annotated[int, typer.Argument(min=1, max=12)],
    type_: Annotated[str, typer.Option("--type", help="all, DEBIT or CREDIT")] = "all",
):
    """Transactions of one month, newest first."""
    with _reported_errors():
        txs = _services(ctx).transactions.get_for_month(year, month, type_)
    console.print(transactions_table(txs, title=f"{year:04d}-{month:02d}"))


@app.command()
def add(
    ctx: typer.Context,
    description: Annotated[str, typer.Argument()],
    amount: Annotated[float, typer.Argument()],
    account: Annotated[str, typer.Option(help="Account id")],
    category: Annotated[str, typer.Option(help="Category id")],
    date: Annotated[Optional[str], typer.Option(help="YYYY-MM-DD, defaults to today")] = None,
    due_date: Annotated[Optional[str], typer.Option(help="YYYY-MM-DD")] = None,
    type_: Annotated[str, typer.Option("--type", help="DEBIT or CREDIT")] = DEBIT,
    subcategory: Annotated[Optional[str], typer.Option(help="Subcategory id")] = None,
    paid: Annotated[bool, typer.Option(help="Already settled")] = False,
    installments: Annotated[Optional[int], typer.Option(help="Create a monthly series of N installments")] = None,
    creditor_name: Annotated[Optional[str], typer.Option()] = None,
    creditor_phone: Annotated[Optional[str], typer.Option()] = None,
):
    """Add a transaction, or a monthly installment series with --installments."""
    if type_ not in TRANSACTION_TYPES:
        _fail(f"Invalid type: {type_}")
    tx = Transaction(
        description=description,
        amount=amount,
        date=date or today_str(),
        due_date=due_date,
        type=type_,
        account_id=account,
        category_id=category,
        subcategory_id=subcategory,
        is_paid=paid,
        is_recurring=installments is not None,
        installments=installments,
        creditor_name=creditor_name,
        creditor_phone=creditor_phone,
    )
    with _reported_errors():
        created = _services(ctx).transactions.create(tx)
    console.print(transactions_table(created, title=f"Created {len(created)} transaction(s)"))


@app.command()
def paid(
    ctx: typer.Context,
    tx_id: Annotated[str, typer.Argument()],
    undo: Annotated[bool, typer.Option(help="Mark as unpaid instead")] = False,
):
    """Mark a transaction as paid (or unpaid)."""
    with _reported_errors():
        _services(ctx).transactions.set_paid(tx_id, not undo)
    console.print("Updated.")


@app.command()
def delete(ctx: typer.Context, tx_id: Annotated[str, typer.Argument()]):
    """Delete a transaction. Installments go with their whole series."""
    with _reported_errors():
        removed = _services(ctx).transactions.delete(tx_id)
    console.print(f"Removed {removed} transaction(s).")


@app.command("delete-month")
def delete_month(
    ctx: typer.Context,
    year: Annotated[int, typer.Argument()],
    month: Annotated[int, typer.Argument(min=1, max=12)],
    yes: Annotated[bool, typer.Option("--yes", help="Skip confirmation")] = False,
):
    """Delete every transaction whose effective date is in the given month."""
    if not yes:
        typer.confirm(f"Delete all transactions of {year:04d}-{month:02d}?", abort=True)
    with _reported_errors():
        removed = _services(ctx).transactions.delete_by_month(year, month)
    console.print(f"Removed {removed} transaction(s).")


@app.command()
def reset(
    ctx: typer.Context,
    yes: Annotated[bool, typer.Option("--yes", help="Skip confirmation")] = False,
):
    """Remove all transactions. Accounts and categories are kept."""
    if not yes:
        typer.confirm("Remove ALL transactions?", abort=True)
    with _reported_errors():
        removed = _services(ctx).transactions.reset()
    console.print(f"Removed {removed} transaction(s).")


# ── Accounts & categories ────────────────────────────────────────────────────

@app.command("add-account")
def add_account(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument()],
    type_: Annotated[str, typer.Option("--type", help="checking, savings, credit_card or wallet")] = "checking",
    initial_balance: Annotated[float, typer.Option()] = 0.0,
):
    with _reported_errors():
        account = _services(ctx).accounts.create(name, type_, initial_balance)
    console.print(f"Account {escape(account.name)} created: {account.id}")


@app.command("add-category")
def add_category(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument()],
    type_: Annotated[str, typer.Option("--type", help="DEBIT or CREDIT")] = DEBIT,
):
    with _reported_errors():
        category = _services(ctx).categories.create(name, type_)
    console.print(f"Category {escape(category.name)} created: {category.id}")


@app.command("add-subcategory")
def add_subcategory(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument()],
    category_id: Annotated[str, typer.Argument()],
):
    with _reported_errors():
        sub = _services(ctx).categories.create_subcategory(name, category_id)
    console.print(f"Subcategory {escape(sub.name)} created: {sub.id}")


# ── Data & notifications ─────────────────────────────────────────────────────

@app.command()
def export(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="File or directory")] = ".",
):
    """Write every transaction to a CSV backup."""
    with _reported_errors():
        try:
            written = _services(ctx).data.export_csv(path)
        except OSError as e:
            _fail(f"Could not write {path}: {e.strerror or e}")
    console.print(f"Exported to {escape(written)}")


@app.command("set-db-folder")
def set_db_folder_cmd(
    path: Annotated[Optional[str], typer.Argument(help="Folder for database files; omit to use the current directory")] = None,
):
    """Remember where database files live (stored in ~/.meusaldo/config.json)."""
    set_db_folder(path)
    console.print(f"Database folder: {escape(path or 'current directory')}")


@app.command("configure-messaging")
def configure_messaging(
    ctx: typer.Context,
    server_url: Annotated[Optional[str], typer.Option()] = None,
    instance_name: Annotated[Optional[str], typer.Option()] = None,
    api_key: Annotated[Optional[str], typer.Option(envvar="MEUSALDO_API_KEY")] = None,
    notification_phone: Annotated[Optional[str], typer.Option(help="Where due-date summaries go")] = None,
    pix_key: Annotated[Optional[str], typer.Option()] = None,
):
    """Update the messaging API settings; omitted options keep their value."""
    settings_dao = _services(ctx).settings_dao
    updates = {
        "server_url": server_url,
        "instance_name": instance_name,
        "api_key": api_key,
        "notification_phone_number": notification_phone,
        "pix_key": pix_key,
    }
    with _reported_errors():
        settings = settings_dao.get_messaging_settings()
        for name, value in updates.items():
            if value is not None:
                setattr(settings, name, value.strip())
        settings_dao.set_messaging_settings(settings)
    console.print("Messaging settings saved.")


@app.command("configure-reminders")
def configure_reminders(
    ctx: typer.Context,
    enabled: Annotated[Optional[bool], typer.Option("--enabled/--disabled")] = None,
    days_before: Annotated[Optional[int], typer.Option(min=1)] = None,
    template: Annotated[Optional[str], typer.Option(help="Placeholders: {nome}, {valor}, {pix}")] = None,
):
    """Update creditor payment-reminder settings."""
    settings_dao = _services(ctx).settings_dao
    with _reported_errors():
        settings = settings_dao.get_reminder_settings()
        if enabled is not None:
            settings.is_enabled = enabled
        if days_before is not None:
            settings.days_before = days_before
        if template is not None:
            settings.message_template = template
        settings_dao.set_reminder_settings(settings)
    console.print("Reminder settings saved.")


@app.command()
def remind(
    ctx: typer.Context,
    today: Annotated[Optional[str], typer.Option(help="Reference date YYYY-MM-DD")] = None,
    force: Annotated[bool, typer.Option(help="Run even if already done today")] = False,
):
    """Send due-date reminders (once per day)."""
    with _reported_errors():
        result = _services(ctx).reminders.run_daily_check(today, force=force)
    if not result.ran:
        console.print(f"Reminders already sent for {result.date}.")
        return
    if result.user_summary:
        console.print(f"Summary: {escape(result.user_summary.message)}")
    sent = sum(1 for r in result.creditor_results if r.success)
    console.print(f"Creditor reminders sent: {sent}/{len(result.creditor_results)}")


@app.command("test-message")
def test_message(ctx: typer.Context, phone: Annotated[str, typer.Argument()]):
    """Send a test message through the configured messaging API."""
    result = _services(ctx).notifier.send_test_message(phone)
    if not result.success:
        _fail(result.message)
    console.print(escape(result.message))


if __name__ == "__main__":
    app()
