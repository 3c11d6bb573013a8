"""Month filtering, balances and category breakdowns.

The module-level functions are pure: they read a snapshot of transactions
(plus accounts/categories) and return plain values. ReportService only
fetches a fresh snapshot from storage and hands it to them.
"""
from typing import Iterable
from meusaldo.database.account_dao import AccountDAO
from meusaldo.database.category_dao import CategoryDAO
from meusaldo.database.transaction_dao import TransactionDAO
from meusaldo.models.account import Account
from meusaldo.models.category import Category
from meusaldo.models.transaction import Transaction
from meusaldo.utils.constants import (
    CREDIT, DEBIT, UNCATEGORIZED_LABEL, RECENT_TRANSACTIONS_LIMIT,
)
from meusaldo.utils.date_helpers import split_date, last_day_of_month_str, today_str


def effective_date(t: Transaction) -> str:
    return t.due_date or t.date


def _in_month(t: Transaction, year: int, month: int) -> bool:
    parts = split_date(effective_date(t))
    return parts is not None and parts[0] == year and parts[1] == month


def _on_or_before(date_str: str, limit: str) -> bool:
    parts = split_date(date_str)
    limit_parts = split_date(limit)
    if parts is None or limit_parts is None:
        return False
    return parts <= limit_parts


def filter_by_month(
    transactions: Iterable[Transaction], year: int, month: int
) -> list[Transaction]:
    """Transactions whose effective date falls in the given calendar month (1-12)."""
    return [t for t in transactions if _in_month(t, year, month)]


def compute_balance(
    accounts: Iterable[Account], transactions: Iterable[Transaction], as_of_date: str
) -> float:
    """Initial balances + every credit - debits that are paid or already due.

    Credits count unconditionally. An unpaid debit counts once its effective
    date is on or before as_of_date.
    """
    balance = sum(a.initial_balance or 0.0 for a in accounts)
    for t in transactions:
        if t.type == CREDIT:
            balance += t.amount or 0.0
        elif t.type == DEBIT:
            if t.is_paid or _on_or_before(effective_date(t), as_of_date):
                balance -= t.amount or 0.0
    return balance


def _sum_type(transactions: Iterable[Transaction], type_: str) -> float:
    return sum(t.amount or 0.0 for t in transactions if t.type == type_)


def monthly_income(transactions: Iterable[Transaction], year: int, month: int) -> float:
    return _sum_type(filter_by_month(transactions, year, month), CREDIT)


def monthly_expenses(transactions: Iterable[Transaction], year: int, month: int) -> float:
    return _sum_type(filter_by_month(transactions, year, month), DEBIT)


def expenses_by_category(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
    year: int,
    month: int,
) -> list[tuple[str, float]]:
    """[(category name, total)] for the month's debits, in first-seen order.

    Debits with a missing or unknown category_id fall under UNCATEGORIZED_LABEL.
    """
    names = {c.id: c.name for c in categories}
    totals: dict[str, float] = {}
    for t in filter_by_month(transactions, year, month):
        if t.type != DEBIT:
            continue
        label = names.get(t.category_id) or UNCATEGORIZED_LABEL
        totals[label] = totals.get(label, 0.0) + (t.amount or 0.0)
    return list(totals.items())


def sort_by_effective_date_desc(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Newest first; ties keep their incoming order."""
    return sorted(
        transactions,
        key=lambda t: split_date(effective_date(t)) or (0, 0, 0),
        reverse=True,
    )


def recent_transactions(
    transactions: Iterable[Transaction],
    as_of_date: str,
    limit: int = RECENT_TRANSACTIONS_LIMIT,
) -> list[Transaction]:
    """Latest transactions up to the end of as_of_date's month."""
    parts = split_date(as_of_date)
    if parts is None:
        return []
    month_end = last_day_of_month_str(parts[0], parts[1])
    eligible = [t for t in transactions if _on_or_before(effective_date(t), month_end)]
    return sort_by_effective_date_desc(eligible)[:max(limit, 0)]


class ReportService:
    def __init__(
        self, tx_dao: TransactionDAO, account_dao: AccountDAO, category_dao: CategoryDAO
    ):
        self._tx_dao = tx_dao
        self._account_dao = account_dao
        self._category_dao = category_dao

    def get_dashboard(
        self, as_of_date: str | None = None, limit: int = RECENT_TRANSACTIONS_LIMIT
    ) -> dict:
        """Return {balance, income, expense, recent} for the month of as_of_date."""
        ref = as_of_date or today_str()
        parts = split_date(ref)
        if parts is None:
            raise ValueError(f"Invalid date: {ref}")
        transactions = self._tx_dao.get_all()
        year, month, _ = parts
        return {
            "balance": compute_balance(self._account_dao.get_all(), transactions, ref),
            "income": monthly_income(transactions, year, month),
            "expense": monthly_expenses(transactions, year, month),
            "recent": recent_transactions(transactions, ref, limit),
        }

    def get_monthly_report(self, year: int, month: int) -> dict:
        """Return {income, expense, net, by_category, transactions} for one month."""
        if not 1 <= month <= 12:
            raise ValueError(f"Invalid month: {month}")
        transactions = self._tx_dao.get_all()
        income = monthly_income(transactions, year, month)
        expense = monthly_expenses(transactions, year, month)
        return {
            "income": income,
            "expense": expense,
            "net": income - expense,
            "by_category": expenses_by_category(
                transactions, self._category_dao.get_all(), year, month
            ),
            "transactions": sort_by_effective_date_desc(
                filter_by_month(transactions, year, month)
            ),
        }
