from dataclasses import replace
from meusaldo.models.transaction import Transaction
from meusaldo.database.transaction_dao import TransactionDAO
from meusaldo.services.recurring_service import RecurringService
from meusaldo.services.report_service import filter_by_month, sort_by_effective_date_desc
from meusaldo.utils.constants import TRANSACTION_TYPES
from meusaldo.utils.date_helpers import parse_date
from meusaldo.utils.logging_setup import get_logger

logger = get_logger(__name__)


class TransactionService:
    def __init__(self, tx_dao: TransactionDAO, recurring_service: RecurringService):
        self._dao = tx_dao
        self._recurring = recurring_service

    def get_all(self) -> list[Transaction]:
        return self._dao.get_all()

    def get_by_id(self, tx_id: str) -> Transaction | None:
        return self._dao.get_by_id(tx_id)

    def get_for_month(
        self, year: int, month: int, type_filter: str | None = None
    ) -> list[Transaction]:
        """Month listing by effective date, newest first. type_filter: 'all' | DEBIT | CREDIT."""
        transactions = filter_by_month(self._dao.get_all(), year, month)
        if type_filter and type_filter != "all":
            transactions = [t for t in transactions if t.type == type_filter]
        return sort_by_effective_date_desc(transactions)

    def create(self, tx: Transaction) -> list[Transaction]:
        """Create a single transaction, or every installment of a recurring one.

        Returns the stored records.
        """
        self._validate(tx)
        if tx.is_recurring:
            return self._recurring.create_series(tx)
        single = replace(tx, id=None, installments=None, recurrence_id=None)
        return [self._dao.create(single)]

    def update(self, tx: Transaction) -> Transaction:
        """Update one stored record; other installments of its series are left alone.

        Series membership (is_recurring, installments, recurrence_id) always
        comes from the stored record.
        """
        stored = self._dao.get_by_id(tx.id) if tx.id else None
        if stored is None:
            raise ValueError("Transaction not found.")
        tx = replace(
            tx,
            is_recurring=stored.is_recurring,
            installments=stored.installments,
            recurrence_id=stored.recurrence_id,
        )
        self._validate(tx)
        return self._dao.update(tx)

    def set_paid(self, tx_id: str, is_paid: bool):
        if self._dao.get_by_id(tx_id) is None:
            raise ValueError("Transaction not found.")
        self._dao.set_paid(tx_id, is_paid)

    def delete(self, tx_id: str) -> int:
        """Delete a transaction; a recurring one takes its whole series with it.

        Returns the number of records removed.
        """
        tx = self._dao.get_by_id(tx_id)
        if tx is None:
            logger.info("Transaction %s not found, might be already deleted", tx_id)
            return 0
        if tx.recurrence_id:
            return self._recurring.delete_series(tx.recurrence_id)
        self._dao.delete(tx_id)
        return 1

    def delete_by_month(self, year: int, month: int) -> int:
        """Delete every transaction whose effective date is in year/month, atomically."""
        if not 1 <= month <= 12:
            raise ValueError(f"Invalid month: {month}")
        ids = [t.id for t in filter_by_month(self._dao.get_all(), year, month)]
        removed = self._dao.delete_many(ids)
        logger.info("Deleted %d transaction(s) for %04d-%02d", removed, year, month)
        return removed

    def reset(self) -> int:
        """Remove all transactions. Accounts and categories are kept."""
        removed = self._dao.delete_all()
        logger.info("All transactions reset (%d removed)", removed)
        return removed

    def _validate(self, tx: Transaction):
        if tx.type not in TRANSACTION_TYPES:
            raise ValueError(f"Invalid type: {tx.type}")
        if not (tx.description or "").strip():
            raise ValueError("Description cannot be empty.")
        if isinstance(tx.amount, bool) or not isinstance(tx.amount, (int, float)):
            raise ValueError("Amount must be a number.")
        if tx.amount < 0:
            raise ValueError("Amount cannot be negative.")
        if not parse_date(tx.date):
            raise ValueError("Invalid date format. Use YYYY-MM-DD.")
        if tx.due_date and not parse_date(tx.due_date):
            raise ValueError("Invalid due date format. Use YYYY-MM-DD.")
        if tx.is_recurring:
            n = tx.installments
            if isinstance(n, bool) or not isinstance(n, int) or n < 1:
                raise ValueError("Installments must be a whole number of at least 1.")
