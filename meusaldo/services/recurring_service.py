import uuid
from dataclasses import replace
from meusaldo.models.transaction import Transaction
from meusaldo.database.transaction_dao import TransactionDAO
from meusaldo.utils.date_helpers import split_date, add_months_ymd, format_ymd
from meusaldo.utils.logging_setup import get_logger

logger = get_logger(__name__)


def installment_dates(
    start_date: str, installments: int, due_date: str | None = None
) -> list[tuple[str, str | None]]:
    """
    Return [(date, due_date), ...] for each installment of a monthly series.

    Installment i falls i calendar months after start_date, keeping start_date's
    day of month clamped to the month's last day (Jan 31 -> Feb 28/29 -> Mar 31).
    When due_date is given, each installment's due date keeps the request's month
    offset from its date and the request's due day, clamped the same way.
    """
    start = split_date(start_date)
    if start is None:
        raise ValueError(f"Invalid start date: {start_date}")
    start_year, start_month, start_day = start

    due_parts = split_date(due_date) if due_date else None
    if due_date and due_parts is None:
        raise ValueError(f"Invalid due date: {due_date}")

    # Both dates advance from their own anchor, so the due-date month offset
    # stays fixed and neither day drifts after a clamp.
    result: list[tuple[str, str | None]] = []
    for i in range(installments):
        occurrence = format_ymd(*add_months_ymd(start_year, start_month, start_day, i))
        due = format_ymd(*add_months_ymd(*due_parts, i)) if due_parts else None
        result.append((occurrence, due))
    return result


def expand_installments(
    request: Transaction, recurrence_id: str | None = None
) -> list[Transaction]:
    """
    Expand a recurring request into its N installment records, ascending by date.

    Every record shares one new recurrence_id, carries "(i/N)" after the
    description, and copies all other fields of the request unchanged. The
    request itself is not modified and no record has an id yet. Validating
    N is the caller's job.
    """
    total = request.installments
    series_id = recurrence_id or uuid.uuid4().hex
    records = []
    for i, (occurrence, due) in enumerate(
        installment_dates(request.date, total, request.due_date)
    ):
        records.append(replace(
            request,
            id=None,
            description=f"{request.description} ({i + 1}/{total})",
            date=occurrence,
            due_date=due,
            is_recurring=True,
            installments=total,
            recurrence_id=series_id,
        ))
    return records


class RecurringService:
    def __init__(self, tx_dao: TransactionDAO):
        self._tx_dao = tx_dao

    def create_series(self, request: Transaction) -> list[Transaction]:
        """Expand and persist a series as one atomic batch."""
        records = expand_installments(request)
        created = self._tx_dao.create_many(records)
        logger.info(
            "Created recurrence %s with %d installment(s)",
            records[0].recurrence_id, len(created),
        )
        return created

    def get_series(self, recurrence_id: str) -> list[Transaction]:
        return self._tx_dao.get_by_recurrence_id(recurrence_id)

    def delete_series(self, recurrence_id: str) -> int:
        """Remove every installment sharing recurrence_id, and nothing else."""
        removed = self._tx_dao.delete_by_recurrence_id(recurrence_id)
        logger.info("Deleted recurrence %s (%d installment(s))", recurrence_id, removed)
        return removed
