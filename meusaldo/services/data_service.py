"""Export all transactions as a flat CSV backup."""
import csv
import io
import os

from meusaldo.database.account_dao import AccountDAO
from meusaldo.database.category_dao import CategoryDAO
from meusaldo.database.transaction_dao import TransactionDAO
from meusaldo.utils.constants import EXPORT_FILE_PREFIX, EXPORT_HEADERS
from meusaldo.utils.currency import format_plain_number
from meusaldo.utils.date_helpers import today_str
from meusaldo.utils.logging_setup import get_logger

logger = get_logger(__name__)


def _yes_no(flag: bool) -> str:
    return "Sim" if flag else "Não"


class DataService:
    def __init__(
        self,
        account_dao: AccountDAO,
        category_dao: CategoryDAO,
        tx_dao: TransactionDAO,
    ):
        self._account_dao = account_dao
        self._category_dao = category_dao
        self._tx_dao = tx_dao

    def build_rows(self) -> list[list[str]]:
        """Header plus one row per transaction, in storage order."""
        cat_names = {c.id: c.name for c in self._category_dao.get_all()}
        sub_names = {s.id: s.name for s in self._category_dao.get_all_subcategories()}
        acct_names = {a.id: a.name for a in self._account_dao.get_all()}

        rows = [list(EXPORT_HEADERS)]
        for tx in self._tx_dao.get_all():
            rows.append([
                tx.id,
                # Commas would shift columns for naive readers
                (tx.description or "").replace(",", "."),
                format_plain_number(tx.amount),
                tx.date,
                tx.due_date or "",
                tx.type,
                cat_names.get(tx.category_id, ""),
                sub_names.get(tx.subcategory_id, ""),
                acct_names.get(tx.account_id, ""),
                _yes_no(tx.is_paid),
                _yes_no(tx.is_recurring),
                str(tx.installments) if tx.installments else "",
            ])
        return rows

    def export_csv_text(self) -> str:
        rows = self.build_rows()
        if len(rows) == 1:
            raise ValueError("There is no data to export.")
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerows(rows)
        return buf.getvalue().rstrip("\n")

    def default_filename(self, date_str: str | None = None) -> str:
        return f"{EXPORT_FILE_PREFIX}{date_str or today_str()}.csv"

    def export_csv(self, path: str) -> str:
        """Write the backup to path (a file, or a directory for the default name)."""
        if os.path.isdir(path):
            path = os.path.join(path, self.default_filename())
        text = self.export_csv_text()
        with open(path, "w", encoding="utf-8-sig", newline="") as f:
            f.write(text)
        logger.info("Exported transactions to %s", path)
        return path
