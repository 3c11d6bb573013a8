import uuid
from typing import Optional
from meusaldo.database.db_manager import DatabaseManager
from meusaldo.models.transaction import Transaction
from meusaldo.utils.constants import DELETE_CHUNK_SIZE
from meusaldo.utils.logging_setup import get_logger

logger = get_logger(__name__)

_COLUMNS = (
    "id", "description", "amount", "date", "due_date", "type",
    "category_id", "subcategory_id", "account_id", "is_paid",
    "is_recurring", "installments", "recurrence_id",
    "creditor_name", "creditor_phone",
)


class TransactionDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Transaction:
        return Transaction(
            id=row["id"],
            description=row["description"],
            amount=row["amount"],
            date=row["date"],
            due_date=row["due_date"],
            type=row["type"],
            category_id=row["category_id"],
            subcategory_id=row["subcategory_id"],
            account_id=row["account_id"],
            is_paid=bool(row["is_paid"]),
            is_recurring=bool(row["is_recurring"]),
            installments=row["installments"],
            recurrence_id=row["recurrence_id"],
            creditor_name=row["creditor_name"],
            creditor_phone=row["creditor_phone"],
        )

    @staticmethod
    def _to_params(tx: Transaction) -> tuple:
        return (
            tx.id, tx.description, tx.amount, tx.date, tx.due_date, tx.type,
            tx.category_id, tx.subcategory_id, tx.account_id,
            1 if tx.is_paid else 0, 1 if tx.is_recurring else 0,
            tx.installments, tx.recurrence_id,
            tx.creditor_name, tx.creditor_phone,
        )

    def get_all(self) -> list[Transaction]:
        """Every transaction, in insertion order."""
        conn = self._db.get_connection()
        rows = conn.execute("SELECT * FROM transactions ORDER BY rowid ASC").fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, tx_id: str) -> Optional[Transaction]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM transactions WHERE id = ?", (tx_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_by_recurrence_id(self, recurrence_id: str) -> list[Transaction]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM transactions WHERE recurrence_id = ? ORDER BY date ASC, rowid ASC",
            (recurrence_id,),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def count_by_reference(self, column: str, ref_id: str) -> int:
        """Number of transactions whose account/category/subcategory column is ref_id."""
        if column not in ("account_id", "category_id", "subcategory_id"):
            raise ValueError(f"Invalid reference column: {column}")
        conn = self._db.get_connection()
        row = conn.execute(
            f"SELECT COUNT(*) AS cnt FROM transactions WHERE {column} = ?", (ref_id,)
        ).fetchone()
        return row["cnt"]

    def create(self, tx: Transaction) -> Transaction:
        return self.create_many([tx])[0]

    def create_many(self, transactions: list[Transaction]) -> list[Transaction]:
        """Insert all records in one transaction: either every row lands or none."""
        if not transactions:
            return []
        conn = self._db.get_connection()
        ids = [uuid.uuid4().hex for _ in transactions]
        placeholders = ",".join("?" * len(_COLUMNS))
        try:
            for tx_id, tx in zip(ids, transactions):
                params = self._to_params(tx)
                conn.execute(
                    f"INSERT INTO transactions ({','.join(_COLUMNS)}) VALUES ({placeholders})",
                    (tx_id,) + params[1:],
                )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        logger.debug("Inserted %d transaction(s)", len(ids))
        return [self.get_by_id(tx_id) for tx_id in ids]

    def update(self, tx: Transaction) -> Transaction:
        conn = self._db.get_connection()
        params = self._to_params(tx)
        assignments = ", ".join(f"{col}=?" for col in _COLUMNS[1:])
        conn.execute(
            f"UPDATE transactions SET {assignments} WHERE id=?",
            params[1:] + (tx.id,),
        )
        conn.commit()
        return self.get_by_id(tx.id)

    def set_paid(self, tx_id: str, is_paid: bool):
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE transactions SET is_paid=? WHERE id=?",
            (1 if is_paid else 0, tx_id),
        )
        conn.commit()

    def delete(self, tx_id: str):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM transactions WHERE id = ?", (tx_id,))
        conn.commit()

    def delete_by_recurrence_id(self, recurrence_id: str) -> int:
        """Delete a whole installment series atomically. Returns rows removed."""
        conn = self._db.get_connection()
        try:
            cursor = conn.execute(
                "DELETE FROM transactions WHERE recurrence_id = ?", (recurrence_id,)
            )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        return cursor.rowcount

    def delete_many(self, tx_ids: list[str]) -> int:
        """Delete the given ids in one transaction, binding at most
        DELETE_CHUNK_SIZE ids per statement."""
        if not tx_ids:
            return 0
        conn = self._db.get_connection()
        removed = 0
        try:
            for start in range(0, len(tx_ids), DELETE_CHUNK_SIZE):
                chunk = tx_ids[start:start + DELETE_CHUNK_SIZE]
                placeholders = ",".join("?" * len(chunk))
                cursor = conn.execute(
                    f"DELETE FROM transactions WHERE id IN ({placeholders})", chunk
                )
                removed += cursor.rowcount
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        return removed

    def delete_all(self) -> int:
        ids = [
            r["id"] for r in
            self._db.get_connection().execute("SELECT id FROM transactions").fetchall()
        ]
        return self.delete_many(ids)
