import uuid
from typing import Optional
from meusaldo.database.db_manager import DatabaseManager
from meusaldo.models.account import Account


class AccountDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db
        self._all_cache: list | None = None

    def _invalidate_cache(self):
        self._all_cache = None

    def _row_to_model(self, row) -> Account:
        return Account(
            id=row["id"],
            name=row["name"],
            initial_balance=row["initial_balance"],
            type=row["type"],
        )

    def get_all(self) -> list[Account]:
        if self._all_cache is None:
            conn = self._db.get_connection()
            rows = conn.execute(
                "SELECT * FROM accounts ORDER BY name"
            ).fetchall()
            self._all_cache = [self._row_to_model(r) for r in rows]
        return list(self._all_cache)

    def get_by_id(self, account_id: str) -> Optional[Account]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM accounts WHERE id = ?", (account_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(
        self,
        name: str,
        account_type: str = "checking",
        initial_balance: float = 0.0,
    ) -> Account:
        conn = self._db.get_connection()
        account_id = uuid.uuid4().hex
        conn.execute(
            "INSERT INTO accounts(id, name, type, initial_balance) VALUES (?, ?, ?, ?)",
            (account_id, name, account_type, initial_balance),
        )
        conn.commit()
        self._invalidate_cache()
        return self.get_by_id(account_id)

    def update(
        self,
        account_id: str,
        name: str,
        account_type: str = "checking",
        initial_balance: float = 0.0,
    ) -> Account:
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE accounts SET name = ?, type = ?, initial_balance = ? WHERE id = ?",
            (name, account_type, initial_balance, account_id),
        )
        conn.commit()
        self._invalidate_cache()
        return self.get_by_id(account_id)

    def delete(self, account_id: str):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM accounts WHERE id = ?", (account_id,))
        conn.commit()
        self._invalidate_cache()
