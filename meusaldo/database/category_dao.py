import uuid
from typing import Optional
from meusaldo.database.db_manager import DatabaseManager
from meusaldo.models.category import Category, Subcategory


class CategoryDAO:
    """Categories and their subcategories."""

    def __init__(self, db: DatabaseManager):
        self._db = db
        self._all_cache: list | None = None

    def _invalidate_cache(self):
        self._all_cache = None

    def _row_to_model(self, row) -> Category:
        return Category(id=row["id"], name=row["name"], type=row["type"])

    def _row_to_subcategory(self, row) -> Subcategory:
        return Subcategory(id=row["id"], name=row["name"], category_id=row["category_id"])

    def get_all(self) -> list[Category]:
        if self._all_cache is None:
            conn = self._db.get_connection()
            rows = conn.execute(
                "SELECT * FROM categories ORDER BY name"
            ).fetchall()
            self._all_cache = [self._row_to_model(r) for r in rows]
        return list(self._all_cache)

    def get_by_id(self, category_id: str) -> Optional[Category]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM categories WHERE id = ?", (category_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_by_type(self, type_filter: str) -> list[Category]:
        """type_filter: 'DEBIT' or 'CREDIT'."""
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM categories WHERE type = ? ORDER BY name", (type_filter,)
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def create(self, name: str, type_: str) -> Category:
        conn = self._db.get_connection()
        category_id = uuid.uuid4().hex
        conn.execute(
            "INSERT INTO categories(id, name, type) VALUES (?, ?, ?)",
            (category_id, name, type_),
        )
        conn.commit()
        self._invalidate_cache()
        return self.get_by_id(category_id)

    def delete(self, category_id: str):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
        conn.commit()
        self._invalidate_cache()

    # ── Subcategories ────────────────────────────────────────────────────────

    def get_all_subcategories(self) -> list[Subcategory]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM subcategories ORDER BY name"
        ).fetchall()
        return [self._row_to_subcategory(r) for r in rows]

    def get_subcategory(self, subcategory_id: str) -> Optional[Subcategory]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM subcategories WHERE id = ?", (subcategory_id,)
        ).fetchone()
        return self._row_to_subcategory(row) if row else None

    def get_subcategories_for(self, category_id: str) -> list[Subcategory]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM subcategories WHERE category_id = ? ORDER BY name",
            (category_id,),
        ).fetchall()
        return [self._row_to_subcategory(r) for r in rows]

    def create_subcategory(self, name: str, category_id: str) -> Subcategory:
        conn = self._db.get_connection()
        subcategory_id = uuid.uuid4().hex
        conn.execute(
            "INSERT INTO subcategories(id, name, category_id) VALUES (?, ?, ?)",
            (subcategory_id, name, category_id),
        )
        conn.commit()
        return self.get_subcategory(subcategory_id)

    def delete_subcategory(self, subcategory_id: str):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM subcategories WHERE id = ?", (subcategory_id,))
        conn.commit()
