import sqlite3
import os
from meusaldo.utils.constants import DB_FILE, db_file_for_user
from meusaldo.utils.logging_setup import get_logger

logger = get_logger(__name__)


class DatabaseManager:
    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or DB_FILE
        self._conn: sqlite3.Connection | None = None

    def get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode = WAL")
        return self._conn

    def initialize(self):
        """Create schema."""
        conn = self.get_connection()
        self._create_schema(conn)
        conn.commit()

    def _create_schema(self, conn: sqlite3.Connection):
        # Foreign references are opaque ids; integrity is checked in the services
        # so that rows left behind by older data still load.
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS accounts (
                id              TEXT PRIMARY KEY,
                name            TEXT NOT NULL,
                type            TEXT NOT NULL DEFAULT 'checking'
                                CHECK(type IN ('checking','savings','credit_card','wallet')),
                initial_balance REAL NOT NULL DEFAULT 0.0
            );

            CREATE TABLE IF NOT EXISTS categories (
                id    TEXT PRIMARY KEY,
                name  TEXT NOT NULL,
                type  TEXT NOT NULL CHECK(type IN ('DEBIT','CREDIT'))
            );

            CREATE TABLE IF NOT EXISTS subcategories (
                id          TEXT PRIMARY KEY,
                name        TEXT NOT NULL,
                category_id TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS transactions (
                id              TEXT PRIMARY KEY,
                description     TEXT NOT NULL DEFAULT '',
                amount          REAL NOT NULL CHECK(amount >= 0),
                date            TEXT NOT NULL,
                due_date        TEXT,
                type            TEXT NOT NULL CHECK(type IN ('DEBIT','CREDIT')),
                category_id     TEXT,
                subcategory_id  TEXT,
                account_id      TEXT,
                is_paid         INTEGER NOT NULL DEFAULT 0,
                is_recurring    INTEGER NOT NULL DEFAULT 0,
                installments    INTEGER,
                recurrence_id   TEXT,
                creditor_name   TEXT,
                creditor_phone  TEXT,
                created_at      TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE INDEX IF NOT EXISTS idx_transactions_recurrence_id ON transactions(recurrence_id);
            CREATE INDEX IF NOT EXISTS idx_transactions_account_id    ON transactions(account_id);
            CREATE INDEX IF NOT EXISTS idx_transactions_category_id   ON transactions(category_id);

            CREATE TABLE IF NOT EXISTS app_settings (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );
        """)

    def get_setting(self, key: str, default: str = "") -> str:
        conn = self.get_connection()
        row = conn.execute(
            "SELECT value FROM app_settings WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else default

    def set_setting(self, key: str, value: str):
        conn = self.get_connection()
        conn.execute(
            "INSERT OR REPLACE INTO app_settings(key, value) VALUES (?, ?)",
            (key, value),
        )
        conn.commit()

    @staticmethod
    def open_for_user(user_id: str, db_folder: str | None = None) -> "DatabaseManager":
        """Startup factory: opens (creating if needed) the DB owned by user_id.

        db_folder: if provided, DB files are stored in that directory instead of CWD.
        """
        filename = db_file_for_user(user_id)
        if db_folder:
            os.makedirs(db_folder, exist_ok=True)
            path = os.path.join(db_folder, filename)
        else:
            path = filename
        logger.debug("Opening database %s", path)
        db = DatabaseManager(path)
        db.initialize()
        return db

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None
