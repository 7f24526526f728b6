"""
SQL file migrations for the congregation database.

Each `NNN_name.sql` file in the migrations directory is applied once, in
filename order. Only the part above a `-- Down` marker runs; the rest is
kept for manual rollback.
"""

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

DOWN_MARKER = "-- Down"

LEDGER_DDL = """
CREATE TABLE IF NOT EXISTS _migrations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    filename TEXT UNIQUE NOT NULL,
    applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
)
"""


def split_migration(text: str) -> tuple[str, str]:
    """Split a migration file into its (up, down) scripts."""
    up, _, down = text.partition(DOWN_MARKER)
    return up, down


class SQLiteMigrator:
    def __init__(self, db_path: str, migrations_dir: str | Path):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute(LEDGER_DDL)
        return conn

    def _files(self) -> list[Path]:
        if not self.migrations_dir.is_dir():
            raise FileNotFoundError(f"Migrations directory not found: {self.migrations_dir}")
        return sorted(self.migrations_dir.glob("*.sql"))

    def _applied(self, conn: sqlite3.Connection) -> set[str]:
        return {name for (name,) in conn.execute("SELECT filename FROM _migrations")}

    def pending(self) -> list[str]:
        """Filenames not yet recorded in the _migrations ledger."""
        conn = self._connect()
        try:
            applied = self._applied(conn)
        finally:
            conn.close()
        return [f.name for f in self._files() if f.name not in applied]

    def run_migrations(self) -> list[str]:
        """
        Apply pending migrations in filename order.

        Returns:
            Filenames applied by this call (empty when up to date).

        Raises:
            RuntimeError: A migration script failed; later files are not run.
        """
        conn = self._connect()
        try:
            applied = self._applied(conn)
            todo = [f for f in self._files() if f.name not in applied]
            for path in todo:
                logger.info("Applying migration %s", path.name)
                self._apply(conn, path)
            if todo:
                logger.info("Applied %d migration(s) to %s", len(todo), self.db_path)
            return [f.name for f in todo]
        finally:
            conn.close()

    def _apply(self, conn: sqlite3.Connection, path: Path) -> None:
        up, _ = split_migration(path.read_text())
        try:
            conn.executescript(up)
            conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (path.name,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise RuntimeError(f"Migration {path.name} failed: {e}") from e
