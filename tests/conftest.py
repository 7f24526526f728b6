from pathlib import Path

import pytest

from congregation.adapters.sqlite.migrator import SQLiteMigrator
from congregation.api.deps import Settings
from congregation.rules.loader import load_rules
from congregation.rules.models import Rules

PROJECT_ROOT = Path(__file__).resolve().parent.parent
MIGRATIONS_DIR = str(PROJECT_ROOT / "migrations")
RULES_PATH = PROJECT_ROOT / "rules.yaml"


@pytest.fixture
def rules() -> Rules:
    """The real rules file from the project root."""
    return load_rules(RULES_PATH)


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """A migrated SQLite database in a temp directory."""
    path = str(tmp_path / "congregation.db")
    SQLiteMigrator(path, MIGRATIONS_DIR).run_migrations()
    return path


@pytest.fixture
def settings(tmp_path: Path, db_path: str) -> Settings:
    s = Settings()
    s.base_dir = PROJECT_ROOT
    s.data_dir = tmp_path
    s.db_path = db_path
    s.rules_path = RULES_PATH
    s.migrations_dir = MIGRATIONS_DIR
    return s


@pytest.fixture
def migrations_dir() -> str:
    return MIGRATIONS_DIR
