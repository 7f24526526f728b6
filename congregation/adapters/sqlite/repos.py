import json
import sqlite3
from datetime import date
from typing import Any
from uuid import UUID, uuid4

from congregation.components.forms import FormTemplate
from congregation.components.recurrence import RecurrencePattern
from congregation.components.service_generation import Service, ServiceTemplate

# Columns of keyed record tables that hold JSON-encoded lists
JSON_COLUMNS: dict[str, frozenset[str]] = {
    "newcomers": frozenset({"interest_areas", "department_interest"}),
}


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _parse_date(s: str | None) -> date | None:
    return date.fromisoformat(s) if s else None


class _SQLiteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn


class SQLiteServiceRepo(_SQLiteRepo):
    def _to_service(self, row: dict[str, Any]) -> Service:
        return Service(id=UUID(row["id"]), date=row["date"], name=row["name"], time=row["time"])

    def list_by_dates(self, dates: list[str]) -> list[Service]:
        if not dates:
            return []
        conn = self._get_conn()
        try:
            placeholders = ",".join("?" for _ in dates)
            rows = conn.execute(
                f"SELECT * FROM services WHERE date IN ({placeholders}) ORDER BY date",
                list(dates),
            ).fetchall()
            return [self._to_service(r) for r in rows]
        finally:
            conn.close()

    def list_by_ids(self, service_ids: list[UUID]) -> list[Service]:
        if not service_ids:
            return []
        conn = self._get_conn()
        try:
            placeholders = ",".join("?" for _ in service_ids)
            rows = conn.execute(
                f"SELECT * FROM services WHERE id IN ({placeholders}) ORDER BY date",
                [str(i) for i in service_ids],
            ).fetchall()
            return [self._to_service(r) for r in rows]
        finally:
            conn.close()

    def create(self, service_date: str, name: str, time: str | None) -> Service | None:
        """Insert a service; None when the date is already taken."""
        service_id = uuid4()
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                """
                INSERT INTO services (id, date, name, time)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(date) DO NOTHING
            """,
                (str(service_id), service_date, name, time),
            )
            conn.commit()
            if cursor.rowcount == 0:
                return None
            return Service(id=service_id, date=service_date, name=name, time=time)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


class SQLiteTemplateRepo(_SQLiteRepo):
    def get_by_id(self, template_id: UUID) -> ServiceTemplate | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM service_templates WHERE id = ?", (str(template_id),)
            ).fetchone()
            if not row:
                return None
            return ServiceTemplate(
                id=UUID(row["id"]),
                name=row["name"],
                default_time=row["default_time"],
                description=row["description"],
            )
        finally:
            conn.close()

    def save(self, template: ServiceTemplate) -> ServiceTemplate:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO service_templates (id, name, description, default_time)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name=excluded.name,
                    description=excluded.description,
                    default_time=excluded.default_time
            """,
                (str(template.id), template.name, template.description, template.default_time),
            )
            conn.commit()
            return template
        finally:
            conn.close()


class SQLitePatternRepo(_SQLiteRepo):
    def _to_pattern(self, row: dict[str, Any]) -> RecurrencePattern:
        start = _parse_date(row["start_date"])
        assert start is not None
        return RecurrencePattern(
            id=UUID(row["id"]),
            template_id=UUID(row["template_id"]),
            pattern_type=row["pattern_type"],
            day_of_week=row["day_of_week"],
            week_of_month=row["week_of_month"],
            interval_weeks=row["interval_weeks"],
            start_date=start,
            end_date=_parse_date(row["end_date"]),
            last_generated_date=_parse_date(row["last_generated_date"]),
            is_active=bool(row["is_active"]),
        )

    def get_by_id(self, pattern_id: UUID) -> RecurrencePattern | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM service_recurring_patterns WHERE id = ?", (str(pattern_id),)
            ).fetchone()
            return self._to_pattern(row) if row else None
        finally:
            conn.close()

    def list_due(self, today: date) -> list[RecurrencePattern]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT * FROM service_recurring_patterns
                WHERE is_active = 1
                  AND (last_generated_date IS NULL OR last_generated_date < ?)
                ORDER BY created_at
            """,
                (today.isoformat(),),
            ).fetchall()
            return [self._to_pattern(r) for r in rows]
        finally:
            conn.close()

    def update_watermark(self, pattern_id: UUID, last_generated_date: date) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "UPDATE service_recurring_patterns SET last_generated_date = ? WHERE id = ?",
                (last_generated_date.isoformat(), str(pattern_id)),
            )
            conn.commit()
        finally:
            conn.close()

    def save(self, pattern: RecurrencePattern) -> RecurrencePattern:
        if pattern.id is None or pattern.template_id is None:
            raise ValueError("Pattern id and template_id are required")
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO service_recurring_patterns (
                    id, template_id, pattern_type, day_of_week, week_of_month,
                    interval_weeks, start_date, end_date, last_generated_date, is_active
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    template_id=excluded.template_id,
                    pattern_type=excluded.pattern_type,
                    day_of_week=excluded.day_of_week,
                    week_of_month=excluded.week_of_month,
                    interval_weeks=excluded.interval_weeks,
                    start_date=excluded.start_date,
                    end_date=excluded.end_date,
                    last_generated_date=excluded.last_generated_date,
                    is_active=excluded.is_active
            """,
                (
                    str(pattern.id),
                    str(pattern.template_id),
                    pattern.pattern_type,
                    pattern.day_of_week,
                    pattern.week_of_month,
                    pattern.interval_weeks,
                    pattern.start_date.isoformat(),
                    pattern.end_date.isoformat() if pattern.end_date else None,
                    pattern.last_generated_date.isoformat() if pattern.last_generated_date else None,
                    1 if pattern.is_active else 0,
                ),
            )
            conn.commit()
            return pattern
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


class SQLiteFormConfigRepo(_SQLiteRepo):
    def get_published(self, form_type: str) -> dict[str, Any] | None:
        conn = self._get_conn()
        try:
            return conn.execute(
                """
                SELECT * FROM form_configs
                WHERE form_type = ? AND status = 'published'
                ORDER BY version DESC LIMIT 1
            """,
                (form_type,),
            ).fetchone()
        finally:
            conn.close()

    def get_latest_active(self, form_type: str) -> dict[str, Any] | None:
        conn = self._get_conn()
        try:
            return conn.execute(
                """
                SELECT * FROM form_configs
                WHERE form_type = ? AND is_active = 1
                ORDER BY version DESC LIMIT 1
            """,
                (form_type,),
            ).fetchone()
        finally:
            conn.close()

    def list_field_rows(self, config_id: str) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM form_fields WHERE form_config_id = ? ORDER BY display_order ASC",
                (config_id,),
            ).fetchall()
            for row in rows:
                for col in ("transformation_config", "validation_rules", "options"):
                    row[col] = json.loads(row[col]) if row[col] else None
            return rows
        finally:
            conn.close()

    def list_static_content_rows(self, config_id: str) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            return conn.execute(
                "SELECT * FROM form_static_content WHERE form_config_id = ?", (config_id,)
            ).fetchall()
        finally:
            conn.close()

    def list_rule_rows(self, config_id: str) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM form_submission_rules WHERE form_config_id = ? "
                "ORDER BY priority ASC",
                (config_id,),
            ).fetchall()
            for row in rows:
                row["rule_config"] = json.loads(row["rule_config"]) if row["rule_config"] else None
            return rows
        finally:
            conn.close()

    def create_from_template(
        self,
        form_type: str,
        template: FormTemplate,
        version: int = 1,
        status: str = "published",
        static_content: dict[str, str] | None = None,
    ) -> str:
        """Store a configuration built from a starter template. Returns its id."""
        config_id = str(uuid4())
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT INTO form_configs (id, form_type, name, version, status, is_active) "
                "VALUES (?, ?, ?, ?, ?, 1)",
                (config_id, form_type, template.name, version, status),
            )
            for position, f in enumerate(template.fields):
                conn.execute(
                    """
                    INSERT INTO form_fields (
                        id, form_config_id, field_key, field_type, label, db_column,
                        is_required, transformation_type, transformation_config,
                        is_notes_field, notes_format, section, display_order,
                        validation_rules, options
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                    (
                        str(uuid4()),
                        config_id,
                        f["field_key"],
                        f.get("field_type", "text"),
                        f.get("label", ""),
                        f.get("db_column"),
                        1 if f.get("is_required") else 0,
                        f.get("transformation_type"),
                        json.dumps(f["transformation_config"])
                        if f.get("transformation_config")
                        else None,
                        1 if f.get("is_notes_field") else 0,
                        f.get("notes_format"),
                        f.get("section"),
                        position,
                        json.dumps(f["validation_rules"]) if f.get("validation_rules") else None,
                        json.dumps(f["options"]) if f.get("options") else None,
                    ),
                )
            for rule in template.rules:
                conn.execute(
                    "INSERT INTO form_submission_rules "
                    "(id, form_config_id, rule_type, rule_config, priority) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (
                        str(uuid4()),
                        config_id,
                        rule["rule_type"],
                        json.dumps(rule.get("rule_config") or {}),
                        rule.get("priority", 0),
                    ),
                )
            for key, content in (static_content or {}).items():
                conn.execute(
                    "INSERT INTO form_static_content (id, form_config_id, content_key, content) "
                    "VALUES (?, ?, ?, ?)",
                    (str(uuid4()), config_id, key, content),
                )
            conn.commit()
            return config_id
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


class SQLiteRecordStore(_SQLiteRepo):
    """
    Keyed record store over plain tables.

    Table and column names are checked against the schema before they are
    interpolated into SQL.
    """

    def __init__(self, db_path: str, json_columns: dict[str, frozenset[str]] | None = None):
        super().__init__(db_path)
        self._json_columns = JSON_COLUMNS if json_columns is None else json_columns

    def _columns(self, conn: sqlite3.Connection, table: str) -> set[str]:
        exists = conn.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?", (table,)
        ).fetchone()
        if not exists:
            raise ValueError(f"Unknown table: {table}")
        return {r["name"] for r in conn.execute(f'PRAGMA table_info("{table}")').fetchall()}

    def _check(self, columns: set[str], table: str, names: list[str]) -> None:
        unknown = [n for n in names if n not in columns]
        if unknown:
            raise ValueError(f"Unknown column(s) for {table}: {', '.join(sorted(unknown))}")

    def _encode(self, table: str, column: str, value: Any) -> Any:
        if column in self._json_columns.get(table, frozenset()):
            # list columns always hold a JSON array; a scalar becomes one element
            if value is None:
                return None
            items = list(value) if isinstance(value, list | tuple) else [value]
            return json.dumps(items)
        if isinstance(value, list | tuple | dict):
            return json.dumps(list(value) if isinstance(value, tuple) else value)
        return value

    def _decode(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        for column in self._json_columns.get(table, frozenset()):
            if row.get(column):
                row[column] = json.loads(row[column])
        return row

    def _fetch(self, conn: sqlite3.Connection, table: str, record_id: Any) -> dict[str, Any] | None:
        row = conn.execute(f'SELECT * FROM "{table}" WHERE id = ?', (str(record_id),)).fetchone()
        return self._decode(table, row) if row else None

    def fetch_by_key(self, table: str, key: str, value: Any) -> dict[str, Any] | None:
        conn = self._get_conn()
        try:
            self._check(self._columns(conn, table), table, [key])
            row = conn.execute(
                f'SELECT * FROM "{table}" WHERE "{key}" = ? ORDER BY created_at LIMIT 1',
                (value,),
            ).fetchone()
            return self._decode(table, row) if row else None
        finally:
            conn.close()

    def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        data = {"id": str(uuid4()), **record}
        conn = self._get_conn()
        try:
            self._check(self._columns(conn, table), table, list(data))
            names = ", ".join(f'"{c}"' for c in data)
            placeholders = ", ".join("?" for _ in data)
            conn.execute(
                f'INSERT INTO "{table}" ({names}) VALUES ({placeholders})',
                [self._encode(table, c, v) for c, v in data.items()],
            )
            conn.commit()
            stored = self._fetch(conn, table, data["id"])
            assert stored is not None
            return stored
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def update(self, table: str, record_id: Any, patch: dict[str, Any]) -> dict[str, Any]:
        data = {k: v for k, v in patch.items() if k != "id"}
        conn = self._get_conn()
        try:
            self._check(self._columns(conn, table), table, list(data))
            if data:
                assignments = ", ".join(f'"{c}" = ?' for c in data)
                conn.execute(
                    f'UPDATE "{table}" SET {assignments} WHERE id = ?',
                    [*(self._encode(table, c, v) for c, v in data.items()), str(record_id)],
                )
                conn.commit()
            stored = self._fetch(conn, table, record_id)
            if stored is None:
                raise LookupError(f"{table} record {record_id} not found")
            return stored
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
