# hardware_store/database.py
import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from hardware_store.config import Settings
from hardware_store.errors import BackendError
from hardware_store.utils.period import format_period, normalize_period, parse_period

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
Params = Sequence[Any]

# Quoted literals are matched first so a "?" inside them is never treated as a placeholder
_TOKEN_RE = re.compile(r"'(?:[^']|'')*'|\"[^\"]*\"|\?")
_INSERT_RE = re.compile(r"^\s*INSERT\b", re.IGNORECASE)
_RETURNING_RE = re.compile(r"\bRETURNING\b", re.IGNORECASE)


@dataclass
class RunResult:
    affected_count: int
    inserted_id: Optional[int] = None


def to_numbered_placeholders(sql: str) -> Tuple[str, int]:
    """Rewrite positional "?" markers to :p1, :p2, ... in statement order."""
    counter = 0

    def _replace(match):
        nonlocal counter
        token = match.group(0)
        if token != "?":
            return token
        counter += 1
        return f":p{counter}"

    return _TOKEN_RE.sub(_replace, sql), counter


def with_returning_id(sql: str) -> Tuple[str, bool]:
    """Append RETURNING id to an INSERT that does not already return something."""
    if not _INSERT_RE.match(sql) or _RETURNING_RE.search(sql):
        return sql, False
    return sql.rstrip().rstrip(";") + " RETURNING id", True


class Unit:
    """A group of statements sharing one connection and one transaction."""

    def __init__(self, database: "Database", connection: Connection):
        self.database = database
        self.connection = connection

    def all(self, sql: str, params: Params = ()) -> List[Row]:
        result = self.database._call(self.database._execute, self.connection, sql, params)
        return [dict(row) for row in result.mappings()]

    def get(self, sql: str, params: Params = ()) -> Optional[Row]:
        rows = self.all(sql, params)
        return rows[0] if rows else None

    def run(self, sql: str, params: Params = ()) -> RunResult:
        return self.database._call(self.database._run, self.connection, sql, params)


class Database:
    """Uniform all/get/run surface over one SQL backend.

    Every statement is written with positional "?" placeholders; subclasses
    translate them to what their driver understands. Calls made directly on
    the database commit immediately, calls made through ``transaction()``
    commit together.
    """

    dialect = ""
    period_columns: Tuple[str, ...] = ()

    def __init__(self, engine: Engine):
        self.engine = engine

    # ---- public surface ----
    def all(self, sql: str, params: Params = ()) -> List[Row]:
        with self.transaction() as unit:
            return unit.all(sql, params)

    def get(self, sql: str, params: Params = ()) -> Optional[Row]:
        with self.transaction() as unit:
            return unit.get(sql, params)

    def run(self, sql: str, params: Params = ()) -> RunResult:
        with self.transaction() as unit:
            return unit.run(sql, params)

    @contextmanager
    def transaction(self) -> Iterator[Unit]:
        try:
            with self.engine.begin() as connection:
                yield Unit(self, connection)
        except SQLAlchemyError as exc:
            raise self._wrap(exc) from exc

    def ping(self) -> None:
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise self._wrap(exc) from exc

    def close(self) -> None:
        self.engine.dispose()

    # ---- budget period translation ----
    def period_params(self, label: str) -> Tuple[Any, ...]:
        raise NotImplementedError

    def period_label(self, row: Row) -> Optional[str]:
        raise NotImplementedError

    def period_clause(self, alias: str = "") -> str:
        prefix = f"{alias}." if alias else ""
        return " AND ".join(f"{prefix}{column} = ?" for column in self.period_columns)

    # ---- maintenance hooks ----
    def after_restore(self, unit: Unit, table: str) -> None:
        """Called once a table has been refilled with explicit ids."""

    # ---- driver specific ----
    def _execute(self, connection: Connection, sql: str, params: Params):
        raise NotImplementedError

    def _run(self, connection: Connection, sql: str, params: Params) -> RunResult:
        raise NotImplementedError

    def _error_code(self, orig) -> Optional[str]:
        return None

    def _call(self, fn, connection, sql, params):
        try:
            return fn(connection, sql, list(params or ()))
        except SQLAlchemyError as exc:
            logger.debug("Statement failed on %s: %s", self.dialect, exc)
            raise self._wrap(exc) from exc

    def _wrap(self, exc: SQLAlchemyError) -> BackendError:
        orig = getattr(exc, "orig", None)
        message = str(orig) if orig is not None else str(exc)
        unique = isinstance(exc, IntegrityError) and "unique" in message.lower()
        return BackendError(message, code=self._error_code(orig), unique_violation=unique)


class SqliteDatabase(Database):
    """Embedded file backend: statements go to sqlite3 unchanged."""

    dialect = "sqlite"
    period_columns = ("month_year",)

    def _execute(self, connection, sql, params):
        return connection.exec_driver_sql(sql, tuple(params))

    def _run(self, connection, sql, params):
        result = connection.exec_driver_sql(sql, tuple(params))
        inserted_id = result.lastrowid if _INSERT_RE.match(sql) else None
        return RunResult(affected_count=result.rowcount, inserted_id=inserted_id)

    def _error_code(self, orig):
        if orig is None:
            return None
        return getattr(orig, "sqlite_errorname", None) or type(orig).__name__

    def period_params(self, label):
        return (normalize_period(label),)

    def period_label(self, row):
        value = row.get("month_year")
        return normalize_period(value) if value else None


class PostgresDatabase(Database):
    """Hosted backend: numbered binds and RETURNING id for inserted keys."""

    dialect = "postgresql"
    period_columns = ("month", "year")

    def _bind(self, sql, params):
        numbered, count = to_numbered_placeholders(sql)
        if count != len(params):
            raise BackendError(
                f"Statement expects {count} parameters, got {len(params)}", code="PARAMS"
            )
        return text(numbered), {f"p{i}": value for i, value in enumerate(params, start=1)}

    def _execute(self, connection, sql, params):
        statement, binds = self._bind(sql, params)
        return connection.execute(statement, binds)

    def _run(self, connection, sql, params):
        sql, returning = with_returning_id(sql)
        statement, binds = self._bind(sql, params)
        result = connection.execute(statement, binds)
        affected = result.rowcount
        inserted_id = None
        if returning:
            row = result.first()
            inserted_id = row[0] if row is not None else None
        return RunResult(affected_count=affected, inserted_id=inserted_id)

    def _error_code(self, orig):
        return getattr(orig, "pgcode", None)

    def period_params(self, label):
        year, month = parse_period(label)
        return (month, year)

    def period_label(self, row):
        if row.get("year") is None or row.get("month") is None:
            return None
        return format_period(row["year"], row["month"])

    def after_restore(self, unit, table):
        # Keep SERIAL sequences ahead of the ids that were inserted explicitly
        unit.get(
            f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
            f"COALESCE(MAX(id), 0) + 1, false) FROM {table}"
        )


def create_database(settings: Settings) -> Database:
    url = settings.database_url
    if url:
        connect_args = {"sslmode": "require"} if settings.DATABASE_SSL else {}
        engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
        logger.info("Using PostgreSQL backend")
        return PostgresDatabase(engine)

    engine = create_engine(
        f"sqlite:///{settings.SQLITE_PATH}", connect_args={"check_same_thread": False}
    )
    logger.info("Using SQLite backend at %s", settings.SQLITE_PATH)
    return SqliteDatabase(engine)


def get_db(request: Request) -> Database:
    return request.app.state.db
