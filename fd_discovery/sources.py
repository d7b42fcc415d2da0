"""
fd_discovery/sources.py
=======================
SQL data source adapters.

  DuckDBSource    – in-process DuckDB database (file or ``:memory:``)
  PostgresSource  – PostgreSQL server through psycopg2

Both wrap one live connection that is passed in explicitly and used for every
call of a run; there is no module-level connection.  Driver exceptions are
translated into the fd_discovery taxonomy:

  catalog / row-count failures  →  SchemaError
  validity-query failures       →  QueryError
  seeding failures              →  SetupError

A table's column list is read from ``information_schema`` once per
``list_columns`` call and kept as the trusted identifier set for that table.
``has_violating_group`` refuses any column outside it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import duckdb
import pandas as pd
import psycopg2

from .errors import QueryError, SchemaError, SetupError
from .sql import (
    COLUMNS_QUERY,
    TABLE_EXISTS_QUERY,
    check_candidate,
    count_query,
    drop_query,
    quote_ident,
    violation_query,
)

log = logging.getLogger(__name__)


class SQLSource:
    """
    Shared adapter logic over a DB-API style connection.

    Subclasses provide the driver hooks ``_fetchall`` / ``_execute``, the
    parameter placeholder and the driver's base exception class.
    """

    placeholder: str = "?"
    driver_error: type[Exception] = Exception

    def __init__(self, conn) -> None:
        self.conn = conn
        self._trusted: dict[str, list[str]] = {}

    # ── Driver hooks ──────────────────────────────────────────────────────────

    def _fetchall(self, query: str, params: Sequence = ()) -> list[tuple]:
        raise NotImplementedError

    def _execute(self, query: str) -> None:
        raise NotImplementedError

    # ── Adapter surface ──────────────────────────────────────────────────────

    def list_columns(self, table: str) -> list[str]:
        """
        Return the columns of *table* in declaration order.

        Raises
        ------
        SchemaError
            If the table does not exist or the catalog query fails.
        """
        try:
            ((n_tables,),) = self._fetchall(
                TABLE_EXISTS_QUERY.format(ph=self.placeholder), (table,)
            )
            rows = self._fetchall(
                COLUMNS_QUERY.format(ph=self.placeholder), (table,)
            )
        except self.driver_error as exc:
            raise SchemaError(f"could not read columns of {table!r}: {exc}") from exc

        if not n_tables:
            raise SchemaError(f"table {table!r} does not exist")

        columns = [row[0] for row in rows]
        self._trusted[table] = columns
        return list(columns)

    def count_rows(self, table: str) -> int:
        """Number of rows in *table*; the table must exist (``SchemaError``)."""
        if table not in self._trusted:
            self.list_columns(table)
        try:
            ((n_rows,),) = self._fetchall(count_query(table))
        except self.driver_error as exc:
            raise SchemaError(f"could not count rows of {table!r}: {exc}") from exc
        return int(n_rows)

    def has_violating_group(
        self,
        table: str,
        lhs: Sequence[str],
        rhs: str,
    ) -> bool:
        """
        True iff some group of equal *lhs* values holds >1 distinct *rhs* value.

        Raises
        ------
        QueryError
            Untrusted identifiers (table columns not yet listed, or a column
            outside that list) or any driver error while running the probe.
        """
        trusted = self._trusted.get(table)
        if trusted is None:
            raise QueryError(f"columns of {table!r} have not been listed")
        check_candidate(trusted, lhs, rhs)

        query = violation_query(table, lhs, rhs)
        log.debug(query)
        try:
            rows = self._fetchall(query)
        except self.driver_error as exc:
            raise QueryError(
                f"validity query [{', '.join(lhs)}] -> [{rhs}] failed: {exc}"
            ) from exc
        return len(rows) > 0

    # ── Setup surface ────────────────────────────────────────────────────────

    def drop_table(self, table: str) -> None:
        try:
            self._execute(drop_query(table))
        except self.driver_error as exc:
            raise SetupError(f"could not drop {table!r}: {exc}") from exc
        self._trusted.pop(table, None)

    def execute_script(self, script: str) -> None:
        try:
            self._execute(script)
        except self.driver_error as exc:
            raise SetupError(f"seed script failed: {exc}") from exc

    def load_frame(self, table: str, frame: pd.DataFrame) -> None:
        raise NotImplementedError

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def close(self) -> None:
        self.conn.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


# ── DuckDB ────────────────────────────────────────────────────────────────────

class DuckDBSource(SQLSource):
    """Adapter over a ``duckdb.DuckDBPyConnection``."""

    placeholder = "?"
    driver_error = duckdb.Error

    @classmethod
    def connect(cls, path: str = ":memory:") -> DuckDBSource:
        try:
            conn = duckdb.connect(path)
        except duckdb.Error as exc:
            raise SetupError(f"could not open DuckDB database {path!r}: {exc}") from exc
        return cls(conn)

    def _fetchall(self, query: str, params: Sequence = ()) -> list[tuple]:
        if params:
            return self.conn.execute(query, list(params)).fetchall()
        return self.conn.execute(query).fetchall()

    def _execute(self, query: str) -> None:
        self.conn.execute(query)

    def load_frame(self, table: str, frame: pd.DataFrame) -> None:
        """Materialize *frame* as a new table, keeping its column order."""
        view = "__fd_seed_frame"
        try:
            self.conn.register(view, frame)
            try:
                self.conn.execute(
                    f"CREATE TABLE {quote_ident(table)} AS SELECT * FROM {quote_ident(view)}"
                )
            finally:
                self.conn.unregister(view)
        except duckdb.Error as exc:
            raise SetupError(f"could not load data into {table!r}: {exc}") from exc


# ── PostgreSQL ────────────────────────────────────────────────────────────────

# pandas dtype kind → PostgreSQL column type used when seeding from a frame
_PG_TYPES: dict[str, str] = {
    "i": "BIGINT",
    "u": "BIGINT",
    "f": "DOUBLE PRECISION",
    "b": "BOOLEAN",
}


class PostgresSource(SQLSource):
    """
    Adapter over a psycopg2 connection.

    The connection runs in autocommit mode: a failed validity query would
    otherwise leave the transaction aborted and fail every later candidate.
    """

    placeholder = "%s"
    driver_error = psycopg2.Error

    def __init__(self, conn) -> None:
        super().__init__(conn)
        self.conn.autocommit = True

    @classmethod
    def connect(
        cls,
        host: str = "localhost",
        port: int = 5432,
        dbname: str = "postgres",
        user: str = "postgres",
        password: str | None = None,
    ) -> PostgresSource:
        try:
            conn = psycopg2.connect(
                host=host, port=port, dbname=dbname, user=user, password=password,
            )
        except psycopg2.Error as exc:
            raise SetupError(
                f"could not connect to PostgreSQL at {host}:{port}/{dbname}: {exc}"
            ) from exc
        return cls(conn)

    def _fetchall(self, query: str, params: Sequence = ()) -> list[tuple]:
        with self.conn.cursor() as cur:
            if params:
                cur.execute(query, tuple(params))
            else:
                cur.execute(query)
            return cur.fetchall()

    def _execute(self, query: str) -> None:
        with self.conn.cursor() as cur:
            cur.execute(query)

    def load_frame(self, table: str, frame: pd.DataFrame) -> None:
        """Create *table* from the frame's dtypes and bulk-insert its rows."""
        col_defs = ", ".join(
            f"{quote_ident(str(c))} {_PG_TYPES.get(frame[c].dtype.kind, 'TEXT')}"
            for c in frame.columns
        )
        names = ", ".join(quote_ident(str(c)) for c in frame.columns)
        marks = ", ".join(["%s"] * len(frame.columns))
        rows = frame.astype(object).where(frame.notna(), None)

        try:
            with self.conn.cursor() as cur:
                cur.execute(f"CREATE TABLE {quote_ident(table)} ({col_defs})")
                cur.executemany(
                    f"INSERT INTO {quote_ident(table)} ({names}) VALUES ({marks})",
                    [tuple(r) for r in rows.itertuples(index=False, name=None)],
                )
        except psycopg2.Error as exc:
            raise SetupError(f"could not load data into {table!r}: {exc}") from exc
