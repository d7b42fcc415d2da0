"""
fd_discovery/frame_source.py
============================
In-memory data source over pandas DataFrames.

Implements the same adapter surface as the SQL sources (``list_columns``,
``count_rows``, ``has_violating_group``, ``close``) so the engine can run
against a CSV file or a test fixture without a database.

Validity tests use stripped partitions.  SP(L) is cached per (table, L) and
built from any cached SP(L \\ {c}) with one ``product_with`` call, so a
level-wise run pays one partition product per LHS instead of a full regroup.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np
import pandas as pd

from .errors import QueryError, SchemaError, SetupError
from .partition import StrippedPartition, lhs_codes, rhs_codes
from .sql import check_candidate

log = logging.getLogger(__name__)


class FrameSource:
    """Adapter holding named DataFrames as tables."""

    def __init__(self, tables: dict[str, pd.DataFrame] | None = None) -> None:
        self._tables: dict[str, pd.DataFrame] = {}
        self._sp_cache: dict[tuple[str, frozenset[str]], StrippedPartition] = {}
        self._lhs_codes: dict[tuple[str, str], np.ndarray] = {}
        self._rhs_codes: dict[tuple[str, str], np.ndarray] = {}
        for name, frame in (tables or {}).items():
            self.load_frame(name, frame)

    # ── Setup surface ────────────────────────────────────────────────────────

    def drop_table(self, table: str) -> None:
        self._tables.pop(table, None)
        self._forget(table)

    def load_frame(self, table: str, frame: pd.DataFrame) -> None:
        if table in self._tables:
            raise SetupError(f"table {table!r} already exists")
        frame = frame.reset_index(drop=True)
        frame.columns = [str(c) for c in frame.columns]
        self._tables[table] = frame
        self._forget(table)

    def execute_script(self, script: str) -> None:
        raise SetupError("the in-memory source cannot execute SQL scripts")

    # ── Adapter surface ──────────────────────────────────────────────────────

    def list_columns(self, table: str) -> list[str]:
        frame = self._frame(table)
        return [str(c) for c in frame.columns]

    def count_rows(self, table: str) -> int:
        return len(self._frame(table))

    def has_violating_group(
        self,
        table: str,
        lhs: Sequence[str],
        rhs: str,
    ) -> bool:
        try:
            frame = self._frame(table)
        except SchemaError as exc:
            raise QueryError(str(exc)) from exc
        check_candidate(self.list_columns(table), lhs, rhs)

        sp = self._partition(table, frozenset(lhs))
        key = (table, rhs)
        if key not in self._rhs_codes:
            self._rhs_codes[key] = rhs_codes(frame[rhs])
        return sp.has_violation(self._rhs_codes[key])

    def close(self) -> None:
        self._sp_cache.clear()
        self._lhs_codes.clear()
        self._rhs_codes.clear()

    def __enter__(self) -> FrameSource:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ── Internals ─────────────────────────────────────────────────────────────

    def _frame(self, table: str) -> pd.DataFrame:
        try:
            return self._tables[table]
        except KeyError:
            raise SchemaError(f"table {table!r} does not exist") from None

    def _forget(self, table: str) -> None:
        for cache in (self._sp_cache, self._lhs_codes, self._rhs_codes):
            for key in [k for k in cache if k[0] == table]:
                del cache[key]

    def _codes(self, table: str, col: str) -> np.ndarray:
        key = (table, col)
        if key not in self._lhs_codes:
            self._lhs_codes[key] = lhs_codes(self._tables[table][col])
        return self._lhs_codes[key]

    def _partition(self, table: str, attrs: frozenset[str]) -> StrippedPartition:
        cached = self._sp_cache.get((table, attrs))
        if cached is not None:
            return cached

        if len(attrs) == 1:
            (col,) = attrs
            sp = StrippedPartition.from_codes(self._codes(table, col))
        else:
            # Extend from a cached subset when one exists, else recurse on
            # the subset without the first column (sorted for determinism).
            ordered = sorted(attrs)
            base_col = next(
                (c for c in ordered if (table, attrs - {c}) in self._sp_cache),
                ordered[0],
            )
            base = self._partition(table, attrs - {base_col})
            sp = base.product_with(self._codes(table, base_col))

        self._sp_cache[(table, attrs)] = sp
        log.debug(f"SP{sorted(attrs)} on {table}: {sp.n_clusters} clusters")
        return sp
