"""
fd_discovery/engine.py
======================
Candidate enumeration and the discovery run.

Algorithm outline
-----------------
  columns ← source.list_columns(table)                     (once)
  for s = 1 .. min(K, |columns|):
      for L in generate_combinations(columns, s):          (lexicographic)
          for R in columns:                                (schema order)
              skip if R ∈ L
              L → R holds  ⟺  not source.has_violating_group(table, L, R)

Every candidate is tested exactly once and confirmed dependencies are
appended in that order, so two runs over an unchanged table produce the same
list.  Results are not reduced to minimal dependencies: if L → R holds, every
superset of L (within K) is reported as well.

Failure policy
--------------
  SchemaError from the column list / row count   → propagates, run aborts
  QueryError from one validity test              → logged, counted, the
                                                   candidate is treated as
                                                   not a dependency, the run
                                                   continues
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from .combinations import generate_combinations
from .errors import QueryError

log = logging.getLogger(__name__)

DEFAULT_MAX_LHS: int = 3

Candidate = tuple[tuple[str, ...], str]


# ── Result types ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FunctionalDependency:
    """A confirmed dependency ``lhs → rhs``."""

    lhs: tuple[str, ...]
    rhs: str

    def __post_init__(self) -> None:
        if not self.lhs:
            raise ValueError("a functional dependency needs a non-empty left-hand side")
        if self.rhs in self.lhs:
            raise ValueError(f"trivial dependency: {self.rhs!r} appears on both sides")

    def __str__(self) -> str:
        return f"[{', '.join(self.lhs)}] -> [{self.rhs}]"


@dataclass
class DiscoveryResult:
    """
    Outcome of one discovery run.

    Attributes
    ----------
    table : str
        Table the run was executed against.
    columns : list[str]
        Column list in schema order, as returned by the source.
    dependencies : list[FunctionalDependency]
        Confirmed dependencies in enumeration order.
    failed_candidates : list[Candidate]
        Candidates whose validity test raised ``QueryError``.
    stats : dict
        Counters for the run:
          - n_columns       : number of columns
          - n_rows          : number of rows
          - max_lhs         : configured maximum LHS size
          - n_candidates    : validity tests attempted
          - n_dependencies  : tests that passed
          - n_query_errors  : tests that could not be evaluated
          - wall_time_s     : elapsed time of the run
    """

    table: str
    columns: list[str]
    dependencies: list[FunctionalDependency] = field(default_factory=list)
    failed_candidates: list[Candidate] = field(default_factory=list)
    stats: dict = field(default_factory=dict)

    @property
    def n_dependencies(self) -> int:
        return len(self.dependencies)

    def holds(self, lhs: Sequence[str], rhs: str) -> bool:
        """True iff ``lhs → rhs`` was reported (LHS order does not matter)."""
        key = frozenset(lhs)
        return any(
            fd.rhs == rhs and frozenset(fd.lhs) == key for fd in self.dependencies
        )


# ── Enumeration ───────────────────────────────────────────────────────────────

def iter_candidates(
    columns: Sequence[str],
    max_lhs: int = DEFAULT_MAX_LHS,
) -> Iterator[Candidate]:
    """
    Yield every non-trivial candidate ``(L, R)`` in canonical order.

    Order is (|L| ascending, L lexicographic by column position, R in schema
    order).  Pairs with ``R ∈ L`` are never yielded.

    Raises
    ------
    ValueError
        If *max_lhs* < 1.
    """
    if max_lhs < 1:
        raise ValueError(f"max_lhs must be >= 1, got {max_lhs}")

    for size in range(1, min(max_lhs, len(columns)) + 1):
        for lhs in generate_combinations(columns, size):
            for rhs in columns:
                if rhs in lhs:
                    continue
                yield lhs, rhs


# ── Discovery run ─────────────────────────────────────────────────────────────

def discover(
    source,
    table: str,
    max_lhs: int = DEFAULT_MAX_LHS,
) -> DiscoveryResult:
    """
    Discover all functional dependencies of *table* with |LHS| ≤ *max_lhs*.

    Parameters
    ----------
    source
        Data source adapter (``DuckDBSource``, ``PostgresSource``,
        ``FrameSource`` or any object with the same three methods).
    table : str
        Table to analyse.
    max_lhs : int
        Maximum left-hand-side size K.

    Returns
    -------
    DiscoveryResult

    Raises
    ------
    SchemaError
        If the column list or row count cannot be obtained.
    ValueError
        If *max_lhs* < 1.
    """
    if max_lhs < 1:
        raise ValueError(f"max_lhs must be >= 1, got {max_lhs}")

    t0 = time.perf_counter()
    columns = source.list_columns(table)
    result = DiscoveryResult(table=table, columns=list(columns))
    stats = result.stats
    stats.update({
        "n_columns":      len(columns),
        "n_rows":         0,
        "max_lhs":        max_lhs,
        "n_candidates":   0,
        "n_dependencies": 0,
        "n_query_errors": 0,
        "wall_time_s":    0.0,
    })

    if not columns:
        log.info(f"No columns found in table {table!r}")
        stats["wall_time_s"] = time.perf_counter() - t0
        return result

    stats["n_rows"] = source.count_rows(table)
    if stats["n_rows"] == 0:
        log.info(f"Table {table!r} has no rows; nothing to test")
        stats["wall_time_s"] = time.perf_counter() - t0
        return result

    log.info(
        f"Testing candidates on {table!r}: {len(columns)} columns, "
        f"{stats['n_rows']:,} rows, max LHS size {max_lhs}"
    )

    for lhs, rhs in iter_candidates(columns, max_lhs):
        stats["n_candidates"] += 1
        try:
            violated = source.has_violating_group(table, lhs, rhs)
        except QueryError as exc:
            stats["n_query_errors"] += 1
            result.failed_candidates.append((lhs, rhs))
            log.warning(f"Could not check [{', '.join(lhs)}] -> [{rhs}]: {exc}")
            continue

        if not violated:
            result.dependencies.append(FunctionalDependency(lhs, rhs))

    stats["n_dependencies"] = len(result.dependencies)
    stats["wall_time_s"] = time.perf_counter() - t0
    log.info(
        f"Discovery finished: {stats['n_dependencies']} dependencies from "
        f"{stats['n_candidates']} candidates in {stats['wall_time_s']:.2f} s"
    )
    return result
