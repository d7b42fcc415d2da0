"""
fd_discovery
============
Functional dependency discovery against a live relational table.

Public API
----------
  from fd_discovery import DuckDBSource, discover, prepare, print_report

  with DuckDBSource.connect() as source:
      prepare(source, "items", frame=df)
      result = discover(source, "items", max_lhs=3)
  print_report(result)

``discover`` tests every candidate (L, R) with 1 ≤ |L| ≤ max_lhs and R ∉ L
through one grouped distinct-count query and returns a DiscoveryResult:

  result.dependencies      : list[FunctionalDependency]  – in canonical order
  result.failed_candidates : list[(lhs, rhs)]            – QueryError'd tests
  result.stats             : dict                        – run counters

Sources: DuckDBSource, PostgresSource (SQL) and FrameSource (pandas,
stripped partitions).
"""

from .combinations import generate_combinations
from .engine import (
    DEFAULT_MAX_LHS,
    DiscoveryResult,
    FunctionalDependency,
    discover,
    iter_candidates,
)
from .errors import DiscoveryError, QueryError, SchemaError, SetupError
from .frame_source import FrameSource
from .report import format_report, print_report, save_results, to_frame
from .seed import load_csv, load_script, prepare
from .sources import DuckDBSource, PostgresSource, SQLSource

__all__ = [
    "DEFAULT_MAX_LHS",
    "DiscoveryError",
    "DiscoveryResult",
    "DuckDBSource",
    "FrameSource",
    "FunctionalDependency",
    "PostgresSource",
    "QueryError",
    "SQLSource",
    "SchemaError",
    "SetupError",
    "discover",
    "format_report",
    "generate_combinations",
    "iter_candidates",
    "load_csv",
    "load_script",
    "prepare",
    "print_report",
    "save_results",
    "to_frame",
]
