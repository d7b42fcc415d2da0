"""
fd_discovery/sql.py
===================
Query text for the SQL adapters.

Validity test
-------------
  L → R holds  ⟺  no group of rows sharing the same L-values has more than
                  one distinct R-value

  SELECT 1
  FROM "t"
  GROUP BY "l1", "l2"
  HAVING COUNT(DISTINCT "r") > 1
  LIMIT 1

  An empty result means the dependency holds.  LIMIT 1 stops the scan at the
  first violating group; only its existence matters.

Identifiers are never taken on trust: every column must belong to the list
previously read from the catalog for that table, and accepted names are
double-quoted (embedded quotes doubled) before they reach the query text.

NULL semantics are the engine's own: NULL LHS values form one group
(GROUP BY), NULL RHS values are ignored (COUNT(DISTINCT ...)).
"""

from __future__ import annotations

from collections.abc import Sequence

from .errors import QueryError

# information_schema is shared by DuckDB and PostgreSQL; the placeholder
# style differs per driver and is substituted by the caller.  Lookups are
# restricted to the current schema so same-named tables elsewhere stay out.
COLUMNS_QUERY = """
    SELECT column_name
    FROM information_schema.columns
    WHERE table_name = {ph}
      AND table_schema = current_schema()
    ORDER BY ordinal_position
"""

TABLE_EXISTS_QUERY = """
    SELECT COUNT(*)
    FROM information_schema.tables
    WHERE table_name = {ph}
      AND table_schema = current_schema()
"""


def quote_ident(name: str) -> str:
    """Double-quote an SQL identifier."""
    return '"' + name.replace('"', '""') + '"'


def check_candidate(
    trusted: Sequence[str],
    lhs: Sequence[str],
    rhs: str,
) -> None:
    """
    Reject a candidate whose identifiers are not all in *trusted*.

    Raises
    ------
    QueryError
        Empty LHS, RHS contained in the LHS, duplicate LHS columns, or any
        column missing from the trusted list.
    """
    if not lhs:
        raise QueryError("left-hand side must contain at least one column")
    if rhs in lhs:
        raise QueryError(f"right-hand column {rhs!r} also appears on the left")
    if len(set(lhs)) != len(lhs):
        raise QueryError(f"duplicate columns in left-hand side {list(lhs)}")

    known = set(trusted)
    unknown = [c for c in (*lhs, rhs) if c not in known]
    if unknown:
        raise QueryError(f"unknown column(s) {unknown}")


def violation_query(table: str, lhs: Sequence[str], rhs: str) -> str:
    """Build the violating-group probe for ``lhs → rhs`` (identifiers pre-checked)."""
    group_by = ", ".join(quote_ident(c) for c in lhs)
    return (
        f"SELECT 1 FROM {quote_ident(table)} "
        f"GROUP BY {group_by} "
        f"HAVING COUNT(DISTINCT {quote_ident(rhs)}) > 1 "
        f"LIMIT 1"
    )


def count_query(table: str) -> str:
    return f"SELECT COUNT(*) FROM {quote_ident(table)}"


def drop_query(table: str) -> str:
    return f"DROP TABLE IF EXISTS {quote_ident(table)}"
