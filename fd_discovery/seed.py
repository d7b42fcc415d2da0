"""
fd_discovery/seed.py
====================
Prepare the table a run will analyse: drop it if present, then recreate it
from a SQL seed script or from a pandas DataFrame.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from .errors import SchemaError, SetupError

log = logging.getLogger(__name__)


def load_script(path: str | Path) -> str:
    """Read a SQL seed file."""
    path = Path(path)
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SetupError(f"could not read seed script {path}: {exc}") from exc


def load_csv(path: str | Path) -> pd.DataFrame:
    """Read a CSV file to seed a table from."""
    path = Path(path)
    try:
        return pd.read_csv(path)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise SetupError(f"could not read CSV {path}: {exc}") from exc


def prepare(
    source,
    table: str,
    script: str | None = None,
    frame: pd.DataFrame | None = None,
) -> None:
    """
    Drop and recreate *table* so that discovery starts from a known state.

    Exactly one of *script* / *frame* must be given.  A script is executed
    as-is and must create *table* itself; a frame is materialized under the
    name *table*.

    Raises
    ------
    SetupError
        On bad arguments, any failure while seeding, or when the table does
        not exist afterwards.
    """
    if (script is None) == (frame is None):
        raise SetupError("prepare() needs exactly one of script= or frame=")

    source.drop_table(table)
    if script is not None:
        source.execute_script(script)
    else:
        source.load_frame(table, frame)

    try:
        columns = source.list_columns(table)
    except SchemaError as exc:
        raise SetupError(f"table {table!r} was not created: {exc}") from exc

    log.info(f"Table {table!r} prepared and populated ({len(columns)} columns)")
