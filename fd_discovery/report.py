"""
fd_discovery/report.py
======================
Console and CSV output of a discovery run.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from .engine import DiscoveryResult

_SEP = "=" * 50


def format_report(result: DiscoveryResult) -> list[str]:
    """
    Render *result* as report lines.

    Layout
    ------
      ==================================================
      Functional dependency discovery complete
      Table: carros
      Columns: [id, marca, modelo]
      Total valid dependencies: 4
      ==================================================
      [id] -> [marca]
      ...
    """
    lines = [
        _SEP,
        "Functional dependency discovery complete",
        f"Table: {result.table}",
        f"Columns: [{', '.join(result.columns)}]",
        f"Total valid dependencies: {result.n_dependencies}",
        _SEP,
    ]
    lines.extend(str(fd) for fd in result.dependencies)

    if result.failed_candidates:
        lines.append("")
        lines.append(
            f"Note: {len(result.failed_candidates)} candidate(s) could not be "
            f"evaluated and were counted as non-dependencies."
        )
    return lines


def print_report(result: DiscoveryResult) -> None:
    print("\n".join(format_report(result)))


def to_frame(result: DiscoveryResult) -> pd.DataFrame:
    """One row per dependency: ``lhs`` (comma-joined), ``rhs``, ``lhs_size``."""
    return pd.DataFrame(
        [
            {"lhs": ", ".join(fd.lhs), "rhs": fd.rhs, "lhs_size": len(fd.lhs)}
            for fd in result.dependencies
        ],
        columns=["lhs", "rhs", "lhs_size"],
    )


def save_results(result: DiscoveryResult, out_path: Path) -> None:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    to_frame(result).to_csv(out_path, index=False)
