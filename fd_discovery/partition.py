"""
fd_discovery/partition.py
=========================
Stripped Partition (SP) – grouping structure behind the in-memory source.

A partition π(X) groups rows by their combined X-values into equivalence
classes.  The *stripped* variant discards singleton classes (rows with a
unique X-value), because a singleton can never hold two different RHS values.

Theory
------
  L → R holds  ⟺  every class C ∈ π(L) has at most one distinct R-value
               ⟺  not SP(L).has_violation(codes_R)

  SP(L ∪ {A}) is computed incrementally:
    for each class C ∈ SP(L):
      split C into sub-groups by A-code
      keep sub-groups of size ≥ 2 → new classes of SP(L ∪ {A})

Columns enter as integer codes from ``pd.factorize``.  The NULL policy is
fixed by how the codes are produced (see ``lhs_codes`` / ``rhs_codes``):
NULL is an ordinary grouping value on the left and is ignored on the right,
the same as GROUP BY / COUNT(DISTINCT ...) in SQL.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass

import numpy as np
import pandas as pd

NULL_CODE = -1


def lhs_codes(series: pd.Series) -> np.ndarray:
    """Factorize a grouping column; NULLs share one ordinary code."""
    codes, _ = pd.factorize(series, use_na_sentinel=False)
    return codes


def rhs_codes(series: pd.Series) -> np.ndarray:
    """Factorize a dependent column; NULLs map to ``NULL_CODE``."""
    codes, _ = pd.factorize(series, use_na_sentinel=True)
    return codes


@dataclass
class StrippedPartition:
    """
    Stripped partition of rows induced by a set of attributes X.

    Attributes
    ----------
    clusters : list[np.ndarray]
        Equivalence classes (row-index arrays) of size ≥ 2.
    n_rows : int
        Total number of rows in the table.
    """

    clusters: list[np.ndarray]
    n_rows: int

    # ── Construction ─────────────────────────────────────────────────────────

    @classmethod
    def from_codes(cls, codes: np.ndarray) -> StrippedPartition:
        """
        Build the single-attribute SP from factorized column codes.

        Parameters
        ----------
        codes : np.ndarray, shape (n_rows,)
            Integer codes, equal codes meaning equal values.

        Returns
        -------
        StrippedPartition
            Groups of row indices sharing the same code, singletons removed.
        """
        groups: dict[int, list[int]] = defaultdict(list)
        for idx, code in enumerate(codes):
            groups[code].append(idx)

        return cls(
            clusters=[np.asarray(g) for g in groups.values() if len(g) >= 2],
            n_rows=len(codes),
        )

    # ── Metrics ───────────────────────────────────────────────────────────────

    @property
    def n_clusters(self) -> int:
        """Number of non-singleton equivalence classes."""
        return len(self.clusters)

    # ── Core operations ───────────────────────────────────────────────────────

    def product_with(self, codes: np.ndarray) -> StrippedPartition:
        """
        Compute SP(X) ⊗ SP({A}) given the codes of A.

        Each class C ∈ SP(X) is split by A.  Sub-groups of size ≥ 2 become
        the classes of SP(X ∪ {A}).  O(n_rows) in the worst case.
        """
        new_clusters: list[np.ndarray] = []

        for cluster in self.clusters:
            sub_groups: dict[int, list[int]] = defaultdict(list)
            for row in cluster:
                sub_groups[codes[row]].append(row)
            for sub in sub_groups.values():
                if len(sub) >= 2:
                    new_clusters.append(np.asarray(sub))

        return StrippedPartition(clusters=new_clusters, n_rows=self.n_rows)

    def has_violation(self, codes: np.ndarray) -> bool:
        """
        Return True iff some class holds two different non-NULL values of A.

        Exits on the first violating class.

        Parameters
        ----------
        codes : np.ndarray, shape (n_rows,)
            RHS codes from ``rhs_codes``; ``NULL_CODE`` entries are skipped.
        """
        for cluster in self.clusters:
            values = codes[cluster]
            values = values[values != NULL_CODE]
            if values.size > 1 and (values != values[0]).any():
                return True
        return False
