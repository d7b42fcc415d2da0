"""
fd_discovery/combinations.py
============================
Lazy k-subset enumeration over an ordered column list.

Subsets are produced by choose-without-replacement backtracking: the partial
subset is only ever extended with columns *after* the last chosen index, so

  - every k-subset is emitted exactly once,
  - columns inside a subset keep their source (schema) order,
  - subsets come out in lexicographic order of column positions.

Example (columns = a, b, c, d ; size = 2)
------------------------------------------
  (a, b)  (a, c)  (a, d)  (b, c)  (b, d)  (c, d)
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence


def generate_combinations(
    columns: Sequence[str],
    size: int,
) -> Iterator[tuple[str, ...]]:
    """
    Yield every subset of *columns* with exactly *size* elements.

    Parameters
    ----------
    columns : Sequence[str]
        Distinct column names in schema order.
    size : int
        Subset size.  ``0`` yields the empty tuple once; a size larger than
        ``len(columns)`` yields nothing.

    Yields
    ------
    tuple[str, ...]
        C(len(columns), size) subsets in lexicographic position order.
        Each call returns a fresh generator, so the sequence is restartable.

    Raises
    ------
    ValueError
        If *size* is negative.
    """
    if size < 0:
        raise ValueError(f"subset size must be >= 0, got {size}")

    pool = tuple(columns)
    n = len(pool)
    if size > n:
        return

    current: list[str] = []

    def _backtrack(start: int) -> Iterator[tuple[str, ...]]:
        if len(current) == size:
            yield tuple(current)
            return
        # Not enough columns left to complete the subset → prune the branch.
        last_start = n - (size - len(current))
        for i in range(start, last_start + 1):
            current.append(pool[i])
            yield from _backtrack(i + 1)
            current.pop()

    yield from _backtrack(0)
