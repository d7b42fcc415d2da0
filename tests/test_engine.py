from __future__ import annotations

from itertools import combinations

import pandas as pd
import pytest

from fd_discovery import (
    FrameSource,
    FunctionalDependency,
    QueryError,
    SchemaError,
    discover,
    iter_candidates,
)


# ── Candidate enumeration ─────────────────────────────────────────────────────

def test_candidates_never_trivial():
    columns = ["a", "b", "c", "d"]
    for lhs, rhs in iter_candidates(columns, max_lhs=3):
        assert rhs not in lhs
        assert 1 <= len(lhs) <= 3


def test_candidate_order_is_canonical():
    assert list(iter_candidates(["a", "b", "c"], max_lhs=2)) == [
        (("a",), "b"), (("a",), "c"),
        (("b",), "a"), (("b",), "c"),
        (("c",), "a"), (("c",), "b"),
        (("a", "b"), "c"),
        (("a", "c"), "b"),
        (("b", "c"), "a"),
    ]


def test_max_lhs_larger_than_columns_is_capped():
    # n = 3 columns: 3·2 + 3·1 + 1·0 candidates
    assert len(list(iter_candidates(["a", "b", "c"], max_lhs=10))) == 9


def test_invalid_max_lhs():
    with pytest.raises(ValueError):
        list(iter_candidates(["a"], max_lhs=0))
    with pytest.raises(ValueError):
        discover(FrameSource(), "t", max_lhs=0)


def test_functional_dependency_rejects_trivial():
    with pytest.raises(ValueError):
        FunctionalDependency(("a", "b"), "a")
    with pytest.raises(ValueError):
        FunctionalDependency((), "a")
    assert str(FunctionalDependency(("a", "b"), "c")) == "[a, b] -> [c]"


# ── Scenarios (run against DuckDB and the in-memory source) ───────────────────

def test_items_scenario(make_source, items_frame):
    result = discover(make_source("items", items_frame), "items")

    assert result.columns == ["id", "category", "price"]
    assert result.holds(["category"], "price")
    assert result.holds(["price"], "category")
    assert result.holds(["id"], "category")
    assert result.holds(["id"], "price")
    assert not result.holds(["category"], "id")
    assert not result.failed_candidates


def test_items_scenario_with_violation(make_source, items_frame_violated):
    result = discover(make_source("items", items_frame_violated), "items")

    assert not result.holds(["category"], "price")
    assert result.holds(["id"], "category")
    assert result.holds(["price"], "category")


def test_single_row_yields_every_candidate(make_source):
    frame = pd.DataFrame({"a": [1], "b": ["x"], "c": [2.5]})
    result = discover(make_source("one", frame), "one", max_lhs=3)

    expected = list(iter_candidates(["a", "b", "c"], max_lhs=3))
    assert [(fd.lhs, fd.rhs) for fd in result.dependencies] == expected


def test_zero_rows_yields_nothing(make_source):
    frame = pd.DataFrame({
        "a": pd.Series([], dtype="int64"),
        "b": pd.Series([], dtype="int64"),
    })
    result = discover(make_source("empty", frame), "empty")

    assert result.dependencies == []
    assert result.stats["n_rows"] == 0
    assert result.stats["n_candidates"] == 0


def test_zero_columns_yields_nothing():
    source = FrameSource({"bare": pd.DataFrame()})
    result = discover(source, "bare")
    assert result.columns == []
    assert result.dependencies == []


def test_idempotent(make_source, items_frame_violated):
    source = make_source("items", items_frame_violated)
    first = discover(source, "items")
    second = discover(source, "items")
    assert first.dependencies == second.dependencies


def test_supersets_of_valid_lhs_are_reported(make_source):
    frame = pd.DataFrame({
        "a": [1, 1, 2, 2, 3],
        "b": [1, 2, 1, 2, 1],
        "c": ["p", "p", "q", "q", "r"],
        "d": [0, 1, 0, 1, 1],
    })
    result = discover(make_source("t", frame), "t", max_lhs=3)

    found = {(frozenset(fd.lhs), fd.rhs) for fd in result.dependencies}
    for lhs, rhs in list(found):
        others = [c for c in frame.columns if c not in lhs and c != rhs]
        for extra in range(1, 3 - len(lhs) + 1):
            for added in combinations(others, extra):
                assert (lhs | set(added), rhs) in found


def test_null_rhs_values_are_ignored(make_source):
    frame = pd.DataFrame({"a": ["k", "k", None], "b": ["x", None, "y"]})
    result = discover(make_source("n", frame), "n", max_lhs=1)
    assert result.holds(["a"], "b")


def test_null_lhs_values_form_one_group(make_source):
    frame = pd.DataFrame({"a": [None, None, "k"], "b": ["y", "z", "x"]})
    result = discover(make_source("n", frame), "n", max_lhs=1)
    assert not result.holds(["a"], "b")


# ── Failure handling ──────────────────────────────────────────────────────────

class FlakySource:
    """Wraps a source and fails the validity test of one candidate."""

    def __init__(self, inner, fail_on):
        self.inner = inner
        self.fail_on = fail_on
        self.seen = []

    def list_columns(self, table):
        return self.inner.list_columns(table)

    def count_rows(self, table):
        return self.inner.count_rows(table)

    def has_violating_group(self, table, lhs, rhs):
        self.seen.append((tuple(lhs), rhs))
        if (tuple(lhs), rhs) == self.fail_on:
            raise QueryError("connection reset")
        return self.inner.has_violating_group(table, lhs, rhs)


def test_query_error_does_not_abort_run(items_frame):
    inner = FrameSource({"items": items_frame})
    baseline = discover(inner, "items")

    flaky = FlakySource(inner, fail_on=(("category",), "price"))
    result = discover(flaky, "items")

    assert flaky.seen == list(iter_candidates(["id", "category", "price"]))
    assert result.failed_candidates == [(("category",), "price")]
    assert result.stats["n_query_errors"] == 1
    assert not result.holds(["category"], "price")
    assert [fd for fd in baseline.dependencies if fd.lhs != ("category",) or fd.rhs != "price"] \
        == result.dependencies


def test_query_error_is_logged(items_frame, caplog):
    flaky = FlakySource(FrameSource({"items": items_frame}), fail_on=(("id",), "price"))
    with caplog.at_level("WARNING", logger="fd_discovery.engine"):
        discover(flaky, "items")
    assert "[id] -> [price]" in caplog.text


def test_missing_table_is_fatal():
    with pytest.raises(SchemaError):
        discover(FrameSource(), "nope")


def test_stats(items_frame):
    result = discover(FrameSource({"items": items_frame}), "items", max_lhs=2)
    stats = result.stats
    assert stats["n_columns"] == 3
    assert stats["n_rows"] == 3
    assert stats["max_lhs"] == 2
    assert stats["n_candidates"] == 9
    assert stats["n_dependencies"] == result.n_dependencies
    assert stats["n_query_errors"] == 0
