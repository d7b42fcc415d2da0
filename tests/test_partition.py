import numpy as np
import pandas as pd

from fd_discovery.partition import NULL_CODE, StrippedPartition, lhs_codes, rhs_codes


def _clusters(sp):
    return sorted(tuple(int(i) for i in c) for c in sp.clusters)


def test_from_codes_strips_singletons():
    sp = StrippedPartition.from_codes(np.array([0, 1, 0, 2, 1]))
    assert _clusters(sp) == [(0, 2), (1, 4)]
    assert sp.n_rows == 5
    assert sp.n_clusters == 2


def test_product_with_splits_classes():
    sp = StrippedPartition.from_codes(np.array([0, 0, 0, 1, 1]))
    product = sp.product_with(np.array([5, 5, 6, 7, 7]))
    assert _clusters(product) == [(0, 1), (3, 4)]


def test_has_violation():
    sp = StrippedPartition.from_codes(np.array([0, 0, 1, 1]))
    assert not sp.has_violation(np.array([3, 3, 4, 4]))
    assert sp.has_violation(np.array([3, 3, 4, 5]))


def test_null_rhs_ignored():
    sp = StrippedPartition.from_codes(np.array([0, 0, 0]))
    assert not sp.has_violation(np.array([2, NULL_CODE, 2]))
    assert not sp.has_violation(np.array([NULL_CODE, NULL_CODE, NULL_CODE]))


def test_null_codes_policy():
    series = pd.Series(["x", None, "x", None])
    left = lhs_codes(series)
    right = rhs_codes(series)
    assert left[1] == left[3] != left[0]
    assert right[1] == right[3] == NULL_CODE
