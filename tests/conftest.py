from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from fd_discovery import DuckDBSource, FrameSource, prepare

REPO_ROOT = Path(__file__).resolve().parents[1]
CARROS_SQL = REPO_ROOT / "data" / "carros.sql"


@pytest.fixture
def items_frame() -> pd.DataFrame:
    return pd.DataFrame({
        "id":       [1, 2, 3],
        "category": ["A", "A", "B"],
        "price":    [10, 10, 20],
    })


@pytest.fixture
def items_frame_violated(items_frame) -> pd.DataFrame:
    extra = pd.DataFrame({"id": [4], "category": ["A"], "price": [99]})
    return pd.concat([items_frame, extra], ignore_index=True)


@pytest.fixture
def duck():
    source = DuckDBSource.connect()
    yield source
    source.close()


@pytest.fixture
def duck_items(duck, items_frame):
    prepare(duck, "items", frame=items_frame)
    return duck


@pytest.fixture(params=["duckdb", "frame"])
def make_source(request):
    """Factory building a source holding one table, for each backend."""
    opened = []

    def _make(table: str, frame: pd.DataFrame):
        if request.param == "duckdb":
            source = DuckDBSource.connect()
        else:
            source = FrameSource()
        prepare(source, table, frame=frame)
        opened.append(source)
        return source

    yield _make
    for source in opened:
        source.close()
