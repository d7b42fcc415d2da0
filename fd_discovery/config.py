"""
fd_discovery/config.py
======================
YAML run configuration.

Layout
------
  database:
    backend: duckdb          # duckdb | postgres | memory
    path: ":memory:"         # duckdb only
    host: localhost          # postgres only
    port: 5432
    dbname: postgres
    user: postgres
    password: null           # falls back to $PGPASSWORD
  dataset:
    table: carros
    seed_sql: ../data/carros.sql   # or csv: some.csv (paths relative to the file)
  discovery:
    max_lhs: 3
  output:
    results_csv: null

Every section and key is optional; missing values take the defaults below.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .engine import DEFAULT_MAX_LHS

BACKENDS = ("duckdb", "postgres", "memory")


@dataclass
class DatabaseConfig:
    backend: str = "duckdb"
    path: str = ":memory:"
    host: str = "localhost"
    port: int = 5432
    dbname: str = "postgres"
    user: str = "postgres"
    password: str | None = None


@dataclass
class DatasetConfig:
    table: str = "carros"
    seed_sql: Path | None = None
    csv: Path | None = None


@dataclass
class Config:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    dataset: DatasetConfig = field(default_factory=DatasetConfig)
    max_lhs: int = DEFAULT_MAX_LHS
    results_csv: Path | None = None

    def validate(self) -> None:
        """Raise ``ValueError`` on an unusable configuration."""
        if self.database.backend not in BACKENDS:
            raise ValueError(
                f"unknown backend {self.database.backend!r}; expected one of {BACKENDS}"
            )
        if self.max_lhs < 1:
            raise ValueError(f"max_lhs must be >= 1, got {self.max_lhs}")
        if not self.dataset.table:
            raise ValueError("dataset.table must be set")
        if self.dataset.seed_sql and self.dataset.csv:
            raise ValueError("set at most one of dataset.seed_sql / dataset.csv")
        if self.database.backend == "memory":
            if self.dataset.seed_sql:
                raise ValueError("the memory backend cannot run a seed SQL script")
            if not self.dataset.csv:
                raise ValueError("the memory backend needs dataset.csv")


def _resolve(base: Path, value) -> Path | None:
    if not value:
        return None
    path = Path(value)
    return path if path.is_absolute() else base / path


def load_config(path: str | Path) -> Config:
    """
    Read a YAML config file into a :class:`Config`.

    Relative dataset and output paths are resolved against the directory of
    the config file.  The result is validated before it is returned.
    """
    path = Path(path)
    cfg = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(cfg, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    base = path.parent

    db = _section(cfg, "database")
    ds = _section(cfg, "dataset")
    disc = _section(cfg, "discovery")
    out = _section(cfg, "output")

    try:
        config = _build(base, db, ds, disc, out)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{path}: {exc}") from exc

    # A relative DuckDB file lives next to the config, like the other paths.
    db_path = config.database.path
    if db_path != ":memory:" and not Path(db_path).is_absolute():
        config.database.path = str(base / db_path)

    config.validate()
    return config


def _section(cfg: dict, name: str) -> dict:
    section = cfg.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"section {name!r} must be a mapping, got {section!r}")
    return section


def _build(base: Path, db: dict, ds: dict, disc: dict, out: dict) -> Config:
    return Config(
        database=DatabaseConfig(
            backend=str(db.get("backend", "duckdb")).lower(),
            path=str(db.get("path", ":memory:")),
            host=db.get("host", "localhost"),
            port=int(db.get("port", 5432)),
            dbname=db.get("dbname", "postgres"),
            user=db.get("user", "postgres"),
            password=db.get("password") or os.environ.get("PGPASSWORD"),
        ),
        dataset=DatasetConfig(
            table=ds.get("table", "carros"),
            seed_sql=_resolve(base, ds.get("seed_sql")),
            csv=_resolve(base, ds.get("csv")),
        ),
        max_lhs=int(disc.get("max_lhs", DEFAULT_MAX_LHS)),
        results_csv=_resolve(base, out.get("results_csv")),
    )
