"""
fd_discovery/cli.py
===================
Command-line entry point: connect → prepare → discover → report.

Usage:
  fd-discovery --config configs/carros.yaml
  fd-discovery --csv data/items.csv --table items --backend memory
  fd-discovery --config configs/carros.yaml --max-lhs 2 --results-csv out/fds.csv

Exit status is 0 on a completed run (even when some candidates could not be
evaluated) and 1 when setup, the schema read or the connection failed; in
that case no report is printed.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

import yaml

from .config import BACKENDS, Config, load_config
from .engine import discover
from .errors import SchemaError, SetupError
from .frame_source import FrameSource
from .report import print_report, save_results
from .seed import load_csv, load_script, prepare
from .sources import DuckDBSource, PostgresSource

log = logging.getLogger("fd_discovery")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="fd-discovery",
        description="Discover functional dependencies in a database table",
    )
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--table", help="table to analyse")
    parser.add_argument("--max-lhs", type=int,
                        help="maximum number of columns on the left-hand side")
    parser.add_argument("--backend", choices=BACKENDS, help="data source backend")
    parser.add_argument("--database",
                        help="DuckDB database file (default: in-memory)")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--seed-sql", help="SQL script that (re)creates the table")
    source.add_argument("--csv", help="CSV file to load into the table")
    parser.add_argument("--results-csv", help="write discovered dependencies to this CSV")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="log every validity query")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> Config:
    """Load the config file (if any) and apply command-line overrides."""
    config = load_config(args.config) if args.config else Config()

    if args.backend:
        config.database.backend = args.backend
    if args.database:
        config.database.path = args.database
    if args.table:
        config.dataset.table = args.table
    if args.seed_sql:
        config.dataset = replace(config.dataset, seed_sql=Path(args.seed_sql), csv=None)
    if args.csv:
        config.dataset = replace(config.dataset, csv=Path(args.csv), seed_sql=None)
    if args.max_lhs is not None:
        config.max_lhs = args.max_lhs
    if args.results_csv:
        config.results_csv = Path(args.results_csv)

    config.validate()
    return config


def open_source(config: Config):
    """Open the configured data source; raises ``SetupError`` when it cannot connect."""
    db = config.database
    if db.backend == "postgres":
        return PostgresSource.connect(
            host=db.host, port=db.port, dbname=db.dbname,
            user=db.user, password=db.password,
        )
    if db.backend == "memory":
        return FrameSource()
    return DuckDBSource.connect(db.path)


def run(config: Config) -> int:
    """Execute one discovery run; returns the process exit status."""
    table = config.dataset.table

    try:
        source = open_source(config)
    except SetupError as exc:
        log.error(f"Connection failed: {exc}")
        return 1
    log.info(f"Connected to {config.database.backend} data source")

    try:
        if config.dataset.seed_sql:
            prepare(source, table, script=load_script(config.dataset.seed_sql))
        elif config.dataset.csv:
            prepare(source, table, frame=load_csv(config.dataset.csv))

        log.info("Starting functional dependency discovery ...")
        result = discover(source, table, max_lhs=config.max_lhs)
    except SetupError as exc:
        log.error(f"Could not prepare table {table!r}: {exc}")
        return 1
    except SchemaError as exc:
        log.error(f"Could not read schema of {table!r}: {exc}")
        return 1
    finally:
        source.close()
        log.info("Disconnected from data source")

    if not result.columns:
        print(f"No columns found in table {table!r}.")
        return 0

    print_report(result)

    if config.results_csv:
        save_results(result, config.results_csv)
        log.info(f"Results saved  ->  {config.results_csv}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = build_config(args)
    except (ValueError, OSError, yaml.YAMLError) as exc:
        log.error(f"Invalid configuration: {exc}")
        return 1
    return run(config)


if __name__ == "__main__":
    sys.exit(main())
