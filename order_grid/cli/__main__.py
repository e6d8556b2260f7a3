from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from order_grid.clients.api import ExternalServiceError, OrderSaveClient
from order_grid.config.loader import DEFAULT_CONFIG_PATH, ConfigError, config_from_dict, load_config
from order_grid.csvio.codec import read_csv_file, write_csv_file
from order_grid.db.order_store import PostgresOrderSaver
from order_grid.logging.init import log_summary, setup_logging
from order_grid.logging.notice_log import NoticeJournal
from order_grid.models.config_models import GridConfig
from order_grid.models.row import Row
from order_grid.services.dispatcher import OrderGrid
from order_grid.services.summary import render_summary_line

"""CLI entrypoint.

Batch front-end for the grid engine:
- Load .env and config
- Import a CSV file into a fresh grid (one commit)
- Report validation issues, optionally export the grid back to CSV
- Optionally save through the configured save collaborator (http | postgres)
- Print the SUMMARY line and persist notices to logs/
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_INVALID = 2  # validation issues (with --validate) or failed save


@contextmanager
def _db_connection(cfg: GridConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Provide a psycopg2 connection for the postgres save mode.

    Resolution order: DATABASE_URL / PGDSN, then individual PG* variables,
    then the config database section as fallback.
    """
    import psycopg2  # type: ignore

    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if not dsn:
        host = os.getenv("PGHOST", db_cfg.host or "localhost")
        port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
        user = os.getenv("PGUSER", db_cfg.user or "postgres")
        password = os.getenv("PGPASSWORD", db_cfg.password or "")
        database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
        dsn = f"host={host} port={port} user={user} dbname={database}"
        if password:
            dsn += f" password={password}"

    conn = psycopg2.connect(dsn)
    conn.autocommit = False  # saver が COMMIT / ROLLBACK を管理
    try:
        yield conn
    finally:
        conn.close()


class _MockSaver:
    """Used when DISABLE_DB_CONNECT=1: accepts the rows without persisting."""

    def save(self, rows: Sequence[Row]) -> int:
        logging.getLogger(__name__).debug("mock save: %d rows", len(rows))
        return len(rows)


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv (its values win over the process env)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="order-grid", description="Order-entry grid batch tool")
    p.add_argument("--config", type=Path, default=None, help=f"Config YAML (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--import-csv", type=Path, default=None, help="CSV file to load into the grid")
    p.add_argument("--export-csv", type=Path, default=None, help="Write the grid to this CSV file or directory")
    p.add_argument("--validate", action="store_true", help="Exit with code 2 when validation issues exist")
    p.add_argument("--save", action="store_true", help="Save the grid via the configured save mode")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _load_grid_config(path: Path | None) -> GridConfig:
    if path is not None:
        return load_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return config_from_dict({})


def _save(grid: OrderGrid, cfg: GridConfig, logger: logging.Logger) -> bool:
    mode = cfg.save.mode
    if mode == "none":
        logger.error("save: save.mode is 'none' in config")
        return False
    if mode == "http":
        try:
            grid.saver = OrderSaveClient(cfg.api)
        except ExternalServiceError as e:
            logger.error(f"save: {e}")
            return False
        return grid.save().ok
    # postgres
    if os.getenv("DISABLE_DB_CONNECT") == "1":
        logger.debug("DB connect disabled via DISABLE_DB_CONNECT=1 -> mock mode")
        grid.saver = _MockSaver()
        return grid.save().ok
    try:
        with _db_connection(cfg) as conn:
            grid.saver = PostgresOrderSaver(conn, table=cfg.save.table)
            return grid.save().ok
    except Exception as e:  # 接続失敗: 保存失敗として報告 (グリッドは不変)
        logger.error(f"save: database connection failed: {e}")
        return False


def main(argv: list[str] | None = None) -> int:
    # NOTE: [] が与えられた場合に sys.argv[1:] が混入しないよう None のときのみ読む
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = _load_grid_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.import_csv is None:
        logger.error("--import-csv is required")
        return EXIT_FATAL
    try:
        text = read_csv_file(args.import_csv)
    except OSError as e:
        logger.error(f"csv not readable: {args.import_csv}: {e}")
        return EXIT_FATAL

    logger.info(f"Importing rows from: {args.import_csv}")
    grid = OrderGrid(config=cfg)
    result = grid.import_csv(text)
    if result.imported_rows == 0:
        logger.error(f"no importable rows in {args.import_csv}")
        return EXIT_FATAL

    issues = grid.validate()
    for issue in issues:
        logger.warning(str(issue))

    exit_code = EXIT_SUCCESS
    if args.validate and issues:
        exit_code = EXIT_INVALID

    if args.export_csv is not None:
        try:
            out = write_csv_file(args.export_csv, grid.rows, filename=cfg.export_filename)
        except OSError as e:
            logger.error(f"csv export failed: {e}")
            return EXIT_FATAL
        logger.info(f"Exported {len(grid.rows)} rows to: {out}")

    if args.save and not _save(grid, cfg, logger):
        exit_code = EXIT_INVALID

    summary_line = render_summary_line(grid.totals(), issues, grid.notices)
    log_summary(summary_line[len("SUMMARY "):])

    journal = NoticeJournal()
    journal.collect(grid.notices)
    path = journal.write()
    if path is not None:
        codes = " ".join(f"{c}={n}" for c, n in sorted(journal.counts_by_code().items()))
        logger.debug(f"notices written to {path}: {codes}")
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
