from __future__ import annotations

import argparse
import json
import os
import sys
from contextlib import contextmanager
from pathlib import Path

from dotenv import load_dotenv

from fleet_ingest.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from fleet_ingest.logging.init import log_summary, set_debug, setup_logging
from fleet_ingest.logging.warning_log import WarningLogBuffer
from fleet_ingest.models.config_models import AppConfig, DatabaseConfig
from fleet_ingest.models.parse_result import ParseResult
from fleet_ingest.services.orchestrator import process_files
from fleet_ingest.services.summary import render_file_line, render_summary_line

"""CLI entrypoint: parse uploaded order / partner sheets.

Flow:
- Load .env (override) and config/ingest.yml (or --config)
- Parse each file argument (.csv / .xlsx / .xls)
- Log warnings, print a SUMMARY line per file plus a run total
- With --persist, write orders / partners to PostgreSQL per file transaction
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


@contextmanager
def _db_connection(db_cfg: DatabaseConfig):  # pragma: no cover (thin wrapper)
    """Provide a psycopg2 cursor.

    接続情報の優先順位:
        1. DATABASE_URL / PGDSN (.env は main() 冒頭で上書き読み込み済み)
        2. 個別 PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
        3. config の database セクション (不足分のフォールバック)
    """
    import psycopg2

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
    # トランザクション境界は orchestrator 側で BEGIN/COMMIT を発行する
    conn.autocommit = True
    cur = conn.cursor()
    try:
        yield cur
    finally:
        cur.close()
        conn.close()


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="fleet-ingest", description="Parse order / partner sheets (.csv, .xlsx, .xls)"
    )
    p.add_argument("files", nargs="+", type=Path, help="Upload files to parse")
    p.add_argument("--config", type=Path, default=None, help=f"Config YAML (default: {DEFAULT_CONFIG_PATH} if present)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--json", action="store_true", help="Print each parse result as a JSON line on stdout (logs go to stderr)")
    p.add_argument("--persist", action="store_true", help="Insert parsed records into PostgreSQL")
    p.add_argument("--org-id", default=None, help="Organization id to tag persisted records with")
    p.add_argument("--job-name", default=None, help="With --persist, seed an optimization job per file")
    return p.parse_args(argv)


def _load_app_config(path: Path | None) -> AppConfig:
    if path is not None:
        return load_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return AppConfig()


def _print_json(path: Path, result: ParseResult) -> None:
    payload = {"file": path.name, **result.to_dict()}
    print(json.dumps(payload, ensure_ascii=False))


def main(argv: list[str] | None = None) -> int:
    # None のときのみ sys.argv を読む (テストで main([...]) を直接呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    # --json 時の stdout は JSON Lines 専用、ログ行は stderr へ
    logger = setup_logging(stream=sys.stderr if args.json else sys.stdout)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    load_dotenv(dotenv_path=Path(".env"), override=True)

    try:
        cfg = _load_app_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.persist and not args.org_id:
        logger.error("--persist requires --org-id")
        return EXIT_FATAL

    warning_log = WarningLogBuffer()
    on_result = _print_json if args.json else None

    if args.persist and os.getenv("DISABLE_DB_CONNECT") != "1":
        try:
            with _db_connection(cfg.database) as cur:
                result = process_files(
                    args.files,
                    cfg.ingest,
                    cursor=cur,
                    org_id=args.org_id,
                    job_name=args.job_name,
                    warning_log=warning_log,
                    on_result=on_result,
                )
        except Exception as db_e:
            logger.error(f"database: {db_e}")
            return EXIT_FATAL
    else:
        if args.persist:
            logger.info("DB connect disabled via DISABLE_DB_CONNECT=1 -> parse only")
        result = process_files(args.files, cfg.ingest, warning_log=warning_log, on_result=on_result)

    log_path = warning_log.flush()
    if log_path is not None:
        logger.info(f"warnings written to {log_path}")

    for stat in result.file_stats or []:
        log_summary(render_file_line(stat)[len("SUMMARY "):])
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
