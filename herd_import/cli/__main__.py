from __future__ import annotations

import argparse
import logging
import os
import sys
from contextlib import ExitStack
from pathlib import Path

from dotenv import load_dotenv

from herd_import.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from herd_import.csvio.reader import preview_csv_file
from herd_import.csvio.writer import render_template
from herd_import.db.connection import db_cursor
from herd_import.db.storage import MemoryStorage, PostgresStorage
from herd_import.logging.init import log_summary, set_debug, setup_logging
from herd_import.models.config_models import ImportConfig
from herd_import.models.import_result import UnknownDataKindError
from herd_import.models.processing_result import ProcessingResult
from herd_import.services.orchestrator import ProcessingError, process_all
from herd_import.services.summary import render_summary_line

"""CLI entrypoint: batch import of the CSV files of one directory.

Flow:
- Load .env (override), then config/import.yml
- Connect to PostgreSQL; fall back to the in-memory storage (mock mode) when the
  database is unreachable or DISABLE_DB_CONNECT=1
- Import mapped files in config order, log the SUMMARY line, exit with
  0 (all ok) / 2 (failed rows or files) / 1 (fatal)
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv.

    override=True: .env の値で既存環境変数を上書きし、DB 接続情報を最優先にする。
    """
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="herd-import", description="Herd CSV -> PostgreSQL bulk importer")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print headers & first rows of mapped files then exit")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to the YAML config")
    p.add_argument("--template", metavar="TYPE", help="Print the CSV template of a data type then exit")
    return p.parse_args(argv)


def _print_template(data_type: str) -> int:
    try:
        sys.stdout.write(render_template(data_type))
    except UnknownDataKindError as e:
        print(f"template: {e}")
        return EXIT_FATAL
    return EXIT_SUCCESS_ALL


def _inspect_data(cfg: ImportConfig) -> int:
    directory = Path(cfg.source_directory)
    if not directory.exists():
        print(f"inspect: directory not found: {directory}")
        return EXIT_FATAL
    for file_name, data_type in cfg.file_mappings.items():
        path = directory / file_name
        if not path.exists():
            print(f"FILE: {file_name} ({data_type}) missing")
            continue
        try:
            preview = preview_csv_file(path)
        except (ValueError, UnicodeDecodeError) as e:  # pandas ParserError / EmptyDataError
            print(f"FILE: {file_name} ({data_type}) read_error: {e}")
            continue
        print(f"FILE: {file_name} ({data_type}) cols={preview.columns}")
        print("    sample_rows=", preview.rows)
    return EXIT_SUCCESS_ALL


def _run(cfg: ImportConfig, logger: logging.Logger) -> tuple[ProcessingResult, str]:
    """Process all files; returns (result, mode).

    Raises:
        ProcessingError: the source directory cannot be scanned
    """
    # テスト等で DB 接続を完全に無効化したい場合 DISABLE_DB_CONNECT=1
    if os.getenv("DISABLE_DB_CONNECT") == "1":
        logger.debug("DB connect disabled via DISABLE_DB_CONNECT=1 -> mock mode")
        return process_all(cfg, MemoryStorage()), "mock"
    with ExitStack() as stack:
        # mock へ落とすのは接続失敗のときだけ (取込中の DB エラーはファイル単位で失敗扱い)
        try:
            cur = stack.enter_context(db_cursor(cfg.database))
        except Exception as db_e:  # psycopg2.OperationalError etc.
            logger.info(f"DB connection failed -> fallback to mock mode: {db_e}")
            return process_all(cfg, MemoryStorage()), "mock"
        storage = PostgresStorage(cur, page_size=cfg.page_size)
        return process_all(cfg, storage), "live"


def _exit_code(result: ProcessingResult) -> int:
    if result.failed_files > 0 or result.total_failed_rows > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む (テストで main([]) を呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.template:
        return _print_template(args.template)

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    directory = Path(cfg.source_directory)
    if not directory.exists():
        logger.error(f"directory not found: {directory}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg)

    logger.info(f"Processing files from: {directory}")
    try:
        result, db_mode = _run(cfg, logger)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    logger.info(f"mode={db_mode} total_rows={result.total_inserted_rows}")

    total_files = result.success_files + result.failed_files
    summary_line = render_summary_line(total_files, result)
    # log_summary が "SUMMARY " ラベルを付けるので除去して渡す
    log_summary(summary_line.removeprefix("SUMMARY "))

    return _exit_code(result)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
