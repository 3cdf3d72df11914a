from __future__ import annotations

import argparse
import sys
from collections.abc import Callable
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

from clinic_import.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from clinic_import.excel.reader import ImportFileError
from clinic_import.logging.error_log import ErrorLogBuffer
from clinic_import.logging.init import log_summary, setup_logging
from clinic_import.models.drafts import ImportKind
from clinic_import.services.preview import render_preview
from clinic_import.services.session import ImportSession
from clinic_import.services.summary import render_summary_line
from clinic_import.store import StoreError, open_store

"""CLI entrypoint.

Flow:
- Load .env and config/import.yml, open the configured record store
- Read the spreadsheet, stage its rows and print the preview table
- Drop rows given with --remove, then ask for confirmation (or --yes)
- Commit row by row and print the SUMMARY line
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _iso_date(value: str) -> str:
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not a YYYY-MM-DD date: {value}") from e


def _index_list(value: str) -> list[int]:
    try:
        return [int(p) for p in value.split(",") if p.strip()]
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected comma separated row indexes: {value}") from e


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="clinic-import", description="Import a spreadsheet into the clinic record store"
    )
    p.add_argument("kind", choices=[k.value for k in ImportKind], help="What the file contains")
    p.add_argument("file", type=Path, help="Spreadsheet (.xlsx, .xls, .csv); first sheet only")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path")
    p.add_argument(
        "--default-date", type=_iso_date, help="Date used for ledger rows without a readable date (default: today)"
    )
    p.add_argument(
        "--remove", type=_index_list, default=[], help="Preview indexes to drop before commit, e.g. 0,4"
    )
    p.add_argument("--preview", action="store_true", help="Print staged rows then exit")
    p.add_argument("--yes", action="store_true", help="Commit without asking")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so DATABASE_URL / PG* / CLINIC_STORE_BACKEND take precedence."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def main(argv: list[str] | None = None, ask: Callable[[str], str] = input) -> int:
    # None only: an explicit [] must not fall back to sys.argv (pytest args)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    kind = ImportKind(args.kind)
    try:
        store = open_store(cfg)
    except StoreError as e:
        logger.error(f"store: {e}")
        return EXIT_FATAL
    logger.debug(f"store backend={cfg.store.backend}")

    try:
        session = ImportSession(
            kind,
            store,
            cfg,
            default_date=args.default_date,
            error_log=ErrorLogBuffer(Path(cfg.logs_dir)),
        )
        try:
            batch = session.load(args.file)
        except ImportFileError as e:
            logger.error(f"file: {e}")
            return EXIT_FATAL
        except StoreError as e:
            logger.error(f"store: {e}")
            return EXIT_FATAL

        if args.remove:
            try:
                removed = batch.remove_many(args.remove)
            except IndexError as e:
                logger.error(f"remove: {e}")
                return EXIT_FATAL
            logger.info(f"{len(removed)} staged rows removed")

        print(render_preview(batch))
        review = batch.needs_review()
        if review:
            logger.warning(f"{len(review)} rows need review (marked !): {review}")

        if args.preview:
            session.cancel()
            return EXIT_SUCCESS
        if len(batch) == 0:
            logger.warning("nothing to import")
            session.cancel()
            return EXIT_SUCCESS
        if not args.yes:
            answer = ask(f"Import {len(batch)} rows into {kind.entity}? [y/N] ")
            if answer.strip().lower() not in ("y", "yes", "o", "oui"):
                session.cancel()
                return EXIT_SUCCESS

        try:
            result = session.commit()
        except StoreError as e:
            logger.error(f"store: {e}")
            return EXIT_FATAL
    finally:
        store.close()

    # log_summary adds the "SUMMARY " prefix itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return EXIT_PARTIAL_FAILURE if result.has_failures else EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
