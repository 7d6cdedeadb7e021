"""CLI entrypoint for the scheduled course name synchronisation."""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.exc import ArgumentError

from config import SyncConfig
from course_store import CourseStore
from errors import ConfigError, LocalStoreError, QueryError, SourceConnectionError
from external_source import ExternalCourseSource
from models import SyncResult, SyncStatus
from reconciler import reconcile_courses
from report import log_summary, summarize, write_report


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(
        description="Sync LMS course names from the external course database"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compare and report, but do not write any local course",
    )
    parser.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Keep processing remaining courses after a failed update",
    )
    parser.add_argument(
        "--report",
        default=None,
        help="Write the per-course CSV report to this path (default: SYNC_REPORT_PATH)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def run(
    config: SyncConfig,
    dry_run: bool = False,
    continue_on_error: bool = False,
    report_path: str | None = None,
) -> SyncResult:
    """Run one reconciliation pass and return its structured result."""
    if not config.is_configured:
        logging.info("Course name synchronisation skipped: sync not configured")
        return SyncResult(SyncStatus.SKIPPED, message="Course name synchronisation skipped.")

    try:
        local_engine = create_engine(config.require_local_db())
    except ArgumentError as exc:
        raise ConfigError(f"Invalid LOCAL_DB_URL: {exc}") from exc

    logging.info("Starting course name synchronisation (dry_run=%s)", dry_run)
    try:
        store = CourseStore(local_engine, config.local_course_table)
        try:
            with ExternalCourseSource(config) as source:
                records = source.fetch_courses()
                logging.info("Fetched %s external course rows", len(records))
                results = reconcile_courses(
                    records,
                    store,
                    continue_on_error=continue_on_error,
                    dry_run=dry_run,
                )
        except SourceConnectionError as exc:
            logging.error("%s", exc)
            return SyncResult(SyncStatus.CONNECTION_FAILED, message=str(exc))
        except QueryError as exc:
            logging.error("%s", exc)
            return SyncResult(SyncStatus.QUERY_FAILED, message=str(exc))
    finally:
        local_engine.dispose()

    summary = summarize(results)
    log_summary(summary)

    if report_path:
        try:
            write_report(results, report_path)
        except OSError as exc:
            logging.warning("Report generation failed (non-fatal): %s", exc)

    store_errors = [r.error for r in results if isinstance(r.error, LocalStoreError)]
    if store_errors:
        return SyncResult(
            SyncStatus.LOCAL_STORE_FAILED,
            results=results,
            message=str(store_errors[0]),
        )
    if summary.failed:
        return SyncResult(
            SyncStatus.UPDATE_FAILED,
            results=results,
            message=f"{summary.failed} course update(s) failed",
        )
    return SyncResult(
        SyncStatus.SUCCESS,
        results=results,
        message="...course name synchronisation finished.",
    )


def main(argv: list[str] | None = None) -> None:
    """Initialize config and execute one sync pass."""
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    config = SyncConfig.from_env()
    try:
        result = run(
            config,
            dry_run=args.dry_run,
            continue_on_error=args.continue_on_error,
            report_path=args.report or config.report_path or None,
        )
    except ConfigError as exc:
        logging.error("Configuration error: %s", exc)
        sys.exit(2)

    logging.info("Sync status=%s exit_code=%s", result.status.label, result.exit_code)
    sys.exit(result.exit_code)


if __name__ == "__main__":
    main()
