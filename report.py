"""Post-run reporting: one CSV row per external course plus summary counters.

The CSV mirrors the table the LMS administrators are used to reviewing after
each sync:

  sr, idnumber, external_fullname, external_shortname, is_exist, course_id,
  local_fullname, local_shortname, is_updated, error

local_* columns show the local names *before* the pass updated them, so an
updated row reads as "was X, now matches the external source".
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from errors import UpdateError
from models import RowResult

LOGGER = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Output schema
# ---------------------------------------------------------------------------

REPORT_COLUMNS = [
    "sr",
    "idnumber",
    # External source values
    "external_fullname",
    "external_shortname",
    # Local match
    "is_exist",
    "course_id",
    "local_fullname",
    "local_shortname",
    # Result
    "is_updated",
    "error",
]


@dataclass(frozen=True, slots=True)
class SyncSummary:
    total: int = 0
    matched: int = 0
    updated: int = 0
    unmatched: int = 0
    failed: int = 0


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def _flag(value: bool) -> str:
    return "TRUE" if value else "FALSE"


def build_report_rows(results: Iterable[RowResult]) -> list[dict]:
    out = []
    for i, result in enumerate(results, 1):
        record = result.record
        row = {
            "sr": i,
            "idnumber": record.idnumber,
            "external_fullname": record.fullname,
            "external_shortname": record.shortname,
            "is_exist": "",
            "course_id": "",
            "local_fullname": "",
            "local_shortname": "",
            "is_updated": "",
            "error": "",
        }
        outcome = result.outcome
        if outcome is not None:
            row["is_exist"] = _flag(outcome.matched)
            row["is_updated"] = _flag(outcome.updated)
            if outcome.matched:
                row["course_id"] = outcome.local_course_id
                row["local_fullname"] = outcome.local_fullname or ""
                row["local_shortname"] = outcome.local_shortname or ""
        if result.error is not None:
            # Only a failed update implies the local course was found.
            row["is_exist"] = "TRUE" if isinstance(result.error, UpdateError) else ""
            row["is_updated"] = "FALSE"
            row["course_id"] = getattr(result.error, "course_id", None) or ""
            row["error"] = str(result.error)
        out.append(row)
    return out


def summarize(results: Sequence[RowResult]) -> SyncSummary:
    matched = updated = unmatched = failed = 0
    for result in results:
        if result.error is not None:
            failed += 1
            continue
        outcome = result.outcome
        if outcome is None or not outcome.matched:
            unmatched += 1
            continue
        matched += 1
        if outcome.updated:
            updated += 1
    return SyncSummary(
        total=len(results),
        matched=matched,
        updated=updated,
        unmatched=unmatched,
        failed=failed,
    )


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def write_report(results: Sequence[RowResult], path: str | Path) -> Path:
    """Write the per-course CSV report, replacing any previous file."""
    report_path = Path(path)
    report_path.parent.mkdir(parents=True, exist_ok=True)
    rows = build_report_rows(results)

    with report_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=REPORT_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)

    LOGGER.info("report: %d courses → %s", len(rows), report_path)
    return report_path


def log_summary(summary: SyncSummary) -> None:
    LOGGER.info(
        "Run complete. total=%s matched=%s updated=%s unmatched=%s failed=%s",
        summary.total,
        summary.matched,
        summary.updated,
        summary.unmatched,
        summary.failed,
    )
