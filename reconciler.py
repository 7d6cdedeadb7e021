"""Compare external course records with local courses and apply name drift."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Iterator

from course_store import CourseStore
from errors import LocalStoreError, UpdateError
from matcher import match_course
from models import ExternalCourseRecord, ReconciliationOutcome, RowResult

LOGGER = logging.getLogger(__name__)


def reconcile_record(
    record: ExternalCourseRecord,
    store: CourseStore,
    dry_run: bool = False,
) -> ReconciliationOutcome:
    """Reconcile one external record against the local store.

    Raises UpdateError when the local write fails. With dry_run the outcome
    reports what would be updated and nothing is written.
    """
    local = match_course(store, record.idnumber)
    if local is None:
        return ReconciliationOutcome(matched=False, updated=False)

    if local.fullname == record.fullname and local.shortname == record.shortname:
        return ReconciliationOutcome(
            matched=True,
            updated=False,
            local_course_id=local.id,
            local_fullname=local.fullname,
            local_shortname=local.shortname,
        )

    if dry_run:
        LOGGER.info("[dry-run] Would update course id=%s idnumber=%s", local.id, record.idnumber)
    else:
        store.update(dataclasses.replace(local, fullname=record.fullname, shortname=record.shortname))
        LOGGER.info(
            "Updated course id=%s idnumber=%s fullname=%r->%r shortname=%r->%r",
            local.id,
            record.idnumber,
            local.fullname,
            record.fullname,
            local.shortname,
            record.shortname,
        )

    return ReconciliationOutcome(
        matched=True,
        updated=True,
        local_course_id=local.id,
        local_fullname=local.fullname,
        local_shortname=local.shortname,
    )


def iter_reconcile(
    records: Iterable[ExternalCourseRecord],
    store: CourseStore,
    dry_run: bool = False,
) -> Iterator[RowResult]:
    """Yield one RowResult per record, in input order.

    A failed local read or write is captured in that row's result; the
    caller decides whether to keep consuming.
    """
    for record in records:
        try:
            outcome = reconcile_record(record, store, dry_run=dry_run)
        except UpdateError as exc:
            LOGGER.error("Update failed for idnumber=%s: %s", record.idnumber, exc)
            yield RowResult(record=record, error=exc)
            continue
        except LocalStoreError as exc:
            LOGGER.error("Local lookup failed for idnumber=%s: %s", record.idnumber, exc)
            yield RowResult(record=record, error=exc)
            continue
        yield RowResult(record=record, outcome=outcome)


def reconcile_courses(
    records: Iterable[ExternalCourseRecord],
    store: CourseStore,
    continue_on_error: bool = False,
    dry_run: bool = False,
) -> list[RowResult]:
    """Run the reconciliation over all records.

    Stops after the first failed update unless continue_on_error is set.
    A failed local read always stops the pass: the local table is unusable.
    """
    results: list[RowResult] = []
    for result in iter_reconcile(records, store, dry_run=dry_run):
        results.append(result)
        if isinstance(result.error, LocalStoreError):
            LOGGER.error("Stopping reconciliation: local course table cannot be read")
            break
        if not result.ok and not continue_on_error:
            LOGGER.error("Stopping reconciliation after first failed update")
            break
    return results
