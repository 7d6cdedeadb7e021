"""Shared typed models for the course name sync."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True, slots=True)
class ExternalCourseRecord:
    """Normalized course row read from the external table."""

    fullname: str
    shortname: str
    idnumber: str = ""


@dataclass(frozen=True, slots=True)
class LocalCourse:
    """Course row owned by the LMS course table."""

    id: int
    fullname: str
    shortname: str
    idnumber: str


@dataclass(frozen=True, slots=True)
class ReconciliationOutcome:
    """What happened to one external record.

    local_fullname / local_shortname hold the local names as they were
    before the pass touched them.
    """

    matched: bool
    updated: bool
    local_course_id: int | None = None
    local_fullname: str | None = None
    local_shortname: str | None = None


@dataclass(frozen=True, slots=True)
class RowResult:
    """Outcome or error for one external record, in reader order."""

    record: ExternalCourseRecord
    outcome: ReconciliationOutcome | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SyncStatus(Enum):
    """Final status of a pass; the value is the process exit code."""

    SKIPPED = ("skipped", 0)
    SUCCESS = ("success", 0)
    CONNECTION_FAILED = ("connection_failed", 1)
    QUERY_FAILED = ("query_failed", 4)
    UPDATE_FAILED = ("update_failed", 5)
    LOCAL_STORE_FAILED = ("local_store_failed", 6)

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def exit_code(self) -> int:
        return self.value[1]


@dataclass(slots=True)
class SyncResult:
    status: SyncStatus
    results: list[RowResult] = field(default_factory=list)
    message: str = ""

    @property
    def exit_code(self) -> int:
        return self.status.exit_code
