"""Match external course records to local courses by idnumber."""

from __future__ import annotations

import logging

from course_store import CourseStore
from models import LocalCourse

LOGGER = logging.getLogger(__name__)


def match_course(store: CourseStore, idnumber: str) -> LocalCourse | None:
    """Return the local course whose idnumber equals idnumber, or None.

    Blank identifiers never match: many local courses carry an empty
    idnumber and none of them is the counterpart of an unidentified row.
    When several courses share the identifier the lowest id wins.
    """
    if not idnumber or not idnumber.strip():
        LOGGER.warning("Skipping external course with blank idnumber")
        return None

    candidates = store.find_by_idnumber(idnumber, limit=2)
    if not candidates:
        return None
    if len(candidates) > 1:
        LOGGER.warning(
            "Multiple local courses share idnumber=%s; using lowest id=%s",
            idnumber,
            candidates[0].id,
        )
    return candidates[0]
