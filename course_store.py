"""Local LMS course table access."""

from __future__ import annotations

import logging

from sqlalchemy import Column, Integer, MetaData, String, Table, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from config import DEFAULT_LOCAL_COURSE_TABLE
from errors import LocalStoreError, UpdateError
from models import LocalCourse

LOGGER = logging.getLogger(__name__)


def course_table(name: str = DEFAULT_LOCAL_COURSE_TABLE, metadata: MetaData | None = None) -> Table:
    """Columns of the LMS course table this sync reads and writes."""
    return Table(
        name,
        metadata or MetaData(),
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("fullname", String(254), nullable=False, default=""),
        Column("shortname", String(255), nullable=False, default="", index=True),
        Column("idnumber", String(100), nullable=False, default="", index=True),
    )


class CourseStore:
    def __init__(self, engine: Engine, table_name: str = DEFAULT_LOCAL_COURSE_TABLE) -> None:
        self.engine = engine
        self.table = course_table(table_name)

    def create_schema(self) -> None:
        """Create the course table if it does not exist yet."""
        self.table.metadata.create_all(self.engine, checkfirst=True)

    def find_by_idnumber(self, idnumber: str, limit: int | None = 2) -> list[LocalCourse]:
        """Return courses with this idnumber, lowest id first."""
        t = self.table
        stmt = (
            select(t.c.id, t.c.fullname, t.c.shortname, t.c.idnumber)
            .where(t.c.idnumber == idnumber)
            .order_by(t.c.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise LocalStoreError(f"Error reading local course table {t.name}: {exc}") from exc
        return [
            LocalCourse(
                id=row.id,
                fullname=row.fullname or "",
                shortname=row.shortname or "",
                idnumber=row.idnumber or "",
            )
            for row in rows
        ]

    def update(self, course: LocalCourse) -> None:
        """Persist fullname/shortname of course by primary key."""
        t = self.table
        stmt = (
            update(t)
            .where(t.c.id == course.id)
            .values(fullname=course.fullname, shortname=course.shortname)
        )
        try:
            with self.engine.begin() as conn:
                result = conn.execute(stmt)
        except SQLAlchemyError as exc:
            raise UpdateError(f"Failed to update course id={course.id}: {exc}", course_id=course.id) from exc

        if result.rowcount == 0:
            raise UpdateError(f"Course id={course.id} no longer exists", course_id=course.id)
        LOGGER.debug("Persisted course id=%s", course.id)
