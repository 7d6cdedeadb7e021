from __future__ import annotations

from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy import create_engine, insert

from config import SyncConfig
from course_store import CourseStore

EXTERNAL_TABLE = "ext_courses"


def make_external_db(
    path: Path,
    rows: Sequence[tuple[Any, Any, Any]],
    table: str = EXTERNAL_TABLE,
    columns: tuple[str, str, str] = ("FullName", "ShortName", "IdNumber"),
) -> str:
    """Create a SQLite external course table and return its URL."""
    url = f"sqlite:///{path}"
    engine = create_engine(url)
    cols = ", ".join(columns)
    with engine.begin() as conn:
        conn.exec_driver_sql(f"CREATE TABLE {table} ({', '.join(c + ' TEXT' for c in columns)})")
        for row in rows:
            conn.exec_driver_sql(f"INSERT INTO {table} ({cols}) VALUES (?, ?, ?)", tuple(row))
    engine.dispose()
    return url


def add_course(store: CourseStore, fullname: str, shortname: str, idnumber: str) -> int:
    with store.engine.begin() as conn:
        result = conn.execute(
            insert(store.table).values(fullname=fullname, shortname=shortname, idnumber=idnumber)
        )
    return result.inserted_primary_key[0]


def make_config(external_url: str, local_url: str = "", **overrides: Any) -> SyncConfig:
    values: dict[str, Any] = {
        "external_db_url": external_url,
        "course_table": EXTERNAL_TABLE,
        "fullname_field": "FullName",
        "shortname_field": "ShortName",
        "idnumber_field": "IdNumber",
        "local_db_url": local_url,
    }
    values.update(overrides)
    return SyncConfig(**values)


@pytest.fixture
def local_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'lms.db'}"


@pytest.fixture
def local_store(local_url: str) -> Iterator[CourseStore]:
    engine = create_engine(local_url)
    store = CourseStore(engine)
    store.create_schema()
    yield store
    engine.dispose()
