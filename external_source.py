"""Read course rows from the external course database."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from types import TracebackType
from typing import Any

from sqlalchemy import Select, bindparam, create_engine, literal_column, quoted_name, select, table, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from config import SyncConfig
from errors import ConfigError, EncodingError, QueryError, SourceConnectionError
from models import ExternalCourseRecord
from text_codec import TextCodec, as_text, lower_keys

LOGGER = logging.getLogger(__name__)


def build_select(
    table_name: str,
    fields: Sequence[str],
    conditions: Mapping[str, Any] | None = None,
    distinct: bool = False,
    sort: str = "",
    codec: TextCodec | None = None,
) -> Select:
    """Build a SELECT over raw table/field names.

    Names are rendered exactly as configured (no identifier quoting) so the
    external database applies its own case rules. Condition values are bound
    parameters, converted to the external encoding first.

    The course fetch is a full pass and uses neither conditions nor sort;
    they make this the general read builder for the external table, the
    one place query literals meet TextCodec.encode.
    """
    if not fields:
        raise ValueError("build_select requires at least one field")

    codec = codec or TextCodec()
    stmt = select(*[literal_column(name) for name in fields]).select_from(
        table(quoted_name(table_name, quote=False))
    )
    for index, (key, value) in enumerate((conditions or {}).items()):
        stmt = stmt.where(literal_column(key) == bindparam(f"cond_{index}", codec.encode(value)))
    if distinct:
        stmt = stmt.distinct()
    if sort:
        stmt = stmt.order_by(text(sort))
    return stmt


def unique_fields(fields: Sequence[str]) -> list[str]:
    """Drop repeated field names, ignoring case; the first spelling wins."""
    seen: dict[str, str] = {}
    for name in fields:
        seen.setdefault(name.lower(), name)
    return list(seen.values())


class ExternalCourseSource:
    """Scoped, read-only access to the external course table.

    Use as a context manager: one connection is opened on enter and released
    exactly once on exit, whether the body succeeded or not.
    """

    def __init__(self, config: SyncConfig) -> None:
        self.config = config
        try:
            self.codec = TextCodec(config.external_encoding)
        except EncodingError as exc:
            raise ConfigError(str(exc)) from exc
        self._engine: Engine | None = None
        self._connection: Connection | None = None

    def __enter__(self) -> ExternalCourseSource:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def connected(self) -> bool:
        return self._connection is not None

    def open(self) -> None:
        try:
            url = self.config.external_url()
            self._engine = create_engine(url, echo=self.config.debug_db)
            self._connection = self._engine.connect()
        except (ConfigError, SQLAlchemyError, ImportError) as exc:
            self.close()
            raise SourceConnectionError(f"Error while communicating with external course database: {exc}") from exc

        LOGGER.info("Connected to external course database dialect=%s", self._engine.dialect.name)

        setup_sql = self.config.external_setup_sql
        if setup_sql:
            try:
                self._connection.exec_driver_sql(setup_sql)
            except SQLAlchemyError as exc:
                self.close()
                raise QueryError(f"External setup statement failed: {exc}") from exc
            LOGGER.debug("Executed external setup statement")

    def close(self) -> None:
        try:
            if self._connection is not None:
                self._connection.close()
        finally:
            self._connection = None
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None
                LOGGER.debug("Released external course database connection")

    def fetch_rows(self, table_name: str, fields: Sequence[str]) -> list[dict[str, Any]]:
        """Return DISTINCT rows as dicts with lower-cased keys and decoded values."""
        if self._connection is None:
            raise QueryError("External course database is not connected")

        stmt = build_select(table_name, fields, distinct=True, codec=self.codec)
        try:
            result = self._connection.execute(stmt)
            rows = [self.codec.decode(lower_keys(row)) for row in result.mappings()]
        except (SQLAlchemyError, EncodingError) as exc:
            raise QueryError(f"Error reading data from the external course table: {exc}") from exc

        LOGGER.info("External fetch: table=%s rows=%s", table_name, len(rows))
        return rows

    def fetch_courses(self) -> list[ExternalCourseRecord]:
        """Fetch and normalize every course row of the configured table.

        All three field names are required configuration. Mappings that name
        the same column (e.g. shortname doubling as idnumber) select it once.
        """
        fullname, shortname, idnumber = (name.lower() for name in self.config.fields)
        rows = self.fetch_rows(self.config.course_table, unique_fields(self.config.fields))

        records: list[ExternalCourseRecord] = []
        for row in rows:
            missing = [key for key in (fullname, shortname, idnumber) if key not in row]
            if missing:
                raise QueryError(f"External rows are missing fields: {', '.join(missing)}")
            try:
                records.append(
                    ExternalCourseRecord(
                        fullname=as_text(row[fullname]),
                        shortname=as_text(row[shortname]),
                        idnumber=as_text(row[idnumber]),
                    )
                )
            except EncodingError as exc:
                raise QueryError(f"Error reading data from the external course table: {exc}") from exc
        return records
