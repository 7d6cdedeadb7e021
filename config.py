"""Environment-backed configuration for the course name sync."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

from errors import ConfigError

DEFAULT_LOCAL_COURSE_TABLE = "mdl_course"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True, slots=True)
class SyncConfig:
    """Read-only settings for one reconciliation pass.

    Field names are stored trimmed. An empty string means "not set".
    """

    external_db_url: str = ""
    external_db_type: str = ""
    external_db_host: str = ""
    external_db_user: str = ""
    external_db_pass: str = ""
    external_db_name: str = ""
    external_encoding: str = ""
    external_setup_sql: str = ""
    debug_db: bool = False
    course_table: str = ""
    fullname_field: str = ""
    shortname_field: str = ""
    idnumber_field: str = ""
    local_db_url: str = ""
    local_course_table: str = DEFAULT_LOCAL_COURSE_TABLE
    report_path: str = ""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SyncConfig:
        env = os.environ if environ is None else environ

        def get(name: str, default: str = "") -> str:
            return (env.get(name) or default).strip()

        return cls(
            external_db_url=get("EXTERNAL_DB_URL"),
            external_db_type=get("EXTERNAL_DB_TYPE"),
            external_db_host=get("EXTERNAL_DB_HOST"),
            external_db_user=get("EXTERNAL_DB_USER"),
            # Passwords may legitimately carry surrounding spaces.
            external_db_pass=env.get("EXTERNAL_DB_PASS") or "",
            external_db_name=get("EXTERNAL_DB_NAME"),
            external_encoding=get("EXTERNAL_DB_ENCODING"),
            external_setup_sql=get("EXTERNAL_DB_SETUP_SQL"),
            debug_db=get("EXTERNAL_DB_DEBUG").lower() in _TRUTHY,
            course_table=get("COURSE_TABLE"),
            fullname_field=get("COURSE_FULLNAME_FIELD"),
            shortname_field=get("COURSE_SHORTNAME_FIELD"),
            idnumber_field=get("COURSE_IDNUMBER_FIELD"),
            local_db_url=get("LOCAL_DB_URL"),
            local_course_table=get("LOCAL_COURSE_TABLE", DEFAULT_LOCAL_COURSE_TABLE),
            report_path=get("SYNC_REPORT_PATH"),
        )

    @property
    def is_configured(self) -> bool:
        """True when the external source, table and all three fields are set."""
        return bool(
            (self.external_db_url or self.external_db_type)
            and self.course_table
            and self.fullname_field
            and self.shortname_field
            and self.idnumber_field
        )

    @property
    def fields(self) -> tuple[str, str, str]:
        return (self.fullname_field, self.shortname_field, self.idnumber_field)

    def external_url(self) -> URL:
        """Return the SQLAlchemy URL of the external course database."""
        try:
            if self.external_db_url:
                return make_url(self.external_db_url)
            return URL.create(
                drivername=self.external_db_type,
                username=self.external_db_user or None,
                password=self.external_db_pass or None,
                host=self.external_db_host or None,
                database=self.external_db_name or None,
            )
        except ArgumentError as exc:
            raise ConfigError(f"Invalid external database URL: {exc}") from exc

    def require_local_db(self) -> str:
        if not self.local_db_url:
            raise ConfigError("LOCAL_DB_URL environment variable is required")
        return self.local_db_url
