"""Per-user limits and privileges from mysql.user."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from .metrics import (
    MYSQL,
    NAMESPACE,
    Desc,
    Metric,
    Scraper,
    ValueType,
    build_fq_name,
    fetch,
)

MYSQL_USER_QUERY = """
		  SELECT
		    user,
		    host,
		    Select_priv,
		    Insert_priv,
		    Update_priv,
		    Delete_priv,
		    Create_priv,
		    Drop_priv,
		    Reload_priv,
		    Shutdown_priv,
		    Process_priv,
		    File_priv,
		    Grant_priv,
		    References_priv,
		    Index_priv,
		    Alter_priv,
		    Show_db_priv,
		    Super_priv,
		    Create_tmp_table_priv,
		    Lock_tables_priv,
		    Execute_priv,
		    Repl_slave_priv,
		    Repl_client_priv,
		    Create_view_priv,
		    Show_view_priv,
		    Create_routine_priv,
		    Alter_routine_priv,
		    Create_user_priv,
		    Event_priv,
		    Trigger_priv,
		    Create_tablespace_priv,
		    max_questions,
		    max_updates,
		    max_connections,
		    max_user_connections
		  FROM mysql.user
		"""

# user, host, 29 privilege flags and 4 limits.
USER_COLUMN_COUNT = 35

LABEL_NAMES = ("mysql_user", "hostmask")

USER_MAX_QUESTIONS_DESC = Desc(
    build_fq_name(NAMESPACE, MYSQL, "max_questions"),
    "The number of max_questions by user.",
    LABEL_NAMES,
)
USER_MAX_UPDATES_DESC = Desc(
    build_fq_name(NAMESPACE, MYSQL, "max_updates"),
    "The number of max_updates by user.",
    LABEL_NAMES,
)
USER_MAX_CONNECTIONS_DESC = Desc(
    build_fq_name(NAMESPACE, MYSQL, "max_connections"),
    "The number of max_connections by user.",
    LABEL_NAMES,
)
USER_MAX_USER_CONNECTIONS_DESC = Desc(
    build_fq_name(NAMESPACE, MYSQL, "max_user_connections"),
    "The number of max_user_connections by user.",
    LABEL_NAMES,
)

_LIMIT_DESCS = (
    USER_MAX_QUESTIONS_DESC,
    USER_MAX_UPDATES_DESC,
    USER_MAX_CONNECTIONS_DESC,
    USER_MAX_USER_CONNECTIONS_DESC,
)

_UINT32_MAX = 2**32 - 1


def parse_privilege(value: Any) -> float | None:
    """Map a privilege flag "Y"/"N" to 1.0/0.0; anything else gives None."""
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value)
        if value == b"Y":
            return 1.0
        if value == b"N":
            return 0.0
        return None
    if value == "Y":
        return 1.0
    if value == "N":
        return 0.0
    return None


def _text(value: Any) -> str:
    if value is None:
        raise ValueError("unexpected NULL value")
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode()
    return str(value)


def _uint32(value: Any) -> int:
    number = int(_text(value))
    if not 0 <= number <= _UINT32_MAX:
        raise ValueError(f"value {number} out of range for an unsigned 32-bit integer")
    return number


@dataclass
class ScrapeUser(Scraper):
    """Collects per-user limits, and optionally privileges, from mysql.user."""

    name = MYSQL + ".user"
    help = "Collect data from mysql.user"
    version = 5.1

    privileges: bool = False

    def scrape(self, db: Any) -> Iterator[Metric]:
        columns, rows = fetch(db, MYSQL_USER_QUERY)
        if len(columns) != USER_COLUMN_COUNT:
            raise ValueError(
                f"expected {USER_COLUMN_COUNT} columns, got {len(columns)}"
            )

        for row in rows:
            if len(row) != USER_COLUMN_COUNT:
                raise ValueError(
                    f"expected {USER_COLUMN_COUNT} values, got {len(row)}"
                )
            user = _text(row[0])
            host = _text(row[1])
            limits = [_uint32(value) for value in row[-4:]]
            labels = (user, host)

            if self.privileges:
                for column, value in zip(columns, row):
                    flag = parse_privilege(value)
                    if flag is None:
                        continue
                    desc = Desc(
                        build_fq_name(NAMESPACE, MYSQL, column.lower()),
                        column + " by user.",
                        LABEL_NAMES,
                    )
                    yield Metric(desc, ValueType.GAUGE, flag, labels)

            for desc, limit in zip(_LIMIT_DESCS, limits):
                yield Metric(desc, ValueType.GAUGE, limit, labels)