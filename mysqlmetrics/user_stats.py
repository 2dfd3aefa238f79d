"""Per-user statistics from information_schema.user_statistics."""

from __future__ import annotations

import logging
from typing import Any, Iterator

from .metrics import (
    INFORMATION_SCHEMA,
    NAMESPACE,
    USERSTAT_CHECK_QUERY,
    Desc,
    Metric,
    Scraper,
    ValueType,
    build_fq_name,
    fetch,
)

logger = logging.getLogger(__name__)

USER_STAT_QUERY = "SELECT * FROM information_schema.user_statistics"


def _stat(name: str, help_text: str, value_type: ValueType = ValueType.COUNTER):
    desc = Desc(
        build_fq_name(NAMESPACE, INFORMATION_SCHEMA, f"user_statistics_{name}"),
        help_text,
        ("user",),
    )
    return value_type, desc


# Known user-statistics columns; anything else is reported as untyped.
USER_STATISTICS_TYPES: dict[str, tuple[ValueType, Desc]] = {
    "TOTAL_CONNECTIONS": _stat(
        "total_connections",
        "The number of connections created for this user.",
    ),
    "CONCURRENT_CONNECTIONS": _stat(
        "concurrent_connections",
        "The number of concurrent connections for this user.",
        ValueType.GAUGE,
    ),
    "CONNECTED_TIME": _stat(
        "connected_time_seconds_total",
        "The cumulative number of seconds elapsed while there were connections from this user.",
    ),
    "BUSY_TIME": _stat(
        "busy_seconds_total",
        "The cumulative number of seconds there was activity on connections from this user.",
    ),
    "CPU_TIME": _stat(
        "cpu_time_seconds_total",
        "The cumulative CPU time elapsed, in seconds, while servicing this user's connections.",
    ),
    "BYTES_RECEIVED": _stat(
        "bytes_received_total",
        "The number of bytes received from this user’s connections.",
    ),
    "BYTES_SENT": _stat(
        "bytes_sent_total",
        "The number of bytes sent to this user’s connections.",
    ),
    "BINLOG_BYTES_WRITTEN": _stat(
        "binlog_bytes_written_total",
        "The number of bytes written to the binary log from this user’s connections.",
    ),
    "ROWS_READ": _stat(
        "rows_read_total",
        "The number of rows read by this user's connections.",
    ),
    "ROWS_SENT": _stat(
        "rows_sent_total",
        "The number of rows sent by this user's connections.",
    ),
    "ROWS_DELETED": _stat(
        "rows_deleted_total",
        "The number of rows deleted by this user's connections.",
    ),
    "ROWS_INSERTED": _stat(
        "rows_inserted_total",
        "The number of rows inserted by this user's connections.",
    ),
    "ROWS_FETCHED": _stat(
        "rows_fetched_total",
        "The number of rows fetched by this user’s connections.",
    ),
    "ROWS_UPDATED": _stat(
        "rows_updated_total",
        "The number of rows updated by this user’s connections.",
    ),
    "TABLE_ROWS_READ": _stat(
        "table_rows_read_total",
        "The number of rows read from tables by this user’s connections. "
        "(It may be different from ROWS_FETCHED.)",
    ),
    "SELECT_COMMANDS": _stat(
        "select_commands_total",
        "The number of SELECT commands executed from this user’s connections.",
    ),
    "UPDATE_COMMANDS": _stat(
        "update_commands_total",
        "The number of UPDATE commands executed from this user’s connections.",
    ),
    "OTHER_COMMANDS": _stat(
        "other_commands_total",
        "The number of other commands executed from this user’s connections.",
    ),
    "COMMIT_TRANSACTIONS": _stat(
        "commit_transactions_total",
        "The number of COMMIT commands issued by this user’s connections.",
    ),
    "ROLLBACK_TRANSACTIONS": _stat(
        "rollback_transactions_total",
        "The number of ROLLBACK commands issued by this user’s connections.",
    ),
    "DENIED_CONNECTIONS": _stat(
        "denied_connections_total",
        "The number of connections denied to this user.",
    ),
    "LOST_CONNECTIONS": _stat(
        "lost_connections_total",
        "The number of this user’s connections that were terminated uncleanly.",
    ),
    "ACCESS_DENIED": _stat(
        "access_denied_total",
        "The number of times this user’s connections issued commands that were denied.",
    ),
    "EMPTY_QUERIES": _stat(
        "empty_queries_total",
        "The number of times this user’s connections sent empty queries to the server.",
    ),
    "TOTAL_SSL_CONNECTIONS": _stat(
        "total_ssl_connections_total",
        "The number of times this user’s connections connected using SSL to the server.",
    ),
}


def _userstat_enabled(db: Any) -> bool:
    try:
        _, rows = fetch(db, USERSTAT_CHECK_QUERY)
        var_name, var_value = rows[0][:2]
    except Exception:
        logger.debug("Detailed user stats are not available.")
        return False
    if var_value == "OFF":
        logger.debug("MySQL variable is OFF: var=%s", var_name)
        return False
    return True


def _column_type(column: str) -> tuple[ValueType, Desc]:
    known = USER_STATISTICS_TYPES.get(column)
    if known is not None:
        return known
    desc = Desc(
        build_fq_name(NAMESPACE, INFORMATION_SCHEMA, f"user_statistics_{column.lower()}"),
        f"Unsupported metric from column {column}",
        ("user",),
    )
    return ValueType.UNTYPED, desc


class ScrapeUserStat(Scraper):
    """Collects information_schema.user_statistics.

    The first column holds the user name; every other column is numeric.
    """

    name = "info_schema.userstats"
    help = "If running with userstat=1, set to true to collect user statistics"
    version = 5.1

    def scrape(self, db: Any) -> Iterator[Metric]:
        if not _userstat_enabled(db):
            return
        columns, rows = fetch(db, USER_STAT_QUERY)
        column_types = [_column_type(column) for column in columns[1:]]
        for user, *values in rows:
            labels = (str(user),)
            numbers = [float(value) for value in values]
            for (value_type, desc), number in zip(column_types, numbers):
                yield Metric(desc, value_type, number, labels)