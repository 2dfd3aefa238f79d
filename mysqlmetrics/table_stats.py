"""Per-table statistics from information_schema.table_statistics."""

from __future__ import annotations

from typing import Any, Iterator

from .metrics import Metric, Scraper, counter_metrics, fetch, info_schema_desc, userstat_enabled

TABLE_STAT_QUERY = """
		SELECT
		  TABLE_SCHEMA,
		  TABLE_NAME,
		  ROWS_READ,
		  ROWS_CHANGED,
		  ROWS_CHANGED_X_INDEXES
		  FROM information_schema.table_statistics
		"""

_DESCS = tuple(
    info_schema_desc(f"table_statistics_{name}_total", help_text, ("schema", "table"))
    for name, help_text in (
        ("rows_read", "The number of rows read from the table."),
        ("rows_changed", "The number of rows changed in the table."),
        (
            "rows_changed_x_indexes",
            "The number of rows changed in the table, "
            "multiplied by the number of indexes changed.",
        ),
    )
)
(
    TABLE_STATS_ROWS_READ_DESC,
    TABLE_STATS_ROWS_CHANGED_DESC,
    TABLE_STATS_ROWS_CHANGED_X_INDEXES_DESC,
) = _DESCS


class ScrapeTableStat(Scraper):
    """Collects information_schema.table_statistics."""

    name = "info_schema.tablestats"
    help = "If running with userstat=1, set to true to collect table statistics"
    version = 5.1

    def scrape(self, db: Any) -> Iterator[Metric]:
        if not userstat_enabled(db, "Detailed table stats are not available."):
            return
        _, rows = fetch(db, TABLE_STAT_QUERY)
        for schema, table, *values in rows:
            yield from counter_metrics(_DESCS, values, (str(schema), str(table)))