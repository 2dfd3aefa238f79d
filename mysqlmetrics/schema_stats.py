"""Per-schema sums of information_schema.table_statistics."""

from __future__ import annotations

from typing import Any, Iterator

from .metrics import Metric, Scraper, counter_metrics, fetch, info_schema_desc, userstat_enabled

SCHEMA_STAT_QUERY = """
		SELECT 
			TABLE_SCHEMA, 
			SUM(ROWS_READ) AS ROWS_READ, 
			SUM(ROWS_CHANGED) AS ROWS_CHANGED, 
			SUM(ROWS_CHANGED_X_INDEXES) AS ROWS_CHANGED_X_INDEXES 
		FROM information_schema.TABLE_STATISTICS 
		GROUP BY TABLE_SCHEMA;
		"""

_DESCS = tuple(
    info_schema_desc(f"schema_statistics_{name}_total", help_text, ("schema",))
    for name, help_text in (
        ("rows_read", "The number of rows read from the schema."),
        ("rows_changed", "The number of rows changed in the schema."),
        (
            "rows_changed_x_indexes",
            "The number of rows changed in the schema, "
            "multiplied by the number of indexes changed.",
        ),
    )
)
(
    SCHEMA_STATS_ROWS_READ_DESC,
    SCHEMA_STATS_ROWS_CHANGED_DESC,
    SCHEMA_STATS_ROWS_CHANGED_X_INDEXES_DESC,
) = _DESCS


class ScrapeSchemaStat(Scraper):
    """Collects information_schema.table_statistics grouped by schema."""

    name = "info_schema.schemastats"
    help = "If running with userstat=1, set to true to collect schema statistics"
    version = 5.1

    def scrape(self, db: Any) -> Iterator[Metric]:
        if not userstat_enabled(db, "Detailed schema stats are not available."):
            return
        _, rows = fetch(db, SCHEMA_STAT_QUERY)
        for schema, *values in rows:
            yield from counter_metrics(_DESCS, values, (str(schema),))