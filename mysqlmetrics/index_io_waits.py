"""Index I/O waits from performance_schema.table_io_waits_summary_by_index_usage."""

from __future__ import annotations

from typing import Any, Iterator

from .metrics import (
    NAMESPACE,
    PERFORMANCE_SCHEMA,
    PICO_SECONDS,
    Desc,
    Metric,
    Scraper,
    ValueType,
    build_fq_name,
    fetch,
)

PERF_INDEX_IO_WAITS_QUERY = """
	SELECT OBJECT_SCHEMA, OBJECT_NAME, ifnull(INDEX_NAME, 'NONE') as INDEX_NAME,
	    COUNT_FETCH, COUNT_INSERT, COUNT_UPDATE, COUNT_DELETE,
	    SUM_TIMER_FETCH, SUM_TIMER_INSERT, SUM_TIMER_UPDATE, SUM_TIMER_DELETE
	  FROM performance_schema.table_io_waits_summary_by_index_usage
	  WHERE OBJECT_SCHEMA NOT IN ('mysql', 'performance_schema')
	"""

_LABELS = ("schema", "name", "index", "operation")

INDEX_WAITS_DESC = Desc(
    build_fq_name(NAMESPACE, PERFORMANCE_SCHEMA, "index_io_waits_total"),
    "The total number of index I/O wait events for each index and operation.",
    _LABELS,
)
INDEX_WAITS_TIME_DESC = Desc(
    build_fq_name(NAMESPACE, PERFORMANCE_SCHEMA, "index_io_waits_seconds_total"),
    "The total time of index I/O wait events for each index and operation.",
    _LABELS,
)


def _text(value: Any) -> str:
    if value is None:
        raise ValueError("unexpected NULL value")
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode()
    return str(value)


def _uint(value: Any) -> int:
    number = int(_text(value).strip())
    if number < 0:
        raise ValueError(f"value {number} is not an unsigned integer")
    return number


class ScrapePerfIndexIOWaits(Scraper):
    """Collects index I/O wait counts and times per operation.

    Inserts are reported only for the "NONE" index row.
    """

    name = "perf_schema.indexiowaits"
    help = "Collect metrics from performance_schema.table_io_waits_summary_by_index_usage"
    version = 5.6

    def scrape(self, db: Any) -> Iterator[Metric]:
        _, rows = fetch(db, PERF_INDEX_IO_WAITS_QUERY)
        for row in rows:
            if len(row) != 11:
                raise ValueError(f"expected 11 values, got {len(row)}")
            schema, table, index = (_text(value) for value in row[:3])
            counts = [_uint(value) for value in row[3:7]]
            times = [_uint(value) for value in row[7:11]]
            operations = ("fetch", "insert", "update", "delete")
            with_insert = index == "NONE"

            for desc, values, scale in (
                (INDEX_WAITS_DESC, counts, 1),
                (INDEX_WAITS_TIME_DESC, times, PICO_SECONDS),
            ):
                for operation, value in zip(operations, values):
                    if operation == "insert" and not with_insert:
                        continue
                    # Timers are reported in picoseconds.
                    amount = value / scale if scale != 1 else value
                    yield Metric(
                        desc,
                        ValueType.COUNTER,
                        amount,
                        (schema, table, index, operation),
                    )