"""Memory usage from performance_schema.memory_summary_global_by_event_name."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from .metrics import (
    NAMESPACE,
    PERFORMANCE_SCHEMA,
    Desc,
    Metric,
    Scraper,
    ValueType,
    build_fq_name,
    fetch,
)

PERF_MEMORY_EVENTS_QUERY = """
	SELECT
		EVENT_NAME, SUM_NUMBER_OF_BYTES_ALLOC, SUM_NUMBER_OF_BYTES_FREE,
		CURRENT_NUMBER_OF_BYTES_USED
	FROM performance_schema.memory_summary_global_by_event_name
		where COUNT_ALLOC > 0;
"""

MEMORY_BYTES_ALLOC_DESC = Desc(
    build_fq_name(NAMESPACE, PERFORMANCE_SCHEMA, "memory_events_alloc_bytes_total"),
    "The total number of bytes allocated by events.",
    ("event_name",),
)
MEMORY_BYTES_FREE_DESC = Desc(
    build_fq_name(NAMESPACE, PERFORMANCE_SCHEMA, "memory_events_free_bytes_total"),
    "The total number of bytes freed by events.",
    ("event_name",),
)
MEMORY_USED_BYTES_DESC = Desc(
    build_fq_name(NAMESPACE, PERFORMANCE_SCHEMA, "memory_events_used_bytes"),
    "The number of bytes currently allocated by events.",
    ("event_name",),
)


def _text(value: Any) -> str:
    if value is None:
        raise ValueError("unexpected NULL value")
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode()
    return str(value)


def _int(value: Any) -> int:
    return int(_text(value).strip())


def _uint(value: Any) -> int:
    number = _int(value)
    if number < 0:
        raise ValueError(f"value {number} is not an unsigned integer")
    return number


@dataclass
class ScrapePerfMemoryEvents(Scraper):
    """Collects allocated, freed and used bytes by memory instrument.

    ``remove_prefix`` is stripped from the front of each event name.
    """

    name = "perf_schema.memory_events"
    help = "Collect metrics from performance_schema.memory_summary_global_by_event_name"
    version = 5.7

    remove_prefix: str = "memory/"

    def scrape(self, db: Any) -> Iterator[Metric]:
        _, rows = fetch(db, PERF_MEMORY_EVENTS_QUERY)
        for row in rows:
            if len(row) != 4:
                raise ValueError(f"expected 4 values, got {len(row)}")
            event_name = _text(row[0])
            bytes_alloc = _uint(row[1])
            bytes_free = _uint(row[2])
            current_bytes = _int(row[3])
            if self.remove_prefix and event_name.startswith(self.remove_prefix):
                event_name = event_name[len(self.remove_prefix):]
            labels = (event_name,)
            yield Metric(MEMORY_BYTES_ALLOC_DESC, ValueType.COUNTER, bytes_alloc, labels)
            yield Metric(MEMORY_BYTES_FREE_DESC, ValueType.COUNTER, bytes_free, labels)
            yield Metric(MEMORY_USED_BYTES_DESC, ValueType.GAUGE, current_bytes, labels)