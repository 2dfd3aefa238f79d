"""Per-file I/O from performance_schema.file_summary_by_instance."""

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

PERF_FILE_INSTANCES_QUERY = """
	SELECT
	    FILE_NAME, EVENT_NAME,
	    COUNT_READ, COUNT_WRITE,
	    SUM_NUMBER_OF_BYTES_READ, SUM_NUMBER_OF_BYTES_WRITE
	  FROM performance_schema.file_summary_by_instance
	     where FILE_NAME REGEXP %s
	"""

_LABELS = ("file_name", "event_name", "mode")

FILE_INSTANCES_BYTES_DESC = Desc(
    build_fq_name(NAMESPACE, PERFORMANCE_SCHEMA, "file_instances_bytes"),
    "The number of bytes processed by file read/write operations.",
    _LABELS,
)
FILE_INSTANCES_COUNT_DESC = Desc(
    build_fq_name(NAMESPACE, PERFORMANCE_SCHEMA, "file_instances_total"),
    "The total number of file read/write operations.",
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


@dataclass
class ScrapePerfFileInstances(Scraper):
    """Collects read/write counts and bytes per file.

    ``filter`` is a regular expression the file name must match on the server;
    ``remove_prefix`` is stripped from the front of each file name.
    """

    name = "perf_schema.file_instances"
    help = "Collect metrics from performance_schema.file_summary_by_instance"
    version = 5.5

    filter: str = ".*"
    remove_prefix: str = "/var/lib/mysql/"

    def scrape(self, db: Any) -> Iterator[Metric]:
        _, rows = fetch(db, PERF_FILE_INSTANCES_QUERY, self.filter)
        for row in rows:
            if len(row) != 6:
                raise ValueError(f"expected 6 values, got {len(row)}")
            file_name = _text(row[0])
            event_name = _text(row[1])
            count_read, count_write, bytes_read, bytes_written = (
                _uint(value) for value in row[2:]
            )
            if self.remove_prefix and file_name.startswith(self.remove_prefix):
                file_name = file_name[len(self.remove_prefix):]
            samples = (
                (FILE_INSTANCES_COUNT_DESC, count_read, "read"),
                (FILE_INSTANCES_COUNT_DESC, count_write, "write"),
                (FILE_INSTANCES_BYTES_DESC, bytes_read, "read"),
                (FILE_INSTANCES_BYTES_DESC, bytes_written, "write"),
            )
            for desc, value, mode in samples:
                yield Metric(
                    desc, ValueType.COUNTER, value, (file_name, event_name, mode)
                )