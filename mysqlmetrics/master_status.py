"""Binary log position and executed GTID set from SHOW MASTER STATUS."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from .metrics import (
    NAMESPACE,
    Desc,
    Metric,
    Scraper,
    ValueType,
    build_fq_name,
    fetch,
)

MASTER = "master_status"
MASTER_STATUS_QUERY = "SHOW MASTER STATUS"

MASTER_BINLOG_POS_DESC = Desc(
    build_fq_name(NAMESPACE, MASTER, "binlog_pos"),
    "Combined size of all registered binlog files.",
)
MASTER_BINLOG_FILE_NUM_DESC = Desc(
    build_fq_name(NAMESPACE, MASTER, "binlog_file_num"),
    "Number of now use binlog files.",
)
MASTER_EXECUTED_GTID_START_DESC = Desc(
    build_fq_name(NAMESPACE, MASTER, "executed_gtid_set_start"),
    "Number of now use binlog files.",
    ("executed_server_id", "partition"),
)
MASTER_EXECUTED_GTID_END_DESC = Desc(
    build_fq_name(NAMESPACE, MASTER, "executed_gtid_set_end"),
    "Number of now use binlog files.",
    ("executed_server_id", "partition"),
)


@dataclass(frozen=True)
class GTIDRange:
    """One interval of transactions executed from one server."""

    server_id: str
    first_transaction: int
    last_transaction: int


def _parse_transaction(text: str, part: str) -> int:
    try:
        number = int(text)
    except ValueError:
        raise ValueError(f"invalid transaction number {text!r} in {part!r}") from None
    if number < 0:
        raise ValueError(f"invalid transaction number {text!r} in {part!r}")
    return number


def parse_gtid_set(gtid_set: str) -> list[GTIDRange]:
    """Parse a GTID set such as "uuid:1-5:7,uuid2:3" into ranges."""
    ranges: list[GTIDRange] = []
    for part in gtid_set.split(","):
        part = part.strip()
        if not part:
            continue
        server_id, *intervals = (piece.strip() for piece in part.split(":"))
        if not server_id or not intervals:
            raise ValueError(f"invalid GTID set item {part!r}")
        for interval in intervals:
            first_text, sep, last_text = interval.partition("-")
            first = _parse_transaction(first_text, part)
            last = _parse_transaction(last_text, part) if sep else first
            if first > last:
                raise ValueError(f"invalid GTID interval {interval!r} in {part!r}")
            ranges.append(GTIDRange(server_id, first, last))
    return ranges


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return value.decode()
    return str(value)


class ScrapeMasterStatus(Scraper):
    """Collects the binary log file, position and executed GTID set."""

    name = "master_status"
    help = "Collect the master status"
    version = 5.1

    def scrape(self, db: Any) -> Iterator[Metric]:
        columns, rows = fetch(db, MASTER_STATUS_QUERY)

        filename = ""
        position = 0
        executed_gtid_set = ""
        for row in rows:
            if len(columns) not in (4, 5):
                raise ValueError(f"invalid number of columns: {len(columns)}")
            filename = _text(row[0])
            position = int(_text(row[1]))
            if len(columns) == 5:
                executed_gtid_set = _text(row[4])

        if filename:
            pieces = filename.split(".")
            if len(pieces) < 2:
                raise ValueError(f"split {filename} by `.` item not enough")
            file_num = float(pieces[1])
            yield Metric(MASTER_BINLOG_FILE_NUM_DESC, ValueType.GAUGE, file_num)
            yield Metric(MASTER_BINLOG_POS_DESC, ValueType.GAUGE, float(position))

        if executed_gtid_set:
            for item in parse_gtid_set(executed_gtid_set):
                labels = (item.server_id, "")
                yield Metric(
                    MASTER_EXECUTED_GTID_START_DESC,
                    ValueType.GAUGE,
                    item.first_transaction,
                    labels,
                )
                yield Metric(
                    MASTER_EXECUTED_GTID_END_DESC,
                    ValueType.GAUGE,
                    item.last_transaction,
                    labels,
                )