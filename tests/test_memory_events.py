import pytest

from mysqlmetrics.memory_events import (
    MEMORY_BYTES_ALLOC_DESC,
    MEMORY_BYTES_FREE_DESC,
    MEMORY_USED_BYTES_DESC,
    PERF_MEMORY_EVENTS_QUERY,
    ScrapePerfMemoryEvents,
)
from mysqlmetrics.metrics import ValueType

COLUMNS = [
    "EVENT_NAME",
    "SUM_NUMBER_OF_BYTES_ALLOC",
    "SUM_NUMBER_OF_BYTES_FREE",
    "CURRENT_NUMBER_OF_BYTES_USED",
]


class FakeCursor:
    def __init__(self, db):
        self.db = db
        self.description = None
        self._rows = []

    def execute(self, query, args=None):
        self.db.queries.append((query, args))
        columns, rows = self.db.results.pop(0)
        self.description = [(name,) for name in columns]
        self._rows = rows

    def fetchall(self):
        return list(self._rows)

    def close(self):
        pass


class FakeDB:
    def __init__(self, *results):
        self.results = list(results)
        self.queries = []

    def cursor(self):
        return FakeCursor(self)


ROWS = [
    ("memory/innodb/event1", "1001", "500", "501"),
    ("memory/performance_schema/event1", "6000", "7", "-83904"),
    ("memory/innodb/event2", "2002", "1000", "1002"),
    ("memory/sql/event1", "30", "4", "26"),
]


def test_scrape_perf_memory_events():
    db = FakeDB((COLUMNS, ROWS))
    metrics = list(ScrapePerfMemoryEvents().scrape(db))

    assert db.queries == [(PERF_MEMORY_EVENTS_QUERY, None)]
    C, G = ValueType.COUNTER, ValueType.GAUGE
    expected = [
        ({"event_name": "innodb/event1"}, 1001, C),
        ({"event_name": "innodb/event1"}, 500, C),
        ({"event_name": "innodb/event1"}, 501, G),
        ({"event_name": "performance_schema/event1"}, 6000, C),
        ({"event_name": "performance_schema/event1"}, 7, C),
        ({"event_name": "performance_schema/event1"}, -83904, G),
        ({"event_name": "innodb/event2"}, 2002, C),
        ({"event_name": "innodb/event2"}, 1000, C),
        ({"event_name": "innodb/event2"}, 1002, G),
        ({"event_name": "sql/event1"}, 30, C),
        ({"event_name": "sql/event1"}, 4, C),
        ({"event_name": "sql/event1"}, 26, G),
    ]
    assert [(m.labels, m.value, m.value_type) for m in metrics] == expected


def test_descriptor_order():
    metrics = list(ScrapePerfMemoryEvents().scrape(FakeDB((COLUMNS, ROWS[:1]))))
    assert [m.desc for m in metrics] == [
        MEMORY_BYTES_ALLOC_DESC,
        MEMORY_BYTES_FREE_DESC,
        MEMORY_USED_BYTES_DESC,
    ]


def test_empty_prefix_keeps_name():
    metrics = list(
        ScrapePerfMemoryEvents(remove_prefix="").scrape(FakeDB((COLUMNS, ROWS[:1])))
    )
    assert metrics[0].labels == {"event_name": "memory/innodb/event1"}


def test_negative_alloc_raises():
    db = FakeDB((COLUMNS, [("memory/x", "-1", "0", "0")]))
    with pytest.raises(ValueError):
        list(ScrapePerfMemoryEvents().scrape(db))