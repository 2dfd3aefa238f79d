import pytest

from mysqlmetrics.query_response_time import (
    QUERY_RESPONSE_CHECK_QUERY,
    QUERY_RESPONSE_TIME_DESCS,
    QUERY_RESPONSE_TIME_QUERIES,
    ScrapeQueryResponseTime,
)


class _QueryFailed(Exception):
    pass


class _Cursor:
    def __init__(self, db):
        self.db = db
        self.result = None
        self.description = None

    def execute(self, query, args=None):
        self.db.executed.append(query)
        result = self.db.responses.get(query)
        if result is None or isinstance(result, Exception):
            raise result or _QueryFailed(query)
        self.result = result
        self.description = [(name, None) for name in result[0]]

    def fetchall(self):
        return list(self.result[1])

    def close(self):
        pass


class _Db:
    def __init__(self, responses):
        self.responses = responses
        self.executed = []

    def cursor(self):
        return _Cursor(self)


ROWS = [
    (0.000001, 124, 0.000000),
    (0.000010, 179, 0.000797),
    (0.000100, 2859, 0.107321),
    (0.001000, 1085, 0.335395),
    (0.010000, 269, 0.522264),
    (0.100000, 11, 0.344209),
    (1.000000, 1, 0.267369),
    (10.000000, 0, 0.000000),
    (100.000000, 0, 0.000000),
    (1000.000000, 0, 0.000000),
    (10000.000000, 0, 0.000000),
    (100000.000000, 0, 0.000000),
    (1000000.000000, 0, 0.000000),
    ("TOO LONG", 0, "TOO LONG"),
]

EXPECTED_COUNTS = {
    1e-06: 124,
    1e-05: 303,
    0.0001: 3162,
    0.001: 4247,
    0.01: 4516,
    0.1: 4527,
    1: 4528,
    10: 4528,
    100: 4528,
    1000: 4528,
    10000: 4528,
    100000: 4528,
    1e06: 4528,
}

TABLE = (["TIME", "COUNT", "TOTAL"], ROWS)


def test_scrape_query_response_time():
    db = _Db({
        QUERY_RESPONSE_CHECK_QUERY: ([""], [(1,)]),
        QUERY_RESPONSE_TIME_QUERIES[0]: TABLE,
    })
    got = list(ScrapeQueryResponseTime().scrape(db))
    assert len(got) == 1
    histogram = got[0]
    assert histogram.desc == QUERY_RESPONSE_TIME_DESCS[0]
    assert histogram.count == 4528
    assert histogram.sum == pytest.approx(1.5773549999999998)
    assert histogram.buckets == EXPECTED_COUNTS
    assert db.executed == [QUERY_RESPONSE_CHECK_QUERY, *QUERY_RESPONSE_TIME_QUERIES]


def test_read_and_write_tables_when_present():
    db = _Db({
        QUERY_RESPONSE_CHECK_QUERY: ([""], [(1,)]),
        QUERY_RESPONSE_TIME_QUERIES[0]: TABLE,
        QUERY_RESPONSE_TIME_QUERIES[1]: TABLE,
        QUERY_RESPONSE_TIME_QUERIES[2]: (["TIME", "COUNT", "TOTAL"], []),
    })
    got = list(ScrapeQueryResponseTime().scrape(db))
    assert [h.desc for h in got] == list(QUERY_RESPONSE_TIME_DESCS)
    assert got[1].buckets == got[0].buckets
    assert got[2].count == 0
    assert got[2].buckets == {}


def test_stats_off_yields_nothing():
    db = _Db({QUERY_RESPONSE_CHECK_QUERY: ([""], [(0,)])})
    assert list(ScrapeQueryResponseTime().scrape(db)) == []
    assert db.executed == [QUERY_RESPONSE_CHECK_QUERY]


def test_check_failure_yields_nothing():
    db = _Db({})
    assert list(ScrapeQueryResponseTime().scrape(db)) == []
    assert db.executed == [QUERY_RESPONSE_CHECK_QUERY]


def test_first_table_failure_raises():
    db = _Db({QUERY_RESPONSE_CHECK_QUERY: ([""], [(1,)])})
    with pytest.raises(_QueryFailed):
        list(ScrapeQueryResponseTime().scrape(db))


def test_string_bounds_are_trimmed():
    db = _Db({
        QUERY_RESPONSE_CHECK_QUERY: ([""], [("1",)]),
        QUERY_RESPONSE_TIME_QUERIES[0]: (
            ["TIME", "COUNT", "TOTAL"],
            [("  0.000001", 2, " 0.5 "), ("TOO LONG", 3, "TOO LONG")],
        ),
    })
    (histogram,) = list(ScrapeQueryResponseTime().scrape(db))
    assert histogram.buckets == {0.000001: 2}
    assert histogram.count == 5
    assert histogram.sum == 0.5