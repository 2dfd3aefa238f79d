import pytest

from mysqlmetrics.master_status import (
    MASTER_STATUS_QUERY,
    GTIDRange,
    ScrapeMasterStatus,
    parse_gtid_set,
)
from mysqlmetrics.metrics import ValueType


class FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self.description = None
        self._rows = []

    def execute(self, query, params=None):
        expected, result = self._conn.script.pop(0)
        assert query == expected
        if isinstance(result, Exception):
            raise result
        columns, rows = result
        self.description = [(name,) for name in columns]
        self._rows = rows

    def fetchall(self):
        return list(self._rows)

    def close(self):
        pass


class FakeConnection:
    def __init__(self, script):
        self.script = list(script)

    def cursor(self):
        return FakeCursor(self)


SERVER_ID = "aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee"
FIVE_COLUMNS = ["File", "Position", "Binlog_Do_DB", "Binlog_Ignore_DB", "Executed_Gtid_Set"]


def _scrape(columns, rows):
    conn = FakeConnection([(MASTER_STATUS_QUERY, (columns, rows))])
    metrics = list(ScrapeMasterStatus().scrape(conn))
    assert conn.script == []
    return metrics


def test_scrape_master_status():
    metrics = _scrape(
        FIVE_COLUMNS, [("binlog.000006", "49066", "", "", f"{SERVER_ID}:1-261530")]
    )
    got = [(m.labels, m.value, m.value_type) for m in metrics]
    gtid_labels = {"executed_server_id": SERVER_ID, "partition": ""}
    assert got == [
        ({}, 6.0, ValueType.GAUGE),
        ({}, 49066.0, ValueType.GAUGE),
        (gtid_labels, 1.0, ValueType.GAUGE),
        (gtid_labels, 261530.0, ValueType.GAUGE),
    ]
    assert metrics[0].desc.fq_name == "mysql_master_status_binlog_file_num"
    assert metrics[1].desc.fq_name == "mysql_master_status_binlog_pos"
    assert metrics[2].desc.fq_name == "mysql_master_status_executed_gtid_set_start"
    assert metrics[3].desc.fq_name == "mysql_master_status_executed_gtid_set_end"


def test_four_columns_reports_file_and_position():
    metrics = _scrape(FIVE_COLUMNS[:4], [("mysql-bin.000012", 154, "", "")])
    assert [m.value for m in metrics] == [12.0, 154.0]


def test_no_rows_yields_nothing():
    assert _scrape(FIVE_COLUMNS, []) == []


def test_invalid_column_count_raises():
    conn = FakeConnection([(MASTER_STATUS_QUERY, (["File", "Position", "X"], [("a.1", 1, "")]))])
    with pytest.raises(ValueError, match="invalid number of columns"):
        list(ScrapeMasterStatus().scrape(conn))


def test_filename_without_dot_raises():
    conn = FakeConnection([(MASTER_STATUS_QUERY, (FIVE_COLUMNS[:4], [("binlog", 4, "", "")]))])
    with pytest.raises(ValueError, match="not enough"):
        list(ScrapeMasterStatus().scrape(conn))


def test_parse_gtid_set_multiple_servers_and_intervals():
    other = "11111111-2222-3333-4444-555555555555"
    ranges = parse_gtid_set(f"{SERVER_ID}:1-5:7,\n{other}:3-9")
    assert ranges == [
        GTIDRange(SERVER_ID, 1, 5),
        GTIDRange(SERVER_ID, 7, 7),
        GTIDRange(other, 3, 9),
    ]


def test_parse_gtid_set_empty():
    assert parse_gtid_set("") == []


@pytest.mark.parametrize(
    "bad",
    [SERVER_ID, f"{SERVER_ID}:a-b", f"{SERVER_ID}:9-3", ":1-2", f"{SERVER_ID}:1-"],
)
def test_parse_gtid_set_invalid(bad):
    with pytest.raises(ValueError):
        parse_gtid_set(bad)


def test_invalid_gtid_set_in_scrape_raises():
    conn = FakeConnection(
        [(MASTER_STATUS_QUERY, (FIVE_COLUMNS, [("binlog.000001", 4, "", "", "garbage")]))]
    )
    with pytest.raises(ValueError):
        list(ScrapeMasterStatus().scrape(conn))