# mysqlmetrics

Scrapers that read a MySQL (or MariaDB / Percona Server) instance and turn
what they find into Prometheus-style metrics: gauges, counters, untyped
values and histograms, each with a fully qualified name, help text and
label values.

The package has no runtime dependencies. Every scraper works with a
database connection that follows the Python DB-API (PEP 249): it calls
`cursor()`, `execute()`, `fetchall()` and reads `description`. Bring
whichever MySQL driver you already use. The one parameterised query (the
file-instance filter) uses the `%s` placeholder style, as PyMySQL and
mysqlclient do.

## Scrapers

Each scraper is a subclass of `mysqlmetrics.metrics.Scraper` with class
attributes `name`, `help` and `version` (the oldest server version it is
meant for) and a `scrape(db)` method. `scrape` is a generator: the queries
run as you iterate over it, and metrics come out in a fixed order.

| Module | Class | Reads |
| --- | --- | --- |
| `mysqlmetrics.processlist` | `ScrapeProcesslist` | `information_schema.processlist` |
| `mysqlmetrics.query_response_time` | `ScrapeQueryResponseTime` | `information_schema.QUERY_RESPONSE_TIME`, `_READ`, `_WRITE` |
| `mysqlmetrics.replica_host` | `ScrapeReplicaHost` | `information_schema.replica_host_status` |
| `mysqlmetrics.schema_stats` | `ScrapeSchemaStat` | `information_schema.TABLE_STATISTICS`, summed per schema |
| `mysqlmetrics.table_stats` | `ScrapeTableStat` | `information_schema.table_statistics` |
| `mysqlmetrics.user_stats` | `ScrapeUserStat` | `information_schema.user_statistics` |
| `mysqlmetrics.master_status` | `ScrapeMasterStatus` | `SHOW MASTER STATUS` |
| `mysqlmetrics.mysql_user` | `ScrapeUser` | `mysql.user` |
| `mysqlmetrics.events_statements` | `ScrapePerfEventsStatements` | `performance_schema.events_statements_summary_by_digest` |
| `mysqlmetrics.file_instances` | `ScrapePerfFileInstances` | `performance_schema.file_summary_by_instance` |
| `mysqlmetrics.index_io_waits` | `ScrapePerfIndexIOWaits` | `performance_schema.table_io_waits_summary_by_index_usage` |
| `mysqlmetrics.memory_events` | `ScrapePerfMemoryEvents` | `performance_schema.memory_summary_global_by_event_name` |

Timers that the server reports in picoseconds are turned into seconds.

### Options

Some scrapers are dataclasses whose fields are options:

- `ScrapeProcesslist(min_time=0, processes_by_user=True, processes_by_host=True,
  processes_detail_count=False, processes_detail_time=False)`: `min_time` is
  the least `TIME` a thread must have to be counted. Threads are always
  reported by command and state; the flags add counts by client host, by
  user, and per user/host/command/state counts and times. Commands and
  states are passed through `sanitize_state`, and an empty host becomes
  `"unknown"`.
- `ScrapeUser(privileges=False)`: always reports `max_questions`,
  `max_updates`, `max_connections` and `max_user_connections`; with
  `privileges=True` it also reports each `*_priv` column as 1 (`Y`) or 0 (`N`).
- `ScrapePerfEventsStatements(limit=250, time_limit=86400, digest_text_limit=120)`:
  the number of digests kept (slowest first), the largest age of `LAST_SEEN`
  in seconds, and the length the digest text is cut to. `query()` returns the
  SQL it will run.
- `ScrapePerfFileInstances(filter=".*", remove_prefix="/var/lib/mysql/")`:
  a regular expression the server matches against `FILE_NAME`, and a prefix
  stripped from file names.
- `ScrapePerfMemoryEvents(remove_prefix="memory/")`: a prefix stripped from
  event names.

### Optional server features

- `ScrapeSchemaStat`, `ScrapeTableStat` and `ScrapeUserStat` first check the
  `userstat` variable; when the check fails or the value is `OFF` they yield
  nothing.
- `ScrapeQueryResponseTime` first reads `@@query_response_time_stats`; when
  that fails or is 0 it yields nothing. Otherwise it yields one `Histogram`
  for all queries, and one each for reads and writes when those tables can
  be read. An error on the main table is raised.
- `ScrapeReplicaHost` yields nothing when the server answers with error 1109
  (unknown table); any other error is raised.
- `ScrapeUserStat` reports unknown columns as untyped metrics named
  `mysql_info_schema_user_statistics_<column>`.

Any other query error, or a value that cannot be read as the expected
number, is raised as an exception.

## Usage

With `connection` an open DB-API connection:

```python
from mysqlmetrics.processlist import ScrapeProcesslist
from mysqlmetrics.memory_events import ScrapePerfMemoryEvents

for scraper in (ScrapeProcesslist(processes_detail_count=True), ScrapePerfMemoryEvents()):
    for metric in scraper.scrape(connection):
        print(metric.desc.fq_name, metric.labels, metric.value)
```

Each result is a `mysqlmetrics.metrics.Metric` with `desc` (a `Desc` holding
`fq_name`, `help` and `variable_labels`), `value_type` (a `ValueType`:
`COUNTER`, `GAUGE` or `UNTYPED`), `value` and `label_values`; its `labels`
property pairs label names with values. Response-time distributions are
`mysqlmetrics.metrics.Histogram` values with `count`, `sum` and cumulative
`buckets` keyed by upper bound.

## Helpers

```python
from mysqlmetrics.metrics import build_fq_name, fetch
from mysqlmetrics.processlist import sanitize_state
from mysqlmetrics.master_status import parse_gtid_set
from mysqlmetrics.mysql_user import parse_privilege

build_fq_name("mysql", "info_schema", "processlist_threads")
# 'mysql_info_schema_processlist_threads'

sanitize_state("Waiting on empty queue")
# 'waiting_on_empty_queue'

parse_gtid_set("3e11fa47-71ca-11e1-9e33-c80aa9429562:1-5:7")
# [GTIDRange(server_id='3e11fa47-...', first_transaction=1, last_transaction=5),
#  GTIDRange(server_id='3e11fa47-...', first_transaction=7, last_transaction=7)]

parse_privilege("Y")
# 1.0
```

`fetch(db, query, *args)` runs a query and returns the column names and all
rows; the scrapers use it for every read.

## What this package does not do

It only builds metric values. It does not open database connections, read
credentials, serve an HTTP metrics endpoint, render the Prometheus text
format, or offer a command-line program; those are left to the code that
uses it.

## Development

The tests use pytest and fake DB-API connections, so no MySQL server is
needed. Install the `test` extra to get pytest.