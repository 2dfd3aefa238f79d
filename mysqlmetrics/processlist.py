"""Thread counts and times from information_schema.processlist."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Iterator

from .metrics import (
    INFORMATION_SCHEMA,
    NAMESPACE,
    Desc,
    Metric,
    Scraper,
    ValueType,
    build_fq_name,
    fetch,
)

PROCESSLIST_QUERY = """
		  SELECT
		    user,
		    SUBSTRING_INDEX(host, ':', 1) AS host,
		    COALESCE(command, '') AS command,
		    COALESCE(state, '') AS state,
		    COUNT(*) AS processes,
		    SUM(time) AS seconds
		  FROM information_schema.processlist
		  WHERE ID != connection_id()
		    AND TIME >= %d
		  GROUP BY user, SUBSTRING_INDEX(host, ':', 1), command, state
	"""


def _desc(name: str, help_text: str, *labels: str) -> Desc:
    return Desc(build_fq_name(NAMESPACE, INFORMATION_SCHEMA, name), help_text, labels)


PROCESSLIST_COUNT_DESC = _desc(
    "processlist_threads",
    "The number of threads split by current state.",
    "command", "state",
)
PROCESSLIST_TIME_DESC = _desc(
    "processlist_seconds",
    "The number of seconds threads have used split by current state.",
    "command", "state",
)
PROCESSES_BY_USER_DESC = _desc(
    "processlist_processes_by_user",
    "The number of processes by user.",
    "mysql_user",
)
PROCESSES_BY_HOST_DESC = _desc(
    "processlist_processes_by_host",
    "The number of processes by host.",
    "client_host",
)
PROCESSES_DETAIL_COUNT_DESC = _desc(
    "processlist_processes_detail_count",
    "The number of processes by user host command state.",
    "mysql_user", "client_host", "command", "state",
)
PROCESSES_DETAIL_TIME_DESC = _desc(
    "processlist_processes_detail_time",
    "The number of seconds threads have used split by user host command state",
    "mysql_user", "client_host", "command", "state",
)

_STATE_TRANSLATION = str.maketrans({
    ";": None,
    ",": None,
    ":": None,
    ".": None,
    "(": None,
    ")": None,
    " ": "_",
    "-": "_",
})


def sanitize_state(state: str) -> str:
    """Turn a command or state into a label value; empty becomes "unknown"."""
    if not state:
        state = "unknown"
    return state.lower().translate(_STATE_TRANSLATION)


@dataclass
class ScrapeProcesslist(Scraper):
    """Collects thread state counts from information_schema.processlist."""

    name = INFORMATION_SCHEMA + ".processlist"
    help = "Collect current thread state counts from the information_schema.processlist"
    version = 5.1

    min_time: int = 0
    processes_by_user: bool = True
    processes_by_host: bool = True
    processes_detail_count: bool = False
    processes_detail_time: bool = False

    def scrape(self, db: Any) -> Iterator[Metric]:
        _, rows = fetch(db, PROCESSLIST_QUERY % self.min_time)

        state_counts: dict[tuple[str, str], int] = defaultdict(int)
        state_times: dict[tuple[str, str], int] = defaultdict(int)
        host_counts: dict[str, int] = defaultdict(int)
        user_counts: dict[str, int] = defaultdict(int)
        detail_counts: dict[tuple[str, str, str, str], int] = defaultdict(int)
        detail_times: dict[tuple[str, str, str, str], int] = defaultdict(int)

        for user, host, command, state, count, seconds in rows:
            command = sanitize_state(command)
            state = sanitize_state(state)
            host = host or "unknown"
            count = int(count)
            seconds = int(seconds)

            state_counts[command, state] += count
            state_times[command, state] += seconds
            host_counts[host] += count
            user_counts[user] += count
            detail_counts[user, host, command, state] += count
            detail_times[user, host, command, state] += seconds

        for key in sorted(state_counts):
            yield Metric(PROCESSLIST_COUNT_DESC, ValueType.GAUGE, state_counts[key], key)
            yield Metric(PROCESSLIST_TIME_DESC, ValueType.GAUGE, state_times[key], key)

        if self.processes_by_host:
            for host in sorted(host_counts):
                yield Metric(PROCESSES_BY_HOST_DESC, ValueType.GAUGE, host_counts[host], (host,))
        if self.processes_by_user:
            for user in sorted(user_counts):
                yield Metric(PROCESSES_BY_USER_DESC, ValueType.GAUGE, user_counts[user], (user,))

        if self.processes_detail_count:
            for key in sorted(detail_counts):
                yield Metric(PROCESSES_DETAIL_COUNT_DESC, ValueType.GAUGE, detail_counts[key], key)
        if self.processes_detail_time:
            for key in sorted(detail_times):
                yield Metric(PROCESSES_DETAIL_TIME_DESC, ValueType.GAUGE, detail_times[key], key)