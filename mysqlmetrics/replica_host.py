"""Replica host status from information_schema.replica_host_status."""

from __future__ import annotations

import logging
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

logger = logging.getLogger(__name__)

REPLICA_HOST_QUERY = """
	  SELECT SERVER_ID
		   , if(SESSION_ID='MASTER_SESSION_ID','writer','reader') AS ROLE
		   , CPU
		   , MASTER_SLAVE_LATENCY_IN_MICROSECONDS
		   , REPLICA_LAG_IN_MILLISECONDS
		   , LOG_STREAM_SPEED_IN_KiB_PER_SECOND
		   , CURRENT_REPLAY_LATENCY_IN_MICROSECONDS
		FROM information_schema.replica_host_status
	"""

UNKNOWN_TABLE_ERROR = 1109


def _desc(name: str, help_text: str) -> Desc:
    return Desc(
        build_fq_name(NAMESPACE, INFORMATION_SCHEMA, name),
        help_text,
        ("server_id", "role"),
    )


REPLICA_HOST_CPU_DESC = _desc(
    "replica_host_cpu_percent", "The CPU usage as a percentage."
)
REPLICA_HOST_REPLICA_LATENCY_DESC = _desc(
    "replica_host_replica_latency_seconds", "The source-replica latency in seconds."
)
REPLICA_HOST_LAG_DESC = _desc(
    "replica_host_lag_seconds", "The replica lag in seconds."
)
REPLICA_HOST_LOG_STREAM_SPEED_DESC = _desc(
    "replica_host_log_stream_speed", "The log stream speed in kilobytes per second."
)
REPLICA_HOST_REPLAY_LATENCY_DESC = _desc(
    "replica_host_replay_latency_seconds", "The current replay latency in seconds."
)


def _error_number(exc: BaseException) -> int | None:
    errno = getattr(exc, "errno", None)
    if isinstance(errno, int):
        return errno
    if exc.args and isinstance(exc.args[0], int):
        return exc.args[0]
    return None


class ScrapeReplicaHost(Scraper):
    """Collects metrics from information_schema.replica_host_status."""

    name = "info_schema.replica_host"
    help = "Collect metrics from information_schema.replica_host_status"
    version = 5.6

    def scrape(self, db: Any) -> Iterator[Metric]:
        try:
            _, rows = fetch(db, REPLICA_HOST_QUERY)
        except Exception as exc:
            if _error_number(exc) == UNKNOWN_TABLE_ERROR:
                logger.debug("information_schema.replica_host_status is not available.")
                return
            raise

        for server_id, role, cpu, replica_latency, lag, speed, replay_latency in rows:
            labels = (str(server_id), str(role))
            cpu = float(cpu)
            replica_latency = int(replica_latency)
            lag = float(lag)
            speed = float(speed)
            replay_latency = int(replay_latency)
            yield Metric(REPLICA_HOST_CPU_DESC, ValueType.GAUGE, cpu, labels)
            yield Metric(
                REPLICA_HOST_REPLICA_LATENCY_DESC,
                ValueType.GAUGE,
                float(replica_latency) * 0.000001,
                labels,
            )
            yield Metric(REPLICA_HOST_LAG_DESC, ValueType.GAUGE, lag * 0.001, labels)
            yield Metric(REPLICA_HOST_LOG_STREAM_SPEED_DESC, ValueType.GAUGE, speed, labels)
            yield Metric(
                REPLICA_HOST_REPLAY_LATENCY_DESC,
                ValueType.GAUGE,
                float(replay_latency) * 0.000001,
                labels,
            )