"""Metric descriptors, metric values and the scraper interface."""

from __future__ import annotations

import contextlib
import enum
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Iterable, Iterator, Sequence

NAMESPACE = "mysql"
INFORMATION_SCHEMA = "info_schema"
PERFORMANCE_SCHEMA = "perf_schema"
MYSQL = "mysql"
PICO_SECONDS = 1e12
USERSTAT_CHECK_QUERY = (
    "SHOW GLOBAL VARIABLES WHERE Variable_Name='userstat' "
    "OR Variable_Name='userstat_running'"
)

_METRIC_NAME = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")
_LABEL_NAME = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

_logger = logging.getLogger(__name__)


class ValueType(enum.Enum):
    """Kind of a single-valued metric."""

    COUNTER = "counter"
    GAUGE = "gauge"
    UNTYPED = "untyped"


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join the non-empty parts with underscores; an empty name gives ""."""
    if not name:
        return ""
    return "_".join(part for part in (namespace, subsystem, name) if part)


@dataclass(frozen=True)
class Desc:
    """Describes a metric: its full name, help text and label names."""

    fq_name: str
    help: str
    variable_labels: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        labels = tuple(self.variable_labels or ())
        object.__setattr__(self, "variable_labels", labels)
        if not _METRIC_NAME.match(self.fq_name):
            raise ValueError(f"{self.fq_name!r} is not a valid metric name")
        for label in labels:
            if not _LABEL_NAME.match(label) or label.startswith("__"):
                raise ValueError(f"{label!r} is not a valid label name")
        if len(set(labels)) != len(labels):
            raise ValueError(f"duplicate label names in {labels!r}")


def info_schema_desc(name: str, help_text: str, labels: Sequence[str]) -> Desc:
    """Describe a metric in the information_schema subsystem."""
    return Desc(build_fq_name(NAMESPACE, INFORMATION_SCHEMA, name), help_text, tuple(labels))


def _check_labels(desc: Desc, label_values: tuple[str, ...]) -> None:
    if len(label_values) != len(desc.variable_labels):
        raise ValueError(
            f"{desc.fq_name}: expected {len(desc.variable_labels)} label values, "
            f"got {len(label_values)}"
        )


@dataclass(frozen=True)
class Metric:
    """A constant single-valued sample."""

    desc: Desc
    value_type: ValueType
    value: float
    label_values: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "label_values", tuple(self.label_values))
        object.__setattr__(self, "value", float(self.value))
        _check_labels(self.desc, self.label_values)

    @property
    def labels(self) -> dict[str, str]:
        return dict(zip(self.desc.variable_labels, self.label_values))


@dataclass(frozen=True)
class Histogram:
    """A constant histogram with cumulative bucket counts keyed by upper bound."""

    desc: Desc
    count: int
    sum: float
    buckets: dict[float, int] = field(default_factory=dict)
    label_values: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "label_values", tuple(self.label_values))
        _check_labels(self.desc, self.label_values)

    @property
    def labels(self) -> dict[str, str]:
        return dict(zip(self.desc.variable_labels, self.label_values))


def fetch(db: Any, query: str, *args: Any) -> tuple[list[str], list[tuple]]:
    """Run a query on a DB-API connection; return column names and all rows."""
    with contextlib.closing(db.cursor()) as cursor:
        if args:
            cursor.execute(query, args)
        else:
            cursor.execute(query)
        columns = [column[0] for column in (cursor.description or ())]
        rows = [tuple(row) for row in cursor.fetchall()]
    return columns, rows


def userstat_enabled(db: Any, unavailable_message: str) -> bool:
    """Tell whether the server collects user statistics (userstat is not OFF)."""
    try:
        _, rows = fetch(db, USERSTAT_CHECK_QUERY)
        var_name, var_value = rows[0][:2]
    except Exception:
        _logger.debug(unavailable_message)
        return False
    if var_value == "OFF":
        _logger.debug("MySQL variable is OFF: var=%s", var_name)
        return False
    return True


def counter_metrics(
    descs: Sequence[Desc], values: Iterable[Any], label_values: Sequence[str]
) -> Iterator[Metric]:
    """Yield one counter per descriptor; every value must be an integer."""
    numbers = [int(value) for value in values]
    for desc, number in zip(descs, numbers):
        yield Metric(desc, ValueType.COUNTER, number, tuple(label_values))


class Scraper(ABC):
    """Collects one group of metrics from a database connection."""

    name: ClassVar[str]
    help: ClassVar[str]
    version: ClassVar[float]

    @abstractmethod
    def scrape(self, db: Any) -> Iterator[Metric | Histogram]:
        """Yield the metrics read from the connection."""