"""
Core metric definitions for the exporter.

Descriptors are the static identity of a metric (what Prometheus sees in
HELP/TYPE lines). Samples are the values produced on a single scrape and
are thrown away once the registry has rendered them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


GLOBAL_NAMESPACE = "couchbase"


class MetricKind(str, Enum):
    GAUGE = "gauge"
    COUNTER = "counter"


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join the non-empty parts with underscores.

    An empty name yields an empty string, matching how Prometheus client
    libraries build fully-qualified names.
    """
    if not name:
        return ""
    return "_".join(part for part in (namespace, subsystem, name) if part)


@dataclass(frozen=True)
class MetricDescriptor:
    """Static identity of one metric, independent of any value."""

    namespace: str
    subsystem: str
    name: str
    help: str
    label_names: tuple[str, ...] = ()

    @property
    def fq_name(self) -> str:
        return build_fq_name(self.namespace, self.subsystem, self.name)


@dataclass(frozen=True)
class MetricSample:
    """A single value emitted during a scrape."""

    descriptor: MetricDescriptor
    kind: MetricKind
    value: float
    label_values: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.descriptor.fq_name


@dataclass(frozen=True)
class ScrapeOutcome:
    """Everything one collect cycle produced.

    When the fetch failed, ``up`` is False, ``samples`` holds only the
    availability sample and ``duration_seconds`` is None.
    """

    up: bool
    samples: tuple[MetricSample, ...] = field(default_factory=tuple)
    duration_seconds: Optional[float] = None

    def summary(self) -> dict:
        """Return a plain dict for display or JSON output."""
        return {
            "up": self.up,
            "duration_seconds": self.duration_seconds,
            "metrics": {s.name: s.value for s in self.samples},
        }
