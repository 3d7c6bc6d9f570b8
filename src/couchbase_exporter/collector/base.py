"""
Base scrape collector.

A collector declares its metrics once, as a table of MetricSpec rows, and
knows how to fetch one snapshot of a remote resource. Everything else --
the availability signal, scrape timing, locking, and turning samples into
prometheus_client metric families -- lives here so every resource type
scrapes the same way.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from operator import attrgetter
from typing import Any, Callable, Iterator

from prometheus_client.core import GaugeMetricFamily, Metric

from couchbase_exporter.metrics import (
    GLOBAL_NAMESPACE,
    MetricDescriptor,
    MetricKind,
    MetricSample,
    ScrapeOutcome,
)


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricSpec:
    """One row of a collector's metric table.

    ``source`` is a dotted attribute path into the snapshot and ``convert``
    turns the raw value into the float that gets emitted.
    """

    name: str
    help: str
    source: str
    convert: Callable[[Any], float] = float
    kind: MetricKind = MetricKind.GAUGE

    def extract(self, snapshot: Any) -> float:
        return float(self.convert(attrgetter(self.source)(snapshot)))


def to_metric_family(descriptor: MetricDescriptor, kind: MetricKind) -> Metric:
    """Build an empty prometheus_client family for a descriptor.

    Counters use a plain Metric so samples keep the exact descriptor name;
    CounterMetricFamily would rename them with a _total suffix.
    """
    if kind is MetricKind.COUNTER:
        return Metric(descriptor.fq_name, descriptor.help, "counter")
    return GaugeMetricFamily(descriptor.fq_name, descriptor.help)


class ScrapeCollector(ABC):
    """Custom prometheus_client collector for one remote resource.

    Subclasses set ``subsystem`` and ``metric_specs`` and implement
    :meth:`fetch`. Register an instance with a ``CollectorRegistry``; the
    registry calls :meth:`describe` once and :meth:`collect` per scrape.
    """

    subsystem: str = ""
    metric_specs: tuple[MetricSpec, ...] = ()

    def __init__(self, namespace: str = GLOBAL_NAMESPACE):
        self._lock = threading.Lock()
        self._up = MetricDescriptor(
            namespace, self.subsystem, "up",
            f"Couchbase {self.subsystem} API is responding",
        )
        self._scrape_duration = MetricDescriptor(
            namespace, self.subsystem, "scrape_duration_seconds",
            "Scrape duration in seconds",
        )
        self._catalog: tuple[tuple[MetricDescriptor, MetricSpec], ...] = tuple(
            (MetricDescriptor(namespace, self.subsystem, spec.name, spec.help), spec)
            for spec in self.metric_specs
        )

    @abstractmethod
    def fetch(self) -> Any:
        """Fetch one snapshot of the resource. May raise anything."""
        ...

    def name(self) -> str:
        """Human-readable name for this source."""
        return self.subsystem

    def descriptors(self) -> list[MetricDescriptor]:
        """The fixed catalog, in emission order."""
        return [self._up] + [desc for desc, _ in self._catalog] + [self._scrape_duration]

    def kinds(self) -> dict[str, MetricKind]:
        kinds = {desc.fq_name: spec.kind for desc, spec in self._catalog}
        kinds[self._up.fq_name] = MetricKind.GAUGE
        kinds[self._scrape_duration.fq_name] = MetricKind.GAUGE
        return kinds

    def map(self, snapshot: Any) -> list[MetricSample]:
        """Turn a snapshot into samples, one per catalog entry. No side effects."""
        return [
            MetricSample(desc, spec.kind, spec.extract(snapshot))
            for desc, spec in self._catalog
        ]

    def scrape(self) -> ScrapeOutcome:
        """Run one full fetch/map cycle while holding the collector lock."""
        with self._lock:
            start = time.perf_counter()
            log.debug("Collecting %s metrics...", self.subsystem)

            try:
                snapshot = self.fetch()
            except Exception as e:
                log.error("Failed to scrape %s: %s", self.subsystem, e)
                return ScrapeOutcome(
                    up=False,
                    samples=(MetricSample(self._up, MetricKind.GAUGE, 0.0),),
                )

            samples = [MetricSample(self._up, MetricKind.GAUGE, 1.0)]
            samples.extend(self.map(snapshot))

            duration = time.perf_counter() - start
            samples.append(MetricSample(self._scrape_duration, MetricKind.GAUGE, duration))
            return ScrapeOutcome(up=True, samples=tuple(samples), duration_seconds=duration)

    def describe(self) -> list[Metric]:
        """Sample-less families for registry registration."""
        kinds = self.kinds()
        return [to_metric_family(desc, kinds[desc.fq_name]) for desc in self.descriptors()]

    def collect(self) -> Iterator[Metric]:
        """Yield one family per sample of a single scrape.

        The whole sample tuple is built under the lock before anything is
        yielded, so concurrent collects never interleave.
        """
        outcome = self.scrape()
        for sample in outcome.samples:
            family = to_metric_family(sample.descriptor, sample.kind)
            labels = dict(zip(sample.descriptor.label_names, sample.label_values))
            family.add_sample(sample.name, labels, sample.value)
            yield family
