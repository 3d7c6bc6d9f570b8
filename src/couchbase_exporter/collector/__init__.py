from couchbase_exporter.collector.base import MetricSpec, ScrapeCollector
from couchbase_exporter.collector.cluster import ClusterCollector

__all__ = ["MetricSpec", "ScrapeCollector", "ClusterCollector"]
