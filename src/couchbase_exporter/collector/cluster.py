"""
Collector for cluster-wide statistics from /pools/default.

Storage totals are flattened into one metric per quantity rather than a
shared metric with a ram/hdd label.
"""

from __future__ import annotations

from couchbase_exporter.client import Cluster, CouchbaseClient
from couchbase_exporter.collector.base import MetricSpec, ScrapeCollector
from couchbase_exporter.collector.conversions import equals, from_bool, mebibytes_to_bytes
from couchbase_exporter.metrics import GLOBAL_NAMESPACE, MetricKind


REBALANCING = "rebalancing"

CLUSTER_METRICS = (
    MetricSpec("balanced", "Is the cluster balanced", "balanced", from_bool),
    MetricSpec(
        "fts_memory_quota_bytes", "Memory quota allocated to full text search buckets",
        "fts_memory_quota", mebibytes_to_bytes,
    ),
    MetricSpec(
        "index_memory_quota_bytes", "Memory quota allocated to Index buckets",
        "index_memory_quota", mebibytes_to_bytes,
    ),
    MetricSpec(
        "memory_quota_bytes", "Memory quota allocated to Data buckets",
        "memory_quota", mebibytes_to_bytes,
    ),
    MetricSpec(
        "rebalance_status", "Rebalance status. 1: rebalancing",
        "rebalance_status", equals(REBALANCING),
    ),
    MetricSpec("max_bucket_count", "Maximum number of buckets allowed", "max_bucket_count"),

    # Lifetime counters
    MetricSpec(
        "counters_rebalance_start", "Number of rebalance starts since cluster is up",
        "counters.rebalance_start", kind=MetricKind.COUNTER,
    ),
    MetricSpec(
        "counters_rebalance_success", "Number of rebalance successes since cluster is up",
        "counters.rebalance_success", kind=MetricKind.COUNTER,
    ),
    MetricSpec(
        "counters_rebalance_fail", "Number of rebalance fails since cluster is up",
        "counters.rebalance_fail", kind=MetricKind.COUNTER,
    ),
    MetricSpec(
        "counters_failover_node", "Number of failovers since cluster is up",
        "counters.failover_node", kind=MetricKind.COUNTER,
    ),

    # RAM totals (bytes)
    MetricSpec(
        "storagetotals_ram_quotatotal_bytes", "Total memory allocated to Couchbase in the cluster",
        "storage_totals.ram.quota_total",
    ),
    MetricSpec(
        "storagetotals_ram_quotaused_bytes", "Memory quota used by the cluster",
        "storage_totals.ram.quota_used",
    ),
    MetricSpec(
        "storagetotals_ram_used_bytes", "Memory used by the cluster",
        "storage_totals.ram.used",
    ),
    MetricSpec(
        "storagetotals_ram_quotausedpernode_bytes", "Memory quota used per node",
        "storage_totals.ram.quota_used_per_node",
    ),
    MetricSpec(
        "storagetotals_ram_usedbydata_bytes", "Memory used by the data in the cluster",
        "storage_totals.ram.used_by_data",
    ),
    MetricSpec(
        "storagetotals_ram_total_bytes", "Total memory available to the cluster",
        "storage_totals.ram.total",
    ),
    MetricSpec(
        "storagetotals_ram_quotatotalpernode_bytes", "Total memory allocated to Couchbase per node",
        "storage_totals.ram.quota_total_per_node",
    ),

    # Disk totals (bytes)
    MetricSpec(
        "storagetotals_hdd_total_bytes", "Total disk space available to the cluster",
        "storage_totals.hdd.total",
    ),
    MetricSpec(
        "storagetotals_hdd_used_bytes", "Disk space used by the cluster",
        "storage_totals.hdd.used",
    ),
    MetricSpec(
        "storagetotals_hdd_quotatotal_bytes", "Disk space quota for the cluster",
        "storage_totals.hdd.quota_total",
    ),
    MetricSpec(
        "storagetotals_hdd_usedbydata_bytes", "Disk space used by the data in the cluster",
        "storage_totals.hdd.used_by_data",
    ),
    MetricSpec(
        "storagetotals_hdd_free_bytes", "Free disk space in the cluster",
        "storage_totals.hdd.free",
    ),
)


class ClusterCollector(ScrapeCollector):

    subsystem = "cluster"
    metric_specs = CLUSTER_METRICS

    def __init__(self, client: CouchbaseClient, namespace: str = GLOBAL_NAMESPACE):
        super().__init__(namespace=namespace)
        self._client = client

    def fetch(self) -> Cluster:
        return self._client.cluster()

    def name(self) -> str:
        return self._client.name()
