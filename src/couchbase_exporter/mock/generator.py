"""
Mock Couchbase cluster.

Produces fake but plausible /pools/default documents so the exporter can
be developed and tested without a running cluster. Numbers are loosely
based on a three-node cluster with 16GB of RAM per node.
"""

import math
import random

GB = 1024 ** 3
NODES = 3


class MockCouchbaseCluster:

    def __init__(self, seed: int = 42):
        self._rng = random.Random(seed)
        self._tick = 0
        self._rebalance_ticks_left = 0
        self._rebalance_start = 0
        self._rebalance_success = 0
        self._rebalance_fail = 0
        self._failover_node = 0

        # quotas are in MiB, like the real API
        self.memory_quota = 10240
        self.index_memory_quota = 512
        self.fts_memory_quota = 512
        self.ram_total_per_node = 16 * GB
        self.hdd_total_per_node = 200 * GB

    @property
    def tick(self) -> int:
        """Number of documents generated so far."""
        return self._tick

    def _advance_rebalance(self):
        if self._rebalance_ticks_left > 0:
            self._rebalance_ticks_left -= 1
            if self._rebalance_ticks_left == 0:
                if self._rng.random() < 0.9:
                    self._rebalance_success += 1
                else:
                    self._rebalance_fail += 1
            return

        # Occasional node failure triggers a failover and a follow-up rebalance
        if self._rng.random() < 0.02:
            self._failover_node += 1
            self._rebalance_start += 1
            self._rebalance_ticks_left = self._rng.randint(3, 8)
        elif self._rng.random() < 0.05:
            self._rebalance_start += 1
            self._rebalance_ticks_left = self._rng.randint(2, 6)

    def pools_default(self) -> dict:
        """Generate one /pools/default document, advancing the simulation clock."""
        self._tick += 1
        t = self._tick
        self._advance_rebalance()
        rebalancing = self._rebalance_ticks_left > 0

        quota_total_per_node = self.memory_quota * 1024 * 1024
        quota_total = quota_total_per_node * NODES

        # Bucket memory follows a slow daily-ish cycle
        data_fraction = 0.45 + 0.2 * math.sin(t * 0.05) + self._rng.gauss(0, 0.02)
        data_fraction = max(0.05, min(0.95, data_fraction))
        used_by_data = int(quota_total * data_fraction)

        ram_total = self.ram_total_per_node * NODES
        ram_used = min(ram_total, used_by_data + int(ram_total * 0.2))

        hdd_total = self.hdd_total_per_node * NODES
        hdd_used_by_data = int(hdd_total * min(0.9, 0.1 + t * 0.0005))
        hdd_used = min(hdd_total, hdd_used_by_data + 20 * GB)

        counters = {}
        for key, value in (
            ("rebalance_start", self._rebalance_start),
            ("rebalance_success", self._rebalance_success),
            ("rebalance_fail", self._rebalance_fail),
            ("failover_node", self._failover_node),
        ):
            # the real API omits counters that never fired
            if value:
                counters[key] = value

        return {
            "name": "default",
            "balanced": not rebalancing,
            "rebalanceStatus": "rebalancing" if rebalancing else "none",
            "maxBucketCount": 30,
            "memoryQuota": self.memory_quota,
            "indexMemoryQuota": self.index_memory_quota,
            "ftsMemoryQuota": self.fts_memory_quota,
            "counters": counters,
            "storageTotals": {
                "ram": {
                    "total": ram_total,
                    "quotaTotal": quota_total,
                    "quotaUsed": quota_total,
                    "used": ram_used,
                    "usedByData": used_by_data,
                    "quotaUsedPerNode": quota_total_per_node,
                    "quotaTotalPerNode": quota_total_per_node,
                },
                "hdd": {
                    "total": hdd_total,
                    "quotaTotal": hdd_total,
                    "used": hdd_used,
                    "usedByData": hdd_used_by_data,
                    "free": hdd_total - hdd_used,
                },
            },
        }
