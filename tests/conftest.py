import threading

import pytest

from couchbase_exporter.client import Cluster, Counters, HddTotals, RAMTotals, StorageTotals
from couchbase_exporter.mock.fake_couchbase_server import FakeCouchbaseServer


@pytest.fixture
def fake_server():
    """Fake admin API on a free port, running in a background thread."""
    server = FakeCouchbaseServer(("127.0.0.1", 0), username="admin", password="secret")
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def cluster_snapshot() -> Cluster:
    return Cluster(
        balanced=True,
        fts_memory_quota=256,
        index_memory_quota=512,
        memory_quota=100,
        rebalance_status="none",
        max_bucket_count=30,
        counters=Counters(
            rebalance_start=4,
            rebalance_success=3,
            rebalance_fail=1,
            failover_node=2,
        ),
        storage_totals=StorageTotals(
            ram=RAMTotals(
                total=51539607552,
                quota_total=32212254720,
                quota_used=10737418240,
                used=20401094656,
                used_by_data=8589934592,
                quota_used_per_node=3579139413,
                quota_total_per_node=10737418240,
            ),
            hdd=HddTotals(
                total=644245094400,
                quota_total=644245094400,
                used=85899345920,
                used_by_data=64424509440,
                free=558345748480,
            ),
        ),
    )
