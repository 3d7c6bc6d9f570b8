"""Basic sanity checks for the mock cluster generator."""

import threading

from couchbase_exporter.client import Cluster
from couchbase_exporter.mock.generator import MockCouchbaseCluster


def test_document_parses_as_cluster():
    cluster = Cluster.from_json(MockCouchbaseCluster(seed=42).pools_default())

    ram = cluster.storage_totals.ram
    hdd = cluster.storage_totals.hdd
    assert cluster.memory_quota > 0
    assert ram.used <= ram.total
    assert ram.used_by_data <= ram.quota_total
    assert hdd.used + hdd.free == hdd.total
    assert cluster.rebalance_status in ("rebalancing", "none")


def test_balanced_unless_rebalancing():
    mock = MockCouchbaseCluster(seed=7)
    for _ in range(200):
        doc = mock.pools_default()
        assert doc["balanced"] == (doc["rebalanceStatus"] != "rebalancing")


def test_counters_never_decrease():
    mock = MockCouchbaseCluster(seed=3)
    previous = {}
    for _ in range(300):
        counters = mock.pools_default()["counters"]
        for key, value in previous.items():
            assert counters.get(key, 0) >= value
        previous = counters

    # over 300 ticks at least one rebalance should have started
    assert previous.get("rebalance_start", 0) > 0


def test_deterministic_with_same_seed():
    doc_a = MockCouchbaseCluster(seed=99).pools_default()
    doc_b = MockCouchbaseCluster(seed=99).pools_default()

    assert doc_a == doc_b


def test_fake_server_documents_are_serialized(fake_server):
    def fetch_many():
        for _ in range(50):
            fake_server.next_document()

    threads = [threading.Thread(target=fetch_many) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert fake_server._cluster.tick == 400
