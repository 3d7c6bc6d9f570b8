"""Tests for the value conversions used by metric tables."""

from couchbase_exporter.collector.conversions import MEBIBYTE, equals, from_bool, mebibytes_to_bytes


def test_from_bool():
    assert from_bool(True) == 1.0
    assert from_bool(False) == 0.0


def test_mebibytes_to_bytes():
    assert MEBIBYTE == 1048576
    assert mebibytes_to_bytes(100) == 104857600.0
    assert mebibytes_to_bytes(0) == 0.0
    assert isinstance(mebibytes_to_bytes(1), float)


def test_equals_matches_only_the_exact_string():
    is_rebalancing = equals("rebalancing")

    assert is_rebalancing("rebalancing") == 1.0
    assert is_rebalancing("none") == 0.0
    assert is_rebalancing("") == 0.0
    assert is_rebalancing("Rebalancing") == 0.0
    assert is_rebalancing("rebalancing_paused") == 0.0
    assert is_rebalancing("some-status-nobody-has-seen") == 0.0
