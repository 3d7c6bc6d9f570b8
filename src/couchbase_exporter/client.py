"""
Client for the Couchbase administrative REST API.

Only the cluster-wide resource (/pools/default) is fetched here. Every
kind of failure -- connection errors, non-2xx responses, bodies that are
not JSON or don't have the expected shape -- comes out as ClientError so
callers only have one thing to catch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx


log = logging.getLogger(__name__)


class ClientError(Exception):
    """Raised when a resource could not be fetched or parsed."""


def _require(data: dict, key: str, kind: type | tuple[type, ...]) -> Any:
    try:
        value = data[key]
    except KeyError:
        raise ClientError(f"missing field {key!r}") from None
    # bool is an int subclass, don't let true/false slip in as numbers
    if kind is not bool and isinstance(value, bool):
        raise ClientError(f"field {key!r} has unexpected type bool")
    if not isinstance(value, kind):
        raise ClientError(f"field {key!r} has unexpected type {type(value).__name__}")
    return value


def _number(data: dict, key: str) -> float:
    value = _require(data, key, (int, float))
    try:
        return float(value)
    except OverflowError:
        raise ClientError(f"field {key!r} is too large to represent") from None


def _object(data: dict, key: str) -> dict:
    return _require(data, key, dict)


@dataclass
class RAMTotals:
    total: float = 0
    quota_total: float = 0
    quota_used: float = 0
    used: float = 0
    used_by_data: float = 0
    quota_used_per_node: float = 0
    quota_total_per_node: float = 0

    @classmethod
    def from_json(cls, data: dict) -> "RAMTotals":
        return cls(
            total=_number(data, "total"),
            quota_total=_number(data, "quotaTotal"),
            quota_used=_number(data, "quotaUsed"),
            used=_number(data, "used"),
            used_by_data=_number(data, "usedByData"),
            quota_used_per_node=_number(data, "quotaUsedPerNode"),
            quota_total_per_node=_number(data, "quotaTotalPerNode"),
        )


@dataclass
class HddTotals:
    total: float = 0
    quota_total: float = 0
    used: float = 0
    used_by_data: float = 0
    free: float = 0

    @classmethod
    def from_json(cls, data: dict) -> "HddTotals":
        return cls(
            total=_number(data, "total"),
            quota_total=_number(data, "quotaTotal"),
            used=_number(data, "used"),
            used_by_data=_number(data, "usedByData"),
            free=_number(data, "free"),
        )


@dataclass
class StorageTotals:
    ram: RAMTotals = field(default_factory=RAMTotals)
    hdd: HddTotals = field(default_factory=HddTotals)


@dataclass
class Counters:
    """Cluster lifetime counters.

    Couchbase leaves a key out until the event has happened at least once,
    so missing keys read as zero.
    """

    rebalance_start: float = 0
    rebalance_success: float = 0
    rebalance_fail: float = 0
    failover_node: float = 0

    @classmethod
    def from_json(cls, data: dict) -> "Counters":
        values = {}
        for key in ("rebalance_start", "rebalance_success", "rebalance_fail", "failover_node"):
            if key in data:
                values[key] = _number(data, key)
        return cls(**values)


@dataclass
class Cluster:
    """One reading of /pools/default. Quotas are in mebibytes, storage totals in bytes."""

    balanced: bool = True
    fts_memory_quota: float = 0
    index_memory_quota: float = 0
    memory_quota: float = 0
    rebalance_status: str = "none"
    max_bucket_count: float = 0
    counters: Counters = field(default_factory=Counters)
    storage_totals: StorageTotals = field(default_factory=StorageTotals)

    @classmethod
    def from_json(cls, data: Any) -> "Cluster":
        if not isinstance(data, dict):
            raise ClientError(f"expected a JSON object, got {type(data).__name__}")

        counters = data.get("counters") or {}
        if not isinstance(counters, dict):
            raise ClientError("field 'counters' has unexpected type")

        storage = _object(data, "storageTotals")
        return cls(
            balanced=_require(data, "balanced", bool),
            fts_memory_quota=_number(data, "ftsMemoryQuota"),
            index_memory_quota=_number(data, "indexMemoryQuota"),
            memory_quota=_number(data, "memoryQuota"),
            rebalance_status=_require(data, "rebalanceStatus", str),
            max_bucket_count=_number(data, "maxBucketCount"),
            counters=Counters.from_json(counters),
            storage_totals=StorageTotals(
                ram=RAMTotals.from_json(_object(storage, "ram")),
                hdd=HddTotals.from_json(_object(storage, "hdd")),
            ),
        )


class CouchbaseClient:

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        timeout_seconds: float = 10.0,
        retries: int = 1,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._client = httpx.Client(
            base_url=self._base_url,
            auth=(username, password),
            timeout=self._timeout,
            transport=transport or httpx.HTTPTransport(retries=retries),
        )

    def cluster(self) -> Cluster:
        """Fetch the cluster-wide overview from /pools/default."""
        return Cluster.from_json(self._get("/pools/default"))

    def _get(self, path: str) -> Any:
        log.debug("GET %s%s", self._base_url, path)
        try:
            response = self._client.get(path)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise ClientError(f"failed to get {path}: {e}") from e
        except ValueError as e:
            raise ClientError(f"failed to decode {path}: {e}") from e

    def name(self) -> str:
        return f"Couchbase ({self._base_url})"

    def close(self):
        self._client.close()
