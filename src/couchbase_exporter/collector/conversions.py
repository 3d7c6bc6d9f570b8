"""Value conversions referenced by the metric tables."""

from __future__ import annotations

from typing import Any, Callable


MEBIBYTE = 1024 * 1024


def from_bool(value: bool) -> float:
    return 1.0 if value else 0.0


def mebibytes_to_bytes(value: float) -> float:
    """Couchbase reports memory quotas in MiB; Prometheus wants bytes."""
    return float(value * MEBIBYTE)


def equals(expected: Any) -> Callable[[Any], float]:
    """Build a converter that yields 1.0 on an exact match, 0.0 otherwise.

    Unrecognised values are not an error, they simply read as 0.0.
    """

    def convert(value: Any) -> float:
        return from_bool(value == expected)

    convert.__name__ = f"equals_{expected}"
    return convert
