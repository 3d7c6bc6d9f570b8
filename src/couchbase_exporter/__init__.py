"""Prometheus exporter for Couchbase cluster statistics."""

__version__ = "0.1.0"
