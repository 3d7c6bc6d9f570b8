"""
couchbase-exporter entry point.

Usage:
    couchbase-exporter                                  Serve /metrics on :9420
    couchbase-exporter --couchbase.url http://cb:8091 serve --web.listen-address :9420
    couchbase-exporter scrape                           One scrape, printed as a table
    couchbase-exporter watch                            Live terminal view
    couchbase-exporter mock-server                      Fake admin API on :8091
"""

from __future__ import annotations

import logging

import click

from couchbase_exporter import __version__
from couchbase_exporter.client import CouchbaseClient
from couchbase_exporter.collector.cluster import ClusterCollector
from couchbase_exporter.server import (
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_TELEMETRY_PATH,
    ExporterApp,
    build_registry,
    parse_listen_address,
    serve as serve_app,
)


log = logging.getLogger("couchbase_exporter")


def _make_client(ctx: click.Context) -> CouchbaseClient:
    return CouchbaseClient(
        base_url=ctx.obj["url"],
        username=ctx.obj["username"],
        password=ctx.obj["password"],
        timeout_seconds=ctx.obj["timeout"],
    )


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="couchbase-exporter")
@click.option("--couchbase.url", "url", default="http://localhost:8091", envvar="COUCHBASE_URL",
              show_default=True, help="Couchbase admin API URL")
@click.option("--couchbase.username", "username", default="admin", envvar="COUCHBASE_USERNAME",
              show_default=True, help="Couchbase admin username")
@click.option("--couchbase.password", "password", default="password", envvar="COUCHBASE_PASSWORD",
              help="Couchbase admin password")
@click.option("--couchbase.timeout", "timeout", default=10.0, envvar="COUCHBASE_TIMEOUT",
              show_default=True, help="Admin API request timeout in seconds")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx, url: str, username: str, password: str, timeout: float, verbose: bool):
    """Prometheus exporter for Couchbase cluster statistics."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    ctx.ensure_object(dict)
    ctx.obj["url"] = url
    ctx.obj["username"] = username
    ctx.obj["password"] = password
    ctx.obj["timeout"] = timeout

    # No subcommand means run the exporter
    if ctx.invoked_subcommand is None:
        ctx.invoke(serve)


@cli.command()
@click.option("--web.listen-address", "listen_address", default=DEFAULT_LISTEN_ADDRESS,
              show_default=True, help="Address to listen on for telemetry")
@click.option("--web.telemetry-path", "telemetry_path", default=DEFAULT_TELEMETRY_PATH,
              show_default=True, help="Path under which to expose metrics")
@click.option("--no-process-metrics", is_flag=True, default=False,
              help="Don't export process and platform metrics of the exporter itself")
@click.pass_context
def serve(ctx, listen_address: str, telemetry_path: str, no_process_metrics: bool):
    """Serve metrics for Prometheus to scrape."""
    try:
        parse_listen_address(listen_address)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--web.listen-address")

    client = _make_client(ctx)
    log.info("Starting couchbase-exporter v%s for %s", __version__, client.name())
    try:
        registry = build_registry(client, process_metrics=not no_process_metrics)
        serve_app(ExporterApp(registry, telemetry_path), listen_address)
    finally:
        client.close()


@cli.command()
@click.option("--json", "as_json", is_flag=True, default=False, help="Print one JSON object instead of a table")
@click.pass_context
def scrape(ctx, as_json: bool):
    """Run a single scrape and print the samples."""
    from rich.console import Console

    from couchbase_exporter.dashboard.terminal import build_display, write_jsonl

    client = _make_client(ctx)
    try:
        collector = ClusterCollector(client)
        outcome = collector.scrape()
    finally:
        client.close()

    if as_json:
        write_jsonl(outcome, collector.name())
    else:
        Console().print(build_display(outcome, collector.name()))

    if not outcome.up:
        raise SystemExit(1)


@cli.command()
@click.option("--refresh", default=5.0, show_default=True, help="Refresh interval in seconds")
@click.option("--output", type=click.Choice(["tui", "jsonl"]), default="tui",
              help="Output mode: tui (Rich dashboard) or jsonl (one JSON line per scrape)")
@click.pass_context
def watch(ctx, refresh: float, output: str):
    """Scrape repeatedly and show the results live."""
    from couchbase_exporter.dashboard.terminal import run_dashboard, run_jsonl

    client = _make_client(ctx)
    runner = run_jsonl if output == "jsonl" else run_dashboard
    try:
        runner(ClusterCollector(client), refresh_interval=refresh)
    finally:
        client.close()


@cli.command("mock-server")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8091, show_default=True)
@click.option("--username", default="admin", show_default=True)
@click.option("--password", default="password")
def mock_server(host: str, port: int, username: str, password: str):
    """Run a fake Couchbase admin API serving simulated cluster stats."""
    from couchbase_exporter.mock.fake_couchbase_server import run_fake_server

    run_fake_server(host=host, port=port, username=username, password=password)


if __name__ == "__main__":
    cli()
