"""Terminal view of scrapes using Rich. Shows every sample, trend arrows, and up/down status."""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime
from typing import Optional

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from couchbase_exporter import __version__
from couchbase_exporter.collector.base import ScrapeCollector
from couchbase_exporter.metrics import MetricKind, MetricSample, ScrapeOutcome

log = logging.getLogger(__name__)

_BYTE_UNITS = ("B", "KiB", "MiB", "GiB", "TiB")


def format_value(sample: MetricSample) -> str:
    """Human-friendly rendering: byte sizes get binary units, durations ms."""
    name = sample.name
    value = sample.value
    if name.endswith("_bytes"):
        step = 0
        while abs(value) >= 1024 and step < len(_BYTE_UNITS) - 1:
            value /= 1024
            step += 1
        if step == 0:
            return f"{value:,.0f} B"
        return f"{value:,.1f} {_BYTE_UNITS[step]}"
    if name.endswith("_seconds"):
        return f"{value * 1000:.1f}ms"
    if value.is_integer():
        return f"{value:,.0f}"
    return f"{value:,.3f}"


def _trend_arrow(current: float, previous: Optional[float]) -> str:
    if previous is None or current == previous:
        return ""
    return "[cyan]^[/cyan]" if current > previous else "[cyan]v[/cyan]"


def build_table(outcome: ScrapeOutcome, previous: Optional[ScrapeOutcome] = None) -> Table:
    prev_values = {s.name: s.value for s in previous.samples} if previous else {}

    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Metric", style="dim")
    table.add_column("Type", width=8)
    table.add_column("Value", justify="right")
    table.add_column("", width=2)

    for sample in outcome.samples:
        kind_style = "magenta" if sample.kind is MetricKind.COUNTER else "white"
        table.add_row(
            sample.name,
            f"[{kind_style}]{sample.kind.value}[/{kind_style}]",
            format_value(sample),
            _trend_arrow(sample.value, prev_values.get(sample.name)),
        )
    return table


def build_display(outcome: ScrapeOutcome, source_name: str, previous: Optional[ScrapeOutcome] = None) -> Panel:
    header = Text(f"  couchbase-exporter v{__version__}  |  {source_name}", style="bold white on blue")
    header.append(f"\n  {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}  ", style="dim")
    if outcome.up:
        header.append(f"  UP  ({outcome.duration_seconds * 1000:.1f}ms)", style="bold green")
        border = "blue"
    else:
        header.append("  DOWN  (fetch failed, see log)", style="bold red")
        border = "red"

    return Panel(
        Group(header, build_table(outcome, previous), Text("  Press Ctrl+C to stop", style="dim")),
        border_style=border,
    )


def run_dashboard(collector: ScrapeCollector, refresh_interval: float = 5.0):

    console = Console()
    source_name = collector.name()
    previous: Optional[ScrapeOutcome] = None

    log.info("Starting dashboard: source=%s, refresh=%.1fs", source_name, refresh_interval)

    with Live(console=console, refresh_per_second=1, screen=True) as live:
        try:
            while True:
                outcome = collector.scrape()
                live.update(build_display(outcome, source_name, previous))
                if outcome.up:
                    previous = outcome
                time.sleep(refresh_interval)
        except KeyboardInterrupt:
            pass

    console.print("\n[dim]Dashboard stopped.[/dim]")


def write_jsonl(outcome: ScrapeOutcome, source_name: str, stream=None):
    record = outcome.summary()
    record["source"] = source_name
    record["timestamp"] = datetime.now().isoformat()
    stream = stream or sys.stdout
    stream.write(json.dumps(record) + "\n")
    stream.flush()


def run_jsonl(collector: ScrapeCollector, refresh_interval: float = 5.0):
    """Non-interactive output mode: prints one JSON object per scrape per line.

    Meant for containers and log pipelines where a Rich TUI isn't available.
    """
    source_name = collector.name()
    log.info("Starting JSONL output: source=%s, refresh=%.1fs", source_name, refresh_interval)

    try:
        while True:
            write_jsonl(collector.scrape(), source_name)
            time.sleep(refresh_interval)
    except KeyboardInterrupt:
        pass
