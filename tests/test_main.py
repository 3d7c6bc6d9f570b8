"""CLI tests using click's test runner against the fake admin API."""

import json

from click.testing import CliRunner

from couchbase_exporter.main import cli


def _last_json_line(output: str) -> dict:
    lines = [line for line in output.splitlines() if line.startswith("{")]
    assert lines, output
    return json.loads(lines[-1])


def test_scrape_json(fake_server):
    result = CliRunner().invoke(cli, [
        "--couchbase.url", fake_server.url,
        "--couchbase.username", "admin",
        "--couchbase.password", "secret",
        "scrape", "--json",
    ])

    assert result.exit_code == 0, result.output
    record = _last_json_line(result.output)
    assert record["up"] is True
    assert record["source"] == f"Couchbase ({fake_server.url})"
    assert len(record["metrics"]) == 24
    assert record["metrics"]["couchbase_cluster_up"] == 1.0


def test_scrape_reads_credentials_from_env(fake_server):
    result = CliRunner().invoke(cli, ["scrape", "--json"], env={
        "COUCHBASE_URL": fake_server.url,
        "COUCHBASE_USERNAME": "admin",
        "COUCHBASE_PASSWORD": "secret",
    })

    assert result.exit_code == 0, result.output
    assert _last_json_line(result.output)["up"] is True


def test_scrape_exits_nonzero_when_cluster_down(fake_server):
    fake_server.set_failing(True)
    result = CliRunner().invoke(cli, [
        "--couchbase.url", fake_server.url,
        "--couchbase.password", "secret",
        "scrape", "--json",
    ])

    assert result.exit_code == 1
    record = _last_json_line(result.output)
    assert record["up"] is False
    assert record["metrics"] == {"couchbase_cluster_up": 0.0}


def test_serve_rejects_bad_listen_address():
    result = CliRunner().invoke(cli, ["serve", "--web.listen-address", "nope"])

    assert result.exit_code == 2
    assert "listen" in result.output


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "couchbase-exporter" in result.output
