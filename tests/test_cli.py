from __future__ import annotations

import json
from pathlib import Path

import pytest

import calltrace.main as cli
from calltrace.errors import TraceSourceError

from conftest import (
    BALANCE_OF_SELECTOR,
    TOKEN,
    TRANSFER_SELECTOR,
    FakeTraceSource,
    make_row,
)

ROWS = [
    make_row(TRANSFER_SELECTOR + "0" * 128, block_number=1),
    make_row(BALANCE_OF_SELECTOR + "0" * 64, block_number=2),
    make_row(TRANSFER_SELECTOR + "0" * 128, block_number=3, status=0, error="Reverted"),
]


@pytest.fixture
def fake_source(monkeypatch) -> FakeTraceSource:
    source = FakeTraceSource(ROWS)
    created = {}

    def factory(credentials_file=None, location="US"):
        created["credentials_file"] = credentials_file
        created["location"] = location
        return source

    monkeypatch.setattr(cli, "BigQueryTraceSource", factory)
    source.created = created
    return source


def test_fetch_writes_ndjson_to_stdout(erc20_abi_file: Path, fake_source, capsys) -> None:
    exit_code = cli.main(["--callee", TOKEN, "--callee-abi", str(erc20_abi_file), "--quiet"])

    assert exit_code == 0
    records = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert [(r["blockNumber"], r["functionName"]) for r in records] == [(1, "transfer"), (3, "transfer")]
    assert records[1]["error"] == "Reverted"


def test_fetch_writes_output_file(erc20_abi_file: Path, fake_source, tmp_path: Path) -> None:
    output = tmp_path / "calls.json"
    exit_code = cli.main([
        "--callee", TOKEN, "--callee-abi", str(erc20_abi_file),
        "--output", str(output), "--pretty", "--quiet",
        "--credentials", "creds.json", "--location", "EU",
    ])

    assert exit_code == 0
    assert output.read_text(encoding="utf-8").startswith("{\n  ")
    assert fake_source.created == {"credentials_file": "creds.json", "location": "EU"}


def test_query_reflects_filters(erc20_abi_file: Path, fake_source) -> None:
    cli.main([
        "--callee", "0xABCDEF0123456789ABCDEF0123456789ABCDEF01",
        "--caller", "0xDEF0123456789ABCDEF0123456789ABCDEF01234",
        "--start-block", "100", "--end-block", "200", "--limit", "5",
        "--callee-abi", str(erc20_abi_file), "--quiet",
    ])

    query = fake_source.queries[0]
    assert "lower(c.to_address) IN ('0xabcdef0123456789abcdef0123456789abcdef01')" in query
    assert "lower(c.from_address) IN ('0xdef0123456789abcdef0123456789abcdef01234')" in query
    assert "c.block_number >= 100" in query
    assert "c.block_number < 200" in query
    assert "LIMIT 5" in query


def test_print_query_does_not_contact_source(fake_source, capsys) -> None:
    exit_code = cli.main(["--print-query", "--since", "2021-01-01T00:00:00Z", "--quiet"])

    assert exit_code == 0
    assert "TIMESTAMP_MILLIS(1609459200000)" in capsys.readouterr().out
    assert fake_source.queries == []


def test_nothing_to_capture_is_fatal(erc20_abi_file: Path, fake_source, capsys) -> None:
    exit_code = cli.main(["--callee-abi", str(erc20_abi_file), "--function", "!transfer",
                          "!approve", "!transferFrom", "!mint"])

    assert exit_code == 1
    assert "No function calls to capture!" in capsys.readouterr().err
    assert fake_source.queries == []


def test_invalid_callee_is_fatal(fake_source, capsys) -> None:
    assert cli.main(["--callee", "not-an-address"]) == 1
    assert "Invalid callee address" in capsys.readouterr().err


def test_source_error_is_fatal_and_writes_nothing(erc20_abi_file: Path, monkeypatch,
                                                  tmp_path: Path, capsys) -> None:
    class FailingSource:
        def __init__(self, credentials_file=None, location="US"):
            pass

        def execute(self, query):
            raise TraceSourceError("BigQuery query failed: access denied")

    monkeypatch.setattr(cli, "BigQueryTraceSource", FailingSource)
    output = tmp_path / "calls.json"

    exit_code = cli.main(["--callee-abi", str(erc20_abi_file), "--output", str(output)])

    assert exit_code == 1
    assert "access denied" in capsys.readouterr().err
    assert not output.exists()


def test_version(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["--version"])
    assert exc.value.code == 0
    assert "0.1.0" in capsys.readouterr().out
