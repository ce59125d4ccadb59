"""Unit tests for the CLI wiring; NebulaClient is patched out."""

import json
from unittest.mock import MagicMock, patch

import pytest

from nebula_mcp_server import cli
from nebula_mcp_server.nebula.client import ResultTable


@pytest.fixture(autouse=True)
def nebula_env(monkeypatch):
    monkeypatch.setenv("NEBULA_HOSTS", "127.0.0.1")
    monkeypatch.setenv("NEBULA_USER", "root")
    monkeypatch.setenv("NEBULA_SPACE", "demo")


@pytest.fixture
def fake_client():
    with patch("nebula_mcp_server.cli.NebulaClient") as client_cls:
        client = MagicMock()
        client.__enter__.return_value = client
        client_cls.return_value = client
        yield client


class TestParser:
    """Argument parsing."""

    def test_lookup_arguments(self):
        args = cli.build_parser().parse_args(
            [
                "lookup-vertices",
                "--tag", "player",
                "--search-field", "name",
                "--search-value", "Tim",
                "--search-value", "Tony",
                "--page-index", "2",
                "--page-size", "10",
            ]
        )
        query = cli._query_from_args(args)
        assert query.search_fields == ["name"]
        assert query.search_values == ["Tim", "Tony"]
        assert query.limit_clause() == " | LIMIT 10, 10"

    def test_describe_needs_a_target(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["describe"])

    def test_invalid_log_level(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["--log-level", "loud", "describe", "--tag", "t"])


class TestCommands:
    """Commands print JSON built from the statement builders."""

    def test_execute_single_statement(self, fake_client, capsys):
        fake_client.execute.return_value = ResultTable(columns=["Host"], rows=[['"h1"']])
        cli.main(["execute", "SHOW HOSTS;"])
        output = json.loads(capsys.readouterr().out)
        assert output == {"count": 1, "results": [{"columns": ["Host"], "rows": [['"h1"']]}]}
        fake_client.execute.assert_called_once_with("SHOW HOSTS;")

    def test_execute_batch(self, fake_client, capsys):
        fake_client.execute_batch.return_value = [ResultTable(), ResultTable()]
        cli.main(["execute", "A;", "B;"])
        assert json.loads(capsys.readouterr().out)["count"] == 2
        fake_client.execute_batch.assert_called_once_with(["A;", "B;"])

    def test_describe(self, fake_client, capsys):
        fake_client.execute.return_value = ResultTable(
            columns=["Field", "Type"], rows=[['"name"', '"string"']]
        )
        cli.main(["describe", "--edge", "follow"])
        output = json.loads(capsys.readouterr().out)
        assert output == {
            "name": "follow",
            "kind": "edge",
            "count": 1,
            "fields": {"name": "string"},
        }
        fake_client.execute.assert_called_once_with("DESCRIBE EDGE follow;")
