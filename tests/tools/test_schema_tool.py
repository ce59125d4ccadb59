"""Unit tests for the schema MCP tool."""

import logging

import pytest

from nebula_mcp_server.nebula.client import ResultTable

DESCRIBE_COLUMNS = ["Field", "Type", "Null", "Default", "Comment"]


def _describe_table(*fields):
    return ResultTable(
        columns=DESCRIBE_COLUMNS,
        rows=[
            [f'"{name}"', f'"{decl}"', '"YES"', "__EMPTY__", "__EMPTY__"]
            for name, decl in fields
        ],
    )


class TestDescribeSchema:
    """describe_schema over tags and edge types."""

    def test_tag(self, mcp_client):
        from nebula_mcp_server.tools.schema import describe_schema

        mcp_client.execute.return_value = _describe_table(
            ("name", "fixed_string(32)"), ("age", "int64")
        )
        result = describe_schema("player")
        assert result == {
            "name": "player",
            "kind": "tag",
            "count": 2,
            "fields": {"name": "fixed_string(32)", "age": "int64"},
        }
        mcp_client.execute.assert_called_once_with("DESCRIBE TAG player;")

    def test_edge_kind_is_case_insensitive(self, mcp_client):
        from nebula_mcp_server.tools.schema import describe_schema

        mcp_client.execute.return_value = _describe_table(("degree", "int64"))
        result = describe_schema("follow", kind="EDGE")
        assert result["kind"] == "edge"
        assert result["fields"] == {"degree": "int64"}
        mcp_client.execute.assert_called_once_with("DESCRIBE EDGE follow;")

    def test_unknown_kind_is_rejected_and_logged(self, mcp_client, caplog):
        from nebula_mcp_server.tools.schema import describe_schema

        with caplog.at_level(logging.INFO, logger="nebula.mcp.tools"):
            with pytest.raises(ValueError, match="kind must be"):
                describe_schema("player", kind="space")
        mcp_client.execute.assert_not_called()
        assert [r.getMessage() for r in caplog.records] == [
            "describe_schema called",
            "describe_schema failed",
        ]
        assert caplog.records[-1].levelno == logging.WARNING
        assert caplog.records[-1].error_type == "ValueError"
