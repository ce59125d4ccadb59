"""Unit tests for tag and edge type schema statements."""

import pytest

from nebula_mcp_server.errors import IllegalField, MissingValue, StatementError
from nebula_mcp_server.nebula.client import ResultTable
from nebula_mcp_server.nebula.entity import Vertex
from nebula_mcp_server.nebula.schema import (
    EdgeTypeDB,
    TagDB,
    build_alter_statement,
    build_create_statement,
    build_drop_statement,
    is_declaration_changed,
)


class TestCreateStatement:
    """CREATE TAG / CREATE EDGE rendering."""

    def test_create_tag(self):
        ngql = build_create_statement("TAG", "player", {"name": "string", "age": "int64"})
        assert ngql == "CREATE TAG player(name string, age int64);"

    def test_composites_are_stored_as_strings(self):
        ngql = build_create_statement("EDGE", "follow", {"tags": "list", "meta": "dict"}, True)
        assert ngql == "CREATE EDGE IF NOT EXISTS follow(tags string, meta string);"

    def test_empty_schema(self):
        with pytest.raises(MissingValue):
            build_create_statement("TAG", "player", {})

    def test_empty_name(self):
        with pytest.raises(MissingValue):
            build_create_statement("TAG", "", {"name": "string"})

    def test_blank_field_or_declaration(self):
        with pytest.raises(IllegalField):
            build_create_statement("TAG", "player", {" ": "string"})
        with pytest.raises(IllegalField):
            build_create_statement("TAG", "player", {"name": ""})


class TestAlterStatement:
    """Schema diffing into a single ALTER statement."""

    def test_same_schema_gives_nothing(self):
        schema = {"a": "int", "b": "string"}
        assert build_alter_statement("TAG", "t", schema, dict(schema)) is None

    def test_add_one(self):
        ngql = build_alter_statement("TAG", "t", {"a": "int"}, {"a": "int", "b": "int"})
        assert ngql == "ALTER TAG t ADD (b int);"

    def test_drop_one(self):
        ngql = build_alter_statement("TAG", "t", {"a": "int", "b": "int"}, {"a": "int"})
        assert ngql == "ALTER TAG t DROP (b);"

    def test_change_one(self):
        ngql = build_alter_statement("EDGE", "e", {"a": "int"}, {"a": "string"})
        assert ngql == "ALTER EDGE e CHANGE (a string);"

    def test_clause_order(self):
        ngql = build_alter_statement(
            "TAG",
            "t",
            {"a": "int", "c": "int"},
            {"a": "string", "b": "list"},
        )
        assert ngql == "ALTER TAG t ADD (b string), CHANGE (a string), DROP (c);"

    def test_case_and_whitespace_are_not_changes(self):
        assert not is_declaration_changed("int  not null", "INT NOT NULL")
        assert build_alter_statement("TAG", "t", {"a": "int  not null"}, {"a": "INT NOT NULL"}) is None

    def test_token_order_is_a_change(self):
        assert is_declaration_changed("int NOT NULL DEFAULT 0", "int DEFAULT 0 NOT NULL")

    def test_drop_statement(self):
        assert build_drop_statement("TAG", "t") == "DROP TAG t;"
        assert build_drop_statement("EDGE", "e", if_exists=True) == "DROP EDGE IF EXISTS e;"


class TestSchemaDB:
    """Statements issued by TagDB / EdgeTypeDB."""

    def test_create_with_index(self, client, executed):
        TagDB(client).create("player", {"name": "string"}, create_index=True)
        assert executed(client) == [
            "CREATE TAG player(name string);",
            "CREATE TAG INDEX IF NOT EXISTS player_index_0 ON player();",
        ]

    def test_create_from_entity(self, client, executed):
        entity = Vertex(tag="player", schema={"name": "string"})
        TagDB(client).create_from(entity, if_not_exists=True)
        assert executed(client) == ["CREATE TAG IF NOT EXISTS player(name string);"]

    def test_create_failure_propagates(self, client):
        client.execute.side_effect = StatementError(-1, "Existed!")
        with pytest.raises(StatementError, match="Existed!"):
            TagDB(client).create("player", {"name": "string"}, create_index=True)
        assert client.execute.call_count == 1

    def test_alter_without_changes_issues_nothing(self, client):
        assert EdgeTypeDB(client).alter("follow", {"a": "int"}, {"a": "INT"}) is False
        client.execute.assert_not_called()

    def test_alter(self, client, executed):
        assert EdgeTypeDB(client).alter("follow", {}, {"degree": "int"}) is True
        assert executed(client) == ["ALTER EDGE follow ADD (degree int);"]

    def test_drop_removes_indexes_first(self, client, executed):
        client.execute.side_effect = [
            ResultTable(
                columns=["Index Name", "By Tag", "Columns"],
                rows=[
                    ['"player_index_0"', '"player"', "[]"],
                    ['"team_index_0"', '"team"', "[]"],
                    ['"player_name"', '"player"', '["name"]'],
                ],
            ),
            ResultTable(),
            ResultTable(),
            ResultTable(),
        ]
        TagDB(client).drop("player", if_exists=True)
        assert executed(client) == [
            "SHOW TAG INDEXES;",
            "DROP TAG INDEX player_index_0;",
            "DROP TAG INDEX player_name;",
            "DROP TAG IF EXISTS player;",
        ]

    def test_edge_drop_also_removes_indexes(self, client, executed):
        client.execute.side_effect = [
            ResultTable(
                columns=["Index Name", "By Edge", "Columns"],
                rows=[['"follow_index_0"', '"follow"', "[]"]],
            ),
            ResultTable(),
            ResultTable(),
        ]
        EdgeTypeDB(client).drop("follow")
        assert executed(client) == [
            "SHOW EDGE INDEXES;",
            "DROP EDGE INDEX follow_index_0;",
            "DROP EDGE follow;",
        ]

    def test_describe(self, client, executed):
        client.execute.return_value = ResultTable(
            columns=["Field", "Type", "Null", "Default", "Comment"],
            rows=[
                ['"name"', '"fixed_string(32)"', '"YES"', "__EMPTY__", "__EMPTY__"],
                ['"age"', '"int64"', '"YES"', "__EMPTY__", "__EMPTY__"],
            ],
        )
        db = TagDB(client)
        assert db.describe("player") == {"name": "fixed_string(32)", "age": "int64"}
        assert db.codec_schema("player") == {"name": "string", "age": "int64"}
        assert executed(client)[0] == "DESCRIBE TAG player;"
