"""Unit tests for vertex statements issued by VertexDB."""

import pytest

from nebula_mcp_server.errors import (
    AlreadyExists,
    ContractViolation,
    IllegalField,
    MissingValue,
    NoDataError,
)
from nebula_mcp_server.nebula.client import ResultTable
from nebula_mcp_server.nebula.entity import Vertex
from nebula_mcp_server.nebula.query import Query
from nebula_mcp_server.nebula.vertex import VertexDB

PLAYER = {"name": "string", "age": "int"}
EXISTS_STMT = 'FETCH PROP ON player "p1" YIELD id(vertex) AS VertexID;'


def _player(vid="p1", **properties):
    return Vertex(tag="player", schema=dict(PLAYER), vid=vid, properties=properties)


# =============================================================================
# Writes
# =============================================================================


class TestInsert:
    """INSERT VERTEX and its existence check."""

    def test_insert_new_vertex(self, client, executed):
        VertexDB(client).insert(_player(name="Tim", age=42))
        assert executed(client) == [
            EXISTS_STMT,
            'INSERT VERTEX player(name, age) VALUES "p1":("Tim", 42);',
        ]

    def test_existing_vid_is_rejected_without_insert(self, client, executed):
        client.execute.return_value = ResultTable(columns=["VertexID"], rows=[['"p1"']])
        with pytest.raises(AlreadyExists, match="p1"):
            VertexDB(client).insert(_player(name="Tim", age=42))
        assert executed(client) == [EXISTS_STMT]

    def test_allow_replace_skips_the_check(self, client, executed):
        VertexDB(client).insert(_player(name="Tim", age=42), allow_replace=True)
        assert executed(client) == [
            'INSERT VERTEX player(name, age) VALUES "p1":("Tim", 42);',
        ]

    def test_absent_fields_are_omitted(self, client, executed):
        VertexDB(client).insert(_player(name="Tim"), allow_replace=True)
        assert executed(client) == ['INSERT VERTEX player(name) VALUES "p1":("Tim");']

    def test_illegal_field(self, client):
        with pytest.raises(IllegalField, match="nickname"):
            VertexDB(client).insert(_player(nickname="Timmy"))
        client.execute.assert_not_called()

    def test_empty_vid(self, client):
        with pytest.raises(MissingValue):
            VertexDB(client).insert(_player(vid="", name="Tim"))
        client.execute.assert_not_called()


class TestUpdate:
    """UPDATE VERTEX in full and partial form."""

    def test_update_listed_fields(self, client, executed):
        VertexDB(client).update(_player(name="Tim", age=43), ["age"])
        assert executed(client) == ['UPDATE VERTEX ON player "p1" SET age = 43;']

    def test_update_requires_fields(self, client):
        with pytest.raises(MissingValue):
            VertexDB(client).update(_player(age=43), [])

    def test_update_unknown_field(self, client):
        with pytest.raises(IllegalField):
            VertexDB(client).update(_player(age=43), ["nickname"])

    def test_update_field_without_value(self, client):
        with pytest.raises(MissingValue, match="name"):
            VertexDB(client).update(_player(age=43), ["name"])

    def test_replace_skips_fields(self, client, executed):
        VertexDB(client).replace(_player(name="Tim", age=42), skip_fields=["name"])
        assert executed(client) == ['UPDATE VERTEX ON player "p1" SET age = 42;']

    def test_replace_with_nothing_to_set(self, client):
        with pytest.raises(MissingValue):
            VertexDB(client).replace(_player(name="Tim"), skip_fields=["name"])

    def test_delete(self, client, executed):
        VertexDB(client).delete(_player())
        assert executed(client) == ['DELETE VERTEX "p1";']


# =============================================================================
# Reads
# =============================================================================


class TestFetch:
    """FETCH PROP on a single vertex."""

    def test_fetch(self, client, executed):
        client.execute.return_value = ResultTable(
            columns=["VertexID", "name", "age"],
            rows=[['"p1"', '"Tim"', "42"]],
        )
        record = VertexDB(client).fetch(_player())
        assert record == {"vid": "p1", "name": "Tim", "age": 42}
        assert executed(client) == [
            'FETCH PROP ON player "p1" YIELD id(vertex) AS VertexID, '
            "properties(vertex).name AS name, properties(vertex).age AS age;"
        ]

    def test_fetch_missing_vertex(self, client):
        with pytest.raises(NoDataError):
            VertexDB(client).fetch(_player())


class TestLookup:
    """LOOKUP ON a tag, with and without pagination."""

    def test_unpaginated_lookup_runs_once(self, client, executed):
        client.execute.return_value = ResultTable(
            columns=["VertexID", "name", "age"],
            rows=[['"p1"', '"Tim"', "42"], ['"p2"', '"Tony"', "36"]],
        )
        total, records = VertexDB(client).lookup(_player(), {"age": 42})
        assert total == 2
        assert records[1] == {"vid": "p2", "name": "Tony", "age": 36}
        assert executed(client) == [
            "LOOKUP ON player WHERE player.age == 42 YIELD id(vertex) AS VertexID, "
            "properties(vertex).name AS name, properties(vertex).age AS age;"
        ]

    def test_paginated_lookup_counts_then_pages(self, client, executed):
        schema = {"name": "string", "created_at": "datetime"}
        entity = Vertex(tag="player", schema=schema)
        client.execute.side_effect = [
            ResultTable(
                columns=["VertexID", "name", "created_at"],
                rows=[
                    ['"p1"', '"Tim"', "2024-01-01T00:00:00.000000"],
                    ['"p2"', '"Tom"', "2024-01-02T03:04:05.000000"],
                ],
            ),
            ResultTable(
                columns=["VertexID", "name", "created_at"],
                rows=[['"p2"', '"Tom"', "2024-01-02T03:04:05.000000"]],
            ),
        ]
        query = Query(page_index=2, page_size=1, search_fields=["name"], search_values=["T"])

        total, records = VertexDB(client).lookup(entity, query=query, show_fields=["name"])

        assert total == 2
        assert records == [{"vid": "p2", "name": "Tom", "created_at": "2024-01-02 03:04:05"}]
        base = (
            'LOOKUP ON player WHERE player.name STARTS WITH "T" YIELD id(vertex) AS VertexID, '
            "properties(vertex).name AS name, properties(vertex).created_at AS created_at"
        )
        assert executed(client) == [
            base + ";",
            base + " | ORDER BY $-.created_at ASC | LIMIT 1, 1;",
        ]

    def test_vid_only_lookup(self, client, executed):
        VertexDB(client).lookup(_player(), show_fields=["vid"])
        assert executed(client) == ["LOOKUP ON player YIELD id(vertex) AS VertexID;"]


class TestChecks:
    """Existence, duplicates and tag names."""

    def test_check_exist(self, client, executed):
        client.execute.return_value = ResultTable(
            columns=["VertexID"], rows=[['"p1"'], ['"p2"'], ['"p3"']]
        )
        assert VertexDB(client).check_exist("player", threshold=2) is True
        assert executed(client) == [
            "LOOKUP ON player YIELD id(vertex) AS VertexID | LIMIT 3;"
        ]

    def test_check_exist_on_empty_tag(self, client):
        assert VertexDB(client).check_exist("player") is False

    def test_find_duplicates(self, client, executed):
        entity = Vertex(
            tag="user",
            schema={"name": "string", "email": "string"},
            vid="u1",
            properties={"name": "Tim", "email": "t@x"},
        )
        client.execute.return_value = ResultTable(
            columns=["VertexID"], rows=[['"u1"'], ['"u2"']]
        )
        duplicates = VertexDB(client).find_duplicates(entity, ["name", "email"], except_vids=["u1"])
        assert duplicates == [{"vid": "u2"}]
        assert executed(client) == [
            'LOOKUP ON user WHERE user.name == "Tim" OR user.email == "t@x" '
            "YIELD id(vertex) AS VertexID;"
        ]

    def test_find_duplicates_requires_unique_fields(self, client):
        with pytest.raises(ContractViolation):
            VertexDB(client).find_duplicates(_player(name="Tim"), [])

    def test_tag_names(self, client, executed):
        client.execute.return_value = ResultTable(
            columns=["VertexID", "tgs"], rows=[['"p1"', '["player", "coach"]']]
        )
        assert VertexDB(client).tag_names("p1") == ["player", "coach"]
        assert executed(client) == [
            'FETCH PROP ON * "p1" YIELD id(vertex) AS VertexID, tags(vertex) AS tgs;'
        ]

    def test_tag_names_of_missing_vertex(self, client):
        with pytest.raises(NoDataError):
            VertexDB(client).tag_names("p1")
