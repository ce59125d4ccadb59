"""Vertex statements: insert, update, delete, fetch and lookup.

Every method takes a ``DataSchema`` and works from its tag name, schema and
data record, so the same helpers serve any vertex kind.

Important: this module assumes the NebulaGraph client/connection is
managed by the caller. It does NOT create or manage connections.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..errors import AlreadyExists, ContractViolation, IllegalField, MissingValue, NoDataError
from .client import NebulaClient
from .entity import VID_FIELD, DataSchema, Record, Schema, validate_name, vertex_id
from .query import Query, project, run_lookup, where_clause
from .table import VERTEX_ID_COLUMN, parse_string_table
from .values import encode_value, quote_string

logger = logging.getLogger(__name__)

_VERTEX_ID_ITEMS = [("id(vertex)", VERTEX_ID_COLUMN)]


def check_fields(
    type_name: str,
    schema: Schema,
    data: Mapping[str, Any],
    identifiers: Iterable[str],
    action: str,
) -> None:
    """Reject data keys that are neither identifiers nor schema fields."""
    skip = set(identifiers)
    for field in data:
        if field in skip:
            continue
        if field not in schema:
            raise IllegalField(f"illegal field '{field}' for {action} on '{type_name}'")


def build_insert_vertex(tag: str, schema: Schema, data: Mapping[str, Any]) -> str:
    """Build ``INSERT VERTEX tag(f, ...) VALUES "vid":(v, ...);``.

    Fields missing from ``data`` are left out of the statement.
    """
    check_fields(tag, schema, data, [VID_FIELD], "vertex insert")
    vid = vertex_id(data)

    names: List[str] = []
    values: List[str] = []
    for field, declaration in schema.items():
        if field not in data:
            continue
        names.append(field)
        values.append(encode_value(declaration, data[field], field))
    return (
        f"INSERT VERTEX {tag}({', '.join(names)}) "
        f"VALUES {quote_string(vid)}:({', '.join(values)});"
    )


def build_update_vertex(
    tag: str,
    vid: str,
    schema: Schema,
    data: Mapping[str, Any],
    fields: Sequence[str],
) -> str:
    assignments = [
        f"{field} = {encode_value(schema[field], data[field], field)}" for field in fields
    ]
    return f"UPDATE VERTEX ON {tag} {quote_string(vid)} SET {', '.join(assignments)};"


class VertexDB:
    """Low-level NebulaGraph vertex helpers backed by a NebulaClient."""

    def __init__(self, client: NebulaClient) -> None:
        self.client = client

    def exists(self, tag: str, vid: str) -> bool:
        """Whether a vertex with ``vid`` carries the given tag."""
        validate_name(vid)
        table = self.client.execute(
            f"FETCH PROP ON {tag} {quote_string(vid)} YIELD id(vertex) AS {VERTEX_ID_COLUMN};"
        )
        return len(table) > 0

    def insert(self, entity: DataSchema, *, allow_replace: bool = False) -> None:
        """Insert a vertex.

        The engine silently overwrites an existing vertex, so unless
        ``allow_replace`` is set the vid is checked first. The check and the
        insert are two separate statements: this guards against mistakes, not
        against concurrent writers.

        Raises:
            AlreadyExists: The vid is already used on the tag.
            IllegalField: The data holds a field the schema does not define.
        """
        tag, schema = entity.get_schema()
        data = entity.get_data_in_schema()
        ngql = build_insert_vertex(tag, schema, data)
        vid = data[VID_FIELD]

        if not allow_replace and self.exists(tag, vid):
            raise AlreadyExists(f"vid '{vid}' already exist")

        self.client.execute(ngql)

    def delete(self, entity: DataSchema) -> None:
        data = entity.get_data_in_schema()
        vid = vertex_id(data)
        self.client.execute(f"DELETE VERTEX {quote_string(vid)};")
        logger.info("Deleted vertex '%s'", vid)

    def replace(self, entity: DataSchema, skip_fields: Sequence[str] = ()) -> None:
        """Overwrite every property of a vertex with the entity's data.

        Args:
            entity: Vertex carrying the new values.
            skip_fields: Schema fields that must not be touched, e.g. read-only
                fields such as ``created_at``.
        """
        tag, schema = entity.get_schema()
        data = entity.get_data_in_schema()
        vid = vertex_id(data)
        check_fields(tag, schema, data, [VID_FIELD], "vertex update")

        fields = [f for f in schema if f not in skip_fields and f in data]
        if not fields:
            raise MissingValue(f"no field to replace on vertex '{vid}'")
        self.client.execute(build_update_vertex(tag, vid, schema, data, fields))

    def update(self, entity: DataSchema, fields: Sequence[str]) -> None:
        """Update only the listed properties of a vertex.

        Raises:
            MissingValue: ``fields`` is empty or names a field without a value.
            IllegalField: ``fields`` names a field outside the schema.
        """
        tag, schema = entity.get_schema()
        data = entity.get_data_in_schema()
        vid = vertex_id(data)
        if not fields:
            raise MissingValue("no field specified in param `fields`")
        for field in fields:
            if field not in schema:
                raise IllegalField(f"illegal field '{field}' found in param `fields`")
            if field not in data:
                raise MissingValue(f"value for field '{field}' not provided")
        self.client.execute(build_update_vertex(tag, vid, schema, data, fields))

    def fetch(self, entity: DataSchema) -> Record:
        """Read every property of the entity's vertex.

        Only ``vid`` needs to be set on the entity.

        Raises:
            NoDataError: No vertex with that vid carries the tag.
        """
        tag, schema = entity.get_schema()
        vid = vertex_id(entity.get_data_in_schema())
        projection = project(schema, None, _VERTEX_ID_ITEMS, "vertex")
        ngql = (
            f"FETCH PROP ON {tag} {quote_string(vid)} "
            f"YIELD {projection.yield_clause()};"
        )
        table = self.client.execute(ngql)
        records = parse_string_table(table.as_string_table(), projection.fields, schema)
        if not records:
            raise NoDataError(f"no data found with vid '{vid}'")
        return records[0]

    def lookup(
        self,
        entity: DataSchema,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        query: Optional[Query] = None,
        show_fields: Optional[Sequence[str]] = None,
    ) -> Tuple[int, List[Record]]:
        """Look up vertices of the entity's tag.

        Args:
            entity: Supplies the tag and schema; its data is not used.
            filters: ``{field: value}`` equality conditions, combined with AND.
            query: Search and pagination descriptor.
            show_fields: Fields to return, ``["vid"]`` for ids only; all
                fields by default. Results are ordered by ``created_at`` when
                that field is returned.

        Returns:
            ``(total, records)`` where ``total`` counts every match regardless
            of pagination.
        """
        tag, schema = entity.get_schema()
        projection = project(schema, show_fields, _VERTEX_ID_ITEMS, "vertex")
        base = (
            f"LOOKUP ON {tag}{where_clause(tag, schema, filters, query)} "
            f"YIELD {projection.yield_clause()}"
        )
        return run_lookup(self.client, base, projection, schema, query)

    def check_exist(self, tag: str, threshold: int = 0) -> bool:
        """Whether the tag holds more than ``threshold`` vertices."""
        table = self.client.execute(
            f"LOOKUP ON {tag} YIELD id(vertex) AS {VERTEX_ID_COLUMN} | LIMIT {threshold + 1};"
        )
        return len(table) > threshold

    def find_duplicates(
        self,
        entity: DataSchema,
        unique_fields: Sequence[str],
        except_vids: Sequence[str] = (),
    ) -> List[Record]:
        """Find vertices sharing any of the entity's unique field values.

        Args:
            entity: Vertex whose values are checked.
            unique_fields: Fields that must be unique on the tag.
            except_vids: Vids to leave out of the result, typically the
                entity's own vid when updating.

        Returns:
            ``[{"vid": ...}, ...]`` of the conflicting vertices.
        """
        if not unique_fields:
            raise ContractViolation(
                "VertexDB.find_duplicates(): usage error",
                detail="param 'unique_fields' should not be empty",
            )
        tag, schema = entity.get_schema()
        data = entity.get_data_in_schema()

        conditions: List[str] = []
        for field in unique_fields:
            if field not in schema:
                raise IllegalField(f"unique field '{field}' not defined on '{tag}'")
            conditions.append(
                f"{tag}.{field} == {encode_value(schema[field], data.get(field), field)}"
            )
        ngql = (
            f"LOOKUP ON {tag} WHERE {' OR '.join(conditions)} "
            f"YIELD id(vertex) AS {VERTEX_ID_COLUMN};"
        )
        table = self.client.execute(ngql)
        records = parse_string_table(table.as_string_table(), [VERTEX_ID_COLUMN], schema)
        return [r for r in records if r[VID_FIELD] not in except_vids]

    def tag_names(self, vid: str) -> List[str]:
        """Names of every tag attached to a vertex.

        Raises:
            NoDataError: The vertex does not exist.
        """
        validate_name(vid)
        ngql = (
            f"FETCH PROP ON * {quote_string(vid)} "
            f"YIELD id(vertex) AS {VERTEX_ID_COLUMN}, tags(vertex) AS tgs;"
        )
        table = self.client.execute(ngql)
        schema: Dict[str, str] = {"tgs": "list"}
        records = parse_string_table(table.as_string_table(), [VERTEX_ID_COLUMN, "tgs"], schema)
        if not records:
            raise NoDataError(f"no data found with vid '{vid}'")
        return [str(name) for name in records[0]["tgs"]]
