"""Edge statements: insert, delete, fetch and lookup."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ..errors import NoDataError
from .client import NebulaClient
from .entity import DST_VID_FIELD, SRC_VID_FIELD, DataSchema, Record, Schema, edge_ends
from .query import Query, project, run_lookup, where_clause
from .table import DST_ID_COLUMN, SRC_ID_COLUMN, parse_string_table
from .values import encode_value, quote_string
from .vertex import check_fields

logger = logging.getLogger(__name__)

_EDGE_ID_ITEMS = [("src(edge)", SRC_ID_COLUMN), ("dst(edge)", DST_ID_COLUMN)]


def _edge_key(src_vid: str, dst_vid: str) -> str:
    return f"{quote_string(src_vid)}->{quote_string(dst_vid)}"


def build_insert_edge(edge_type: str, schema: Schema, data: Mapping[str, Any]) -> str:
    """Build ``INSERT EDGE e(f, ...) VALUES "src"->"dst":(v, ...);``."""
    src_vid, dst_vid = edge_ends(data)
    check_fields(edge_type, schema, data, [SRC_VID_FIELD, DST_VID_FIELD], "edge insert")

    names: List[str] = []
    values: List[str] = []
    for field, declaration in schema.items():
        if field not in data:
            continue
        names.append(field)
        values.append(encode_value(declaration, data[field], field))
    return (
        f"INSERT EDGE {edge_type}({', '.join(names)}) "
        f"VALUES {_edge_key(src_vid, dst_vid)}:({', '.join(values)});"
    )


class EdgeDB:
    """Low-level NebulaGraph edge helpers backed by a NebulaClient."""

    def __init__(self, client: NebulaClient) -> None:
        self.client = client

    def insert(self, entity: DataSchema) -> None:
        """Insert an edge; an existing edge with the same ends is overwritten."""
        edge_type, schema = entity.get_schema()
        self.client.execute(build_insert_edge(edge_type, schema, entity.get_data_in_schema()))

    def insert_empty(self, edge_type: str, src_vid: str, dst_vid: str) -> None:
        """Insert a property-less edge between two vertices."""
        edge_ends({SRC_VID_FIELD: src_vid, DST_VID_FIELD: dst_vid})
        self.client.execute(
            f"INSERT EDGE {edge_type}() VALUES {_edge_key(src_vid, dst_vid)}:();"
        )

    def delete(self, entity: DataSchema) -> None:
        edge_type, _ = entity.get_schema()
        src_vid, dst_vid = edge_ends(entity.get_data_in_schema())
        self.delete_by_name(edge_type, src_vid, dst_vid)

    def delete_by_name(self, edge_type: str, src_vid: str, dst_vid: str) -> None:
        edge_ends({SRC_VID_FIELD: src_vid, DST_VID_FIELD: dst_vid})
        self.client.execute(
            f"DELETE EDGE {edge_type} {quote_string(src_vid)} -> {quote_string(dst_vid)};"
        )
        logger.info("Deleted edge '%s' from '%s' to '%s'", edge_type, src_vid, dst_vid)

    def fetch(self, entity: DataSchema) -> Record:
        """Read every property of the edge between the entity's two ends.

        Raises:
            NoDataError: No such edge exists.
        """
        edge_type, schema = entity.get_schema()
        src_vid, dst_vid = edge_ends(entity.get_data_in_schema())
        projection = project(schema, None, _EDGE_ID_ITEMS, "edge")
        ngql = (
            f"FETCH PROP ON {edge_type} {_edge_key(src_vid, dst_vid)} "
            f"YIELD {projection.yield_clause()};"
        )
        table = self.client.execute(ngql)
        records = parse_string_table(table.as_string_table(), projection.fields, schema)
        if not records:
            raise NoDataError(f"no edge '{edge_type}' found from '{src_vid}' to '{dst_vid}'")
        return records[0]

    def lookup(
        self,
        entity: DataSchema,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        query: Optional[Query] = None,
        show_fields: Optional[Sequence[str]] = None,
    ) -> Tuple[int, List[Record]]:
        """Look up edges of the entity's type.

        Works like ``VertexDB.lookup``; records carry ``src_vid`` and
        ``dst_vid`` instead of ``vid``.
        """
        edge_type, schema = entity.get_schema()
        projection = project(schema, show_fields, _EDGE_ID_ITEMS, "edge")
        base = (
            f"LOOKUP ON {edge_type}{where_clause(edge_type, schema, filters, query)} "
            f"YIELD {projection.yield_clause()}"
        )
        return run_lookup(self.client, base, projection, schema, query)
