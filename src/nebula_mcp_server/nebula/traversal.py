"""Graph traversal helpers built on ``GO`` statements.

Traversals start from a single vertex and follow one or more edge types,
forward by default or against the edge direction with ``reversely``.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..errors import IllegalField
from .client import NebulaClient
from .entity import Record, Schema, validate_name
from .query import project
from .table import VERTEX_ID_COLUMN, parse_string_table
from .values import quote_string

logger = logging.getLogger(__name__)

_END_ID_ITEMS = [("id($$)", VERTEX_ID_COLUMN)]


def _go_from(start_vid: str, over: str, steps: int = 1, reversely: bool = False) -> str:
    validate_name(start_vid)
    if steps <= 0:
        steps = 1
    go = "GO" if steps == 1 else f"GO {steps} STEPS"
    direction = " REVERSELY" if reversely else ""
    return f"{go} FROM {quote_string(start_vid)} OVER {over}{direction}"


class TraversalDB:
    """GO-based traversal helpers backed by a NebulaClient."""

    def __init__(self, client: NebulaClient) -> None:
        self.client = client

    def go_get_ends(
        self,
        start_vid: str,
        over: str,
        schema: Schema,
        show_fields: Optional[Sequence[str]] = None,
        *,
        steps: int = 1,
        reversely: bool = False,
    ) -> List[Record]:
        """Return the vertices reached from ``start_vid`` over ``over``.

        Args:
            start_vid: Vertex to start from.
            over: Edge type to follow.
            schema: Schema of the vertices at the far end.
            show_fields: Same rules as ``VertexDB.lookup``.
            steps: Number of hops; values below 1 mean one hop.
            reversely: Follow edges against their direction.

        Returns:
            One record per reached vertex, ordered by ``created_at`` when that
            field is returned.
        """
        projection = project(schema, show_fields, _END_ID_ITEMS, "$$")
        ngql = (
            f"{_go_from(start_vid, over, steps, reversely)} "
            f"YIELD {projection.yield_clause()}{projection.order_clause()};"
        )
        table = self.client.execute(ngql)
        return parse_string_table(table.as_string_table(), projection.fields, schema)

    def go_get_relations(
        self,
        start_vid: str,
        over: Sequence[str],
        schema: Schema,
        *,
        reversely: bool = False,
        show_fields: Sequence[str] = (),
    ) -> List[Record]:
        """Return ``{"edgeType", "vid", ...}`` for each edge leaving ``start_vid``.

        An empty ``over`` follows every edge type. Properties are only read
        for the listed ``show_fields``.
        """
        over_clause = ", ".join(over) if over else "*"
        items = ["type(edge) AS edgeType", "id($$) AS vid"]
        fields = ["edgeType", "vid"]
        for name in show_fields:
            if name == "vid" or name in fields:
                continue
            if name not in schema:
                raise IllegalField(f"invalid show field '{name}'")
            items.append(f"properties($$).{name} AS {name}")
            fields.append(name)

        ngql = f"{_go_from(start_vid, over_clause, 1, reversely)} YIELD {', '.join(items)};"
        table = self.client.execute(ngql)
        return parse_string_table(table.as_string_table(), fields, schema)

    def go_and_delete(self, start_vid: str, edge: str, steps: int = 1) -> None:
        """Delete every vertex found ``steps`` hops away over ``edge``."""
        ngql = (
            f"{_go_from(start_vid, edge, steps)} "
            "YIELD dst(edge) AS id | DELETE VERTEX $-.id;"
        )
        self.client.execute(ngql)
        logger.info("Deleted end vertices of '%s' over '%s'", start_vid, edge)

    def go_and_check_exist(
        self,
        start_vid: str,
        edge: str,
        *,
        reversely: bool = False,
        threshold: int = 0,
    ) -> bool:
        """Whether more than ``threshold`` vertices sit one hop away."""
        validate_name(edge, "edge type")
        ngql = (
            f"{_go_from(start_vid, edge, 1, reversely)} "
            f"YIELD dst(edge) AS vid | LIMIT {threshold + 1};"
        )
        return len(self.client.execute(ngql)) > threshold

    def has_next(self, start_vid: str, edge: str, threshold: int = 0) -> bool:
        return self.go_and_check_exist(start_vid, edge, threshold=threshold)

    def has_upward(self, start_vid: str, edge: str, threshold: int = 0) -> bool:
        return self.go_and_check_exist(start_vid, edge, reversely=True, threshold=threshold)
