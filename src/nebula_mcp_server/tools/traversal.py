"""MCP tools for one-vertex-outward graph traversals.

These tools expose `TraversalDB.go_get_ends` and
`TraversalDB.go_get_relations` via the shared MCP server instance.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..mcp_instance import tagdb, tool, traversaldb
from .utils import tool_call


@tool()
def go_get_ends(
    start_vid: str,
    over: str,
    tag: str,
    steps: int = 1,
    reversely: bool = False,
    show_fields: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Find the vertices reached from a vertex by following one edge type.

    Direction behavior:
      - reversely=False: start_vid -> ... -> end vertex
      - reversely=True:  start_vid <- ... <- end vertex

    Use this tool when:
      - You want the neighbours of a vertex over a known relationship.
      - You want every vertex exactly `steps` hops away.

    Args:
        start_vid: Vertex to start from.
        over: Edge type to follow.
        tag: Tag of the vertices at the far end, used to read their fields.
        steps: Number of hops.
        reversely: Follow edges against their direction.
        show_fields: Fields to return; all fields by default, ["vid"] for
            ids only.

    Returns:
        A JSON-serializable dict:

            {
              "count": <int>,
              "steps": <int>,
              "results": [ { "vid": <str>, ... }, ... ]
            }
    """
    arguments = {
        "start_vid": start_vid,
        "over": over,
        "tag": tag,
        "steps": steps,
        "reversely": reversely,
        "show_fields": show_fields,
    }
    with tool_call("go_get_ends", arguments) as outcome:
        records = traversaldb.go_get_ends(
            start_vid,
            over,
            tagdb.codec_schema(tag),
            show_fields,
            steps=steps,
            reversely=reversely,
        )
        outcome["result_count"] = len(records)

    return {
        "count": len(records),
        "steps": steps,
        "results": records,
    }


@tool()
def go_get_relations(
    start_vid: str,
    tag: str,
    over: Optional[List[str]] = None,
    reversely: bool = False,
    show_fields: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """List the edges leaving (or entering) a vertex, one hop deep.

    Use this tool when:
      - You want to know how a vertex is related to its neighbours.
      - You do not know which edge types a vertex has; leave `over` empty
        to follow all of them.

    Args:
        start_vid: Vertex to start from.
        tag: Tag of the neighbour vertices, used to read `show_fields`.
        over: Edge types to follow; all edge types when empty.
        reversely: List incoming edges instead of outgoing ones.
        show_fields: Neighbour fields to include next to the edge type.

    Returns:
        A JSON-serializable dict:

            {
              "count": <int>,
              "results": [ { "edgeType": <str>, "vid": <str>, ... }, ... ]
            }
    """
    arguments = {
        "start_vid": start_vid,
        "tag": tag,
        "over": over,
        "reversely": reversely,
        "show_fields": show_fields,
    }
    with tool_call("go_get_relations", arguments) as outcome:
        # Neighbour properties are only read when asked for.
        schema = tagdb.codec_schema(tag) if show_fields else {}
        records = traversaldb.go_get_relations(
            start_vid,
            over or [],
            schema,
            reversely=reversely,
            show_fields=show_fields or (),
        )
        outcome["result_count"] = len(records)

    return {
        "count": len(records),
        "results": records,
    }
