"""MCP tools for reading vertices.

These tools expose `VertexDB.fetch` and `VertexDB.lookup`. The schema of
the requested tag is read from the graph on every call, so no schema has
to be configured up front.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..mcp_instance import tagdb, tool, vertexdb
from ..nebula import Query, Vertex
from .utils import tool_call


@tool()
def fetch_vertex(tag: str, vid: str) -> Dict[str, Any]:
    """Fetch every property of one vertex.

    Use this tool when:
        - You already know the vertex id and need its full metadata.

    Args:
        tag: Tag the vertex carries.
        vid: Vertex id.

    Returns:
        A JSON-serializable dict:

            {
              "count": 1,
              "results": [ { "vid": <str>, <field>: <value>, ... } ]
            }
    """
    with tool_call("fetch_vertex", {"tag": tag, "vid": vid}) as outcome:
        vertex = Vertex(tag=tag, schema=tagdb.codec_schema(tag), vid=vid)
        record = vertexdb.fetch(vertex)
        outcome["result_count"] = 1

    return {
        "count": 1,
        "results": [record],
    }


@tool()
def lookup_vertices(
    tag: str,
    search_fields: Optional[List[str]] = None,
    search_values: Optional[List[str]] = None,
    explicitly: bool = False,
    page_index: int = 1,
    page_size: int = 20,
    show_fields: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Look up vertices of a tag, optionally searching on some fields.

    String fields match values by prefix (STARTS WITH) unless `explicitly`
    is set; number fields always match exactly. Several values or several
    fields are combined with OR.

    Use this tool when:
        - You need to find vertices by a partial name or a known property.
        - You want to page through every vertex of a tag.

    Args:
        tag: Tag to look up.
        search_fields: Fields to search on. See `describe_schema`.
        search_values: Values to search for.
        explicitly: Require exact matches on string fields.
        page_index: 1-based page number.
        page_size: Vertices per page.
        show_fields: Fields to return; all fields by default, ["vid"] for
            ids only.

    Returns:
        A JSON-serializable dict:

            {
              "total": <int>,
              "count": <int>,
              "results": [ { "vid": <str>, ... }, ... ]
            }

        `total` counts every match, `count` only the returned page.

    Example:
        lookup_vertices(tag="player", search_fields=["name"], search_values=["Tim"])
        {
            "total": 1,
            "count": 1,
            "results": [{"vid": "player100", "name": "Tim Duncan", "age": 42}]
        }
    """
    arguments = {
        "tag": tag,
        "search_fields": search_fields,
        "search_values": search_values,
        "explicitly": explicitly,
        "page_index": page_index,
        "page_size": page_size,
        "show_fields": show_fields,
    }
    with tool_call("lookup_vertices", arguments) as outcome:
        query = Query(
            page_index=page_index,
            page_size=page_size,
            search_fields=search_fields or [],
            search_values=search_values or [],
            explicitly=explicitly,
        )
        vertex = Vertex(tag=tag, schema=tagdb.codec_schema(tag))
        total, records = vertexdb.lookup(vertex, query=query, show_fields=show_fields)
        outcome["total"] = total
        outcome["result_count"] = len(records)

    return {
        "total": total,
        "count": len(records),
        "results": records,
    }
