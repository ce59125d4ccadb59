"""MCP tools for reading tag and edge type schemas.

These tools expose `TagDB.describe` and `EdgeTypeDB.describe` so that
clients can discover which fields a lookup or traversal may show, search
or filter on.
"""

from __future__ import annotations

from typing import Any, Dict

from ..mcp_instance import edgetypedb, tagdb, tool
from .utils import tool_call


@tool()
def describe_schema(type_name: str, kind: str = "tag") -> Dict[str, Any]:
    """Describe the properties of a tag or an edge type.

    Use this tool when:
        - You need to know which fields exist before looking up vertices.
        - You want to know which fields can be passed as `search_fields`
          or `show_fields` to other tools.

    Args:
        type_name: Name of the tag or edge type.
        kind: "tag" or "edge".

    Returns:
        A JSON-serializable dict:

            {
              "name": <str>,
              "kind": <"tag" | "edge">,
              "count": <int>,
              "fields": { <field>: <declaration>, ... }
            }

    Example:
        describe_schema(type_name="player")
        {
            "name": "player",
            "kind": "tag",
            "count": 2,
            "fields": {"name": "string", "age": "int64"}
        }
    """
    with tool_call("describe_schema", {"type_name": type_name, "kind": kind}) as outcome:
        kind = kind.lower()
        if kind not in ("tag", "edge"):
            raise ValueError(f'kind must be "tag" or "edge", got "{kind}"')
        schema_db = tagdb if kind == "tag" else edgetypedb
        fields = schema_db.describe(type_name)
        outcome["result_count"] = len(fields)

    return {
        "name": type_name,
        "kind": kind,
        "count": len(fields),
        "fields": fields,
    }
