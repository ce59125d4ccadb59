"""
NebulaGraph client, connection management, and nGQL statement builders.

This package should contain ONLY NebulaGraph-specific logic:
- Connection pool and session handling
- Value codec and result table parsing
- nGQL statement builders for schemas, vertices, edges and traversals

Request handling and compositions of these helpers belong in the
`tools` package.
"""

from .client import NebulaClient, ResultTable
from .edge import EdgeDB
from .entity import DataSchema, Edge, Vertex
from .query import Query, page_window
from .schema import EdgeTypeDB, TagDB
from .table import parse_string_table
from .traversal import TraversalDB
from .values import FieldType, decode_value, encode_value
from .vertex import VertexDB

__all__ = [
    "NebulaClient",
    "ResultTable",
    "DataSchema",
    "Vertex",
    "Edge",
    "Query",
    "page_window",
    "TagDB",
    "EdgeTypeDB",
    "VertexDB",
    "EdgeDB",
    "TraversalDB",
    "parse_string_table",
    "FieldType",
    "encode_value",
    "decode_value",
]
