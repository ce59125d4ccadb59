"""Shared MCP server and NebulaGraph wiring for the MCP tools.

All MCP tools and the server entrypoint must import and use this module
so that there is exactly one FastMCP server and one NebulaClient per
process.
"""

from mcp.server.fastmcp import FastMCP

from .config import load_config
from .nebula import EdgeTypeDB, NebulaClient, TagDB, TraversalDB, VertexDB

config = load_config()

# Single shared MCP server instance
mcp = FastMCP(
    "nebula-mcp-server",
    host=config.mcp_host,
    streamable_http_path="/",
    port=config.mcp_port,
)

# Shared NebulaGraph wiring for all tools
nebula_client = NebulaClient(config=config)
tagdb = TagDB(nebula_client)
edgetypedb = EdgeTypeDB(nebula_client)
vertexdb = VertexDB(nebula_client)
traversaldb = TraversalDB(nebula_client)

# Convenience alias for defining tools bound to this server
tool = mcp.tool

__all__ = [
    "mcp",
    "tool",
    "config",
    "nebula_client",
    "tagdb",
    "edgetypedb",
    "vertexdb",
    "traversaldb",
]
