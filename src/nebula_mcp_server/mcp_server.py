"""
MCP Server implementation for NebulaGraph

This module is the entrypoint used when running the MCP server process.
It imports the shared `mcp` instance and all MCP tools so they are
registered on the same FastMCP server.
"""

from __future__ import annotations

import logging

from .mcp_instance import config, mcp, nebula_client  # shared FastMCP instance

logging.basicConfig(
    level=config.log_level,
    handlers=[logging.FileHandler("/tmp/nebula_mcp_server.log")]
)

# Import tools so their @tool decorators run and register them on `mcp`.
from .tools import schema as schema_tools  # noqa: E402,F401
from .tools import traversal as traversal_tools  # noqa: E402,F401
from .tools import vertex as vertex_tools  # noqa: E402,F401


logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point for the MCP server."""
    logger.info("Starting NebulaGraph MCP server 'nebula-mcp-server'...")
    nebula_client.connect()
    try:
        # Run the shared FastMCP instance; this will block the current process.
        mcp.run(transport="streamable-http")
    finally:
        nebula_client.close()


if __name__ == "__main__":
    main()
