"""Logging helpers shared by the MCP tools.

Every tool call produces a "called" record, then either a "completed"
record with the result counts or a "failed" warning carrying the error.
Records go to the ``nebula.mcp.tools`` logger with their fields attached
as ``extra`` so a structured handler can pick them up.
"""
from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

mcp_tools_logger = logging.getLogger('nebula.mcp.tools')


def log_mcp_tool(
    function_name: str,
    phase: str,
    extra: Dict[str, Any],
    duration: Optional[float] = None,
    level: int = logging.INFO,
) -> None:
    """Log one phase of an MCP tool call.

    Args:
        function_name: Name of the MCP tool function.
        phase: "called", "completed" or "failed".
        extra: Fields attached to the log record. Keys must not clash with
            ``logging.LogRecord`` attributes such as ``name`` or ``args``.
        duration: Seconds since the call started.
        level: Log level of the record.
    """
    if duration is not None:
        extra["duration_seconds"] = duration
    mcp_tools_logger.log(level, f"{function_name} {phase}", extra=extra)


@contextmanager
def tool_call(function_name: str, arguments: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
    """Log the start and the outcome of one tool invocation.

    The body fills the yielded dict with result details such as
    ``result_count``; they are logged next to the arguments on completion.
    Exceptions are logged as "failed" and re-raised unchanged.

    Example:
        with tool_call("fetch_vertex", {"tag": tag, "vid": vid}) as outcome:
            record = vertexdb.fetch(vertex)
            outcome["result_count"] = 1
    """
    start_time = time.time()
    log_mcp_tool(function_name, "called", dict(arguments))

    outcome: Dict[str, Any] = {}
    try:
        yield outcome
    except Exception as e:
        log_mcp_tool(
            function_name,
            "failed",
            {**arguments, "error_type": type(e).__name__, "error": str(e)},
            duration=time.time() - start_time,
            level=logging.WARNING,
        )
        raise

    log_mcp_tool(
        function_name,
        "completed",
        {**arguments, **outcome},
        duration=time.time() - start_time,
    )
