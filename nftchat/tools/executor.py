"""Tool executor — dispatches tool calls by name to their query functions."""
import logging
import time
from typing import Any, Dict, Optional

from .registry import get_tool, ToolResult
from .rarible import RaribleClient

logger = logging.getLogger(__name__)


async def execute_tool(tool_name: str, args: Optional[Dict[str, Any]], client: RaribleClient) -> ToolResult:
    """Execute a registered tool by name.

    Never raises: unknown tools, missing parameters and handler crashes
    all come back as error results.
    """
    tool = get_tool(tool_name)
    if not tool:
        logger.warning(f"Unknown tool: {tool_name}")
        return ToolResult.fail(f"Unknown tool: {tool_name}")

    args = args or {}
    # Only declared params; None means "use the default"
    kwargs = {p.name: args[p.name] for p in tool.params if args.get(p.name) is not None}

    for param in tool.params:
        if param.required and param.name not in kwargs:
            return ToolResult.fail(f"Missing required parameter '{param.name}' for {tool_name}")

    arg_str = ", ".join(f"{k}={v!r}" for k, v in kwargs.items())
    logger.info(f"Executing tool: {tool_name}({arg_str})")
    t0 = time.monotonic()

    try:
        result = await tool.handler(client=client, **kwargs)
    except Exception as e:
        logger.error(f"Tool {tool_name} failed: {e}", exc_info=True)
        result = ToolResult.fail(f"Tool {tool_name} failed: {e}")

    elapsed = time.monotonic() - t0
    logger.info(f"Tool {tool_name}: {elapsed:.1f}s -> {'error' if result.is_error else 'data'}")
    return result
