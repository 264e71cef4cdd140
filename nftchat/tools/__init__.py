"""Tool system — registry, Rarible client, executor."""
from .registry import register_tool, get_tool, all_tools, openai_tools, tool_descriptions_for_llm, ToolResult, ToolParam
from .rarible import RaribleClient
from .executor import execute_tool

# Auto-import builtin tools to trigger @register_tool decorators
from .builtin import *  # noqa
