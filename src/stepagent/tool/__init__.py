"""Tool system — base classes, registry, and output truncation."""

from stepagent.tool.base import BaseTool, ToolResult, ToolOk, ToolError, ToolInput
from stepagent.tool.registry import ToolRegistry
from stepagent.tool.truncation import truncate_output

__all__ = [
    "BaseTool",
    "ToolResult",
    "ToolOk",
    "ToolError",
    "ToolInput",
    "ToolRegistry",
    "truncate_output",
]
