"""Tool registry — register, look up, and invoke tools by name."""

from __future__ import annotations

import logging

from stepagent.tool.base import BaseTool, ToolInput

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Registry of available tools.

    Populated once at startup and only read afterwards, so a single
    registry is safely shared by concurrent requests.
    """

    def __init__(self) -> None:
        self._tools: dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> None:
        """Register a tool instance."""
        if tool.name in self._tools:
            logger.warning("Tool %s already registered, overwriting", tool.name)
        self._tools[tool.name] = tool

    def register_many(self, tools: list[BaseTool]) -> None:
        """Register multiple tools."""
        for tool in tools:
            self.register(tool)

    def lookup(self, name: str) -> BaseTool | None:
        """Get a tool by name, or None if it is not registered."""
        return self._tools.get(name)

    def names(self) -> list[str]:
        """Get all registered tool names."""
        return list(self._tools.keys())

    def subset(self, names: list[str]) -> ToolRegistry:
        """Create a new registry with only the specified tools."""
        reg = ToolRegistry()
        for name in names:
            tool = self._tools.get(name)
            if tool:
                reg.register(tool)
            else:
                logger.warning("Tool %s not found in registry", name)
        return reg

    def describe(self) -> str:
        """Render the tool list for the system prompt."""
        return "\n".join(
            f"- {t.name}: {t.description} Input: {t.input_shape}."
            for t in self._tools.values()
        )

    async def invoke(self, tool: BaseTool, raw_input: ToolInput) -> tuple[str, bool]:
        """Invoke a looked-up tool. No retries, no extra coercion.

        Returns:
            (content, is_error) tuple.
        """
        logger.debug("Invoking tool %s with %r", tool.name, raw_input)
        return await tool(raw_input)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools
