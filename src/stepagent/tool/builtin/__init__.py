"""Built-in tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

from stepagent.tool.base import BaseTool
from stepagent.tool.builtin.shell import RunCommandTool
from stepagent.tool.builtin.stocks import (
    CompanyInfoTool,
    StockHistoryTool,
    StockPriceTool,
    TopGainersTool,
)
from stepagent.tool.builtin.weather import WeatherTool

if TYPE_CHECKING:
    from stepagent.config import AgentSettings


def default_tools(settings: AgentSettings | None = None) -> list[BaseTool]:
    """Build the standard tool set, applying the configured timeouts."""
    command_timeout = settings.command_timeout if settings else 60.0
    tools: list[BaseTool] = [
        WeatherTool(),
        RunCommandTool(command_timeout=command_timeout),
        StockPriceTool(),
        StockHistoryTool(),
        TopGainersTool(),
        CompanyInfoTool(),
    ]
    if settings is not None:
        for tool in tools:
            tool.timeout = settings.tool_timeout
    return tools


__all__ = [
    "CompanyInfoTool",
    "RunCommandTool",
    "StockHistoryTool",
    "StockPriceTool",
    "TopGainersTool",
    "WeatherTool",
    "default_tools",
]
