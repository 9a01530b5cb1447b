"""Shared fakes: a scripted model and a deterministic weather tool."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, ClassVar

import pytest
from pydantic import BaseModel

from stepagent.llm.provider import ProviderConfig
from stepagent.tool.base import BaseTool, ToolOk, ToolResult
from stepagent.tool.registry import ToolRegistry


def reply(**payload: Any) -> str:
    """Encode a model reply."""
    return json.dumps(payload)


@dataclass
class ScriptedProvider:
    """Returns canned replies in order and records every call."""

    replies: list[str]
    calls: list[tuple[str, str]] = field(default_factory=list)
    _config: ProviderConfig = field(
        default_factory=lambda: ProviderConfig(model="test/model")
    )

    @property
    def config(self) -> ProviderConfig:
        return self._config

    async def complete(self, system: str, prompt: str) -> str:
        self.calls.append((system, prompt))
        if not self.replies:
            raise AssertionError("model called after the script ran out")
        return self.replies.pop(0)


class CityParams(BaseModel):
    city: str


class FakeWeatherTool(BaseTool[CityParams]):
    name: ClassVar[str] = "get_weather"
    description: ClassVar[str] = "Current weather for a city."
    param_model: ClassVar[type[BaseModel]] = CityParams
    scalar_param: ClassVar[str | None] = "city"

    def __init__(self) -> None:
        self.calls: list[str] = []

    async def execute(self, params: CityParams) -> ToolResult:
        self.calls.append(params.city)
        return ToolOk(output=f"The weather in {params.city} is Clear 15°C.")


class CountingRegistry(ToolRegistry):
    """Registry that counts lookups."""

    def __init__(self) -> None:
        super().__init__()
        self.lookups: list[str] = []

    def lookup(self, name: str) -> BaseTool | None:
        self.lookups.append(name)
        return super().lookup(name)


@pytest.fixture
def weather_tool() -> FakeWeatherTool:
    return FakeWeatherTool()


@pytest.fixture
def registry(weather_tool: FakeWeatherTool) -> CountingRegistry:
    reg = CountingRegistry()
    reg.register(weather_tool)
    return reg
