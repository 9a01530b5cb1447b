"""Base tool classes with Pydantic input validation."""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from stepagent.tool.truncation import truncate_output

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

# What the model may put in an action's "input" field
ToolInput = str | dict[str, Any] | None


@dataclass
class ToolResult:
    """Base result from a tool execution."""

    output: str = ""
    brief: str = ""  # Short description for log lines
    is_error: bool = False


@dataclass
class ToolOk(ToolResult):
    """Successful tool result."""

    is_error: bool = False


@dataclass
class ToolError(ToolResult):
    """Failed tool result. Still reaches the model as an observation."""

    is_error: bool = True


class InvalidToolInput(ValueError):
    """The raw input could not be bound to the tool's parameters."""


class BaseTool(ABC, Generic[T]):
    """Base class for all tools.

    A tool is a named capability: text or record in, text out. Each tool
    declares its input shape as a Pydantic model (the type parameter T).
    Tools that take a single string set ``scalar_param`` to the field a
    bare string binds to, so the model can write ``"input": "Paris"``
    instead of ``"input": {"city": "Paris"}``.

    Usage:
        class WeatherParams(BaseModel):
            city: str

        class WeatherTool(BaseTool[WeatherParams]):
            name = "get_weather"
            description = "Current weather for a city"
            param_model = WeatherParams
            scalar_param = "city"

            async def execute(self, params: WeatherParams) -> ToolResult:
                return ToolOk(output="sunny")
    """

    name: ClassVar[str]
    description: ClassVar[str]
    param_model: ClassVar[type[BaseModel]]
    scalar_param: ClassVar[str | None] = None

    # Per-invocation wall-clock limit in seconds; None means unbounded.
    timeout: float | None = None

    @property
    def input_shape(self) -> str:
        """Describe the declared input for the system prompt."""
        fields = list(self.param_model.model_fields)
        if self.scalar_param:
            return f"a string ({self.scalar_param})"
        if not fields:
            return "no input"
        return "an object with keys: " + ", ".join(fields)

    def coerce_input(self, raw: ToolInput) -> dict[str, Any]:
        """Bind the model-provided input to a parameter dict.

        Raises:
            InvalidToolInput: If the input does not fit the declared shape.
        """
        if raw is None:
            return {}
        if isinstance(raw, dict):
            return raw
        if isinstance(raw, str):
            if self.scalar_param:
                return {self.scalar_param: raw}
            if not self.param_model.model_fields:
                return {}
            # Models sometimes send a record as a JSON-encoded string
            try:
                decoded = json.loads(raw)
            except (ValueError, RecursionError):
                decoded = None
            if isinstance(decoded, dict):
                return decoded
            raise InvalidToolInput(f"expected {self.input_shape}, got a string")
        raise InvalidToolInput(
            f"expected {self.input_shape}, got {type(raw).__name__}"
        )

    async def __call__(self, raw_input: ToolInput) -> tuple[str, bool]:
        """Validate input, execute within the timeout, truncate output.

        Failures inside the tool are turned into text so the model can
        react to them; only cancellation propagates.

        Returns:
            (content, is_error) tuple.
        """
        try:
            params = self.param_model.model_validate(self.coerce_input(raw_input))
        except (InvalidToolInput, ValidationError) as e:
            return f"Invalid input for {self.name}: {e}", True

        try:
            result = await asyncio.wait_for(
                self.execute(params),  # type: ignore[arg-type]
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Tool %s timed out after %ss", self.name, self.timeout)
            return f"{self.name} timed out after {self.timeout}s", True
        except Exception as e:
            logger.error("Tool %s execution error: %s", self.name, e, exc_info=True)
            return f"Error executing {self.name}: {e}", True

        return truncate_output(result.output), result.is_error

    @abstractmethod
    async def execute(self, params: T) -> ToolResult:
        """Execute the tool with validated parameters."""
        ...
