"""Weather tool — current conditions from wttr.in."""

from __future__ import annotations

import logging
from typing import ClassVar

import httpx
from pydantic import BaseModel, Field

from stepagent.tool.base import BaseTool, ToolError, ToolOk, ToolResult

logger = logging.getLogger(__name__)

WTTR_URL = "https://wttr.in/{city}"


class WeatherParams(BaseModel):
    city: str = Field(description="City name, e.g. 'Paris' or 'new york'.")


class WeatherTool(BaseTool[WeatherParams]):
    """Look up the current weather for a city."""

    name: ClassVar[str] = "get_weather"
    description: ClassVar[str] = (
        "Takes a city name as an input and returns the current weather for the city."
    )
    param_model: ClassVar[type[BaseModel]] = WeatherParams
    scalar_param: ClassVar[str | None] = "city"

    def __init__(
        self,
        http_timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http_timeout = http_timeout
        self._transport = transport

    async def execute(self, params: WeatherParams) -> ToolResult:
        city = params.city.strip()
        try:
            async with httpx.AsyncClient(
                timeout=self._http_timeout, transport=self._transport
            ) as client:
                response = await client.get(
                    WTTR_URL.format(city=city), params={"format": "%C %t"}
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Weather lookup for %s failed: %s", city, e)
            return ToolError(
                output="Something went wrong while fetching the weather data.",
                brief=f"weather: {city}",
            )

        return ToolOk(
            output=f"The weather in {city} is {response.text.strip()}.",
            brief=f"weather: {city}",
        )
