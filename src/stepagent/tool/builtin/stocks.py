"""Stock market tools backed by Yahoo Finance (yfinance).

yfinance is synchronous, so every lookup runs in a worker thread to keep
the event loop free for other requests.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, ClassVar

from pydantic import BaseModel, Field

from stepagent.tool.base import BaseTool, ToolError, ToolOk, ToolResult

logger = logging.getLogger(__name__)

TOP_GAINERS_LIMIT = 5


class TickerParams(BaseModel):
    ticker: str = Field(description="Stock ticker symbol, e.g. AAPL or TSLA.")


class Period(BaseModel):
    start: str = Field(description="Start date, YYYY-MM-DD.")
    end: str = Field(description="End date, YYYY-MM-DD.")


class StockHistoryParams(BaseModel):
    ticker: str = Field(description="Stock ticker symbol.")
    period: Period


class NoParams(BaseModel):
    pass


class StockPriceTool(BaseTool[TickerParams]):
    name: ClassVar[str] = "get_stock_price"
    description: ClassVar[str] = (
        "Takes a stock ticker (like AAPL or TSLA) and returns the current price."
    )
    param_model: ClassVar[type[BaseModel]] = TickerParams
    scalar_param: ClassVar[str | None] = "ticker"

    async def execute(self, params: TickerParams) -> ToolResult:
        ticker = params.ticker.upper()
        try:
            price = await asyncio.to_thread(_last_price, ticker)
        except Exception as e:
            logger.warning("Price lookup for %s failed: %s", ticker, e)
            return ToolError(output=f"Couldn't fetch stock info for {ticker}.")
        return ToolOk(output=f"The current price of {ticker} is ${price}.")


class StockHistoryTool(BaseTool[StockHistoryParams]):
    name: ClassVar[str] = "get_stock_history"
    description: ClassVar[str] = (
        "Takes a ticker and a date range, returns historical close prices."
    )
    param_model: ClassVar[type[BaseModel]] = StockHistoryParams

    @property
    def input_shape(self) -> str:
        return 'an object {"ticker": "AAPL", "period": {"start": "YYYY-MM-DD", "end": "YYYY-MM-DD"}}'

    async def execute(self, params: StockHistoryParams) -> ToolResult:
        ticker = params.ticker.upper()
        start, end = params.period.start, params.period.end
        try:
            prices = await asyncio.to_thread(_close_prices, ticker, start, end)
        except Exception as e:
            logger.warning("History lookup for %s failed: %s", ticker, e)
            return ToolError(output=f"Error fetching history for {ticker}.")
        return ToolOk(
            output=(
                f"Stock history for {ticker} from {start} to {end}:\n"
                f"{json.dumps(prices, indent=2)}"
            )
        )


class TopGainersTool(BaseTool[NoParams]):
    name: ClassVar[str] = "get_top_gainers"
    description: ClassVar[str] = "Returns a list of top trending stocks today."
    param_model: ClassVar[type[BaseModel]] = NoParams

    async def execute(self, params: NoParams) -> ToolResult:
        try:
            quotes = await asyncio.to_thread(_day_gainers, TOP_GAINERS_LIMIT)
        except Exception as e:
            logger.warning("Top gainers lookup failed: %s", e)
            return ToolError(output="Failed to fetch top gainers.")
        lines = [
            f"{q.get('symbol')} (${q.get('regularMarketPrice')})"
            for q in quotes[:TOP_GAINERS_LIMIT]
        ]
        return ToolOk(output="Top trending stocks today:\n" + "\n".join(lines))


class CompanyInfoTool(BaseTool[TickerParams]):
    name: ClassVar[str] = "get_company_info"
    description: ClassVar[str] = (
        "Takes a stock ticker and returns company summary info."
    )
    param_model: ClassVar[type[BaseModel]] = TickerParams
    scalar_param: ClassVar[str | None] = "ticker"

    async def execute(self, params: TickerParams) -> ToolResult:
        ticker = params.ticker.upper()
        try:
            info = await asyncio.to_thread(_company_profile, ticker)
            summary = info["longBusinessSummary"]
        except Exception as e:
            logger.warning("Company info lookup for %s failed: %s", ticker, e)
            return ToolError(
                output=f"Could not retrieve company information for {ticker}."
            )
        return ToolOk(
            output=(
                f"{summary}\n"
                f"Industry: {info.get('industry')}, Sector: {info.get('sector')}"
            )
        )


# ---------------------------------------------------------------------------
# Blocking yfinance calls (run via asyncio.to_thread)
# ---------------------------------------------------------------------------


def _last_price(ticker: str) -> float:
    import yfinance as yf

    return yf.Ticker(ticker).fast_info.last_price


def _close_prices(ticker: str, start: str, end: str) -> list[dict[str, Any]]:
    import yfinance as yf

    frame = yf.Ticker(ticker).history(start=start, end=end)
    return [
        {"date": ts.strftime("%Y-%m-%d"), "close": round(float(close), 2)}
        for ts, close in frame["Close"].items()
    ]


def _day_gainers(count: int) -> list[dict[str, Any]]:
    import yfinance as yf

    return yf.screen("day_gainers", count=count).get("quotes", [])


def _company_profile(ticker: str) -> dict[str, Any]:
    import yfinance as yf

    return yf.Ticker(ticker).info
