"""FastAPI application exposing the agent as a single chat endpoint."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from stepagent.config import StepAgentConfig
from stepagent.pipeline import Pipeline, build_pipeline

logger = logging.getLogger(__name__)


class ChatResponse(BaseModel):
    result: str


class HealthStatus(BaseModel):
    status: str
    model: str
    tools: list[str]


def create_app(
    config: StepAgentConfig | None = None,
    pipeline: Pipeline | None = None,
) -> FastAPI:
    """Build the app. Pass ``pipeline`` to inject a provider/registry in tests."""
    if pipeline is None:
        pipeline = build_pipeline(config or StepAgentConfig.load())

    app = FastAPI(title="stepagent", version="0.1.0")
    app.state.pipeline = pipeline

    @app.get("/health", response_model=HealthStatus)
    async def health() -> HealthStatus:
        p: Pipeline = app.state.pipeline
        return HealthStatus(
            status="ok",
            model=p.provider.config.model,
            tools=p.tool_registry.names(),
        )

    @app.post("/chat", response_model=ChatResponse)
    async def chat(request: Request) -> ChatResponse | JSONResponse:
        try:
            body = await request.json()
        except ValueError:
            body = None

        query = body.get("query") if isinstance(body, dict) else None
        if not isinstance(query, str) or not query.strip():
            return JSONResponse({"error": "No query provided"}, status_code=400)

        p: Pipeline = app.state.pipeline
        result = await p.run(query)

        if result.ok and result.answer is not None:
            return ChatResponse(result=result.answer)

        error = result.error
        assert error is not None
        logger.warning("Chat request failed after %d rounds: %s", result.rounds, error)
        return JSONResponse(error.to_payload(), status_code=error.status_code)

    return app
