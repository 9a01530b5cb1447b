"""Tests for stepagent.server (HTTP surface)."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from stepagent.agent.agent import Agent, AgentConfig
from stepagent.pipeline import Pipeline
from stepagent.server.app import create_app

from conftest import CountingRegistry, FakeWeatherTool, ScriptedProvider, reply


def _client(replies: list[str], registry: CountingRegistry) -> TestClient:
    pipeline = Pipeline(
        agent=Agent.default(registry, max_rounds=5),
        provider=ScriptedProvider(replies),
        tool_registry=registry,
    )
    return TestClient(create_app(pipeline=pipeline))


class TestChat:
    def test_weather_scenario(
        self, registry: CountingRegistry, weather_tool: FakeWeatherTool
    ) -> None:
        client = _client(
            [
                reply(step="plan", content="weather"),
                reply(step="action", function="get_weather", input="Paris"),
                reply(step="output", content="It's 15°C and clear in Paris."),
            ],
            registry,
        )
        resp = client.post("/chat", json={"query": "What is the weather in Paris?"})
        assert resp.status_code == 200
        assert resp.json() == {"result": "It's 15°C and clear in Paris."}
        assert weather_tool.calls == ["Paris"]

    @pytest.mark.parametrize("body", [{}, {"query": ""}, {"query": "   "}, {"query": 5}])
    def test_missing_query(self, registry: CountingRegistry, body: dict) -> None:
        resp = _client([], registry).post("/chat", json=body)
        assert resp.status_code == 400
        assert resp.json() == {"error": "No query provided"}

    def test_non_json_body(self, registry: CountingRegistry) -> None:
        resp = _client([], registry).post("/chat", content=b"hello")
        assert resp.status_code == 400

    def test_malformed_reply(
        self, registry: CountingRegistry, weather_tool: FakeWeatherTool
    ) -> None:
        resp = _client(["not json"], registry).post("/chat", json={"query": "hi"})
        assert resp.status_code == 500
        assert resp.json() == {"or": "Invalid JSON from model", "raw": "not json"}
        assert weather_tool.calls == []

    def test_unknown_tool(self, registry: CountingRegistry) -> None:
        resp = _client(
            [reply(step="action", function="delete_universe", input=None)], registry
        ).post("/chat", json={"query": "hi"})
        assert resp.status_code == 500
        assert resp.json()["error"] == "Invalid function call"
        assert registry.lookups == ["delete_universe"]

    def test_unrecognized_step(self, registry: CountingRegistry) -> None:
        resp = _client([reply(step="dance")], registry).post("/chat", json={"query": "hi"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Unrecognized step", "raw": {"step": "dance"}}

    def test_round_limit(self, registry: CountingRegistry) -> None:
        replies = [reply(step="plan", content="again")] * 5
        resp = _client(replies, registry).post("/chat", json={"query": "hi"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "No final answer after 5 rounds"}


class TestHealth:
    def test_health(self, registry: CountingRegistry) -> None:
        resp = _client([], registry).get("/health")
        assert resp.status_code == 200
        assert resp.json() == {
            "status": "ok",
            "model": "test/model",
            "tools": ["get_weather"],
        }
