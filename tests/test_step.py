"""Tests for stepagent.agent.step (reply parsing and validation)."""

from __future__ import annotations

import pytest

from stepagent.agent.errors import MalformedReply, UnknownTool, UnrecognizedStep
from stepagent.agent.step import (
    ActionStep,
    ObserveStep,
    OutputStep,
    PlanStep,
    parse_step,
)

from conftest import CountingRegistry, reply


# ---------------------------------------------------------------------------
# Valid steps
# ---------------------------------------------------------------------------


class TestParseValid:
    def test_plan(self) -> None:
        step = parse_step(reply(step="plan", content="think first"))
        assert step == PlanStep(content="think first")

    def test_action_with_string_input(self) -> None:
        step = parse_step(reply(step="action", function="get_weather", input="Paris"))
        assert isinstance(step, ActionStep)
        assert step.function == "get_weather"
        assert step.input == "Paris"

    def test_action_with_record_input(self) -> None:
        step = parse_step(
            reply(step="action", function="get_stock_history", input={"ticker": "AAPL"})
        )
        assert isinstance(step, ActionStep)
        assert step.input == {"ticker": "AAPL"}

    def test_action_without_input(self) -> None:
        step = parse_step(reply(step="action", function="get_top_gainers"))
        assert isinstance(step, ActionStep)
        assert step.input is None

    def test_observe(self) -> None:
        assert parse_step(reply(step="observe", output="12C")) == ObserveStep(output="12C")

    def test_output(self) -> None:
        assert parse_step(reply(step="output", content="done")) == OutputStep(content="done")

    def test_extra_fields_ignored(self) -> None:
        step = parse_step(
            reply(step="action", content="calling", function="get_weather", input="Oslo")
        )
        assert isinstance(step, ActionStep)

    def test_code_fence_stripped(self) -> None:
        raw = '```json\n{"step": "output", "content": "hi"}\n```'
        assert parse_step(raw) == OutputStep(content="hi")

    def test_surrounding_whitespace(self) -> None:
        assert parse_step('  {"step": "plan", "content": "x"}\n') == PlanStep(content="x")


# ---------------------------------------------------------------------------
# Rejections
# ---------------------------------------------------------------------------


class TestParseMalformed:
    def test_not_json(self) -> None:
        with pytest.raises(MalformedReply) as exc:
            parse_step("not json")
        assert exc.value.raw == "not json"

    def test_json_array(self) -> None:
        with pytest.raises(MalformedReply):
            parse_step('[{"step": "plan"}]')

    def test_plan_without_content(self) -> None:
        with pytest.raises(MalformedReply):
            parse_step(reply(step="plan"))

    def test_output_with_non_string_content(self) -> None:
        with pytest.raises(MalformedReply):
            parse_step(reply(step="output", content=42))

    def test_action_without_function(self) -> None:
        with pytest.raises(MalformedReply):
            parse_step(reply(step="action", input="Paris"))

    def test_action_with_empty_function(self) -> None:
        with pytest.raises(MalformedReply):
            parse_step(reply(step="action", function="", input="Paris"))

    def test_action_with_list_input(self) -> None:
        with pytest.raises(MalformedReply):
            parse_step(reply(step="action", function="get_weather", input=["Paris"]))

    def test_oversized_integer(self) -> None:
        raw = '{"step": "plan", "content": "x", "n": ' + "1" * 5000 + "}"
        with pytest.raises(MalformedReply) as exc:
            parse_step(raw)
        assert exc.value.raw == raw

    def test_deeply_nested_arrays(self) -> None:
        raw = "[" * 100000 + "]" * 100000
        with pytest.raises(MalformedReply):
            parse_step(raw)


class TestParseUnrecognized:
    def test_unknown_tag(self) -> None:
        with pytest.raises(UnrecognizedStep) as exc:
            parse_step(reply(step="reflect", content="hmm"))
        assert exc.value.parsed == {"step": "reflect", "content": "hmm"}

    def test_missing_tag(self) -> None:
        with pytest.raises(UnrecognizedStep):
            parse_step(reply(content="no tag"))

    def test_non_string_tag(self) -> None:
        with pytest.raises(UnrecognizedStep):
            parse_step(reply(step=3))


class TestParseWithRegistry:
    def test_known_tool(self, registry: CountingRegistry) -> None:
        step = parse_step(
            reply(step="action", function="get_weather", input="Paris"), registry
        )
        assert isinstance(step, ActionStep)
        assert registry.lookups == ["get_weather"]

    def test_unknown_tool(self, registry: CountingRegistry) -> None:
        raw = reply(step="action", function="delete_universe", input=None)
        with pytest.raises(UnknownTool) as exc:
            parse_step(raw, registry)
        assert exc.value.function == "delete_universe"
        assert registry.lookups == ["delete_universe"]

    def test_non_action_skips_lookup(self, registry: CountingRegistry) -> None:
        parse_step(reply(step="plan", content="x"), registry)
        assert registry.lookups == []


# ---------------------------------------------------------------------------
# Payload shape
# ---------------------------------------------------------------------------


class TestPayload:
    def test_action_payload(self) -> None:
        step = ActionStep(function="get_weather", input="Paris")
        assert step.to_payload() == {
            "step": "action",
            "function": "get_weather",
            "input": "Paris",
        }

    def test_observe_payload(self) -> None:
        assert ObserveStep(output="x").to_payload() == {"step": "observe", "output": "x"}

    def test_steps_are_frozen(self) -> None:
        step = PlanStep(content="x")
        with pytest.raises(Exception):
            step.content = "y"  # type: ignore[misc]
