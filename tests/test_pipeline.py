"""Tests for stepagent.pipeline (component wiring)."""

from __future__ import annotations

from pathlib import Path

from stepagent.config import AgentSettings, StepAgentConfig
from stepagent.llm.provider import LiteLLMProvider
from stepagent.pipeline import build_pipeline
from stepagent.tool.builtin.shell import RunCommandTool

from conftest import CountingRegistry, ScriptedProvider, reply


class TestBuildPipeline:
    def test_defaults(self) -> None:
        config = StepAgentConfig()
        pipeline = build_pipeline(config)
        assert isinstance(pipeline.provider, LiteLLMProvider)
        assert pipeline.provider.config.model == "gemini/gemini-2.0-flash"
        assert pipeline.provider.config.timeout == 60.0
        assert len(pipeline.tool_registry) == 6
        assert pipeline.agent.max_rounds == 25
        assert pipeline.agent.engine_timeout == 120.0
        assert "get_stock_history" in pipeline.agent.system_prompt

    def test_custom_agent_file(self, tmp_path: Path, registry: CountingRegistry) -> None:
        path = tmp_path / "agent.md"
        path.write_text("---\nname: weather\nmax_rounds: 2\n---\nOnly weather.\n{tools}\n")
        config = StepAgentConfig(
            agent=AgentSettings(system_prompt_file=str(path), max_rounds=9)
        )
        pipeline = build_pipeline(config, ScriptedProvider([]), registry)
        assert pipeline.agent.name == "weather"
        # Configured limit wins over the file's
        assert pipeline.agent.max_rounds == 9
        assert pipeline.agent.system_prompt.startswith("Only weather.\n- get_weather:")

    def test_agent_file_limit_kept_when_not_configured(
        self, tmp_path: Path, registry: CountingRegistry
    ) -> None:
        path = tmp_path / "agent.md"
        path.write_text("---\nname: weather\nmax_rounds: 2\n---\nOnly weather.\n")
        config = StepAgentConfig(agent=AgentSettings(system_prompt_file=str(path)))
        pipeline = build_pipeline(config, ScriptedProvider([]), registry)
        assert pipeline.agent.max_rounds == 2

    def test_agent_file_lists_only_its_tools(
        self, tmp_path: Path, registry: CountingRegistry
    ) -> None:
        registry.register(RunCommandTool())
        path = tmp_path / "agent.md"
        path.write_text("---\nname: weather\ntools: [get_weather]\n---\nOnly weather.\n{tools}\n")
        config = StepAgentConfig(agent=AgentSettings(system_prompt_file=str(path)))
        pipeline = build_pipeline(config, ScriptedProvider([]), registry)
        assert "- get_weather:" in pipeline.agent.system_prompt
        assert "run_command" not in pipeline.agent.system_prompt

    async def test_run(self, registry: CountingRegistry) -> None:
        provider = ScriptedProvider([reply(step="output", content="hi")])
        pipeline = build_pipeline(StepAgentConfig(), provider, registry)
        result = await pipeline.run("hello")
        assert result.answer == "hi"
        assert result.conversation.directive == pipeline.agent.system_prompt
