"""Component wiring shared by the CLI and the HTTP server."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from stepagent.agent.agent import Agent
from stepagent.agent.loop import LoopResult, OnStep, agent_loop
from stepagent.config import StepAgentConfig
from stepagent.llm.provider import ChatProvider, create_provider
from stepagent.tool.builtin import default_tools
from stepagent.tool.registry import ToolRegistry

logger = logging.getLogger(__name__)


@dataclass
class Pipeline:
    """Everything a query needs. Shared read-only across requests."""

    agent: Agent
    provider: ChatProvider
    tool_registry: ToolRegistry

    async def run(self, query: str, on_step: OnStep = None) -> LoopResult:
        """Run one query with a fresh conversation."""
        return await agent_loop(
            agent=self.agent,
            query=query,
            provider=self.provider,
            tool_registry=self.tool_registry,
            on_step=on_step,
        )


def build_pipeline(
    config: StepAgentConfig,
    provider: ChatProvider | None = None,
    tool_registry: ToolRegistry | None = None,
) -> Pipeline:
    """Set up provider, tools and agent from config.

    This is synchronous setup — nothing touches the network here.
    """
    if provider is None:
        provider = create_provider(
            model=config.llm.model,
            temperature=config.llm.temperature,
            max_tokens=config.llm.max_tokens,
            timeout=config.llm.timeout,
        )

    if tool_registry is None:
        tool_registry = ToolRegistry()
        tool_registry.register_many(default_tools(config.agent))

    settings = config.agent
    if settings.system_prompt_file:
        agent = Agent.from_markdown(settings.system_prompt_file).render(tool_registry)
        logger.info("Loaded agent %s from %s", agent.name, settings.system_prompt_file)
    else:
        agent = Agent.default(tool_registry)

    agent = agent.with_limits(
        max_rounds=settings.max_rounds, engine_timeout=settings.engine_timeout
    )
    return Pipeline(agent=agent, provider=provider, tool_registry=tool_registry)
