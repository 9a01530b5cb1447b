"""Agent definition — the immutable directive and limits for one loop."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from stepagent.tool.registry import ToolRegistry

SYSTEM_PROMPT_TEMPLATE = """\
You are a helpful AI assistant specialized in resolving user queries.
You work in plan, action, observe and output steps.
For the given user query and the available tools, plan the step by step
execution. Based on the plan, select the relevant tool from the available
tools and perform an action to call it. Wait for the observation, and
based on the observation from the tool call resolve the user query.

Rules:
- Follow the output JSON format exactly.
- Always perform one step at a time and wait for the next input.
- Never write an "observe" step yourself; observations are provided to you.
- Carefully analyse the user query.

Output JSON format:
{{
    "step": "plan | action | output",
    "content": "string (for plan and output steps)",
    "function": "the name of the function if the step is action",
    "input": "the input parameter for the function"
}}

Available tools:
{tools}

Example:
User query: What is the weather of new york?
Output: {{"step": "plan", "content": "The user is interested in weather data of new york"}}
Output: {{"step": "plan", "content": "From the available tools I should call get_weather"}}
Output: {{"step": "action", "function": "get_weather", "input": "new york"}}
Output: {{"step": "observe", "output": "12 Degree Cel"}}
Output: {{"step": "output", "content": "The weather for new york seems to be 12 degrees."}}
"""


def build_system_prompt(registry: ToolRegistry) -> str:
    """Render the default directive listing the registry's tools."""
    return SYSTEM_PROMPT_TEMPLATE.format(tools=registry.describe() or "- (none)")


@dataclass(frozen=True)
class AgentConfig:
    """Limits and identity for an agent."""

    name: str = "assistant"
    description: str = ""
    tools: tuple[str, ...] = ()  # Empty means every registered tool
    max_rounds: int = 25
    engine_timeout: float | None = 120.0


@dataclass(frozen=True)
class Agent:
    """A configured agent ready to run.

    Built once and passed explicitly to ``agent_loop``; the directive is
    part of the value, not module state. Custom agents can be written as
    markdown files with YAML frontmatter:

        ---
        name: weather
        tools: [get_weather]
        max_rounds: 10
        ---

        You are a weather assistant...
    """

    config: AgentConfig = field(default_factory=AgentConfig)
    system_prompt: str = ""

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def tools(self) -> tuple[str, ...]:
        return self.config.tools

    @property
    def max_rounds(self) -> int:
        return self.config.max_rounds

    @property
    def engine_timeout(self) -> float | None:
        return self.config.engine_timeout

    def with_limits(
        self,
        max_rounds: int | None = None,
        engine_timeout: float | None = None,
    ) -> Agent:
        """Copy of this agent with overridden limits."""
        config = self.config
        if max_rounds is not None:
            config = replace(config, max_rounds=max_rounds)
        if engine_timeout is not None:
            config = replace(config, engine_timeout=engine_timeout)
        return replace(self, config=config)

    @classmethod
    def default(cls, registry: ToolRegistry, **config: Any) -> Agent:
        """The standard assistant, with a directive built from the registry."""
        return cls(config=AgentConfig(**config), system_prompt=build_system_prompt(registry))

    @classmethod
    def from_markdown(cls, path: str) -> Agent:
        """Load an agent definition from a markdown file with YAML frontmatter.

        ``{tools}`` in the body is left as-is; call ``render`` to fill it.
        """
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()

        config_dict, prompt = _parse_frontmatter(content)
        if "tools" in config_dict:
            config_dict["tools"] = tuple(config_dict["tools"] or ())
        return cls(config=AgentConfig(**config_dict), system_prompt=prompt.strip())

    def render(self, registry: ToolRegistry) -> Agent:
        """Fill a ``{tools}`` placeholder with the tools this agent may call."""
        if "{tools}" not in self.system_prompt:
            return self
        if self.tools:
            registry = registry.subset(list(self.tools))
        return replace(
            self,
            system_prompt=self.system_prompt.replace("{tools}", registry.describe()),
        )


def _parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Parse YAML frontmatter from markdown content.

    Returns (config_dict, body_text).
    """
    import yaml  # lazy import, only needed when loading agents

    pattern = re.compile(r"^---\s*\n(.*?)\n---\s*\n(.*)", re.DOTALL)
    match = pattern.match(content)

    if not match:
        return {}, content

    config = yaml.safe_load(match.group(1)) or {}
    if not isinstance(config, dict):
        raise ValueError("Agent frontmatter must be a mapping")
    return config, match.group(2)
