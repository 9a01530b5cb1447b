"""Configuration — Pydantic models for stepagent settings."""

from __future__ import annotations

import json
import os
from typing import Any

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

from stepagent.llm.provider import DEFAULT_MODEL


class LLMConfig(BaseModel):
    """LLM provider configuration.

    Model names use litellm's provider-prefix format:
        "gemini/gemini-2.0-flash"
        "anthropic/claude-sonnet-4-5-20250929"
        "openai/gpt-4o"

    API keys are read from env vars automatically by litellm
    (GEMINI_API_KEY, ANTHROPIC_API_KEY, OPENAI_API_KEY).
    """

    model: str = Field(default=DEFAULT_MODEL)
    temperature: float | None = Field(default=None)
    max_tokens: int | None = Field(default=None)
    timeout: float | None = Field(
        default=60.0, description="Transport timeout per model request (seconds)"
    )


class AgentSettings(BaseModel):
    """Agent loop limits."""

    max_rounds: int | None = Field(
        default=None, ge=1, description="Max rounds per query (None keeps the agent's own)"
    )
    engine_timeout: float | None = Field(
        default=120.0,
        gt=0,
        description="Wall-clock limit for one model call, retries included",
    )
    tool_timeout: float | None = Field(
        default=90.0, gt=0, description="Wall-clock limit for one tool call"
    )
    command_timeout: float = Field(
        default=60.0, gt=0, description="Timeout for run_command subprocesses"
    )
    system_prompt_file: str | None = Field(
        default=None,
        description="Markdown agent definition replacing the default directive",
    )


class ServerConfig(BaseModel):
    """HTTP server settings."""

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3000)


class StepAgentConfig(BaseModel):
    """Top-level stepagent configuration."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    agent: AgentSettings = Field(default_factory=AgentSettings)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def load(cls, config_path: str | None = None) -> StepAgentConfig:
        """Load config from file, env vars, or defaults.

        Priority: env vars > config file > defaults.

        Env vars:
            GEMINI_API_KEY              - Gemini API key (read by litellm automatically)
            OPENAI_API_KEY              - OpenAI API key (read by litellm automatically)
            STEPAGENT_MODEL             - Override model (litellm format with provider prefix)
            STEPAGENT_MAX_ROUNDS        - Override round limit
            STEPAGENT_ENGINE_TIMEOUT    - Override model call timeout (seconds)
            STEPAGENT_TOOL_TIMEOUT      - Override tool call timeout (seconds)
            STEPAGENT_HOST              - HTTP bind address
            PORT                        - HTTP port
        """
        load_dotenv(find_dotenv(usecwd=True))

        config_data: dict[str, Any] = {}

        if config_path and os.path.exists(config_path):
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)

        llm = config_data.get("llm", {})
        agent = config_data.get("agent", {})
        server = config_data.get("server", {})

        env_model = os.environ.get("STEPAGENT_MODEL")
        if env_model:
            llm["model"] = env_model

        env_max_rounds = os.environ.get("STEPAGENT_MAX_ROUNDS")
        if env_max_rounds:
            agent["max_rounds"] = int(env_max_rounds)

        env_engine_timeout = os.environ.get("STEPAGENT_ENGINE_TIMEOUT")
        if env_engine_timeout:
            agent["engine_timeout"] = float(env_engine_timeout)

        env_tool_timeout = os.environ.get("STEPAGENT_TOOL_TIMEOUT")
        if env_tool_timeout:
            agent["tool_timeout"] = float(env_tool_timeout)

        env_host = os.environ.get("STEPAGENT_HOST")
        if env_host:
            server["host"] = env_host

        env_port = os.environ.get("PORT")
        if env_port:
            server["port"] = int(env_port)

        if llm:
            config_data["llm"] = llm
        if agent:
            config_data["agent"] = agent
        if server:
            config_data["server"] = server

        return cls.model_validate(config_data)
