"""Agent system — directive, conversation, step protocol, loop."""

from stepagent.agent.agent import Agent, AgentConfig, build_system_prompt
from stepagent.agent.conversation import Conversation
from stepagent.agent.errors import AgentError
from stepagent.agent.loop import agent_loop, LoopResult, TurnOutcome
from stepagent.agent.step import ReasoningStep, parse_step

__all__ = [
    "Agent",
    "AgentConfig",
    "AgentError",
    "Conversation",
    "LoopResult",
    "ReasoningStep",
    "TurnOutcome",
    "agent_loop",
    "build_system_prompt",
    "parse_step",
]
