"""The agent loop — plan, act, observe, answer."""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Callable

from stepagent.agent.agent import Agent
from stepagent.agent.conversation import Conversation
from stepagent.agent.errors import (
    AgentError,
    EngineFailure,
    EngineTimeout,
    RoundLimitExceeded,
    ToolFault,
    UnknownTool,
)
from stepagent.agent.step import (
    ActionStep,
    ObserveStep,
    OutputStep,
    PlanStep,
    ReasoningStep,
    parse_step,
)
from stepagent.llm.provider import ChatProvider
from stepagent.tool.registry import ToolRegistry

logger = logging.getLogger(__name__)

OnStep = Callable[[int, ReasoningStep], None] | None  # (round_no, step)


class TurnOutcome(enum.Enum):
    """Why did the run end?"""

    COMPLETE = "complete"  # Model produced an output step
    MAX_ROUNDS = "max_rounds"  # Hit the round limit
    ERROR = "error"  # Unrecoverable error


@dataclass
class LoopResult:
    """Outcome of one agent run, with the full log for diagnostics."""

    outcome: TurnOutcome
    conversation: Conversation
    answer: str | None = None
    error: AgentError | None = None
    rounds: int = 0

    @property
    def ok(self) -> bool:
        return self.outcome is TurnOutcome.COMPLETE


async def agent_loop(
    agent: Agent,
    query: str,
    provider: ChatProvider,
    tool_registry: ToolRegistry,
    on_step: OnStep = None,
) -> LoopResult:
    """Run the agent loop for a single query.

    Each round:
    1. Send the whole conversation to the model (the only await besides tools)
    2. Parse the reply into a step
    3. Append the step to the conversation, before acting on it
    4. plan/observe: continue; action: run the tool and append an observe
       step; output: return the answer

    Rounds run strictly one after another. Any error ends the run; nothing
    is retried. Cancelling the calling task cancels the in-flight model or
    tool call.

    Args:
        agent: Directive and limits for this run.
        query: The user's request.
        provider: Model client.
        tool_registry: Tools the model may call.
        on_step: Callback after each step is appended (round_no, step).
    """
    registry = (
        tool_registry.subset(list(agent.tools)) if agent.tools else tool_registry
    )
    conversation = Conversation.start(agent.system_prompt, query)

    def _record(round_no: int, step: ReasoningStep) -> None:
        conversation.append(step)
        if on_step:
            on_step(round_no, step)

    def _fail(round_no: int, error: AgentError) -> LoopResult:
        logger.error("Agent %s: %s at round %d", agent.name, error.kind, round_no)
        return LoopResult(
            outcome=TurnOutcome.ERROR,
            conversation=conversation,
            error=error,
            rounds=round_no,
        )

    round_no = 0
    while round_no < agent.max_rounds:
        round_no += 1
        logger.info("Agent %s: round %d/%d", agent.name, round_no, agent.max_rounds)

        try:
            raw = await _ask_model(agent, provider, conversation)
            step = parse_step(raw)
        except AgentError as e:
            return _fail(round_no, e)

        _record(round_no, step)

        if isinstance(step, PlanStep):
            logger.info("Plan: %s", step.content)
            continue

        if isinstance(step, ObserveStep):
            # Observations are ours to write; one from the model carries no
            # directive, so it is kept in the log and otherwise ignored.
            logger.warning("Agent %s: model emitted an observe step, ignoring", agent.name)
            continue

        if isinstance(step, OutputStep):
            logger.info("Output: %s", step.content)
            return LoopResult(
                outcome=TurnOutcome.COMPLETE,
                conversation=conversation,
                answer=step.content,
                rounds=round_no,
            )

        assert isinstance(step, ActionStep)
        logger.info("Action: %s(%r)", step.function, step.input)
        tool = registry.lookup(step.function)
        if tool is None:
            return _fail(round_no, UnknownTool(step.function, raw))

        try:
            content, is_error = await registry.invoke(tool, step.input)
        except Exception as e:
            logger.error("Tool %s raised: %s", step.function, e, exc_info=True)
            return _fail(round_no, ToolFault(step.function, e))

        if is_error:
            logger.info("Tool %s reported an error: %s", step.function, content[:200])
        _record(round_no, ObserveStep(output=content))

    logger.warning("Agent %s hit max rounds (%d)", agent.name, agent.max_rounds)
    return LoopResult(
        outcome=TurnOutcome.MAX_ROUNDS,
        conversation=conversation,
        error=RoundLimitExceeded(agent.max_rounds),
        rounds=round_no,
    )


async def _ask_model(
    agent: Agent, provider: ChatProvider, conversation: Conversation
) -> str:
    """Send the full log to the model, bounded by the agent's timeout."""
    try:
        return await asyncio.wait_for(
            provider.complete(agent.system_prompt, conversation.to_json()),
            timeout=agent.engine_timeout,
        )
    except asyncio.TimeoutError:
        raise EngineTimeout(agent.engine_timeout or 0.0) from None
    except Exception as e:
        logger.error("Model call failed: %s", e, exc_info=True)
        raise EngineFailure(f"Model call failed: {e}") from e
