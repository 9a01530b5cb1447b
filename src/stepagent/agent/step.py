"""Reasoning step protocol — the one JSON object the model emits per round.

The model is an untrusted producer: its reply is decoded, the ``step``
tag is checked against the four known variants, and the variant's fields
are validated before the loop touches any of them.
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from stepagent.agent.errors import MalformedReply, UnknownTool, UnrecognizedStep

if TYPE_CHECKING:
    from stepagent.tool.registry import ToolRegistry

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?```$", re.DOTALL)


class _Step(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    def to_payload(self) -> dict[str, Any]:
        """The JSON object shape used on the wire and in the log."""
        return self.model_dump(mode="json")


class PlanStep(_Step):
    """Intermediate reasoning. No side effect."""

    step: Literal["plan"] = "plan"
    content: str


class ActionStep(_Step):
    """A request to invoke a registered tool."""

    step: Literal["action"] = "action"
    function: str = Field(min_length=1)
    input: str | dict[str, Any] | None = None


class ObserveStep(_Step):
    """A tool result. Authored by the loop, not the model."""

    step: Literal["observe"] = "observe"
    output: str


class OutputStep(_Step):
    """The final answer."""

    step: Literal["output"] = "output"
    content: str


ReasoningStep = Annotated[
    Union[PlanStep, ActionStep, ObserveStep, OutputStep],
    Field(discriminator="step"),
]

STEP_TAGS = frozenset({"plan", "action", "observe", "output"})

_step_adapter: TypeAdapter[ReasoningStep] = TypeAdapter(ReasoningStep)


def validate_step(data: Any) -> ReasoningStep:
    """Validate an already-decoded step object.

    Raises:
        pydantic.ValidationError: If the object is not a valid step.
    """
    return _step_adapter.validate_python(data)


def _strip_fences(text: str) -> str:
    text = text.strip()
    match = _FENCE_RE.match(text)
    return match.group(1).strip() if match else text


def parse_step(raw: str, registry: ToolRegistry | None = None) -> ReasoningStep:
    """Parse one model reply into a step.

    Args:
        raw: The model's reply text.
        registry: When given, an action naming an unregistered tool is
            rejected here. The agent loop passes None and resolves the
            tool itself so the action is logged before the lookup.

    Raises:
        MalformedReply: Not a JSON object, or a known step with bad fields.
        UnrecognizedStep: ``step`` missing or not one of the four tags.
        UnknownTool: ``registry`` given and the action's tool is not in it.
    """
    try:
        data = json.loads(_strip_fences(raw))
    except (ValueError, TypeError, RecursionError):
        raise MalformedReply(raw) from None

    if not isinstance(data, dict):
        raise MalformedReply(raw, "Expected a JSON object from model")

    tag = data.get("step")
    if not isinstance(tag, str) or tag not in STEP_TAGS:
        raise UnrecognizedStep(data, raw)

    try:
        step = validate_step(data)
    except ValidationError as e:
        logger.debug("Invalid %s step: %s", tag, e)
        raise MalformedReply(raw, f"Invalid {tag} step from model") from e

    if registry is not None and isinstance(step, ActionStep):
        if registry.lookup(step.function) is None:
            raise UnknownTool(step.function, raw)

    return step
