"""Agent error taxonomy.

Every error here ends the current request. None of them trigger a retry
of the model call or the tool call; the caller gets the diagnostic
payload instead of a partial answer.
"""

from __future__ import annotations

from typing import Any, ClassVar


class AgentError(Exception):
    """Base class for errors that terminate an agent run."""

    kind: ClassVar[str] = "agent_error"
    status_code: ClassVar[int] = 500

    def to_payload(self) -> dict[str, Any]:
        """Caller-facing error body."""
        return {"error": str(self)}


class MalformedReply(AgentError):
    """The model's reply is not a well-formed step object."""

    kind = "malformed_reply"

    def __init__(self, raw: str, reason: str = "Invalid JSON from model") -> None:
        self.raw = raw
        self.reason = reason
        super().__init__(reason)

    def to_payload(self) -> dict[str, Any]:
        return {"or": self.reason, "raw": self.raw}


class UnrecognizedStep(AgentError):
    """The reply parsed, but its ``step`` tag is missing or unknown."""

    kind = "unrecognized_step"

    def __init__(self, parsed: Any, raw: str) -> None:
        self.parsed = parsed
        self.raw = raw
        tag = parsed.get("step") if isinstance(parsed, dict) else None
        super().__init__(f"Unrecognized step: {tag!r}")

    def to_payload(self) -> dict[str, Any]:
        return {"error": "Unrecognized step", "raw": self.parsed}


class UnknownTool(AgentError):
    """An action step names a tool that is not registered."""

    kind = "unknown_tool"

    def __init__(self, function: str, raw: str = "") -> None:
        self.function = function
        self.raw = raw
        super().__init__(f"Invalid function call: {function!r}")

    def to_payload(self) -> dict[str, Any]:
        return {"error": "Invalid function call", "function": self.function}


class ToolFault(AgentError):
    """A tool raised instead of reporting its failure as text."""

    kind = "tool_fault"

    def __init__(self, function: str, cause: BaseException) -> None:
        self.function = function
        self.cause = cause
        super().__init__(f"Tool {function} failed: {cause}")


class EngineFailure(AgentError):
    """The model call itself failed."""

    kind = "engine_failure"
    status_code = 502


class EngineTimeout(EngineFailure):
    """The model call did not return within the configured timeout."""

    kind = "engine_timeout"
    status_code = 504

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Model call timed out after {timeout}s")


class RoundLimitExceeded(AgentError):
    """The run used up its round budget without producing an output step."""

    kind = "round_limit_exceeded"

    def __init__(self, max_rounds: int) -> None:
        self.max_rounds = max_rounds
        super().__init__(f"No final answer after {max_rounds} rounds")
