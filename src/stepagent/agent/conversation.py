"""Conversation state — the append-only log resent to the model each round."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Literal

from stepagent.agent.step import ReasoningStep, validate_step


@dataclass(frozen=True)
class SystemEntry:
    directive: str
    role: Literal["system"] = "system"

    def to_message(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.directive}


@dataclass(frozen=True)
class UserEntry:
    query: str
    role: Literal["user"] = "user"

    def to_message(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.query}


@dataclass(frozen=True)
class AssistantEntry:
    step: ReasoningStep
    role: Literal["assistant"] = "assistant"

    def to_message(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "content": json.dumps(self.step.to_payload(), ensure_ascii=False),
        }


ConversationEntry = SystemEntry | UserEntry | AssistantEntry


@dataclass
class Conversation:
    """Ordered, append-only record of one request.

    Entry 1 is always the system directive and entry 2 the user query.
    Entries are only ever added at the end; nothing is removed or
    reordered. One conversation per request, discarded when the run ends.
    """

    _entries: list[ConversationEntry] = field(default_factory=list, repr=False)

    @classmethod
    def start(cls, directive: str, query: str) -> Conversation:
        return cls(_entries=[SystemEntry(directive), UserEntry(query)])

    @property
    def entries(self) -> tuple[ConversationEntry, ...]:
        return tuple(self._entries)

    @property
    def directive(self) -> str:
        return self._entries[0].directive  # type: ignore[union-attr]

    @property
    def query(self) -> str:
        return self._entries[1].query  # type: ignore[union-attr]

    @property
    def steps(self) -> list[ReasoningStep]:
        """All assistant steps, in order."""
        return [e.step for e in self._entries if isinstance(e, AssistantEntry)]

    def append(self, step: ReasoningStep) -> None:
        """Append an assistant step to the log."""
        self._entries.append(AssistantEntry(step))

    def to_messages(self) -> list[dict[str, Any]]:
        """The role/content list the model sees."""
        return [e.to_message() for e in self._entries]

    def to_json(self) -> str:
        """Serialize the whole log; stable under from_json round-trips."""
        return json.dumps(self.to_messages(), ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> Conversation:
        """Rebuild a conversation from ``to_json`` output.

        Raises:
            ValueError: If the log is not a system, user, assistant... sequence
                or an assistant entry does not hold a valid step.
        """
        messages = json.loads(text)
        if not isinstance(messages, list) or len(messages) < 2:
            raise ValueError("Conversation log must start with system and user entries")

        roles = [m.get("role") if isinstance(m, dict) else None for m in messages]
        if roles[:2] != ["system", "user"] or any(r != "assistant" for r in roles[2:]):
            raise ValueError(f"Unexpected role sequence: {roles}")

        conversation = cls.start(messages[0]["content"], messages[1]["content"])
        for message in messages[2:]:
            conversation.append(validate_step(json.loads(message["content"])))
        return conversation

    def __len__(self) -> int:
        return len(self._entries)
