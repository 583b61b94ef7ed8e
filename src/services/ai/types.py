"""Provider-neutral shapes exchanged with the completion gateway."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ToolCall:
    """A model-requested tool invocation.

    `arguments` is the raw JSON text exactly as the model produced it.
    """

    id: str
    name: str
    arguments: str = ""

    def to_message(self) -> dict[str, object]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass(frozen=True, slots=True)
class Completion:
    """A whole (non-streamed) completion."""

    content: str | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ToolCallDelta:
    """Partial tool call for the call at position `index`."""

    index: int
    id: str | None = None
    name_delta: str | None = None
    arguments_delta: str | None = None


@dataclass(frozen=True, slots=True)
class CompletionFragment:
    """One chunk of a streamed completion."""

    content_delta: str | None = None
    tool_call_deltas: list[ToolCallDelta] = field(default_factory=list)
