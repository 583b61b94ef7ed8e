"""Reassembly of streamed completions.

Streamed tool calls arrive as partial deltas keyed by position index: the id
usually comes once, while the name and the JSON arguments may be split across
many chunks. Deltas for one index are folded in arrival order.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from services.ai.types import CompletionFragment, ToolCall, ToolCallDelta


@dataclass
class _PendingToolCall:
    id: str = ""
    name_parts: list[str] = field(default_factory=list)
    argument_parts: list[str] = field(default_factory=list)

    def build(self) -> ToolCall:
        return ToolCall(
            id=self.id,
            name="".join(self.name_parts),
            arguments="".join(self.argument_parts),
        )


@dataclass(frozen=True, slots=True)
class AccumulatedCompletion:
    content: str
    tool_calls: list[ToolCall]


class ToolCallAccumulator:
    """Assembles text and complete tool calls from completion fragments."""

    def __init__(self) -> None:
        self._content_parts: list[str] = []
        self._pending: dict[int, _PendingToolCall] = {}

    def feed(self, fragment: CompletionFragment) -> None:
        if fragment.content_delta:
            self._content_parts.append(fragment.content_delta)
        for delta in fragment.tool_call_deltas:
            self._feed_tool_delta(delta)

    def _feed_tool_delta(self, delta: ToolCallDelta) -> None:
        pending = self._pending.setdefault(delta.index, _PendingToolCall())
        # First id wins; providers repeat or omit it on later chunks.
        if delta.id and not pending.id:
            pending.id = delta.id
        if delta.name_delta:
            pending.name_parts.append(delta.name_delta)
        if delta.arguments_delta:
            pending.argument_parts.append(delta.arguments_delta)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self._pending)

    def result(self) -> AccumulatedCompletion:
        """Return the text so far and the tool calls in index order."""
        return AccumulatedCompletion(
            content="".join(self._content_parts),
            tool_calls=[self._pending[i].build() for i in sorted(self._pending)],
        )
