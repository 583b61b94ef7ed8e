"""Role-tagged conversation transcript for one question.

A transcript is a closed union of four turn kinds. It only grows: turns are
appended, never reordered or removed, and the first turn is always the system
instruction. A tool turn must answer a tool call id issued by an earlier
assistant turn.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from core.exceptions import TranscriptError
from services.ai.types import ToolCall


@dataclass(frozen=True, slots=True)
class SystemTurn:
    content: str
    role: Literal["system"] = "system"

    def to_message(self) -> dict[str, Any]:
        return {"role": "system", "content": self.content}


@dataclass(frozen=True, slots=True)
class UserTurn:
    content: str
    role: Literal["user"] = "user"

    def to_message(self) -> dict[str, Any]:
        return {"role": "user", "content": self.content}


@dataclass(frozen=True, slots=True)
class AssistantTurn:
    content: str | None = None
    tool_calls: tuple[ToolCall, ...] = ()
    role: Literal["assistant"] = "assistant"

    def to_message(self) -> dict[str, Any]:
        message: dict[str, Any] = {"role": "assistant", "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = [tc.to_message() for tc in self.tool_calls]
        return message


@dataclass(frozen=True, slots=True)
class ToolTurn:
    tool_call_id: str
    content: str
    role: Literal["tool"] = "tool"

    def to_message(self) -> dict[str, Any]:
        return {
            "role": "tool",
            "tool_call_id": self.tool_call_id,
            "content": self.content,
        }


Turn = SystemTurn | UserTurn | AssistantTurn | ToolTurn


class Transcript:
    """Append-only turn sequence owned by a single orchestration run."""

    def __init__(self) -> None:
        self._turns: list[Turn] = []
        self._issued_call_ids: set[str] = set()

    @classmethod
    def start(cls, system_prompt: str, user_content: str) -> "Transcript":
        transcript = cls()
        transcript._turns.append(SystemTurn(system_prompt))
        transcript._turns.append(UserTurn(user_content))
        return transcript

    @property
    def turns(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def add_assistant(
        self, content: str | None, tool_calls: list[ToolCall] | None = None
    ) -> AssistantTurn:
        turn = AssistantTurn(content=content or None, tool_calls=tuple(tool_calls or ()))
        self._turns.append(turn)
        self._issued_call_ids.update(tc.id for tc in turn.tool_calls)
        return turn

    def add_tool_result(self, tool_call_id: str, content: str) -> ToolTurn:
        if tool_call_id not in self._issued_call_ids:
            raise TranscriptError(
                f"Tool result for unknown tool call id '{tool_call_id}'"
            )
        turn = ToolTurn(tool_call_id=tool_call_id, content=content)
        self._turns.append(turn)
        return turn

    def to_messages(self) -> list[dict[str, Any]]:
        """Render as the chat-completions `messages` list."""
        return [turn.to_message() for turn in self._turns]
