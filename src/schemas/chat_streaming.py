"""Schemas for assistant SSE streaming."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


StreamEventType = Literal[
    "thinking",
    "tool_call",
    "tool_result",
    "text",
    "chart",
    "done",
    "error",
]


class StreamEvent(BaseModel):
    """One externally observable step of a streamed answer.

    Only the fields relevant to `type` are set; unset fields are dropped on
    the wire.
    """

    type: StreamEventType
    content: str | None = None
    toolName: str | None = None
    toolArgs: dict[str, Any] | None = None
    toolResult: dict[str, Any] | None = None
    title: str | None = None
    chartConfig: dict[str, Any] | None = None

    model_config = ConfigDict(extra="forbid")

    def to_sse(self) -> str:
        """Serialize event to the `data: <json>` SSE wire format."""
        return f"data: {self.model_dump_json(exclude_none=True)}\n\n"

    @classmethod
    def thinking(cls, content: str) -> "StreamEvent":
        return cls(type="thinking", content=content)

    @classmethod
    def tool_call(cls, name: str, args: dict[str, Any]) -> "StreamEvent":
        return cls(
            type="tool_call",
            toolName=name,
            toolArgs=args,
            content=f"Calling {name}...",
        )

    @classmethod
    def tool_result(cls, name: str, result: dict[str, Any]) -> "StreamEvent":
        return cls(
            type="tool_result",
            toolName=name,
            toolResult=result,
            content=f"Got results from {name}",
        )

    @classmethod
    def text(cls, content: str) -> "StreamEvent":
        return cls(type="text", content=content)

    @classmethod
    def chart(cls, title: str, chart_config: dict[str, Any]) -> "StreamEvent":
        return cls(type="chart", title=title, chartConfig=chart_config)

    @classmethod
    def error(cls, content: str) -> "StreamEvent":
        return cls(type="error", content=content)

    @classmethod
    def done(cls) -> "StreamEvent":
        return cls(type="done")
