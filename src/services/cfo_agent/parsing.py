"""Tolerant parsing of model-produced JSON.

Parsers return a `ParseOutcome` instead of raising so each caller applies its
own documented fallback: empty arguments for tool calls, a raw-text message
for the structured answer.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from schemas.chat import ChartConfig, ChatMessage, StructuredResponse


logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CHART_TITLE = "Chart"


class _WireMessage(BaseModel):
    """An answer message as the response schema allows it, every field nullable."""

    type: Literal["text", "chart"]
    content: str | None = None
    title: str | None = None
    chartConfig: ChartConfig | None = None

    model_config = ConfigDict(extra="ignore")


class _AnswerEnvelope(BaseModel):
    messages: list[Any]


@dataclass(frozen=True, slots=True)
class ParseOutcome(Generic[T]):  # noqa: UP046
    """Either a parsed value or the reason parsing failed."""

    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: T) -> T:
        if self.error is not None or self.value is None:
            return default
        return self.value


def parse_tool_arguments(raw: str | None) -> ParseOutcome[dict[str, Any]]:
    """Decode tool-call arguments; blank input is an empty object."""
    if raw is None or not raw.strip():
        return ParseOutcome(value={})
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as exc:
        return ParseOutcome(error=f"invalid JSON: {exc.msg}")
    if not isinstance(decoded, dict):
        return ParseOutcome(
            error=f"expected a JSON object, got {type(decoded).__name__}"
        )
    return ParseOutcome(value=decoded)


def _normalize_message(item: Any) -> ChatMessage | None:
    """Coerce one schema-legal message into a text or chart message.

    Fields that do not belong to the message kind are dropped. Messages that
    cannot be shown (a chart without a config, a text without content) give
    None.
    """
    try:
        wire = _WireMessage.model_validate(item)
    except ValidationError:
        return None
    if wire.type == "chart":
        if wire.chartConfig is None:
            return None
        return ChatMessage(
            type="chart",
            title=wire.title or DEFAULT_CHART_TITLE,
            chartConfig=wire.chartConfig,
        )
    if not wire.content:
        return None
    return ChatMessage.text(wire.content)


def parse_structured_response(raw: str) -> ParseOutcome[StructuredResponse]:
    """Decode the schema-constrained final answer.

    Only a payload that is not a `{"messages": [...]}` JSON object fails.
    Unusable messages inside a valid payload are skipped.
    """
    try:
        envelope = _AnswerEnvelope.model_validate_json(raw)
    except ValidationError as exc:
        return ParseOutcome(error=f"{exc.error_count()} validation error(s)")

    messages: list[ChatMessage] = []
    for position, item in enumerate(envelope.messages):
        message = _normalize_message(item)
        if message is None:
            logger.warning("Skipping unusable answer message at position %d", position)
            continue
        messages.append(message)
    return ParseOutcome(value=StructuredResponse(messages=messages))
