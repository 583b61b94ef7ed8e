"""Schemas for assistant questions and the structured answer messages.

The structured answer is a list of `ChatMessage` objects, each either a text
message or a chart message. Field names follow the camelCase wire format the
dashboard consumes.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


ChartType = Literal["bar", "line", "horizontalBar"]
GroupBy = Literal["month", "product"]
MetricName = Literal["revenue", "expenses", "profit", "margin", "cac", "ltv"]
SortDirection = Literal["asc", "desc"]


class ChartQuery(BaseModel):
    """Data query backing a chart."""

    groupBy: GroupBy
    metric: MetricName
    startDate: str | None = None
    endDate: str | None = None
    productIds: list[str] | None = None
    sortDirection: SortDirection | None = None

    model_config = ConfigDict(extra="forbid")


class ChartConfig(BaseModel):
    """Declarative chart descriptor.

    `id` stays None until the descriptor is finalized for a client.
    """

    id: str | None = None
    chartType: ChartType
    query: ChartQuery

    model_config = ConfigDict(extra="forbid")


class ChatMessage(BaseModel):
    """One answer message: either text or a chart, never both."""

    type: Literal["text", "chart"]
    content: str | None = None
    title: str | None = None
    chartConfig: ChartConfig | None = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _check_kind_fields(self) -> "ChatMessage":
        if self.type == "text":
            if self.content is None:
                raise ValueError("text messages require content")
            if self.title is not None or self.chartConfig is not None:
                raise ValueError("text messages must not carry chart fields")
        else:
            if self.title is None or self.chartConfig is None:
                raise ValueError("chart messages require title and chartConfig")
            if self.content is not None:
                raise ValueError("chart messages must not carry content")
        return self

    @classmethod
    def text(cls, content: str) -> "ChatMessage":
        return cls(type="text", content=content)


class StructuredResponse(BaseModel):
    """Top-level object returned by the schema-constrained final completion."""

    messages: list[ChatMessage]


class DateWindow(BaseModel):
    startDate: str
    endDate: str


class ProductRef(BaseModel):
    id: str
    name: str


class ChatContext(BaseModel):
    """Optional dashboard state sent alongside a question."""

    dateRange: DateWindow | None = None
    products: list[ProductRef] | None = None


class ChatRequest(BaseModel):
    """Request payload for both the batch and the streaming chat endpoints."""

    question: str = Field(..., max_length=4000)
    context: ChatContext | None = None


class IdentifiedChatMessage(ChatMessage):
    """A chat message with a response-level id, used inside `multiple` replies."""

    id: str


class ChatResponse(BaseModel):
    """Batch chat reply.

    A single message is flattened into the top level (`type` text or chart);
    several messages are wrapped as `type="multiple"`.
    """

    id: str
    type: Literal["text", "chart", "multiple"]
    content: str | None = None
    title: str | None = None
    chartConfig: ChartConfig | None = None
    messages: list[IdentifiedChatMessage] | None = None
