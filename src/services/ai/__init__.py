"""Init file for AI services."""

from .gateway import (
    CompletionGatewayProtocol,
    OpenAICompletionGateway,
    create_completion_gateway,
)
from .types import Completion, CompletionFragment, ToolCall, ToolCallDelta


__all__ = [
    "Completion",
    "CompletionFragment",
    "CompletionGatewayProtocol",
    "OpenAICompletionGateway",
    "ToolCall",
    "ToolCallDelta",
    "create_completion_gateway",
]
