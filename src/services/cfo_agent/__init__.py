"""CFO assistant: tool orchestration over the financial dataset."""

from .service import CFOAssistantService, EventSink, annotate_question
from .tools import ToolExecutor


__all__ = ["CFOAssistantService", "EventSink", "ToolExecutor", "annotate_question"]
