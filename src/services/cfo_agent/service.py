"""Tool-orchestration loop behind the CFO assistant.

One question runs as a bounded loop: request a completion offering the data
tools, dispatch any requested tool calls in order, fold their results back
into the transcript, and repeat until the model answers without tools. That
tool-free turn triggers a final schema-constrained completion which becomes
the structured answer. If the model keeps calling tools the loop stops after
`max_iterations` and answers with a fixed message instead.

Two modes share the loop:

- `process_question` returns the final messages (batch).
- `stream_question` yields `StreamEvent`s as the loop progresses, always
  ending with exactly one `done` event. `process_question_stream` writes those
  events as SSE records to an `EventSink`.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import AsyncGenerator
from contextlib import aclosing
from typing import Any, Protocol

from core.exceptions import AssistantError
from core.observability import get_tracer
from schemas.chat import ChatContext, ChatMessage
from schemas.chat_streaming import StreamEvent
from services.ai.gateway import CompletionGatewayProtocol
from services.ai.types import Completion, ToolCall
from services.cfo_agent.accumulator import ToolCallAccumulator
from services.cfo_agent.extractor import StructuredResponseExtractor
from services.cfo_agent.parsing import DEFAULT_CHART_TITLE, parse_tool_arguments
from services.cfo_agent.prompts import SYSTEM_PROMPT
from services.cfo_agent.tool_specs import TOOL_SPECS
from services.cfo_agent.tools import ToolExecutor
from services.cfo_agent.transcript import Transcript


logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

DEFAULT_MAX_ITERATIONS = 10
MAX_ITERATIONS_MESSAGE = "Reached maximum iterations."
GENERIC_ERROR_MESSAGE = "Error processing request."


class EventSink(Protocol):
    """Destination for serialized SSE records."""

    async def write(self, data: str) -> None: ...

    async def close(self) -> None: ...


def annotate_question(question: str, context: ChatContext | None) -> str:
    """Append dashboard context to the question without altering it."""
    if context is None:
        return question
    annotated = question
    if context.dateRange is not None:
        annotated += (
            f"\n\n[Dashboard date range: {context.dateRange.startDate} "
            f"to {context.dateRange.endDate}]"
        )
    if context.products:
        selected = ", ".join(f"{p.name} ({p.id})" for p in context.products)
        annotated += f"\n\n[Selected products: {selected}]"
    return annotated


def get_user_friendly_error_message(exc: Exception) -> str:
    """Convert provider failures into text suitable for the chat UI."""
    exc_str = str(exc).lower()

    if "503" in exc_str or "overloaded" in exc_str or "unavailable" in exc_str:
        return (
            "The AI service is currently experiencing high demand. "
            "Please wait a moment and try again."
        )

    if "429" in exc_str or "rate limit" in exc_str or "quota" in exc_str:
        return "You've sent too many requests. Please wait a minute before trying again."

    if "timeout" in exc_str or "timed out" in exc_str:
        return (
            "The request took too long to complete. "
            "Please try a simpler question or try again later."
        )

    if "connection" in exc_str or "network" in exc_str:
        return (
            "There was a network issue connecting to the AI service. "
            "Please check your connection and try again."
        )

    return GENERIC_ERROR_MESSAGE


def _answer_event(message: ChatMessage) -> StreamEvent | None:
    """Map an answer message to its stream event; blank messages give None."""
    if message.type == "text":
        return StreamEvent.text(message.content) if message.content else None
    if message.chartConfig is None:
        return None
    return StreamEvent.chart(
        message.title or DEFAULT_CHART_TITLE,
        message.chartConfig.model_dump(exclude_none=True),
    )


class CFOAssistantService:
    """Answers financial questions by letting the model call data tools."""

    def __init__(
        self,
        gateway: CompletionGatewayProtocol,
        executor: ToolExecutor,
        *,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        system_prompt: str = SYSTEM_PROMPT,
    ) -> None:
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self._gateway = gateway
        self._executor = executor
        self._extractor = StructuredResponseExtractor(gateway)
        self._max_iterations = max_iterations
        self._system_prompt = system_prompt

    def _start_transcript(self, question: str, context: ChatContext | None) -> Transcript:
        return Transcript.start(self._system_prompt, annotate_question(question, context))

    # ------------------------------------------------------------------
    # Shared steps
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_arguments(tool_call: ToolCall) -> dict[str, Any]:
        outcome = parse_tool_arguments(tool_call.arguments)
        if not outcome.ok:
            logger.warning(
                "Malformed arguments for tool %s (%s); using empty arguments",
                tool_call.name,
                outcome.error,
            )
        return outcome.unwrap_or({})

    async def _execute_tool(
        self, tool_call: ToolCall, args: dict[str, Any], iteration: int
    ) -> dict[str, Any]:
        started = time.perf_counter()
        with _tracer.start_as_current_span(f"tool_call:{tool_call.name}") as span:
            span.set_attribute("tool_name", tool_call.name)
            span.set_attribute("tool_call_id", tool_call.id)
            span.set_attribute("iteration", iteration)
            # A cancelled consumer must not interrupt a running query; the
            # call finishes in the background and its result is dropped.
            result = await asyncio.shield(self._executor.execute(tool_call.name, args))
            duration_ms = (time.perf_counter() - started) * 1000
            span.set_attribute("duration_ms", duration_ms)
            span.set_attribute("success", bool(result.get("success")))
        logger.debug(
            "Tool %s finished in %.1fms (success=%s)",
            tool_call.name,
            duration_ms,
            result.get("success"),
        )
        return result

    async def _dispatch(
        self, transcript: Transcript, tool_call: ToolCall, iteration: int
    ) -> dict[str, Any]:
        args = self._parse_arguments(tool_call)
        result = await self._execute_tool(tool_call, args, iteration)
        transcript.add_tool_result(tool_call.id, json.dumps(result))
        return result

    async def _complete(self, transcript: Transcript, iteration: int) -> Completion:
        with _tracer.start_as_current_span("completion_request") as span:
            span.set_attribute("iteration", iteration)
            span.set_attribute("streaming", False)
            completion = await self._gateway.complete(
                transcript.to_messages(), tools=TOOL_SPECS
            )
            span.set_attribute("tool_call_count", len(completion.tool_calls))
        return completion

    async def _stream_completion(self, transcript: Transcript, iteration: int) -> Completion:
        accumulator = ToolCallAccumulator()
        with _tracer.start_as_current_span("completion_request") as span:
            span.set_attribute("iteration", iteration)
            span.set_attribute("streaming", True)
            async with aclosing(
                self._gateway.stream(transcript.to_messages(), tools=TOOL_SPECS)
            ) as fragments:
                async for fragment in fragments:
                    accumulator.feed(fragment)
            accumulated = accumulator.result()
            span.set_attribute("tool_call_count", len(accumulated.tool_calls))
        return Completion(content=accumulated.content, tool_calls=accumulated.tool_calls)

    # ------------------------------------------------------------------
    # Batch mode
    # ------------------------------------------------------------------

    async def process_question(
        self, question: str, context: ChatContext | None = None
    ) -> list[ChatMessage]:
        """Run the loop to completion and return the structured answer.

        Raises:
            CompletionGatewayError: if any completion request fails.
        """
        transcript = self._start_transcript(question, context)

        for iteration in range(1, self._max_iterations + 1):
            completion = await self._complete(transcript, iteration)
            if not completion.tool_calls:
                logger.info("Answer ready after %d iteration(s)", iteration)
                return await self._extractor.extract(transcript)

            transcript.add_assistant(completion.content, completion.tool_calls)
            for tool_call in completion.tool_calls:
                await self._dispatch(transcript, tool_call, iteration)

        logger.warning(
            "Stopped after %d iterations without a final answer", self._max_iterations
        )
        return [ChatMessage.text(MAX_ITERATIONS_MESSAGE)]

    # ------------------------------------------------------------------
    # Streaming mode
    # ------------------------------------------------------------------

    async def stream_question(
        self, question: str, context: ChatContext | None = None
    ) -> AsyncGenerator[StreamEvent, None]:
        """Yield progress events for one question, ending with `done`.

        Closing the generator early stops the loop: no further completions are
        requested and no further events (including `done`) are produced.
        """
        transcript = self._start_transcript(question, context)
        try:
            answered = False
            for iteration in range(1, self._max_iterations + 1):
                yield StreamEvent.thinking(f"Processing (iteration {iteration})...")

                completion = await self._stream_completion(transcript, iteration)
                if not completion.tool_calls:
                    messages = await self._extractor.extract(transcript)
                    for message in messages:
                        event = _answer_event(message)
                        if event is not None:
                            yield event
                    answered = True
                    break

                transcript.add_assistant(completion.content, completion.tool_calls)
                for tool_call in completion.tool_calls:
                    args = self._parse_arguments(tool_call)
                    yield StreamEvent.tool_call(tool_call.name, args)
                    result = await self._execute_tool(tool_call, args, iteration)
                    transcript.add_tool_result(tool_call.id, json.dumps(result))
                    yield StreamEvent.tool_result(tool_call.name, result)

            if not answered:
                logger.warning(
                    "Stopped after %d iterations without a final answer",
                    self._max_iterations,
                )
                yield StreamEvent.text(MAX_ITERATIONS_MESSAGE)
        except AssistantError as exc:
            logger.error("Assistant stream failed: %s", exc.error_code)
            yield StreamEvent.error(get_user_friendly_error_message(exc))
        except Exception:
            logger.exception("Unexpected error while streaming an answer")
            yield StreamEvent.error(GENERIC_ERROR_MESSAGE)

        # Not in a `finally`: an aborted consumer must not receive `done`.
        yield StreamEvent.done()

    async def process_question_stream(
        self, question: str, context: ChatContext | None, sink: EventSink
    ) -> None:
        """Write the event stream for `question` to `sink`, then close it."""
        try:
            async with aclosing(self.stream_question(question, context)) as events:
                async for event in events:
                    await sink.write(event.to_sse())
        finally:
            await sink.close()
