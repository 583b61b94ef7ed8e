"""Completion gateway over the OpenAI chat completions API.

The assistant talks to the model only through `CompletionGatewayProtocol`:

    gateway = create_completion_gateway(get_settings())
    completion = await gateway.complete(messages, tools=TOOL_SPECS)
    async for fragment in gateway.stream(messages, tools=TOOL_SPECS):
        ...

Every provider failure surfaces as `CompletionGatewayError`. The gateway is
constructed explicitly and fails at construction time when no API key is
configured.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Any, Protocol

import httpx
from openai import AsyncOpenAI, OpenAIError

from core.config import Settings
from core.exceptions import CompletionGatewayError, MissingCredentialError
from services.ai.types import Completion, CompletionFragment, ToolCall, ToolCallDelta


logger = logging.getLogger(__name__)


class CompletionGatewayProtocol(Protocol):
    """Protocol for chat completion providers."""

    async def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        tools: list[dict[str, Any]] | None = None,
        response_format: dict[str, Any] | None = None,
    ) -> Completion:
        """Request one whole completion."""
        ...

    def stream(
        self,
        messages: list[dict[str, Any]],
        *,
        tools: list[dict[str, Any]] | None = None,
    ) -> AsyncGenerator[CompletionFragment, None]:
        """Request a completion delivered as incremental fragments."""
        ...


def fragment_from_chunk(chunk: Any) -> CompletionFragment | None:
    """Normalize an OpenAI `ChatCompletionChunk` into a `CompletionFragment`.

    Returns None for chunks without a choice (e.g. trailing usage chunks).
    """
    if not chunk.choices:
        return None
    delta = chunk.choices[0].delta
    if delta is None:
        return None

    tool_deltas: list[ToolCallDelta] = []
    for tc in delta.tool_calls or []:
        function = tc.function
        tool_deltas.append(
            ToolCallDelta(
                index=tc.index,
                id=tc.id,
                name_delta=function.name if function else None,
                arguments_delta=function.arguments if function else None,
            )
        )
    return CompletionFragment(content_delta=delta.content, tool_call_deltas=tool_deltas)


class OpenAICompletionGateway:
    """`CompletionGatewayProtocol` implementation backed by `AsyncOpenAI`."""

    def __init__(
        self, client: AsyncOpenAI, *, model: str, temperature: float = 0.7
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = temperature

    def _request_kwargs(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None,
        response_format: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": messages,
            "temperature": self._temperature,
        }
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = "auto"
        if response_format:
            kwargs["response_format"] = response_format
        return kwargs

    async def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        tools: list[dict[str, Any]] | None = None,
        response_format: dict[str, Any] | None = None,
    ) -> Completion:
        try:
            response = await self._client.chat.completions.create(
                **self._request_kwargs(messages, tools, response_format)
            )
        except OpenAIError as exc:
            logger.error("Completion request failed: %s", exc.__class__.__name__)
            raise CompletionGatewayError(str(exc)) from exc

        if not response.choices:
            return Completion()
        message = response.choices[0].message
        tool_calls = [
            ToolCall(
                id=tc.id,
                name=tc.function.name,
                arguments=tc.function.arguments or "",
            )
            for tc in message.tool_calls or []
            if tc.type == "function"
        ]
        return Completion(content=message.content, tool_calls=tool_calls)

    async def stream(
        self,
        messages: list[dict[str, Any]],
        *,
        tools: list[dict[str, Any]] | None = None,
    ) -> AsyncGenerator[CompletionFragment, None]:
        try:
            response_stream = await self._client.chat.completions.create(
                **self._request_kwargs(messages, tools), stream=True
            )
        except OpenAIError as exc:
            logger.error("Streaming request failed: %s", exc.__class__.__name__)
            raise CompletionGatewayError(str(exc)) from exc

        # Leaving this block (normally, on error, or when the consumer closes
        # the generator) releases the HTTP response.
        async with response_stream:
            try:
                async for chunk in response_stream:
                    fragment = fragment_from_chunk(chunk)
                    if fragment is not None:
                        yield fragment
            except (OpenAIError, httpx.HTTPError) as exc:
                logger.error("Completion stream broke: %s", exc.__class__.__name__)
                raise CompletionGatewayError(str(exc)) from exc


def create_completion_gateway(settings: Settings) -> OpenAICompletionGateway:
    """Build the OpenAI-backed gateway from settings.

    Raises:
        MissingCredentialError: if OPENAI_API_KEY is not configured.
    """
    if not settings.OPENAI_API_KEY:
        raise MissingCredentialError()

    client = AsyncOpenAI(
        api_key=settings.OPENAI_API_KEY,
        base_url=settings.OPENAI_BASE_URL,
        timeout=settings.OPENAI_TIMEOUT_SECONDS,
        max_retries=settings.OPENAI_MAX_RETRIES,
    )
    logger.info("Using OpenAI chat model: %s", settings.OPENAI_MODEL)
    return OpenAICompletionGateway(
        client, model=settings.OPENAI_MODEL, temperature=settings.AI_TEMPERATURE
    )
