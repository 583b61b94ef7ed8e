"""AI CFO chat endpoints.

`POST /ai/chat` answers in one response; `POST /ai/chat/stream` streams
progress as server-sent events (`data: <json>\\n\\n`), always ending with a
`done` event.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import aclosing
from uuid import uuid4

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import StreamingResponse

from dependencies.services import AssistantServiceDep
from schemas.chat import ChatMessage, ChatRequest, ChatResponse, IdentifiedChatMessage


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])


def _require_question(payload: ChatRequest) -> str:
    question = payload.question.strip()
    if not question:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Question is required and must be a non-empty string",
        )
    return question


def build_chat_response(messages: list[ChatMessage]) -> ChatResponse:
    """Flatten a single message into the reply; wrap anything else."""
    if len(messages) == 1:
        message = messages[0]
        if message.type == "chart" and message.chartConfig is not None:
            return ChatResponse(
                id=str(uuid4()),
                type="chart",
                title=message.title,
                chartConfig=message.chartConfig,
            )
        return ChatResponse(id=str(uuid4()), type="text", content=message.content)

    return ChatResponse(
        id=str(uuid4()),
        type="multiple",
        messages=[
            IdentifiedChatMessage(id=str(uuid4()), **message.model_dump())
            for message in messages
        ],
    )


@router.post(
    "/chat",
    response_model=ChatResponse,
    response_model_exclude_none=True,
    summary="Ask the AI CFO a question",
)
async def chat(payload: ChatRequest, assistant: AssistantServiceDep) -> ChatResponse:
    """Run the tool loop to completion and return the structured answer.

    Raises:
        HTTPException: 400 if the question is blank.
        CompletionGatewayError: surfaced as 502 by the global error handler.
    """
    question = _require_question(payload)
    messages = await assistant.process_question(question, payload.context)
    return build_chat_response(messages)


@router.post(
    "/chat/stream",
    response_class=StreamingResponse,
    summary="Ask the AI CFO a question and stream progress events",
)
async def chat_stream(
    payload: ChatRequest, assistant: AssistantServiceDep
) -> StreamingResponse:
    """Stream assistant progress using the SSE event envelope."""
    question = _require_question(payload)

    async def event_stream() -> AsyncIterator[str]:
        async with aclosing(
            assistant.stream_question(question, payload.context)
        ) as events:
            async for event in events:
                yield event.to_sse()

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )
