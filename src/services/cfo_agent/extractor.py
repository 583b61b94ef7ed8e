"""Final schema-constrained completion that turns a transcript into messages."""

from __future__ import annotations

import logging
import uuid

from schemas.chat import ChatMessage
from services.ai.gateway import CompletionGatewayProtocol
from services.cfo_agent.parsing import parse_structured_response
from services.cfo_agent.tool_specs import RESPONSE_SCHEMA
from services.cfo_agent.transcript import Transcript


logger = logging.getLogger(__name__)


class StructuredResponseExtractor:
    """Requests the structured answer and assigns chart ids.

    Chart ids are minted here, once per extraction, so extracting the same
    model output twice yields different ids.
    """

    def __init__(self, gateway: CompletionGatewayProtocol) -> None:
        self._gateway = gateway

    async def extract(self, transcript: Transcript) -> list[ChatMessage]:
        completion = await self._gateway.complete(
            transcript.to_messages(), response_format=RESPONSE_SCHEMA
        )
        content = completion.content
        if not content:
            logger.warning("Structured completion returned no content")
            return []

        outcome = parse_structured_response(content)
        if outcome.value is None:
            logger.warning(
                "Structured response is not a messages object (%s); returning raw text",
                outcome.error,
            )
            return [ChatMessage.text(content)]

        return [self._with_chart_id(message) for message in outcome.value.messages]

    @staticmethod
    def _with_chart_id(message: ChatMessage) -> ChatMessage:
        if message.chartConfig is None:
            return message
        config = message.chartConfig.model_copy(update={"id": str(uuid.uuid4())})
        return message.model_copy(update={"chartConfig": config})
