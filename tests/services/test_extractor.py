"""Tests for the schema-constrained final answer."""

from __future__ import annotations

import pytest
from fixtures.cfo_fakes import (
    CHART_MESSAGE,
    TEXT_MESSAGE,
    ScriptedGateway,
    structured_answer,
)

from core.exceptions import CompletionGatewayError
from services.cfo_agent.extractor import StructuredResponseExtractor
from services.cfo_agent.tool_specs import RESPONSE_SCHEMA
from services.cfo_agent.transcript import Transcript


def _transcript() -> Transcript:
    return Transcript.start("sys", "Show Q2 revenue")


@pytest.mark.asyncio
async def test_text_and_chart_messages_with_fresh_chart_id():
    gateway = ScriptedGateway(
        structured=structured_answer(
            {**TEXT_MESSAGE, "content": "X"}, {**CHART_MESSAGE, "title": "T"}
        )
    )
    extractor = StructuredResponseExtractor(gateway)

    messages = await extractor.extract(_transcript())

    assert len(messages) == 2
    assert messages[0].type == "text"
    assert messages[0].content == "X"
    assert messages[1].type == "chart"
    assert messages[1].title == "T"
    assert messages[1].chartConfig is not None
    assert messages[1].chartConfig.id
    assert gateway.response_formats == [RESPONSE_SCHEMA]


@pytest.mark.asyncio
async def test_chart_ids_differ_between_extractions():
    gateway = ScriptedGateway(structured=structured_answer(CHART_MESSAGE))
    extractor = StructuredResponseExtractor(gateway)

    first = await extractor.extract(_transcript())
    second = await extractor.extract(_transcript())

    assert first[0].chartConfig.id != second[0].chartConfig.id


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [None, ""])
async def test_empty_content_yields_no_messages(content):
    extractor = StructuredResponseExtractor(ScriptedGateway(structured=content))

    assert await extractor.extract(_transcript()) == []


@pytest.mark.asyncio
async def test_unparseable_content_degrades_to_raw_text():
    extractor = StructuredResponseExtractor(
        ScriptedGateway(structured="Revenue was up 10%.")
    )

    messages = await extractor.extract(_transcript())

    assert len(messages) == 1
    assert messages[0].type == "text"
    assert messages[0].content == "Revenue was up 10%."


@pytest.mark.asyncio
async def test_non_envelope_json_degrades_to_raw_text():
    raw = '{"answer": "Revenue was up 10%."}'
    extractor = StructuredResponseExtractor(ScriptedGateway(structured=raw))

    messages = await extractor.extract(_transcript())

    assert [(m.type, m.content) for m in messages] == [("text", raw)]


@pytest.mark.asyncio
async def test_chart_with_content_and_no_title_is_kept_beside_text():
    gateway = ScriptedGateway(
        structured=structured_answer(
            {**TEXT_MESSAGE, "content": "Revenue grew."},
            {**CHART_MESSAGE, "content": "Monthly revenue", "title": None},
        )
    )
    extractor = StructuredResponseExtractor(gateway)

    messages = await extractor.extract(_transcript())

    assert [m.type for m in messages] == ["text", "chart"]
    assert messages[0].content == "Revenue grew."
    assert messages[1].content is None
    assert messages[1].title == "Chart"
    assert messages[1].chartConfig.id


@pytest.mark.asyncio
async def test_unusable_message_is_dropped_from_answer():
    gateway = ScriptedGateway(
        structured=structured_answer(
            {**CHART_MESSAGE, "chartConfig": None}, TEXT_MESSAGE
        )
    )

    messages = await StructuredResponseExtractor(gateway).extract(_transcript())

    assert [m.content for m in messages] == [TEXT_MESSAGE["content"]]


@pytest.mark.asyncio
async def test_gateway_failure_propagates():
    extractor = StructuredResponseExtractor(
        ScriptedGateway(structured=CompletionGatewayError("boom"))
    )

    with pytest.raises(CompletionGatewayError):
        await extractor.extract(_transcript())
