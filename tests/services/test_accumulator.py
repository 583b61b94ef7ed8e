"""Unit tests for reassembling streamed tool calls."""

from __future__ import annotations

from services.ai.types import CompletionFragment, ToolCall, ToolCallDelta
from services.cfo_agent.accumulator import ToolCallAccumulator


def _delta(index: int, **kwargs) -> CompletionFragment:
    return CompletionFragment(tool_call_deltas=[ToolCallDelta(index=index, **kwargs)])


def test_fragments_fold_into_one_tool_call():
    acc = ToolCallAccumulator()
    for fragment in [
        _delta(0, id="a", name_delta="query_"),
        _delta(0, name_delta="metrics"),
        _delta(0, arguments_delta='{"group'),
        _delta(0, arguments_delta='By":"month"}'),
    ]:
        acc.feed(fragment)

    result = acc.result()

    assert result.tool_calls == [
        ToolCall(id="a", name="query_metrics", arguments='{"groupBy":"month"}')
    ]
    assert result.content == ""


def test_first_id_wins():
    acc = ToolCallAccumulator()
    acc.feed(_delta(0, id="first", name_delta="get_products"))
    acc.feed(_delta(0, id="second"))

    assert acc.result().tool_calls[0].id == "first"


def test_interleaved_indices_are_ordered_by_index():
    acc = ToolCallAccumulator()
    acc.feed(_delta(1, id="b", name_delta="get_date_range"))
    acc.feed(_delta(0, id="a", name_delta="get_products"))
    acc.feed(_delta(1, arguments_delta="{}"))
    acc.feed(_delta(0, arguments_delta="{"))
    acc.feed(_delta(0, arguments_delta="}"))

    calls = acc.result().tool_calls

    assert [c.id for c in calls] == ["a", "b"]
    assert [c.name for c in calls] == ["get_products", "get_date_range"]
    assert all(c.arguments == "{}" for c in calls)


def test_sparse_indices_do_not_create_placeholders():
    acc = ToolCallAccumulator()
    acc.feed(_delta(3, id="x", name_delta="get_products"))

    calls = acc.result().tool_calls

    assert len(calls) == 1
    assert calls[0].id == "x"


def test_text_deltas_concatenate():
    acc = ToolCallAccumulator()
    acc.feed(CompletionFragment(content_delta="Let me "))
    acc.feed(CompletionFragment(content_delta=None))
    acc.feed(CompletionFragment(content_delta="check."))

    result = acc.result()

    assert result.content == "Let me check."
    assert result.tool_calls == []
    assert acc.has_tool_calls is False
