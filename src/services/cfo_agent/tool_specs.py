"""Tool declarations and the final-answer JSON schema sent to the model."""

from __future__ import annotations

from typing import Any


METRIC_NAMES = ["revenue", "expenses", "profit", "margin", "cac", "ltv"]
GROUP_BY_VALUES = ["month", "product"]
CHART_TYPES = ["bar", "line", "horizontalBar"]


TOOL_SPECS: list[dict[str, Any]] = [
    {
        "type": "function",
        "function": {
            "name": "query_metrics",
            "description": (
                "Query financial metrics from the database. "
                "Use this to get data for charts or analysis."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "groupBy": {
                        "type": "string",
                        "enum": GROUP_BY_VALUES,
                        "description": (
                            "How to aggregate the data. Use 'month' for "
                            "time-series, 'product' for product comparisons."
                        ),
                    },
                    "metric": {
                        "type": "string",
                        "enum": METRIC_NAMES,
                        "description": "Which metric to query",
                    },
                    "startDate": {
                        "type": "string",
                        "description": "Start date in YYYY-MM-DD format (optional)",
                    },
                    "endDate": {
                        "type": "string",
                        "description": "End date in YYYY-MM-DD format (optional)",
                    },
                    "productIds": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Filter by specific product IDs",
                    },
                },
                "required": ["groupBy", "metric"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "get_products",
            "description": "Get the list of all available products",
            "parameters": {"type": "object", "properties": {}},
        },
    },
    {
        "type": "function",
        "function": {
            "name": "get_date_range",
            "description": "Get the available date range in the dataset",
            "parameters": {"type": "object", "properties": {}},
        },
    },
]


def _nullable_string(description: str) -> dict[str, Any]:
    return {"type": ["string", "null"], "description": description}


# Strict mode requires every property to be listed as required, so optional
# fields are expressed as required-but-nullable.
_CHART_QUERY_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "groupBy": {"type": "string", "enum": GROUP_BY_VALUES},
        "metric": {"type": "string", "enum": METRIC_NAMES},
        "startDate": _nullable_string("Start date in YYYY-MM-DD format"),
        "endDate": _nullable_string("End date in YYYY-MM-DD format"),
        "productIds": {
            "anyOf": [
                {"type": "array", "items": {"type": "string"}},
                {"type": "null"},
            ]
        },
        "sortDirection": {
            "type": ["string", "null"],
            "enum": ["asc", "desc", None],
        },
    },
    "required": [
        "groupBy",
        "metric",
        "startDate",
        "endDate",
        "productIds",
        "sortDirection",
    ],
    "additionalProperties": False,
}

_MESSAGE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "type": {
            "type": "string",
            "enum": ["text", "chart"],
            "description": "Type of message",
        },
        "content": _nullable_string(
            "Text content (for text messages, null for charts)"
        ),
        "title": _nullable_string("Chart title (for chart messages, null for text)"),
        "chartConfig": {
            "anyOf": [
                {
                    "type": "object",
                    "properties": {
                        "chartType": {"type": "string", "enum": CHART_TYPES},
                        "query": _CHART_QUERY_SCHEMA,
                    },
                    "required": ["chartType", "query"],
                    "additionalProperties": False,
                },
                {"type": "null"},
            ]
        },
    },
    "required": ["type", "content", "title", "chartConfig"],
    "additionalProperties": False,
}

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "json_schema",
    "json_schema": {
        "name": "ai_cfo_response",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                "messages": {
                    "type": "array",
                    "description": (
                        "Array of response messages - can include text and/or charts"
                    ),
                    "items": _MESSAGE_SCHEMA,
                }
            },
            "required": ["messages"],
            "additionalProperties": False,
        },
    },
}
