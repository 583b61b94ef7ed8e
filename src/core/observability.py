"""Tracing helpers built on the OpenTelemetry API.

The orchestration loop opens spans around completion requests and tool
dispatch. Without a configured SDK the OpenTelemetry API hands out no-op
tracers, so instrumentation is always safe to call.

PII guidance:
- NEVER put the user's question, model output, or tool arguments in span
  attributes. Use iteration numbers, tool names, durations and status flags.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from opentelemetry import trace
from opentelemetry.trace import Tracer


logger = logging.getLogger(__name__)

_ENV_ENABLE_OBSERVABILITY = "ENABLE_OBSERVABILITY"
_ENV_OTEL_SERVICE_NAME = "OTEL_SERVICE_NAME"

_DEFAULT_SERVICE_NAME = "ai-cfo-backend"


def _is_observability_enabled() -> bool:
    """Check if observability is enabled via environment variable."""
    value = os.getenv(_ENV_ENABLE_OBSERVABILITY, "false").lower()
    return value in {"true", "1", "yes", "on"}


@lru_cache
def configure_observability() -> bool:
    """Log whether tracing is expected for this process.

    Exporter wiring belongs to the deployment (e.g. `opentelemetry-instrument`);
    this only records the service name so spans are attributed consistently.

    Returns:
        True if observability is enabled, False otherwise.
    """
    if not _is_observability_enabled():
        logger.info(
            "Observability disabled. Set %s=true to enable tracing.",
            _ENV_ENABLE_OBSERVABILITY,
        )
        return False

    service_name = os.getenv(_ENV_OTEL_SERVICE_NAME, _DEFAULT_SERVICE_NAME)
    os.environ.setdefault(_ENV_OTEL_SERVICE_NAME, service_name)
    logger.info("Tracing enabled for service '%s'", service_name)
    return True


def get_tracer(name: str) -> Tracer:
    """Get an OpenTelemetry tracer for custom instrumentation.

    Example:
        tracer = get_tracer(__name__)

        with tracer.start_as_current_span("completion_request") as span:
            span.set_attribute("iteration", 1)

    WARNING: Never add user content or PII to span attributes!
    """
    return trace.get_tracer(name)
