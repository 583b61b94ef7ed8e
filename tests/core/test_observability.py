from core.observability import configure_observability, get_tracer


def test_observability_disabled_by_default(monkeypatch):
    monkeypatch.delenv("ENABLE_OBSERVABILITY", raising=False)
    configure_observability.cache_clear()

    assert configure_observability() is False
    configure_observability.cache_clear()


def test_observability_enabled_sets_service_name(monkeypatch):
    monkeypatch.setenv("ENABLE_OBSERVABILITY", "true")
    monkeypatch.setenv("OTEL_SERVICE_NAME", "cfo-test")
    configure_observability.cache_clear()

    assert configure_observability() is True
    configure_observability.cache_clear()


def test_tracer_spans_work_without_sdk():
    tracer = get_tracer("tests")

    with tracer.start_as_current_span("completion_request") as span:
        span.set_attribute("iteration", 1)
