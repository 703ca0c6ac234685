from __future__ import annotations

import logging

import pytest

from tinystorex import (
    BaseMiddleware,
    ErrorMiddleware,
    LoggerMiddleware,
    PerformanceMonitorMiddleware,
    apply_middleware,
    combine_reducers,
    create_store,
)
from tinystorex.middleware import global_error


class RecordingMiddleware(BaseMiddleware):
    def __init__(self) -> None:
        self.events = []

    def on_next(self, action, prev_state):
        self.events.append(("next", action["type"], prev_state))

    def on_complete(self, next_state, action):
        self.events.append(("complete", action["type"], next_state))

    def on_error(self, error, action):
        self.events.append(("error", action["type"], str(error)))


def failing_counter(state=None, action=None):
    if state is None:
        state = 0
    if action["type"] == "explode":
        raise ValueError("boom")
    if action["type"] == "increment":
        return state + 1
    return state


def test_base_middleware_hooks_wrap_dispatch() -> None:
    recorder = RecordingMiddleware()
    store = create_store(failing_counter, apply_middleware(recorder))

    store.dispatch({"type": "increment"})
    with pytest.raises(ValueError):
        store.dispatch({"type": "explode"})

    assert recorder.events == [
        ("next", "increment", 0),
        ("complete", "increment", 1),
        ("next", "explode", 1),
        ("error", "explode", "boom"),
    ]


def test_logger_middleware_logs_states(caplog, todos, name) -> None:
    store = create_store(
        combine_reducers({"todos": todos, "name": name}),
        apply_middleware(LoggerMiddleware),
    )

    with caplog.at_level(logging.INFO, logger="tinystorex.middleware"):
        store.dispatch({"type": "changename", "name": "xyy"})

    messages = [record.getMessage() for record in caplog.records]
    assert messages[0] == "dispatching changename"
    assert messages[1].startswith("state before changename:")
    assert "'yyt'" in messages[1]
    assert messages[2].startswith("state after changename:")
    assert "'xyy'" in messages[2]


def test_logger_middleware_logs_errors(caplog) -> None:
    store = create_store(failing_counter, apply_middleware(LoggerMiddleware()))

    with caplog.at_level(logging.INFO, logger="tinystorex.middleware"):
        with pytest.raises(ValueError):
            store.dispatch({"type": "explode"})

    errors = [record for record in caplog.records if record.levelno == logging.ERROR]
    assert [record.getMessage() for record in errors] == ["error in explode: boom"]


def test_error_middleware_dispatches_global_error_and_reraises() -> None:
    errors = []

    def error_reducer(state=None, action=None):
        if action["type"] == global_error.type:
            errors.append(action.payload)
            return action.payload["error"]
        return state

    store = create_store(
        combine_reducers({"count": failing_counter, "last_error": error_reducer}),
        apply_middleware(ErrorMiddleware),
    )

    with pytest.raises(ValueError, match="boom"):
        store.dispatch({"type": "explode"})

    assert store.get_state() == {"count": 0, "last_error": "boom"}
    assert errors[0]["error_type"] == "ValueError"
    assert errors[0]["action"] == "explode"


def test_error_middleware_keeps_original_error_when_forwarding_fails(caplog) -> None:
    def always_fails(state=None, action=None):
        if action["type"] == "explode":
            raise ValueError("original")
        if action["type"] == global_error.type:
            raise RuntimeError("secondary")
        return state

    store = create_store(always_fails, apply_middleware(ErrorMiddleware))

    with caplog.at_level(logging.ERROR, logger="tinystorex.middleware"):
        with pytest.raises(ValueError, match="original"):
            store.dispatch({"type": "explode"})

    errors = [record for record in caplog.records if record.levelno == logging.ERROR]
    assert len(errors) == 1
    assert errors[0].getMessage() == f"failed to dispatch {global_error.type} for explode"
    assert isinstance(errors[0].exc_info[1], RuntimeError)


def test_error_middleware_class_reports_to_its_own_store() -> None:
    def error_log(state=None, action=None):
        if state is None:
            state = ()
        if action["type"] == global_error.type:
            return state + (action.payload["error"],)
        return state

    enhancer = apply_middleware(ErrorMiddleware)
    reducer = combine_reducers({"count": failing_counter, "errors": error_log})
    first = create_store(reducer, enhancer)
    second = create_store(reducer, enhancer)

    with pytest.raises(ValueError, match="boom"):
        first.dispatch({"type": "explode"})

    assert first.get_state()["errors"] == ("boom",)
    assert second.get_state()["errors"] == ()


def test_performance_monitor_collects_metrics(caplog) -> None:
    monitor = PerformanceMonitorMiddleware(threshold_ms=10_000, log_all=True)
    store = create_store(failing_counter, apply_middleware(monitor))

    with caplog.at_level(logging.INFO, logger="tinystorex.middleware"):
        store.dispatch({"type": "increment"})
        store.dispatch({"type": "increment"})

    metrics = monitor.get_metrics()
    assert metrics["increment"]["count"] == 2
    assert metrics["increment"]["min"] <= metrics["increment"]["avg"] <= metrics["increment"]["max"]
    assert any("action increment took" in record.getMessage() for record in caplog.records)


def test_performance_monitor_keeps_aggregates_only() -> None:
    monitor = PerformanceMonitorMiddleware(threshold_ms=10_000)
    store = create_store(failing_counter, apply_middleware(monitor))

    for _ in range(50):
        store.dispatch({"type": "increment"})

    assert monitor.metrics["increment"]["count"] == 50
    assert set(monitor.metrics["increment"]) == {"count", "total", "min", "max"}
    assert monitor.get_metrics()["increment"]["avg"] == pytest.approx(
        monitor.metrics["increment"]["total"] / 50
    )


def test_performance_monitor_class_metrics_are_per_store() -> None:
    monitors = []

    class TrackedMonitor(PerformanceMonitorMiddleware):
        def __init__(self) -> None:
            super().__init__(threshold_ms=10_000)
            monitors.append(self)

    enhancer = apply_middleware(TrackedMonitor)
    first = create_store(failing_counter, enhancer)
    second = create_store(failing_counter, enhancer)

    first.dispatch({"type": "increment"})
    first.dispatch({"type": "increment"})
    second.dispatch({"type": "increment"})

    assert len(monitors) == 2
    assert monitors[0].get_metrics()["increment"]["count"] == 2
    assert monitors[1].get_metrics()["increment"]["count"] == 1


def test_performance_monitor_warns_above_threshold(caplog) -> None:
    monitor = PerformanceMonitorMiddleware(threshold_ms=-1)
    store = create_store(failing_counter, apply_middleware(monitor))

    with caplog.at_level(logging.WARNING, logger="tinystorex.middleware"):
        store.dispatch({"type": "increment"})
        with pytest.raises(ValueError):
            store.dispatch({"type": "explode"})

    messages = [record.getMessage() for record in caplog.records]
    assert any("exceeded threshold" in message for message in messages)
    assert any(message.startswith("action explode failed after") for message in messages)
    assert "explode" not in monitor.get_metrics()
