"""请求级别 request_id 注入 + wide event 的单元测试."""

from __future__ import annotations

import pytest
from flask import Flask, g

from reqbind.infra import request_logging
from reqbind.infra.request_logging import generate_request_id, register_request_logging, sanitize_request_id
from reqbind.utils.logging.context_vars import request_id_var


class _Logger:
    def __init__(self, sink: list[tuple[str, dict]]) -> None:
        self.sink = sink

    def info(self, event, **kwargs):  # type: ignore[no-untyped-def]
        self.sink.append((event, kwargs))


@pytest.fixture
def logging_app(monkeypatch):
    events: list[tuple[str, dict]] = []
    monkeypatch.setattr(request_logging, "get_logger", lambda _name: _Logger(events))

    app = Flask(__name__)
    app.config["TESTING"] = True
    register_request_logging(app)

    @app.get("/_test/ping")
    def _ping():  # type: ignore[no-untyped-def]
        return {"request_id": request_id_var.get()}

    @app.get("/_test/fail")
    def _fail():  # type: ignore[no-untyped-def]
        g._request_error_type = "ValidationError"
        return {"ok": False}, 400

    app.events = events  # type: ignore[attr-defined]
    return app


@pytest.mark.unit
def test_incoming_request_id_is_propagated(logging_app) -> None:
    response = logging_app.test_client().get("/_test/ping", headers={"X-Request-ID": "req_test_123"})

    assert response.status_code == 200
    assert response.get_json() == {"request_id": "req_test_123"}
    assert response.headers.get("X-Request-ID") == "req_test_123"
    # teardown_request 应 reset contextvars
    assert request_id_var.get() is None


@pytest.mark.unit
def test_invalid_request_id_is_replaced(logging_app) -> None:
    response = logging_app.test_client().get("/_test/ping", headers={"X-Request-ID": "bad id with spaces"})

    request_id = response.headers.get("X-Request-ID")
    assert request_id is not None
    assert request_id.startswith("req_")
    assert response.get_json() == {"request_id": request_id}


@pytest.mark.unit
def test_wide_event_is_emitted_once_per_request(logging_app) -> None:
    logging_app.test_client().get("/_test/fail", headers={"X-Request-ID": "req_fail"})

    assert len(logging_app.events) == 1
    event, fields = logging_app.events[0]
    assert event == "http_request_completed"
    assert fields["module"] == "http"
    assert fields["action"] == "GET /_test/fail"
    assert fields["status_code"] == 400
    assert fields["outcome"] == "error"
    assert fields["error_type"] == "ValidationError"
    assert isinstance(fields["duration_ms"], int)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, None),
        ("", None),
        ("   ", None),
        ("  req_abc  ", "req_abc"),
        ("trace:1.2-3", "trace:1.2-3"),
        ("-leading-dash", None),
        ("a" * 129, None),
        ("id;drop", None),
    ],
)
def test_sanitize_request_id(raw, expected) -> None:
    assert sanitize_request_id(raw) == expected


@pytest.mark.unit
def test_generated_request_ids_are_unique_and_valid() -> None:
    first, second = generate_request_id(), generate_request_id()

    assert first != second
    assert sanitize_request_id(first) == first
