"""响应工具函数单元测试."""

from __future__ import annotations

import io
from dataclasses import dataclass

import pytest
from flask import Response

from reqbind.constants import ErrorCode, ErrorMessages, SuccessMessages
from reqbind.errors import BodyTooLargeError, NotFoundError
from reqbind.responses import (
    FileResult,
    error_payload,
    error_response,
    public_message,
    success_payload,
    success_response,
)
from reqbind.utils.logging.context_vars import request_id_var


@dataclass
class _Item:
    id: int
    name: str


@pytest.fixture
def trace_id():
    token = request_id_var.set("req_test_trace")
    yield "req_test_trace"
    request_id_var.reset(token)


@pytest.mark.unit
def test_success_payload_omits_empty_fields() -> None:
    payload = success_payload()

    assert payload == {"code": ErrorCode.OK, "message": SuccessMessages.OPERATION_SUCCESS}


@pytest.mark.unit
def test_success_payload_with_data_and_trace_id() -> None:
    payload = success_payload({"id": 1}, trace_id="req_1")

    assert payload["data"] == {"id": 1}
    assert payload["trace_id"] == "req_1"


@pytest.mark.unit
def test_error_payload_shape() -> None:
    assert error_payload("NOT_FOUND", "missing") == {"code": "NOT_FOUND", "message": "missing"}


@pytest.mark.unit
def test_success_response_wraps_result_in_envelope(flask_app, trace_id) -> None:
    with flask_app.app_context():
        response = success_response(_Item(id=1, name="pen"))

    assert response.status_code == 200
    assert response.get_json() == {
        "code": "OK",
        "message": "success",
        "data": {"id": 1, "name": "pen"},
        "trace_id": trace_id,
    }
    assert response.headers["X-Request-ID"] == trace_id


@pytest.mark.unit
def test_success_response_without_envelope(flask_app) -> None:
    with flask_app.app_context():
        response = success_response([1, 2], envelope=False)

    assert response.get_json() == [1, 2]
    assert "X-Request-ID" not in response.headers


@pytest.mark.unit
def test_success_response_passes_through_responses(flask_app) -> None:
    raw = Response("created", status=201, mimetype="text/plain")

    with flask_app.app_context():
        assert success_response(raw) is raw


@pytest.mark.unit
def test_file_result_streams_download(flask_app) -> None:
    result = FileResult(content=b"a,b\n1,2\n", name="report.csv", size=8, content_type="text/csv")

    with flask_app.test_request_context("/"):
        response = success_response(result)
        response.direct_passthrough = False
        body = response.get_data()

    assert body == b"a,b\n1,2\n"
    assert response.mimetype == "text/csv"
    assert response.headers["Content-Length"] == "8"
    assert "attachment" in response.headers["Content-Disposition"]
    assert "report.csv" in response.headers["Content-Disposition"]


@pytest.mark.unit
def test_file_result_defaults_to_octet_stream(flask_app) -> None:
    result = FileResult(content=io.BytesIO(b"\x00\x01"))

    with flask_app.test_request_context("/"):
        response = result.to_response()

    assert response.mimetype == "application/octet-stream"
    assert "Content-Disposition" not in response.headers


@pytest.mark.unit
def test_error_response_uses_error_metadata(flask_app, trace_id) -> None:
    with flask_app.app_context():
        response = error_response(BodyTooLargeError())

    assert response.status_code == 413
    assert response.get_json() == {
        "code": ErrorCode.REQUEST_ENTITY_TOO_LARGE,
        "message": ErrorMessages.REQUEST_ENTITY_TOO_LARGE,
        "trace_id": trace_id,
    }


@pytest.mark.unit
def test_error_response_for_unknown_exception(flask_app) -> None:
    with flask_app.app_context():
        response = error_response(RuntimeError("db password leaked"))

    assert response.status_code == 500
    assert response.get_json()["code"] == ErrorCode.INTERNAL_ERROR
    assert response.get_json()["message"] == "db password leaked"


@pytest.mark.unit
def test_safe_mode_masks_unknown_server_errors(flask_app) -> None:
    with flask_app.app_context():
        response = error_response(RuntimeError("db password leaked"), safe_mode=True)

    assert response.get_json()["message"] == ErrorMessages.INTERNAL_ERROR


@pytest.mark.unit
def test_safe_mode_keeps_app_error_messages() -> None:
    assert public_message(NotFoundError("order 7 missing"), 404, safe_mode=True) == "order 7 missing"
    assert public_message(ValueError("bad input"), 400, safe_mode=True) == "bad input"
