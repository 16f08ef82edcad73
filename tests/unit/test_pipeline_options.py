"""处理器选项与流水线失败出口的单元测试."""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from flask import Response, request

from reqbind.binding.binders import Binder, BinderKind, ClientAuthBinder, FormBinder, JSONBinder, PathBinder, QueryBinder
from reqbind.binding.orchestrator import DEFAULT_BINDERS
from reqbind.constants import DEFAULT_MAX_BODY_SIZE, ErrorCode
from reqbind.errors import BodyTooLargeError, NotFoundError
from reqbind.pipeline import EXTENSION_KEY, DEFAULT_OPTIONS, HandlerOptions, RequestPipeline, current_options
from reqbind.settings import Settings
from reqbind.validation import validate_record


@dataclass
class _Lookup:
    name: str = ""


@dataclass(frozen=True)
class _RaisingBinder(Binder):
    error: Exception

    name = "raising"
    kind = BinderKind.METADATA

    def matches(self, request) -> bool:
        return True

    def bind(self, request, record) -> None:
        raise self.error


@pytest.mark.unit
def test_default_options() -> None:
    options = HandlerOptions()

    assert options.binders == DEFAULT_BINDERS
    assert options.max_body_size == DEFAULT_MAX_BODY_SIZE
    assert options.validator is validate_record
    assert options.envelope is True
    assert options.no_vary_search is True


@pytest.mark.unit
def test_from_settings_builds_binders_and_limits() -> None:
    settings = Settings(max_body_size=4096, multipart_memory=1024, json_disallow_unknown_fields=False, safe_mode=True)
    options = HandlerOptions.from_settings(settings)

    assert options.max_body_size == 4096
    assert options.safe_mode is True
    assert JSONBinder(disallow_unknown_fields=False) in options.binders
    assert FormBinder(max_memory=1024) in options.binders


@pytest.mark.unit
def test_with_binders_replaces_chain() -> None:
    options = HandlerOptions().with_binders(QueryBinder())

    assert options.binders == (QueryBinder(),)


@pytest.mark.unit
def test_add_binders_prepends() -> None:
    options = HandlerOptions().add_binders(ClientAuthBinder())

    assert options.binders[0] == ClientAuthBinder()
    assert options.binders[1:] == DEFAULT_BINDERS


@pytest.mark.unit
def test_multipart_limit_replaces_form_binder_and_raises_body_limit() -> None:
    limit = 16 * 1024 * 1024
    options = HandlerOptions().with_multipart_limit(limit)

    assert FormBinder(max_memory=limit) in options.binders
    assert len([binder for binder in options.binders if isinstance(binder, FormBinder)]) == 1
    assert options.max_body_size == limit


@pytest.mark.unit
def test_multipart_limit_keeps_larger_or_unlimited_body_limit() -> None:
    assert HandlerOptions(max_body_size=64).with_multipart_limit(32).max_body_size == 64
    assert HandlerOptions(max_body_size=0).with_multipart_limit(32).max_body_size == 0


@pytest.mark.unit
def test_multipart_limit_appends_form_binder_when_missing() -> None:
    options = HandlerOptions().with_binders(PathBinder()).with_multipart_limit(1024)

    assert options.binders == (PathBinder(), FormBinder(max_memory=1024))


@pytest.mark.unit
def test_merged_applies_overrides_in_order() -> None:
    options = HandlerOptions().merged(
        extra_binders=[ClientAuthBinder()],
        disallow_unknown_fields=False,
        max_body_size=128,
        envelope=False,
    )

    assert options.binders[0] == ClientAuthBinder()
    assert JSONBinder(disallow_unknown_fields=False) in options.binders
    assert options.max_body_size == 128
    assert options.envelope is False


@pytest.mark.unit
def test_current_options_reads_app_extension(flask_app) -> None:
    registered = HandlerOptions(safe_mode=True)
    flask_app.extensions[EXTENSION_KEY] = registered

    with flask_app.app_context():
        assert current_options() is registered
    assert current_options() is DEFAULT_OPTIONS


@pytest.mark.unit
def test_pipeline_resolves_registered_options(flask_app) -> None:
    pipeline = RequestPipeline(_Lookup, lambda record: record.name, envelope=False)
    flask_app.extensions[EXTENSION_KEY] = HandlerOptions(safe_mode=True)

    with flask_app.app_context():
        options = pipeline.resolve_options()

    assert options.safe_mode is True
    assert options.envelope is False


@pytest.mark.unit
def test_content_length_over_limit_is_rejected_before_binding(flask_app) -> None:
    with flask_app.test_request_context("/", method="POST", data=b"x" * 32, content_type="text/plain"):
        with pytest.raises(BodyTooLargeError):
            RequestPipeline.install_body_limit(request, HandlerOptions(max_body_size=8))
        assert request.max_content_length == 8


@pytest.mark.unit
def test_zero_limit_installs_no_ceiling(flask_app) -> None:
    with flask_app.test_request_context("/", method="POST", data=b"x" * 32, content_type="text/plain"):
        RequestPipeline.install_body_limit(request, HandlerOptions(max_body_size=0))
        assert request.content_length == 32


@pytest.mark.unit
def test_fail_invokes_hook_and_custom_renderer(flask_app) -> None:
    seen: list[BaseException] = []

    def _render(error: BaseException) -> Response:
        return Response(str(error), status=418)

    options = HandlerOptions(error_hook=seen.append, error_renderer=_render)
    pipeline = RequestPipeline(_Lookup, lambda record: record, options)
    error = NotFoundError("missing")

    with flask_app.test_request_context("/"):
        response = pipeline.fail(error, options=options, stage="handler")

    assert seen == [error]
    assert response.status_code == 418
    assert response.get_data(as_text=True) == "missing"


@pytest.mark.unit
@pytest.mark.parametrize("error", [ValueError("bad tenant"), TypeError("bad tenant")])
def test_binder_value_errors_become_bad_request(flask_app, error) -> None:
    options = HandlerOptions(binders=(_RaisingBinder(error),))
    pipeline = RequestPipeline(_Lookup, lambda record: record.name, options)

    with flask_app.test_request_context("/"):
        response = pipeline.handle(request)

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["code"] == ErrorCode.BAD_REQUEST
    assert payload["message"] == "bad tenant"


@pytest.mark.unit
def test_unexpected_binder_errors_are_internal_errors(flask_app) -> None:
    """绑定器自身的缺陷不应伪装成客户端错误."""
    options = HandlerOptions(binders=(_RaisingBinder(AttributeError("no attribute 'tenant'")),))
    pipeline = RequestPipeline(_Lookup, lambda record: record.name, options)

    with flask_app.test_request_context("/"):
        response = pipeline.handle(request)

    assert response.status_code == 500
    assert response.get_json()["code"] == ErrorCode.INTERNAL_ERROR
