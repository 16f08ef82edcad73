"""路径参数与查询参数绑定器的单元测试."""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from flask import request

from reqbind.binding.binders import BinderKind, PathBinder, QueryBinder, view_args_lookup
from reqbind.binding.tags import bind_field
from reqbind.errors import DecodeError


@dataclass
class _GetItem:
    item_id: int = bind_field(path="id", form="id", default=0)
    slug: str = bind_field(path="slug", default="")
    verbose: bool = False


@dataclass
class _NoPath:
    name: str = ""


@pytest.mark.unit
def test_binder_kinds_and_names() -> None:
    assert PathBinder().name == "path"
    assert PathBinder().kind is BinderKind.METADATA
    assert QueryBinder().name == "query"
    assert QueryBinder().kind is BinderKind.METADATA
    assert PathBinder().is_body is False


@pytest.mark.unit
def test_view_args_lookup_reads_route_match(flask_app) -> None:
    with flask_app.test_request_context("/items/42"):
        request.view_args = {"id": 42, "slug": "blue"}

        assert view_args_lookup(request, "id") == "42"
        assert view_args_lookup(request, "slug") == "blue"
        assert view_args_lookup(request, "missing") == ""


@pytest.mark.unit
def test_view_args_lookup_handles_unmatched_request(flask_app) -> None:
    with flask_app.test_request_context("/"):
        assert view_args_lookup(request, "id") == ""


@pytest.mark.unit
def test_path_binder_converts_through_decoder(flask_app) -> None:
    record = _GetItem()
    with flask_app.test_request_context("/items/42"):
        request.view_args = {"id": "42"}
        binder = PathBinder()

        assert binder.matches(request) is True
        binder.bind(request, record)

    assert record.item_id == 42
    assert record.slug == ""


@pytest.mark.unit
def test_path_binder_rejects_non_numeric_value(flask_app) -> None:
    record = _GetItem()
    with flask_app.test_request_context("/items/abc"), pytest.raises(DecodeError) as exc_info:
        request.view_args = {"id": "abc"}
        PathBinder().bind(request, record)

    assert '"id"' in exc_info.value.message
    assert record.item_id == 0


@pytest.mark.unit
def test_path_binder_accepts_custom_lookup(flask_app) -> None:
    def _lookup(_request, name: str) -> str:
        return {"id": "7", "slug": "red"}.get(name, "")

    record = _GetItem()
    with flask_app.test_request_context("/"):
        PathBinder(lookup=_lookup).bind(request, record)

    assert record.item_id == 7
    assert record.slug == "red"


@pytest.mark.unit
def test_path_binder_is_noop_without_path_fields(flask_app) -> None:
    record = _NoPath(name="kept")
    with flask_app.test_request_context("/"):
        request.view_args = {"name": "ignored"}
        PathBinder().bind(request, record)

    assert record.name == "kept"


@pytest.mark.unit
def test_query_binder_matches_only_with_query_string(flask_app) -> None:
    with flask_app.test_request_context("/items"):
        assert QueryBinder().matches(request) is False
    with flask_app.test_request_context("/items?verbose=1"):
        assert QueryBinder().matches(request) is True


@pytest.mark.unit
def test_query_binder_decodes_declared_keys(flask_app) -> None:
    record = _GetItem()
    with flask_app.test_request_context("/items?id=9&verbose=true&other=x"):
        QueryBinder().bind(request, record)

    assert record.item_id == 9
    assert record.verbose is True
