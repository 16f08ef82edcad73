"""声明 key 小语言的单元测试."""

from __future__ import annotations

from dataclasses import dataclass, field, fields

import pytest

from reqbind.binding.tags import FORM_TAG, JSON_TAG, PATH_TAG, bind_field, ignored, parse_tag, resolve_key


@dataclass
class _Tagged:
    plain: str = ""
    by_json: str = bind_field(json="nick,omitempty", default="")
    by_form: str = bind_field(form="f", json="j", default="")
    hidden: str = ignored(default="")
    empty_form: str = bind_field(form=",omitempty", json="fallback", default="")
    item_id: int = bind_field(path="id", form="id", default=0)
    tags: list[str] = bind_field(json="tags", default_factory=list)


def _metadata(name: str):
    return next(f for f in fields(_Tagged) if f.name == name).metadata


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("name", ("name", ())),
        ("name,omitempty", ("name", ("omitempty",))),
        ("-", ("-", ())),
        ("", ("", ())),
        (None, ("", ())),
        (",omitempty", ("", ("omitempty",))),
    ],
)
def test_parse_tag_splits_key_and_modifiers(raw, expected) -> None:
    assert parse_tag(raw) == expected


@pytest.mark.unit
def test_resolve_key_prefers_form_then_json_then_field_name() -> None:
    assert resolve_key("plain", _metadata("plain")) == "plain"
    assert resolve_key("by_json", _metadata("by_json")) == "nick"
    assert resolve_key("by_form", _metadata("by_form")) == "f"
    assert resolve_key("empty_form", _metadata("empty_form")) == "fallback"
    assert resolve_key("item_id", _metadata("item_id")) == "id"


@pytest.mark.unit
def test_ignore_marker_suppresses_field() -> None:
    assert resolve_key("hidden", _metadata("hidden")) is None


@pytest.mark.unit
def test_bind_field_stores_metadata_and_defaults() -> None:
    metadata = _metadata("item_id")
    assert metadata[PATH_TAG] == "id"
    assert metadata[FORM_TAG] == "id"
    assert JSON_TAG not in metadata

    record = _Tagged()
    assert record.item_id == 0
    assert record.tags == []
    assert record.tags is not _Tagged().tags


@pytest.mark.unit
def test_bind_field_merges_existing_metadata() -> None:
    declared = bind_field(json="x", default=0, metadata={"doc": "说明"})
    assert dict(declared.metadata) == {"doc": "说明", JSON_TAG: "x"}
    assert declared.default == 0


@pytest.mark.unit
def test_bind_field_is_plain_dataclass_field() -> None:
    declared = bind_field(form="a", default="", repr=False)
    plain = field(default="", repr=False)
    assert type(declared) is type(plain)
    assert declared.repr is False
