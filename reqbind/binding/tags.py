"""字段声明 key 的小语言.

约定:
- 逗号前的第一段是 key, 其余段是修饰符, 例如 ``"name,omitempty"``.
- 单独的 ``-`` 表示忽略该字段, 任何来源都不会写入.
- key 解析优先级: ``form`` -> ``json`` -> 字段名.
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

FORM_TAG = "form"
JSON_TAG = "json"
PATH_TAG = "path"
IGNORE_MARKER = "-"

_MISSING: Any = dataclasses.MISSING


def parse_tag(raw: str | None) -> tuple[str, tuple[str, ...]]:
    """拆分 tag 为 (key, modifiers).

    >>> parse_tag("name,omitempty")
    ('name', ('omitempty',))
    >>> parse_tag("-")
    ('-', ())
    """
    if not raw:
        return "", ()
    key, *modifiers = raw.split(",")
    return key, tuple(modifiers)


def resolve_key(name: str, metadata: Mapping[str, object]) -> str | None:
    """按 form -> json -> 字段名 的顺序解析声明 key.

    Returns:
        声明 key; 字段被 ``-`` 忽略时返回 None.

    """
    for tag in (FORM_TAG, JSON_TAG):
        raw = metadata.get(tag)
        if not isinstance(raw, str):
            continue
        key, _ = parse_tag(raw)
        if key == IGNORE_MARKER:
            return None
        if key:
            return key
    return name


def bind_field(
    *,
    form: str | None = None,
    json: str | None = None,
    path: str | None = None,
    default: Any = _MISSING,
    default_factory: Callable[[], Any] | Any = _MISSING,
    **kwargs: Any,
) -> Any:
    """声明一个可绑定字段, 本质是携带 metadata 的 ``dataclasses.field``.

    Args:
        form: 绑定专用 key, 优先级最高.
        json: 通用载荷 key, 逗号后的修饰符会被忽略.
        path: 路径参数名, 声明后该字段会从路由匹配结果中取值.
        default: 默认值.
        default_factory: 默认值工厂.
        **kwargs: 透传给 ``dataclasses.field`` 的其他参数.

    Example:
        >>> @dataclass
        ... class GetItem:
        ...     item_id: int = bind_field(path="id", form="id", default=0)

    """
    metadata: dict[str, object] = dict(kwargs.pop("metadata", None) or {})
    if form is not None:
        metadata[FORM_TAG] = form
    if json is not None:
        metadata[JSON_TAG] = json
    if path is not None:
        metadata[PATH_TAG] = path
    return dataclasses.field(default=default, default_factory=default_factory, metadata=metadata, **kwargs)


def ignored(*, default: Any = _MISSING, default_factory: Callable[[], Any] | Any = _MISSING) -> Any:
    """声明一个不参与绑定的字段."""
    return bind_field(form=IGNORE_MARKER, default=default, default_factory=default_factory)


__all__ = [
    "FORM_TAG",
    "IGNORE_MARKER",
    "JSON_TAG",
    "PATH_TAG",
    "bind_field",
    "ignored",
    "parse_tag",
    "resolve_key",
]
