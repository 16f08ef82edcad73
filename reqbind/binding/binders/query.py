"""查询参数绑定器."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from reqbind.binding.binders.base import Binder, BinderKind
from reqbind.binding.decoder import decode_values

if TYPE_CHECKING:
    from werkzeug.wrappers.request import Request


@dataclass(frozen=True, slots=True)
class QueryBinder(Binder):
    """按声明 key 解码 URL 查询参数, 只在请求带有查询串时运行."""

    name = "query"
    kind = BinderKind.METADATA

    def matches(self, request: Request) -> bool:
        return bool(request.query_string)

    def bind(self, request: Request, record: object) -> None:
        decode_values(record, request.args)


__all__ = ["QueryBinder"]
