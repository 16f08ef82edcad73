"""路径参数绑定器."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from werkzeug.datastructures import MultiDict

from reqbind.binding.binders.base import Binder, BinderKind
from reqbind.binding.cache import get_descriptor
from reqbind.binding.decoder import decode_values

if TYPE_CHECKING:
    from werkzeug.wrappers.request import Request

    from reqbind.types import PathLookup


def view_args_lookup(request: Request, name: str) -> str:
    """从路由匹配结果(``request.view_args``)中读取路径参数, 缺失时返回空字符串."""
    view_args = getattr(request, "view_args", None) or {}
    value = view_args.get(name)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass(frozen=True, slots=True)
class PathBinder(Binder):
    """把声明了 ``path`` 的字段按路径参数赋值.

    路径参数先以声明 key 暂存, 再交给与查询参数相同的解码器完成类型转换.
    空值不会写入, 因此缺失的路径参数不会覆盖已有值.

    Attributes:
        lookup: 路径参数读取函数, 默认读取 Flask 的 ``view_args``.

    """

    lookup: PathLookup = view_args_lookup

    name = "path"
    kind = BinderKind.METADATA

    def matches(self, request: Request) -> bool:
        return True

    def bind(self, request: Request, record: object) -> None:
        descriptor = get_descriptor(type(record))
        if not descriptor.path_fields:
            return

        staged: MultiDict[str, str] = MultiDict()
        for path_field in descriptor.path_fields:
            value = self.lookup(request, path_field.source_key)
            if value:
                staged.add(path_field.dest_key, value)
        if staged:
            decode_values(record, staged, descriptor)


__all__ = ["PathBinder", "view_args_lookup"]
