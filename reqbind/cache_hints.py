"""``No-Vary-Search`` 缓存提示.

记录类型声明的 key 会影响响应, 其余查询参数不会. 据此生成
``params, except=("k1" "k2")``, 让缓存忽略未声明的查询参数.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from reqbind.binding.descriptor import TypeDescriptor

IGNORE_ALL_PARAMS = "params"


def _quote(key: str) -> str:
    # structured field string: 仅需转义反斜杠与双引号
    escaped = key.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_no_vary_search(descriptor: TypeDescriptor | None = None, keys: Iterable[str] | None = None) -> str:
    """生成 ``No-Vary-Search`` 头的值.

    Args:
        descriptor: 记录类型描述符, 默认使用其全部声明 key.
        keys: 显式指定的 key 列表, 优先于描述符; 传入空列表表示忽略全部查询参数.

    Returns:
        头部取值字符串.

    """
    if keys is not None:
        allowed = list(dict.fromkeys(keys))
    elif descriptor is not None:
        allowed = list(descriptor.all_keys)
    else:
        allowed = []

    if not allowed:
        return IGNORE_ALL_PARAMS
    quoted = " ".join(_quote(key) for key in allowed)
    return f"{IGNORE_ALL_PARAMS}, except=({quoted})"


__all__ = ["build_no_vary_search"]
