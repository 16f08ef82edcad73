"""通用结构化数据类型别名.

统一 JSON/Mapping 风格的类型,方便在绑定、日志、响应等模块中共享定义,避免重复声明.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, MutableMapping, Sequence
from typing import TypeAlias

from werkzeug.wrappers import Request

ScalarValue: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = ScalarValue | Sequence["JsonValue"] | Mapping[str, "JsonValue"]
JsonDict: TypeAlias = dict[str, JsonValue]
StructlogEventDict: TypeAlias = MutableMapping[str, JsonValue]
LoggerExtra: TypeAlias = Mapping[str, JsonValue]

# 路由匹配结果查询: (request, name) -> value, 缺失时返回空字符串
PathLookup: TypeAlias = Callable[[Request, str], str]
ErrorHook: TypeAlias = Callable[[BaseException], None]
