"""reqbind 共享类型定义."""

from .structures import (
    ErrorHook,
    JsonDict,
    JsonValue,
    LoggerExtra,
    PathLookup,
    ScalarValue,
    StructlogEventDict,
)

__all__ = [
    "ErrorHook",
    "JsonDict",
    "JsonValue",
    "LoggerExtra",
    "PathLookup",
    "ScalarValue",
    "StructlogEventDict",
]
