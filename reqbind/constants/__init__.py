"""常量模块。

集中管理 HTTP 状态码、HTTP 头、错误分类与默认尺寸上限。
"""

# 导入HTTP状态码常量（使用Python标准库）
from http import HTTPStatus as HttpStatus

from .http_headers import ContentTypes, HttpHeaders
from .system_constants import (
    ErrorCategory,
    ErrorCode,
    ErrorMessages,
    ErrorSeverity,
    SuccessMessages,
)

# 请求体硬上限, 2MB
DEFAULT_MAX_BODY_SIZE = 2 * 1024 * 1024
# multipart 内存上限, 超出部分落盘, 8MB
DEFAULT_MULTIPART_MEMORY = 8 * 1024 * 1024

__all__ = [
    "DEFAULT_MAX_BODY_SIZE",
    "DEFAULT_MULTIPART_MEMORY",
    "ContentTypes",
    "ErrorCategory",
    "ErrorCode",
    "ErrorMessages",
    "ErrorSeverity",
    "HttpHeaders",
    "HttpStatus",
    "SuccessMessages",
]
