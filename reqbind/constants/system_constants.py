"""reqbind - 常量定义模块

统一管理错误分类、严重度、业务码与默认文案.
"""

from enum import Enum


class ErrorCategory(Enum):
    """错误分类枚举."""

    VALIDATION = "validation"
    BINDING = "binding"
    BUSINESS = "business"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    SECURITY = "security"
    SYSTEM = "system"


class ErrorSeverity(Enum):
    """错误严重程度枚举."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """响应信封中的业务码.

    与 HTTP 状态码分离,供调用方展示具体错误文案.
    """

    OK = "OK"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"
    CONFLICT = "CONFLICT"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    REQUEST_ENTITY_TOO_LARGE = "REQUEST_ENTITY_TOO_LARGE"
    # 未单独定义的 4xx 统一使用
    GENERIC_CLIENT_ERROR = "ERROR"


class ErrorMessages:
    """错误消息常量."""

    INTERNAL_ERROR = "Internal Server Error"
    BAD_REQUEST = "Bad Request"
    VALIDATION_ERROR = "Validation Failed"
    UNAUTHORIZED = "Unauthorized"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "Not Found"
    CONFLICT = "Conflict"
    TOO_MANY_REQUESTS = "Too Many Requests"
    REQUEST_ENTITY_TOO_LARGE = "Request Entity Too Large"


class SuccessMessages:
    """成功消息常量."""

    OPERATION_SUCCESS = "success"


__all__ = [
    "ErrorCategory",
    "ErrorCode",
    "ErrorMessages",
    "ErrorSeverity",
    "SuccessMessages",
]
