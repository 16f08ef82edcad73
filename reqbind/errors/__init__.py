"""reqbind - 统一异常定义.

集中维护绑定/校验/业务异常类型、严重度、业务码与 HTTP 状态码映射.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from werkzeug.exceptions import HTTPException

from reqbind.constants import ErrorCategory, ErrorCode, ErrorMessages, ErrorSeverity, HttpStatus

if TYPE_CHECKING:
    from reqbind.types import LoggerExtra

_ERROR_CODE_BY_STATUS: dict[int, str] = {
    HttpStatus.BAD_REQUEST: ErrorCode.BAD_REQUEST,
    HttpStatus.UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
    HttpStatus.FORBIDDEN: ErrorCode.FORBIDDEN,
    HttpStatus.NOT_FOUND: ErrorCode.NOT_FOUND,
    HttpStatus.CONFLICT: ErrorCode.CONFLICT,
    HttpStatus.REQUEST_ENTITY_TOO_LARGE: ErrorCode.REQUEST_ENTITY_TOO_LARGE,
    HttpStatus.TOO_MANY_REQUESTS: ErrorCode.TOO_MANY_REQUESTS,
    HttpStatus.INTERNAL_SERVER_ERROR: ErrorCode.INTERNAL_ERROR,
}


def infer_error_code(status_code: int) -> str:
    """根据 HTTP 状态码推断业务码.

    未登记的 4xx 返回通用的 ``ERROR``, 其余一律视为内部错误.
    """
    code = _ERROR_CODE_BY_STATUS.get(status_code)
    if code is not None:
        return code
    if HttpStatus.BAD_REQUEST <= status_code < HttpStatus.INTERNAL_SERVER_ERROR:
        return ErrorCode.GENERIC_CLIENT_ERROR
    return ErrorCode.INTERNAL_ERROR


@dataclass(slots=True, frozen=True)
class ExceptionMetadata:
    """异常类的默认 HTTP 语义.

    Attributes:
        status_code: 默认 HTTP 状态码.
        code: 响应信封中的业务码.
        category: 错误分类, 用于日志聚合.
        severity: 严重度, 决定是否可恢复.
        default_message_key: ``ErrorMessages`` 中的默认文案名.

    """

    status_code: int
    code: str
    category: ErrorCategory
    severity: ErrorSeverity
    default_message_key: str

    @classmethod
    def for_status(
        cls,
        status_code: int,
        category: ErrorCategory,
        severity: ErrorSeverity,
        *,
        code: str | None = None,
        message_key: str | None = None,
    ) -> ExceptionMetadata:
        """按状态码推断业务码, 默认文案名与业务码同名."""
        code = code or infer_error_code(status_code)
        return cls(status_code, code, category, severity, message_key or code)

    @property
    def default_message(self) -> str:
        return getattr(ErrorMessages, self.default_message_key, ErrorMessages.INTERNAL_ERROR)


class AppError(Exception):
    """统一的基础异常.

    所有自带 HTTP 语义的异常都继承此类, 流水线的错误漏斗据此推导状态码与业务码.

    Args:
        message: 自定义错误文案,为空时使用元数据中的默认文案.
        code: 覆盖默认业务码.
        status_code: 覆盖默认 HTTP 状态码, 未同时给出 code 时按状态码推断业务码.
        extra: 附加到日志的上下文.

    """

    metadata = ExceptionMetadata.for_status(HttpStatus.INTERNAL_SERVER_ERROR, ErrorCategory.SYSTEM, ErrorSeverity.HIGH)

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        extra: LoggerExtra | None = None,
    ) -> None:
        self.message = message or self.metadata.default_message
        if code is None and status_code is not None:
            code = infer_error_code(status_code)
        self._code = code or self.metadata.code
        self._status_code = status_code or self.metadata.status_code
        self.extra = dict(extra or {})
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def code(self) -> str:
        return self._code

    @property
    def severity(self) -> ErrorSeverity:
        return self.metadata.severity

    @property
    def category(self) -> ErrorCategory:
        return self.metadata.category

    @property
    def recoverable(self) -> bool:
        """严重度为 LOW 或 MEDIUM 时视为可恢复."""
        return self.severity in (ErrorSeverity.LOW, ErrorSeverity.MEDIUM)


class BindError(AppError):
    """表示请求数据无法绑定到目标记录.

    绑定器抛出的所有错误都属于此类, 默认返回 400.
    """

    metadata = ExceptionMetadata.for_status(HttpStatus.BAD_REQUEST, ErrorCategory.BINDING, ErrorSeverity.LOW)


class DecodeError(BindError):
    """表示请求体或参数在结构上不合法.

    包括 JSON 语法错误、未知字段、multipart 边界错误与类型转换失败, 文案保留解码器原文.
    """


class BodyTooLargeError(BindError):
    """表示请求体超过了配置的字节上限.

    属于终态错误, 不应重试, 默认返回 413.
    """

    metadata = ExceptionMetadata.for_status(
        HttpStatus.REQUEST_ENTITY_TOO_LARGE,
        ErrorCategory.SECURITY,
        ErrorSeverity.MEDIUM,
    )


class ValidationError(AppError):
    """表示记录结构完整但语义校验未通过, 默认返回 400."""

    metadata = ExceptionMetadata.for_status(
        HttpStatus.BAD_REQUEST,
        ErrorCategory.VALIDATION,
        ErrorSeverity.LOW,
        code=ErrorCode.VALIDATION_FAILED,
        message_key="VALIDATION_ERROR",
    )


# 业务函数常用的异常, 流水线原样映射为对应状态码


class AuthenticationError(AppError):
    metadata = ExceptionMetadata.for_status(HttpStatus.UNAUTHORIZED, ErrorCategory.AUTHENTICATION, ErrorSeverity.MEDIUM)


class AuthorizationError(AppError):
    metadata = ExceptionMetadata.for_status(HttpStatus.FORBIDDEN, ErrorCategory.AUTHORIZATION, ErrorSeverity.MEDIUM)


class NotFoundError(AppError):
    metadata = ExceptionMetadata.for_status(HttpStatus.NOT_FOUND, ErrorCategory.BUSINESS, ErrorSeverity.LOW)


class ConflictError(AppError):
    metadata = ExceptionMetadata.for_status(HttpStatus.CONFLICT, ErrorCategory.BUSINESS, ErrorSeverity.MEDIUM)


class RateLimitError(AppError):
    metadata = ExceptionMetadata.for_status(HttpStatus.TOO_MANY_REQUESTS, ErrorCategory.SECURITY, ErrorSeverity.MEDIUM)


class SystemError(AppError):
    """表示系统级未知错误, 默认返回 500."""


def map_exception_to_status(error: BaseException, default: int = HttpStatus.INTERNAL_SERVER_ERROR) -> int:
    """根据异常推导 HTTP 状态码.

    Args:
        error: 捕获到的异常.
        default: 既不是 ``AppError`` 也不是 Werkzeug ``HTTPException`` 时使用的状态码.

    Returns:
        HTTP 状态码.

    """
    if isinstance(error, AppError):
        return error.status_code
    if isinstance(error, HTTPException) and error.code is not None:
        return int(error.code)
    return default


def resolve_error_code(error: BaseException, status_code: int) -> str:
    """优先使用异常自带的业务码, 否则按状态码推断."""
    if isinstance(error, AppError) and error.code:
        return error.code
    return infer_error_code(status_code)


__all__ = [
    "AppError",
    "AuthenticationError",
    "AuthorizationError",
    "BindError",
    "BodyTooLargeError",
    "ConflictError",
    "DecodeError",
    "ExceptionMetadata",
    "NotFoundError",
    "RateLimitError",
    "SystemError",
    "ValidationError",
    "infer_error_code",
    "map_exception_to_status",
    "resolve_error_code",
]
