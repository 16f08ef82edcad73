"""reqbind - 统一响应工具.

提供统一的成功/错误响应信封, 以及文件下载结果. 信封结构:

    {"code": "OK", "message": "success", "data": ..., "trace_id": "req_..."}

``data`` 为空时省略, ``trace_id`` 为空时省略; trace id 同时写入 ``X-Request-ID`` 响应头.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import IO, TYPE_CHECKING

from flask import jsonify, send_file
from werkzeug.exceptions import HTTPException
from werkzeug.wrappers.response import Response as WerkzeugResponse

from reqbind.constants import ContentTypes, ErrorCode, ErrorMessages, HttpHeaders, HttpStatus, SuccessMessages
from reqbind.errors import AppError, map_exception_to_status, resolve_error_code
from reqbind.utils.logging.context_vars import request_id_var

if TYPE_CHECKING:
    from flask import Response

    from reqbind.types import JsonDict


@dataclass(slots=True)
class FileResult:
    """文件下载结果, 业务函数返回它即可流式输出文件.

    Attributes:
        content: 文件内容, 字节串或可读的二进制流.
        name: 下载文件名, 非空时附带 ``Content-Disposition: attachment``.
        size: 字节数, 大于 0 时写入 ``Content-Length``.
        content_type: 媒体类型, 缺省为 ``application/octet-stream``.

    """

    content: bytes | IO[bytes]
    name: str = ""
    size: int = 0
    content_type: str = ""

    def to_response(self) -> Response:
        stream = io.BytesIO(self.content) if isinstance(self.content, bytes) else self.content
        response = send_file(
            stream,
            mimetype=self.content_type or ContentTypes.OCTET_STREAM,
            as_attachment=bool(self.name),
            download_name=self.name or None,
        )
        if self.size > 0:
            response.headers[HttpHeaders.CONTENT_LENGTH] = str(self.size)
        return response


def get_trace_id() -> str | None:
    """返回当前请求的 trace id(即 request_id), 未注册请求日志时为 None."""
    return request_id_var.get()


def success_payload(data: object | None = None, *, trace_id: str | None = None) -> JsonDict:
    """生成成功响应信封."""
    payload: JsonDict = {"code": ErrorCode.OK, "message": SuccessMessages.OPERATION_SUCCESS}
    if data is not None:
        payload["data"] = data  # type: ignore[assignment]
    if trace_id:
        payload["trace_id"] = trace_id
    return payload


def error_payload(code: str, message: str, *, trace_id: str | None = None) -> JsonDict:
    """生成错误响应信封."""
    payload: JsonDict = {"code": code, "message": message}
    if trace_id:
        payload["trace_id"] = trace_id
    return payload


def public_message(error: BaseException, status_code: int, *, safe_mode: bool = False) -> str:
    """计算对外展示的错误文案.

    安全模式下, 非 AppError/HTTPException 的 5xx 错误文案会被替换为通用文案,
    原始异常只出现在日志中.
    """
    if isinstance(error, AppError):
        return error.message
    if isinstance(error, HTTPException):
        return error.description or ErrorMessages.INTERNAL_ERROR
    if safe_mode and status_code >= HttpStatus.INTERNAL_SERVER_ERROR:
        return ErrorMessages.INTERNAL_ERROR
    return str(error) or type(error).__name__


def success_response(result: object, *, envelope: bool = True) -> WerkzeugResponse:
    """把业务结果转换为响应.

    Args:
        result: 业务函数返回值. ``Response`` 原样返回, ``FileResult`` 转换为文件下载,
            其余按 JSON 序列化(支持 dataclass/date/UUID 等 Flask 默认可序列化类型).
        envelope: 是否使用统一信封包裹.

    Returns:
        Flask 响应对象.

    """
    if isinstance(result, WerkzeugResponse):
        return result

    trace_id = get_trace_id()
    if isinstance(result, FileResult):
        response = result.to_response()
    elif envelope:
        response = jsonify(success_payload(result, trace_id=trace_id))
    else:
        response = jsonify(result)

    if trace_id:
        response.headers.setdefault(HttpHeaders.X_REQUEST_ID, trace_id)
    return response


def error_response(error: BaseException, *, safe_mode: bool = False) -> WerkzeugResponse:
    """把异常转换为带信封的错误响应.

    Args:
        error: 捕获到的异常.
        safe_mode: 是否隐藏未知 5xx 异常的原始文案.

    Returns:
        Flask 响应对象, 状态码由异常类型推导.

    """
    status_code = map_exception_to_status(error)
    trace_id = get_trace_id()
    payload = error_payload(
        resolve_error_code(error, status_code),
        public_message(error, status_code, safe_mode=safe_mode),
        trace_id=trace_id,
    )
    response = jsonify(payload)
    response.status_code = status_code
    if trace_id:
        response.headers.setdefault(HttpHeaders.X_REQUEST_ID, trace_id)
    return response


__all__ = [
    "FileResult",
    "error_payload",
    "error_response",
    "get_trace_id",
    "public_message",
    "success_payload",
    "success_response",
]
