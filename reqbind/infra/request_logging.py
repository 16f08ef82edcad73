"""请求级别的 request_id 传播与 wide event.

- ``X-Request-ID`` 合法时沿用, 否则生成 ``req_<hex>``; 写入 contextvar 供日志与响应信封使用.
- 每个请求结束时发射一条 ``http_request_completed`` 事件, 附带流水线记录的失败类型.
- teardown 时复位 contextvar.
"""

from __future__ import annotations

import re
import time
from contextlib import suppress
from typing import TYPE_CHECKING
from uuid import uuid4

from flask import g, request

from reqbind.constants import HttpHeaders
from reqbind.utils.logging.context_vars import request_id_var
from reqbind.utils.structlog_config import get_logger

if TYPE_CHECKING:
    from flask import Flask
    from werkzeug.wrappers.response import Response

# 首字符必须是字母或数字, 总长不超过 128
_VALID_REQUEST_ID = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.:-]{0,127}")


def generate_request_id() -> str:
    return f"req_{uuid4().hex}"


def sanitize_request_id(raw_value: str | None) -> str | None:
    """校验调用方传入的 request_id, 不合法时返回 None."""
    candidate = (raw_value or "").strip()
    if candidate and _VALID_REQUEST_ID.fullmatch(candidate):
        return candidate
    return None


def _start_request() -> None:
    request_id = sanitize_request_id(request.headers.get(HttpHeaders.X_REQUEST_ID)) or generate_request_id()
    g.request_id = request_id
    g._request_id_token = request_id_var.set(request_id)
    g._request_started = time.perf_counter()


def _finish_request(response: Response) -> Response:
    request_id = request_id_var.get() or g.get("request_id") or generate_request_id()
    response.headers.setdefault(HttpHeaders.X_REQUEST_ID, request_id)

    started = g.get("_request_started")
    duration_ms = round((time.perf_counter() - started) * 1000) if started is not None else None
    status_code = response.status_code

    get_logger("http").info(
        "http_request_completed",
        module="http",
        action=f"{request.method} {request.path}",
        endpoint=request.endpoint,
        status_code=status_code,
        outcome="success" if status_code < 400 else "error",
        duration_ms=duration_ms,
        content_type=request.mimetype or None,
        content_length=request.content_length,
        error_type=g.get("_request_error_type"),
    )
    return response


def _end_request(_exc: BaseException | None) -> None:
    # 提前失败的请求可能没有 token
    token = g.pop("_request_id_token", None)
    if token is not None:
        # token 只能在创建它的上下文中复位
        with suppress(ValueError):
            request_id_var.reset(token)


def register_request_logging(app: Flask) -> None:
    """为应用注册 request_id 传播与 wide event."""
    app.before_request(_start_request)
    app.after_request(_finish_request)
    app.teardown_request(_end_request)


__all__ = ["generate_request_id", "register_request_logging", "sanitize_request_id"]
