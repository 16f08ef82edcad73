"""reqbind 的结构化日志.

处理器链: 调试过滤 -> 时间戳 -> 日志级别 -> 堆栈/异常格式化 -> 请求上下文 -> 服务上下文 -> 渲染.
日志经由标准库 logging 输出, handler 与级别由宿主应用决定.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

import structlog
from flask import current_app, has_app_context, has_request_context, request

from reqbind.settings import APP_NAME, APP_VERSION
from reqbind.utils.logging.context_vars import request_id_var
from reqbind.utils.logging.handlers import DebugFilter

if TYPE_CHECKING:
    from flask import Flask
    from structlog.typing import BindableLogger, Processor

    from reqbind.types import StructlogEventDict


def add_request_context(
    _logger: BindableLogger,
    _method_name: str,
    event_dict: StructlogEventDict,
) -> StructlogEventDict:
    """在请求上下文内附加 request_id、method 与 path."""
    if not has_request_context():
        return event_dict
    event_dict["request_id"] = request_id_var.get()
    event_dict.setdefault("method", request.method)
    event_dict.setdefault("path", request.path)
    return event_dict


def add_service_context(
    logger: BindableLogger,
    _method_name: str,
    event_dict: StructlogEventDict,
) -> StructlogEventDict:
    """附加服务名、版本与 logger 名称."""
    app_name = current_app.config.get("REQBIND_APP_NAME", APP_NAME) if has_app_context() else APP_NAME
    event_dict["app_name"] = app_name
    event_dict["app_version"] = APP_VERSION
    event_dict["logger_name"] = getattr(logger, "name", "unknown")
    return event_dict


def select_renderer(stream: TextIO | None = None) -> Processor:
    # 交互终端输出彩色文本, 其余环境输出 JSON
    target = stream or sys.stdout
    if target.isatty():
        return structlog.dev.ConsoleRenderer(colors=True)
    return structlog.processors.JSONRenderer()


class StructlogConfig:
    """维护 structlog 的全局配置状态.

    ``configure`` 只会执行一次 ``structlog.configure``, 之后的调用只同步调试开关.

    Attributes:
        debug_filter: 控制 DEBUG 事件是否输出.
        configured: 是否已完成全局配置.

    Example:
        >>> config = StructlogConfig()
        >>> config.configure(app)

    """

    def __init__(self) -> None:
        self.debug_filter = DebugFilter()
        self.configured = False

    def processors(self) -> list[Processor]:
        return [
            self.debug_filter,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            add_request_context,
            add_service_context,
            select_renderer(),
        ]

    def configure(self, app: Flask | None = None) -> None:
        """配置 structlog, 传入应用时读取 ``REQBIND_ENABLE_DEBUG_LOG``.

        Args:
            app: 可选的 Flask 应用.

        """
        if not self.configured:
            structlog.configure(
                processors=self.processors(),
                context_class=dict,
                logger_factory=structlog.stdlib.LoggerFactory(),
                wrapper_class=structlog.stdlib.BoundLogger,
                cache_logger_on_first_use=True,
            )
            self.configured = True

        if app is not None:
            self.debug_filter.set_enabled(enabled=bool(app.config.get("REQBIND_ENABLE_DEBUG_LOG", False)))


structlog_config = StructlogConfig()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """获取结构化日志记录器.

    Args:
        name: 记录器名称, 例如 ``binding``、``pipeline``、``http``.

    Returns:
        structlog 记录器, 首次调用时会完成全局配置.

    """
    structlog_config.configure()
    return structlog.get_logger(name)


def configure_structlog(app: Flask) -> None:
    structlog_config.configure(app)


def _emit(level: str, message: str, module: str, exception: BaseException | None, **kwargs: object) -> None:
    logger = get_logger("reqbind")
    if exception is not None:
        kwargs["exception"] = str(exception)
        if level == "error":
            kwargs["exc_info"] = exception
    getattr(logger, level)(message, module=module, **kwargs)


def log_info(message: str, module: str = "reqbind", **kwargs: object) -> None:
    _emit("info", message, module, None, **kwargs)


def log_warning(
    message: str,
    module: str = "reqbind",
    exception: BaseException | None = None,
    **kwargs: object,
) -> None:
    """记录警告, 传入异常时只记录其文本.

    Args:
        message: 事件名.
        module: 来源模块.
        exception: 可选的异常.
        **kwargs: 其他上下文字段.

    """
    _emit("warning", message, module, exception, **kwargs)


def log_error(
    message: str,
    module: str = "reqbind",
    exception: BaseException | None = None,
    **kwargs: object,
) -> None:
    """记录错误, 传入异常时附带堆栈."""
    _emit("error", message, module, exception, **kwargs)


def log_debug(message: str, module: str = "reqbind", **kwargs: object) -> None:
    """记录调试日志, 未开启 ``REQBIND_ENABLE_DEBUG_LOG`` 时被丢弃."""
    _emit("debug", message, module, None, **kwargs)


__all__ = [
    "StructlogConfig",
    "add_request_context",
    "add_service_context",
    "configure_structlog",
    "get_logger",
    "log_debug",
    "log_error",
    "log_info",
    "log_warning",
    "select_renderer",
    "structlog_config",
]
