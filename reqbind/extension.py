"""reqbind - Flask 应用集成.

``init_app`` 负责把 Settings 转换为应用级的处理器选项, 并完成日志与 request_id 注入的初始化.
未调用 ``init_app`` 时, ``bind_handler`` 使用内置默认选项.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reqbind.infra.request_logging import register_request_logging
from reqbind.pipeline import EXTENSION_KEY, HandlerOptions
from reqbind.settings import Settings
from reqbind.utils.structlog_config import configure_structlog, log_info

if TYPE_CHECKING:
    from flask import Flask


def init_app(app: Flask, settings: Settings | None = None, *, request_logging: bool = True) -> HandlerOptions:
    """为 Flask 应用注册 reqbind.

    Args:
        app: Flask 应用实例.
        settings: 可选的配置对象, 用于测试或多环境启动, 缺省时从环境变量加载.
        request_logging: 是否注册 request_id 注入与 wide event.

    Returns:
        HandlerOptions: 注册到应用上的处理器选项.

    """
    resolved_settings = settings or Settings.load()
    app.config.setdefault("REQBIND_APP_NAME", resolved_settings.app_name)
    app.config.setdefault("REQBIND_ENABLE_DEBUG_LOG", resolved_settings.enable_debug_log)

    options = HandlerOptions.from_settings(resolved_settings)
    app.extensions[EXTENSION_KEY] = options

    configure_structlog(app)
    if request_logging:
        register_request_logging(app)

    log_info(
        "reqbind 已初始化",
        module="extension",
        max_body_size=options.max_body_size,
        safe_mode=options.safe_mode,
        envelope=options.envelope,
        binders=[binder.name for binder in options.binders],
    )
    return options


__all__ = ["init_app"]
