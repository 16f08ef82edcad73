"""请求处理流水线.

每次请求依次执行:
1. 安装请求体上限;
2. 创建零值记录;
3. 运行绑定器链, 超限返回 413, 其他绑定错误返回 400;
4. 校验记录, 未通过返回 400 (VALIDATION_FAILED);
5. 以记录调用业务函数;
6. 格式化业务结果.

所有失败都经由 ``RequestPipeline.fail`` 统一处理: 调用错误钩子、记录日志、渲染错误响应.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from functools import wraps
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from flask import current_app, g, has_app_context, has_request_context, request

from reqbind.binding.binders.base import Binder
from reqbind.binding.binders.form import FormBinder
from reqbind.binding.binders.json_body import JSONBinder
from reqbind.binding.cache import get_descriptor, new_record
from reqbind.binding.orchestrator import DEFAULT_BINDERS, bind, default_binders
from reqbind.cache_hints import build_no_vary_search
from reqbind.constants import DEFAULT_MAX_BODY_SIZE, HttpHeaders, HttpStatus
from reqbind.errors import AppError, BindError, BodyTooLargeError, ValidationError, map_exception_to_status
from reqbind.responses import error_response, success_response
from reqbind.utils.structlog_config import log_error, log_warning
from reqbind.validation import Validator, validate_record

if TYPE_CHECKING:
    from werkzeug.wrappers.request import Request
    from werkzeug.wrappers.response import Response

    from reqbind.settings import Settings
    from reqbind.types import ErrorHook

RecordT = TypeVar("RecordT")

EXTENSION_KEY = "reqbind"

ErrorRenderer = Callable[[BaseException], "Response"]


@dataclass(frozen=True, slots=True)
class HandlerOptions:
    """单个处理器的配置.

    Attributes:
        binders: 绑定器链, 默认 Path -> Query -> JSON -> Form.
        max_body_size: 请求体字节上限, 0 表示不限制.
        validator: 校验函数, 为 None 时跳过校验.
        error_hook: 错误钩子, 在渲染错误响应前调用, 通常用于上报.
        error_renderer: 自定义错误渲染, 为 None 时使用统一错误信封.
        envelope: 成功响应是否使用统一信封.
        safe_mode: 是否隐藏未知 5xx 异常的原始文案.
        no_vary_search: 是否写入 ``No-Vary-Search`` 头.
        no_vary_search_keys: 显式指定影响响应的查询参数, 为 None 时使用记录的声明 key.

    """

    binders: tuple[Binder, ...] = DEFAULT_BINDERS
    max_body_size: int = DEFAULT_MAX_BODY_SIZE
    validator: Validator | None = validate_record
    error_hook: ErrorHook | None = None
    error_renderer: ErrorRenderer | None = None
    envelope: bool = True
    safe_mode: bool = False
    no_vary_search: bool = True
    no_vary_search_keys: tuple[str, ...] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> HandlerOptions:
        """根据 Settings 构建默认选项."""
        return cls(
            binders=default_binders(settings),
            max_body_size=settings.max_body_size,
            envelope=settings.envelope,
            safe_mode=settings.safe_mode,
            no_vary_search=settings.no_vary_search,
        )

    def with_binders(self, *binders: Binder) -> HandlerOptions:
        """整体替换绑定器链."""
        return replace(self, binders=tuple(binders))

    def add_binders(self, *binders: Binder) -> HandlerOptions:
        """把自定义绑定器放到现有链之前."""
        return replace(self, binders=(*binders, *self.binders))

    def with_max_body_size(self, max_bytes: int) -> HandlerOptions:
        return replace(self, max_body_size=max_bytes)

    def with_multipart_limit(self, limit: int) -> HandlerOptions:
        """替换链中的 FormBinder, 并确保请求体上限不小于 multipart 内存上限.

        链中没有 FormBinder 时追加一个.
        """
        binders = list(self.binders)
        for index, binder in enumerate(binders):
            if isinstance(binder, FormBinder):
                binders[index] = FormBinder(max_memory=limit)
                break
        else:
            binders.append(FormBinder(max_memory=limit))
        max_body_size = self.max_body_size
        if 0 < max_body_size < limit:
            max_body_size = limit
        return replace(self, binders=tuple(binders), max_body_size=max_body_size)

    def with_json_strictness(
        self,
        *,
        disallow_unknown_fields: bool | None = None,
        disallow_trailing_data: bool | None = None,
    ) -> HandlerOptions:
        """替换链中 JSONBinder 的严格度配置."""
        binders = []
        for binder in self.binders:
            if isinstance(binder, JSONBinder):
                binder = JSONBinder(
                    disallow_unknown_fields=(
                        binder.disallow_unknown_fields if disallow_unknown_fields is None else disallow_unknown_fields
                    ),
                    disallow_trailing_data=(
                        binder.disallow_trailing_data if disallow_trailing_data is None else disallow_trailing_data
                    ),
                )
            binders.append(binder)
        return replace(self, binders=tuple(binders))

    def merged(
        self,
        *,
        binders: Sequence[Binder] | None = None,
        extra_binders: Sequence[Binder] = (),
        max_body_size: int | None = None,
        multipart_memory: int | None = None,
        disallow_unknown_fields: bool | None = None,
        disallow_trailing_data: bool | None = None,
        **fields: Any,
    ) -> HandlerOptions:
        """按固定顺序叠加覆盖项.

        顺序: 替换链 -> JSON 严格度 -> 请求体上限 -> multipart 上限 -> 前置自定义绑定器 -> 其他字段.
        """
        options = self
        if binders is not None:
            options = options.with_binders(*binders)
        if disallow_unknown_fields is not None or disallow_trailing_data is not None:
            options = options.with_json_strictness(
                disallow_unknown_fields=disallow_unknown_fields,
                disallow_trailing_data=disallow_trailing_data,
            )
        if max_body_size is not None:
            options = options.with_max_body_size(max_body_size)
        if multipart_memory is not None:
            options = options.with_multipart_limit(multipart_memory)
        if extra_binders:
            options = options.add_binders(*extra_binders)
        if fields:
            options = replace(options, **fields)
        return options


DEFAULT_OPTIONS = HandlerOptions()


def current_options() -> HandlerOptions:
    """返回当前应用通过 ``init_app`` 注册的选项, 未注册时返回默认选项."""
    if has_app_context():
        options = current_app.extensions.get(EXTENSION_KEY)
        if isinstance(options, HandlerOptions):
            return options
    return DEFAULT_OPTIONS


class RequestPipeline(Generic[RecordT]):
    """把记录类型与业务函数组合成一个请求处理器.

    Args:
        record_type: 请求记录类型.
        func: 业务函数, 接收绑定完成的记录, 返回业务结果.
        options: 显式选项; 为 None 时在请求期读取应用注册的选项.
        **overrides: 叠加在基础选项之上的覆盖项, 见 ``HandlerOptions.merged``.

    """

    def __init__(
        self,
        record_type: type[RecordT],
        func: Callable[[RecordT], object],
        options: HandlerOptions | None = None,
        **overrides: Any,
    ) -> None:
        self.record_type = record_type
        self.func = func
        self.descriptor = get_descriptor(record_type)
        self._base_options = options
        self._overrides = overrides
        self._resolved: tuple[HandlerOptions, HandlerOptions, str | None] | None = None
        # 提前校验覆盖项, 配置错误在注册期暴露
        self.resolve_options(options or DEFAULT_OPTIONS)

    def resolve_options(self, base: HandlerOptions | None = None) -> HandlerOptions:
        """计算生效的选项, 结果按基础选项缓存."""
        return self._resolve(base)[1]

    def _resolve(self, base: HandlerOptions | None = None) -> tuple[HandlerOptions, HandlerOptions, str | None]:
        base = base or self._base_options or current_options()
        resolved = self._resolved
        if resolved is not None and resolved[0] is base:
            return resolved

        options = base.merged(**self._overrides)
        header = None
        if options.no_vary_search:
            header = build_no_vary_search(self.descriptor, options.no_vary_search_keys)
        resolved = (base, options, header)
        self._resolved = resolved
        return resolved

    def __call__(self, req: Request) -> Response:
        return self.handle(req)

    def handle(self, req: Request) -> Response:
        """处理一次请求, 任何异常都会被转换为错误响应."""
        _, options, no_vary_search = self._resolve()
        stage = "bind"
        try:
            self.install_body_limit(req, options)
            record = new_record(self.record_type)
            self._bind(req, record, options)
            stage = "validate"
            self._validate(record, options)
            stage = "handler"
            result = self.func(record)
        except Exception as exc:
            response = self.fail(exc, options=options, stage=stage)
        else:
            response = success_response(result, envelope=options.envelope)

        if no_vary_search:
            response.headers.setdefault(HttpHeaders.NO_VARY_SEARCH, no_vary_search)
        return response

    @staticmethod
    def install_body_limit(req: Request, options: HandlerOptions) -> None:
        """设置请求体上限, 已声明的 Content-Length 超限时直接拒绝."""
        limit = options.max_body_size
        if limit <= 0:
            return
        req.max_content_length = limit
        if req.content_length is not None and req.content_length > limit:
            raise BodyTooLargeError()

    @staticmethod
    def _bind(req: Request, record: object, options: HandlerOptions) -> None:
        try:
            bind(req, record, options.binders)
        except AppError:
            raise
        except (ValueError, TypeError) as exc:
            # 自定义绑定器的取值/类型错误视为请求不合法, 其余异常按内部错误处理
            raise BindError(str(exc) or type(exc).__name__) from exc

    @staticmethod
    def _validate(record: object, options: HandlerOptions) -> None:
        if options.validator is None:
            return
        try:
            options.validator(record)
        except ValidationError:
            raise
        except Exception as exc:
            raise ValidationError(str(exc) or type(exc).__name__) from exc

    def fail(self, error: BaseException, *, options: HandlerOptions, stage: str) -> Response:
        """统一的失败出口."""
        status_code = map_exception_to_status(error)
        if has_request_context():
            g._request_error_type = type(error).__name__

        log_context: dict[str, object] = {
            "stage": stage,
            "record_type": self.record_type.__name__,
            "error_type": type(error).__name__,
            "status_code": status_code,
        }
        if status_code >= HttpStatus.INTERNAL_SERVER_ERROR:
            log_error("请求处理失败", module="pipeline", exception=error, **log_context)
        else:
            log_warning("请求被拒绝", module="pipeline", exception=error, **log_context)

        if options.error_hook is not None:
            options.error_hook(error)
        if options.error_renderer is not None:
            return options.error_renderer(error)
        return error_response(error, safe_mode=options.safe_mode)


def bind_handler(
    record_type: type[RecordT],
    options: HandlerOptions | None = None,
    **overrides: Any,
) -> Callable[[Callable[[RecordT], object]], Callable[..., Response]]:
    """把业务函数注册为 Flask 视图的装饰器.

    Args:
        record_type: 请求记录类型.
        options: 显式选项, 缺省时使用 ``init_app`` 注册的选项.
        **overrides: 覆盖项, 例如 ``max_body_size``、``multipart_memory``、``extra_binders``、
            ``disallow_unknown_fields``、``envelope``.

    Example:
        >>> @app.get("/items/<int:id>")
        ... @bind_handler(GetItem)
        ... def get_item(req: GetItem) -> dict:
        ...     return {"id": req.item_id}

    """

    def decorator(func: Callable[[RecordT], object]) -> Callable[..., Response]:
        pipeline = RequestPipeline(record_type, func, options, **overrides)

        @wraps(func)
        def view(*_args: object, **_view_args: object) -> Response:
            # 路径参数由 PathBinder 从 request.view_args 读取
            return pipeline.handle(request._get_current_object())  # type: ignore[attr-defined]

        view.pipeline = pipeline  # type: ignore[attr-defined]
        return view

    return decorator


__all__ = [
    "DEFAULT_OPTIONS",
    "EXTENSION_KEY",
    "HandlerOptions",
    "RequestPipeline",
    "bind_handler",
    "current_options",
]
