"""reqbind - 声明式的请求数据绑定与处理流水线.

把 HTTP 请求的路径参数、查询参数、JSON/表单请求体与 Basic 凭证绑定到一个
dataclass 记录上, 校验后交给业务函数, 并统一格式化成功/错误响应.
"""

from reqbind.binding import (
    DEFAULT_BINDERS,
    Binder,
    BinderKind,
    ClientAuthBinder,
    FormBinder,
    JSONBinder,
    PathBinder,
    QueryBinder,
    bind,
    bind_field,
    get_descriptor,
    ignored,
    new_record,
    parse_tag,
)
from reqbind.cache_hints import build_no_vary_search
from reqbind.errors import (
    AppError,
    BindError,
    BodyTooLargeError,
    DecodeError,
    ValidationError,
)
from reqbind.extension import init_app
from reqbind.pipeline import HandlerOptions, RequestPipeline, bind_handler
from reqbind.responses import FileResult
from reqbind.settings import APP_VERSION, Settings
from reqbind.validation import SelfValidating, validate_record

__version__ = APP_VERSION

__all__ = [
    "DEFAULT_BINDERS",
    "AppError",
    "BindError",
    "Binder",
    "BinderKind",
    "BodyTooLargeError",
    "ClientAuthBinder",
    "DecodeError",
    "FileResult",
    "FormBinder",
    "HandlerOptions",
    "JSONBinder",
    "PathBinder",
    "QueryBinder",
    "RequestPipeline",
    "SelfValidating",
    "Settings",
    "ValidationError",
    "bind",
    "bind_field",
    "bind_handler",
    "build_no_vary_search",
    "get_descriptor",
    "ignored",
    "init_app",
    "new_record",
    "parse_tag",
    "validate_record",
]
