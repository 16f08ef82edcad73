"""按顺序执行绑定器链.

- 不匹配的绑定器直接跳过.
- BODY 类绑定器互斥, 一次请求至多执行一个(请求体只能读取一次).
- 首个错误立即终止, 后续绑定器不再执行.
- 多个绑定器写同一字段时, 后执行者覆盖先执行者.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from werkzeug.exceptions import RequestEntityTooLarge

from reqbind.binding.binders.base import Binder
from reqbind.binding.binders.form import FormBinder
from reqbind.binding.binders.json_body import JSONBinder
from reqbind.binding.binders.path import PathBinder
from reqbind.binding.binders.query import QueryBinder
from reqbind.errors import BodyTooLargeError
from reqbind.utils.structlog_config import log_debug

if TYPE_CHECKING:
    from werkzeug.wrappers.request import Request

    from reqbind.settings import Settings

DEFAULT_BINDERS: tuple[Binder, ...] = (PathBinder(), QueryBinder(), JSONBinder(), FormBinder())


def default_binders(settings: Settings) -> tuple[Binder, ...]:
    """按设置构建默认绑定器链(顺序与 ``DEFAULT_BINDERS`` 一致)."""
    return (
        PathBinder(),
        QueryBinder(),
        JSONBinder(
            disallow_unknown_fields=settings.json_disallow_unknown_fields,
            disallow_trailing_data=settings.json_disallow_trailing_data,
        ),
        FormBinder(max_memory=settings.multipart_memory),
    )


def bind(request: Request, record: object, binders: Sequence[Binder] | None = None) -> None:
    """把请求数据绑定到记录.

    Args:
        request: 当前请求.
        record: 目标记录实例, 通常由 ``new_record`` 创建.
        binders: 绑定器链, 为空时使用 ``DEFAULT_BINDERS``.

    Raises:
        BodyTooLargeError: 任一绑定器读取请求体时超过上限.
        BindError: 绑定器报告的其他错误, 原样抛出.

    """
    chain = binders or DEFAULT_BINDERS
    body_bound = False

    for binder in chain:
        if not binder.matches(request):
            continue
        if binder.is_body:
            if body_bound:
                log_debug("请求体已被绑定, 跳过绑定器", module="binding", binder=binder.name)
                continue
            body_bound = True

        try:
            binder.bind(request, record)
        except RequestEntityTooLarge as exc:
            raise BodyTooLargeError() from exc


__all__ = ["DEFAULT_BINDERS", "bind", "default_binders"]
