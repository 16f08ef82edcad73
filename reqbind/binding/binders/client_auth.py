"""HTTP Basic 客户端凭证绑定器."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from reqbind.binding.binders.base import Binder, BinderKind
from reqbind.binding.cache import get_descriptor
from reqbind.constants import HttpHeaders

if TYPE_CHECKING:
    from werkzeug.wrappers.request import Request

_BASIC_PREFIX = "basic "


@dataclass(frozen=True, slots=True)
class ClientAuthBinder(Binder):
    """把 Basic 认证中的用户名/密码写入 ``client_id`` / ``client_secret`` 字段.

    只填充仍为空的字段, 请求体或查询参数中已给出的凭证优先. 默认不在绑定链中,
    需要时通过 ``extra_binders`` 追加.
    """

    name = "client_auth"
    kind = BinderKind.METADATA

    def matches(self, request: Request) -> bool:
        header = request.headers.get(HttpHeaders.AUTHORIZATION, "")
        return header[: len(_BASIC_PREFIX)].lower() == _BASIC_PREFIX

    def bind(self, request: Request, record: object) -> None:
        credentials = get_descriptor(type(record)).credential_fields
        if credentials is None:
            return
        auth = request.authorization
        if auth is None or auth.type != "basic":
            return

        if credentials.client_id_field and auth.username and not getattr(record, credentials.client_id_field, ""):
            setattr(record, credentials.client_id_field, auth.username)
        if (
            credentials.client_secret_field
            and auth.password
            and not getattr(record, credentials.client_secret_field, "")
        ):
            setattr(record, credentials.client_secret_field, auth.password)


__all__ = ["ClientAuthBinder"]
