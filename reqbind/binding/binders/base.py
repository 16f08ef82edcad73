"""绑定器抽象."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from werkzeug.wrappers.request import Request


class BinderKind(str, Enum):
    """绑定器类别.

    - METADATA: 读取路径/查询参数/请求头等元数据, 可以任意叠加.
    - BODY: 读取请求体, 一次请求至多运行一个.
    """

    METADATA = "metadata"
    BODY = "body"


class Binder(ABC):
    """从请求的某个来源读取数据并写入记录.

    子类以类属性声明 ``name`` 与 ``kind``, 并实现 ``matches`` / ``bind``.
    """

    name: ClassVar[str]
    kind: ClassVar[BinderKind] = BinderKind.METADATA

    @abstractmethod
    def matches(self, request: Request) -> bool:
        """判断当前请求是否包含本绑定器负责的数据."""

    @abstractmethod
    def bind(self, request: Request, record: object) -> None:
        """把请求数据写入记录, 失败时抛出 BindError 或其子类."""

    @property
    def is_body(self) -> bool:
        return self.kind is BinderKind.BODY


__all__ = ["Binder", "BinderKind"]
