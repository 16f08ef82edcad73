"""记录校验.

优先走快速路径: 记录实现了 ``validate_request`` 时直接调用, 不做反射.
否则逐字段运行描述符中带约束的 pydantic 校验器, 约束通过
``Annotated[int, Field(gt=0)]`` 之类的注解声明; 绑定阶段只做类型转换, 约束只在这里检查.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from pydantic import ValidationError as PydanticValidationError

from reqbind.binding.cache import get_descriptor
from reqbind.errors import AppError, ValidationError

Validator = Callable[[object], None]


@runtime_checkable
class SelfValidating(Protocol):
    """自校验记录协议, 抛出的任何异常都会被包装为 ValidationError."""

    def validate_request(self) -> None: ...


def validate_record(record: object) -> None:
    """校验绑定完成的记录.

    Args:
        record: 待校验的记录.

    Raises:
        ValidationError: 校验未通过, 文案为校验器给出的原始说明.

    """
    if isinstance(record, SelfValidating):
        _run_fast_path(record)
        return

    descriptor = get_descriptor(type(record))
    errors: list[str] = []
    for spec in descriptor.fields:
        if not spec.bindable:
            continue
        try:
            spec.check(getattr(record, spec.name, None))
        except PydanticValidationError as exc:
            for detail in exc.errors(include_url=False):
                errors.append(f"{spec.key}: {detail.get('msg', 'invalid value')}")

    if errors:
        raise ValidationError("; ".join(errors))


def _run_fast_path(record: SelfValidating) -> None:
    try:
        record.validate_request()
    except ValidationError:
        raise
    except AppError as exc:
        raise ValidationError(exc.message) from exc
    except Exception as exc:
        raise ValidationError(str(exc) or type(exc).__name__) from exc


__all__ = ["SelfValidating", "Validator", "validate_record"]
