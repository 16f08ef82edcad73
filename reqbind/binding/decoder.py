"""把多值字符串映射解码到记录字段.

规则:
- 只处理声明了 key 的字段, 映射中的未知 key 一律忽略.
- 标量字段取该 key 的最后一个值, 序列字段取全部值.
- 非字符串标量字段遇到空字符串时跳过, 保留原值.
- 先转换全部字段, 全部成功后才写入记录, 失败时记录保持不变.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from reqbind.binding.cache import get_descriptor
from reqbind.errors import DecodeError

if TYPE_CHECKING:
    from werkzeug.datastructures import MultiDict

    from reqbind.binding.descriptor import TypeDescriptor


def decode_values(
    record: object,
    values: MultiDict[str, str],
    descriptor: TypeDescriptor | None = None,
) -> None:
    """将 ``MultiDict`` 中的取值写入记录.

    Args:
        record: 目标记录实例.
        values: 多值映射, 通常是 ``request.args`` 或 ``request.form``.
        descriptor: 可选的描述符, 缺省时从缓存获取.

    Raises:
        DecodeError: 任一字段转换失败时抛出, 文案包含全部失败字段.

    """
    descriptor = descriptor or get_descriptor(type(record))
    staged: dict[str, Any] = {}
    errors: list[str] = []

    for key in values:
        spec = descriptor.fields_by_key.get(key)
        if spec is None or not spec.bindable:
            continue
        raw_values = values.getlist(key)
        if not raw_values:
            continue
        if spec.many:
            raw: object = list(raw_values)
        else:
            raw = raw_values[-1]
            if raw == "" and not spec.text:
                continue
        try:
            staged[spec.name] = spec.convert(raw)
        except PydanticValidationError as exc:
            errors.append(f'schema: error converting value for "{key}": {first_error_message(exc)}')

    if errors:
        raise DecodeError("; ".join(errors))

    for name, value in staged.items():
        setattr(record, name, value)


def first_error_message(exc: PydanticValidationError) -> str:
    """提取 pydantic 校验异常中的首条文案."""
    details = exc.errors(include_url=False)
    if not details:
        return str(exc)
    return str(details[0].get("msg", exc))


__all__ = ["decode_values", "first_error_message"]
