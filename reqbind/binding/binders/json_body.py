"""JSON 请求体绑定器."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from reqbind.binding.binders.base import Binder, BinderKind
from reqbind.binding.cache import get_descriptor
from reqbind.binding.decoder import first_error_message
from reqbind.errors import DecodeError

if TYPE_CHECKING:
    from werkzeug.wrappers.request import Request

_JSON_WHITESPACE = re.compile(r"[ \t\n\r]*")
_ERROR_PREFIX = "bind json error"

_JSON_TYPE_NAMES: dict[type, str] = {
    list: "array",
    str: "string",
    bool: "bool",
    int: "number",
    float: "number",
}


@dataclass(frozen=True, slots=True)
class JSONBinder(Binder):
    """解码 JSON 请求体.

    - 空请求体视为无操作, 顶层 ``null`` 同样不修改记录.
    - 顶层必须是对象, 按声明 key 匹配字段; 值按 JSON 类型严格转换, 不把字符串转换为数字.
    - 不可空字段收到 ``null`` 时保留原值.
    - 严格模式下未知 key 与对象之后的多余数据都会被拒绝.

    Attributes:
        disallow_unknown_fields: 是否拒绝未声明的 key.
        disallow_trailing_data: 是否拒绝对象之后的非空白内容.

    """

    disallow_unknown_fields: bool = True
    disallow_trailing_data: bool = True

    name = "json"
    kind = BinderKind.BODY

    def matches(self, request: Request) -> bool:
        # application/json 以及 application/*+json
        return request.is_json

    def bind(self, request: Request, record: object) -> None:
        raw = request.get_data(cache=True)
        if not raw:
            return
        payload = self._decode(raw)
        if payload is None:
            return
        if not isinstance(payload, dict):
            json_type = _JSON_TYPE_NAMES.get(type(payload), "value")
            raise DecodeError(f"{_ERROR_PREFIX}: cannot unmarshal {json_type} into {type(record).__name__}")
        self._assign(record, payload)

    def _decode(self, raw: bytes) -> Any:
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"{_ERROR_PREFIX}: {exc}") from exc

        decoder = json.JSONDecoder()
        start = _JSON_WHITESPACE.match(text, 0).end()
        try:
            payload, end = decoder.raw_decode(text, start)
        except json.JSONDecodeError as exc:
            raise DecodeError(f"{_ERROR_PREFIX}: {exc}") from exc

        if self.disallow_trailing_data and _JSON_WHITESPACE.match(text, end).end() != len(text):
            raise DecodeError(f"{_ERROR_PREFIX}: unexpected extra data in body")
        return payload

    def _assign(self, record: object, payload: dict[str, Any]) -> None:
        descriptor = get_descriptor(type(record))
        if self.disallow_unknown_fields:
            for key in payload:
                if key not in descriptor.fields_by_key:
                    raise DecodeError(f'{_ERROR_PREFIX}: unknown field "{key}"')

        staged: dict[str, Any] = {}
        errors: list[str] = []
        for key, value in payload.items():
            spec = descriptor.fields_by_key.get(key)
            if spec is None or not spec.bindable:
                continue
            if value is None and not spec.nullable:
                # null 对不可空字段视为未提供, 保留原值
                continue
            try:
                staged[spec.name] = spec.convert_json(value)
            except PydanticValidationError as exc:
                errors.append(f'field "{key}": {first_error_message(exc)}')

        if errors:
            raise DecodeError(f"{_ERROR_PREFIX}: " + "; ".join(errors))

        for name, value in staged.items():
            setattr(record, name, value)


__all__ = ["JSONBinder"]
