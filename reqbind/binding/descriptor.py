"""记录类型的字段描述符.

描述符在首次遇到某个记录类型时构建一次, 此后只读共享. 它记录:
- 每个可绑定字段的声明 key、类型、是否为序列、以及预先构建的 pydantic 转换器;
- 哪些字段声明了路径参数;
- 哪些字段承载上传文件;
- 哪些字段用于接收客户端凭证(client_id / client_secret).
"""

from __future__ import annotations

import dataclasses
import json
import types
from collections.abc import Mapping, MutableMapping, MutableSequence, MutableSet, Sequence, Set
from dataclasses import dataclass, field
from functools import partial
from types import MappingProxyType
from typing import TYPE_CHECKING, Annotated, Any, Literal, Union, get_args, get_origin, get_type_hints

import annotated_types
from pydantic import ConfigDict, PydanticUserError, TypeAdapter
from pydantic.fields import FieldInfo
from werkzeug.datastructures import FileStorage

from reqbind.binding.tags import PATH_TAG, resolve_key
from reqbind.utils.structlog_config import log_debug

if TYPE_CHECKING:
    from collections.abc import Callable

CLIENT_ID_KEY = "client_id"
CLIENT_SECRET_KEY = "client_secret"

_ADAPTER_CONFIG = ConfigDict(arbitrary_types_allowed=True)
# Annotated 中只在校验阶段生效的约束元数据
_CONSTRAINT_METADATA = (FieldInfo, annotated_types.BaseMetadata, annotated_types.GroupedMetadata)
_SEQUENCE_ORIGINS = (list, tuple, set, frozenset, Sequence, MutableSequence, Set, MutableSet)
_SCALAR_ZEROS: dict[type, object] = {int: 0, float: 0.0, str: "", bool: False, bytes: b""}


@dataclass(slots=True, frozen=True)
class FieldSpec:
    """单个可绑定字段的描述.

    Attributes:
        name: 记录上的属性名.
        key: 声明 key, 查询参数/表单/JSON 都按此 key 匹配.
        hint: 解析后的类型注解, 无法解析时为 None.
        many: 是否为序列类型, 序列字段接收某个 key 的全部取值.
        text: 是否为字符串类型, 只有字符串字段接受空字符串.
        is_file: 是否承载上传文件.
        nullable: 字段类型是否接受 None.
        adapter: 完整注解(含 ``Field(...)`` 约束)的校验器, 只在校验阶段使用,
            为 None 时该字段不参与文本绑定.
        decoder: 去掉约束后的转换器, 绑定阶段只做类型转换; 缺省时使用 ``adapter``.

    """

    name: str
    key: str
    hint: Any = field(compare=False)
    many: bool = False
    text: bool = False
    is_file: bool = False
    nullable: bool = field(default=False, compare=False)
    adapter: TypeAdapter[Any] | None = field(default=None, compare=False, repr=False)
    decoder: TypeAdapter[Any] | None = field(default=None, compare=False, repr=False)

    @property
    def bindable(self) -> bool:
        return self.adapter is not None and not self.is_file

    def convert(self, value: object) -> Any:
        """把查询参数/表单等文本值宽松转换为字段类型, 失败时抛出 pydantic.ValidationError."""
        converter = self.decoder or self.adapter
        if converter is None:
            return value
        return converter.validate_python(value)

    def convert_json(self, value: object) -> Any:
        """按 JSON 类型严格转换, 字符串不会被转换为数字或布尔值."""
        converter = self.decoder or self.adapter
        if converter is None:
            return value
        return converter.validate_json(json.dumps(value), strict=True)

    def check(self, value: object) -> None:
        """按完整注解校验当前值, 约束不满足时抛出 pydantic.ValidationError."""
        if self.adapter is not None:
            self.adapter.validate_python(value)


@dataclass(slots=True, frozen=True)
class PathField:
    """声明了路径参数的字段."""

    name: str
    source_key: str
    dest_key: str


@dataclass(slots=True, frozen=True)
class FileField:
    """承载上传文件的字段, many 为 True 时接收同名的全部文件."""

    name: str
    form_key: str
    many: bool = False


@dataclass(slots=True, frozen=True)
class CredentialFields:
    """接收 client_id / client_secret 的字段名, 缺失的一侧为 None."""

    client_id_field: str | None = None
    client_secret_field: str | None = None


@dataclass(slots=True, frozen=True)
class TypeDescriptor:
    """记录类型的完整描述.

    描述符按内容比较, 预先构建的转换器等实例不参与比较, 因此并发构建出的两份描述符相等.
    """

    record_type: type
    fields: tuple[FieldSpec, ...] = ()
    path_fields: tuple[PathField, ...] = ()
    file_fields: tuple[FileField, ...] = ()
    credential_fields: CredentialFields | None = None
    field_factories: tuple[tuple[str, Callable[[], Any]], ...] = field(default=(), compare=False, repr=False)
    fields_by_key: Mapping[str, FieldSpec] = field(init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        by_key: dict[str, FieldSpec] = {}
        for spec in self.fields:
            # 同一 key 声明在多个字段上时, 首个字段生效
            by_key.setdefault(spec.key, spec)
        object.__setattr__(self, "fields_by_key", MappingProxyType(by_key))

    @property
    def all_keys(self) -> tuple[str, ...]:
        """全部声明 key, 按字段声明顺序去重."""
        return tuple(self.fields_by_key)

    def new_record(self) -> Any:
        """创建零值记录: 有默认值的字段取默认值, 其余字段取类型零值.

        不经过 ``__init__``, 因此 ``__post_init__`` 与 pydantic 的构造期校验都不会在绑定前触发.
        """
        if not self.field_factories:
            return self.record_type()
        record = object.__new__(self.record_type)
        for name, factory in self.field_factories:
            object.__setattr__(record, name, factory())
        return record


def build_descriptor(record_type: type) -> TypeDescriptor:
    """反射记录类型并构建描述符.

    非 dataclass 类型没有可绑定字段, 返回空描述符.

    Args:
        record_type: 目标记录类型, 通常是 ``@dataclass`` 或 pydantic dataclass.

    Returns:
        TypeDescriptor: 构建好的描述符.

    """
    if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
        return TypeDescriptor(record_type=record_type)

    hints = _resolve_type_hints(record_type)
    specs: list[FieldSpec] = []
    path_fields: list[PathField] = []
    file_fields: list[FileField] = []
    field_factories: list[tuple[str, Callable[[], Any]]] = []
    client_id_field: str | None = None
    client_secret_field: str | None = None

    for dc_field in dataclasses.fields(record_type):
        hint = hints.get(dc_field.name)
        field_factories.append((dc_field.name, _field_factory(dc_field, hint)))

        if dc_field.name.startswith("_"):
            continue
        key = resolve_key(dc_field.name, dc_field.metadata)
        if key is None:
            continue

        inner = _unwrap(hint)
        file_shape = _file_shape(inner)
        if file_shape is not None:
            specs.append(FieldSpec(name=dc_field.name, key=key, hint=hint, many=file_shape, is_file=True))
            file_fields.append(FileField(name=dc_field.name, form_key=key, many=file_shape))
            continue

        text = inner is str
        adapter = _build_adapter(record_type, dc_field.name, hint)
        spec = FieldSpec(
            name=dc_field.name,
            key=key,
            hint=hint,
            many=_is_sequence(inner),
            text=text,
            nullable=_accepts_none(hint),
            adapter=adapter,
            decoder=_build_decoder(record_type, dc_field.name, hint, adapter),
        )
        specs.append(spec)

        path_name = dc_field.metadata.get(PATH_TAG)
        if isinstance(path_name, str) and path_name:
            path_fields.append(PathField(name=dc_field.name, source_key=path_name, dest_key=key))

        if text and key == CLIENT_ID_KEY and client_id_field is None:
            client_id_field = dc_field.name
        elif text and key == CLIENT_SECRET_KEY and client_secret_field is None:
            client_secret_field = dc_field.name

    credentials = None
    if client_id_field or client_secret_field:
        credentials = CredentialFields(client_id_field=client_id_field, client_secret_field=client_secret_field)

    return TypeDescriptor(
        record_type=record_type,
        fields=tuple(specs),
        path_fields=tuple(path_fields),
        file_fields=tuple(file_fields),
        credential_fields=credentials,
        field_factories=tuple(field_factories),
    )


def zero_value(hint: Any) -> Any:
    """返回类型注解对应的零值.

    - 可选类型 -> None
    - int/float/str/bool/bytes -> 0 / 0.0 / "" / False / b""
    - 容器类型 -> 空容器
    - 嵌套 dataclass -> 递归零值记录
    - 其他 -> None
    """
    if hint is None:
        return None
    if get_origin(hint) is Annotated:
        hint = get_args(hint)[0]
    if _is_optional(hint):
        return None
    if isinstance(hint, type) and hint in _SCALAR_ZEROS:
        return _SCALAR_ZEROS[hint]

    origin = get_origin(hint) or hint
    if origin in (list, dict, set, tuple, frozenset):
        return origin()
    if origin in (Sequence, MutableSequence):
        return []
    if origin in (Mapping, MutableMapping):
        return {}
    if origin in (Set, MutableSet):
        return set()
    if isinstance(hint, type) and dataclasses.is_dataclass(hint):
        return build_descriptor(hint).new_record()
    return None


def _resolve_type_hints(record_type: type) -> dict[str, Any]:
    try:
        return get_type_hints(record_type, include_extras=True)
    except (NameError, TypeError, SyntaxError) as exc:
        # 逐字段回退: 字符串形式且无法解析的注解直接跳过
        log_debug(
            "类型注解解析失败, 回退到逐字段解析",
            module="binding",
            record_type=record_type.__qualname__,
            error=str(exc),
        )
        return {
            dc_field.name: dc_field.type
            for dc_field in dataclasses.fields(record_type)
            if not isinstance(dc_field.type, str)
        }


def _build_adapter(record_type: type, name: str, hint: Any) -> TypeAdapter[Any] | None:
    if hint is None:
        return None
    try:
        return TypeAdapter(hint, config=_ADAPTER_CONFIG)
    except PydanticUserError:
        # dataclass/TypedDict/BaseModel 自带配置, 不能再额外传入 config
        pass
    try:
        return TypeAdapter(hint)
    except PydanticUserError as exc:
        log_debug(
            "字段类型无法构建转换器, 跳过绑定",
            module="binding",
            record_type=record_type.__qualname__,
            field=name,
            error=str(exc),
        )
        return None


def _build_decoder(
    record_type: type,
    name: str,
    hint: Any,
    adapter: TypeAdapter[Any] | None,
) -> TypeAdapter[Any] | None:
    """构建只做类型转换的转换器, 注解不含约束时直接复用 adapter."""
    if adapter is None:
        return None
    stripped = _strip_constraints(hint)
    if stripped is hint:
        return adapter
    return _build_adapter(record_type, name, stripped) or adapter


def _strip_constraints(hint: Any) -> Any:
    """移除 Annotated 中的约束元数据, 保留 BeforeValidator 等会改变转换结果的元数据.

    嵌套的容器与联合类型逐层处理; 没有可移除的约束时原样返回同一对象.
    """
    origin = get_origin(hint)
    if origin is Annotated:
        base, *metadata = get_args(hint)
        stripped = _strip_constraints(base)
        kept = [item for item in metadata if not isinstance(item, _CONSTRAINT_METADATA)]
        if not kept:
            return stripped
        if stripped is base and len(kept) == len(metadata):
            return hint
        return Annotated[(stripped, *kept)]
    if origin is None or origin is Literal:
        return hint

    args = get_args(hint)
    stripped_args = tuple(arg if arg is Ellipsis else _strip_constraints(arg) for arg in args)
    if all(new is old for new, old in zip(stripped_args, args, strict=True)):
        return hint
    if origin is Union or origin is types.UnionType:
        return Union[stripped_args]  # noqa: UP007
    try:
        return origin[stripped_args]
    except TypeError:
        return hint


def _accepts_none(hint: Any) -> bool:
    if get_origin(hint) is Annotated:
        hint = get_args(hint)[0]
    return hint is Any or hint is object or _is_optional(hint)


def _field_factory(dc_field: dataclasses.Field[Any], hint: Any) -> Callable[[], Any]:
    if dc_field.default_factory is not dataclasses.MISSING:
        return dc_field.default_factory
    default = dc_field.default
    if isinstance(default, FieldInfo):
        # pydantic dataclass 把 Field(...) 作为默认值存放
        if default.is_required():
            return partial(zero_value, hint)
        return partial(default.get_default, call_default_factory=True)
    if default is not dataclasses.MISSING:
        return partial(_constant, default)
    return partial(zero_value, hint)


def _constant(value: Any) -> Any:
    return value


def _is_optional(hint: Any) -> bool:
    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        return type(None) in get_args(hint)
    return hint is None or hint is type(None)


def _unwrap(hint: Any) -> Any:
    """剥离 Annotated 与 Optional, 返回内层类型."""
    if get_origin(hint) is Annotated:
        hint = get_args(hint)[0]
    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(hint) if arg is not type(None)]
        if len(members) == 1:
            return _unwrap(members[0])
    return hint


def _is_sequence(hint: Any) -> bool:
    origin = get_origin(hint) or hint
    return origin in _SEQUENCE_ORIGINS


def _file_shape(hint: Any) -> bool | None:
    """判断字段是否承载文件: 返回 None 表示不是, False 为单文件, True 为文件列表."""
    if isinstance(hint, type) and issubclass(hint, FileStorage):
        return False
    if _is_sequence(hint):
        args = get_args(hint)
        if args:
            item = _unwrap(args[0])
            if isinstance(item, type) and issubclass(item, FileStorage):
                return True
    return None


__all__ = [
    "CLIENT_ID_KEY",
    "CLIENT_SECRET_KEY",
    "CredentialFields",
    "FieldSpec",
    "FileField",
    "PathField",
    "TypeDescriptor",
    "build_descriptor",
    "zero_value",
]
