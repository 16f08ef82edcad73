"""请求数据绑定: 描述符、解码器、绑定器与编排."""

from reqbind.binding.binders import (
    Binder,
    BinderKind,
    ClientAuthBinder,
    FormBinder,
    JSONBinder,
    PathBinder,
    QueryBinder,
    view_args_lookup,
)
from reqbind.binding.cache import DescriptorCache, descriptor_cache, get_descriptor, new_record
from reqbind.binding.decoder import decode_values
from reqbind.binding.descriptor import TypeDescriptor, build_descriptor
from reqbind.binding.orchestrator import DEFAULT_BINDERS, bind, default_binders
from reqbind.binding.tags import bind_field, ignored, parse_tag

__all__ = [
    "DEFAULT_BINDERS",
    "Binder",
    "BinderKind",
    "ClientAuthBinder",
    "DescriptorCache",
    "FormBinder",
    "JSONBinder",
    "PathBinder",
    "QueryBinder",
    "TypeDescriptor",
    "bind",
    "bind_field",
    "build_descriptor",
    "decode_values",
    "default_binders",
    "descriptor_cache",
    "get_descriptor",
    "ignored",
    "new_record",
    "parse_tag",
    "view_args_lookup",
]
