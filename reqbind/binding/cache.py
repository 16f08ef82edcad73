"""进程级的描述符缓存.

读取无锁; 未命中时在锁外构建描述符, 只在写入时加锁. 并发构建同一类型时, 先写入的结果胜出,
所有调用方拿到的都是同一份实例.
"""

from __future__ import annotations

import threading
from typing import Any

from reqbind.binding.descriptor import TypeDescriptor, build_descriptor
from reqbind.utils.structlog_config import log_debug


class DescriptorCache:
    """记录类型到描述符的映射."""

    def __init__(self) -> None:
        self._descriptors: dict[type, TypeDescriptor] = {}
        self._lock = threading.Lock()

    def get(self, record_type: type | object) -> TypeDescriptor:
        """返回记录类型的描述符, 首次访问时构建; 传入实例时按其类型查找."""
        if not isinstance(record_type, type):
            record_type = type(record_type)
        descriptor = self._descriptors.get(record_type)
        if descriptor is not None:
            return descriptor

        built = build_descriptor(record_type)
        with self._lock:
            descriptor = self._descriptors.setdefault(record_type, built)
        if descriptor is built:
            log_debug(
                "记录类型描述符已缓存",
                module="binding",
                record_type=getattr(record_type, "__qualname__", repr(record_type)),
                keys=list(descriptor.all_keys),
            )
        return descriptor

    def clear(self) -> None:
        with self._lock:
            self._descriptors.clear()

    def __contains__(self, record_type: object) -> bool:
        return record_type in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)


descriptor_cache = DescriptorCache()


def get_descriptor(record_type: type | object) -> TypeDescriptor:
    """从进程级缓存获取描述符."""
    return descriptor_cache.get(record_type)


def new_record(record_type: type) -> Any:
    """创建记录类型的零值实例."""
    return get_descriptor(record_type).new_record()


__all__ = ["DescriptorCache", "descriptor_cache", "get_descriptor", "new_record"]
