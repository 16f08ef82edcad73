"""表单与 multipart 请求体绑定器."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from tempfile import SpooledTemporaryFile
from typing import IO, TYPE_CHECKING

from werkzeug.formparser import FormDataParser

from reqbind.binding.binders.base import Binder, BinderKind
from reqbind.binding.cache import get_descriptor
from reqbind.binding.decoder import decode_values
from reqbind.constants import DEFAULT_MULTIPART_MEMORY, ContentTypes
from reqbind.errors import DecodeError

if TYPE_CHECKING:
    from werkzeug.datastructures import FileStorage, MultiDict
    from werkzeug.wrappers.request import Request

    from reqbind.binding.descriptor import TypeDescriptor


def spooled_stream_factory(
    max_memory: int,
    total_content_length: int | None,
    content_type: str | None,
    filename: str | None,
    content_length: int | None = None,
) -> IO[bytes]:
    """上传文件的暂存流: 不超过 ``max_memory`` 时留在内存, 超出后写入临时文件."""
    return SpooledTemporaryFile(max_size=max_memory, mode="rb+")


@dataclass(frozen=True, slots=True)
class FormBinder(Binder):
    """解析 urlencoded 或 multipart 请求体.

    文本字段交给解码器按声明 key 写入; 文件字段单值取第一个文件, 列表字段取同名的全部文件.

    Attributes:
        max_memory: multipart 解析的内存上限, 非正数时回退到默认值 8MB.

    """

    max_memory: int = DEFAULT_MULTIPART_MEMORY

    name = "form"
    kind = BinderKind.BODY

    @property
    def memory_limit(self) -> int:
        return self.max_memory if self.max_memory > 0 else DEFAULT_MULTIPART_MEMORY

    def matches(self, request: Request) -> bool:
        return request.mimetype in (ContentTypes.FORM_URLENCODED, ContentTypes.MULTIPART_FORM)

    def bind(self, request: Request, record: object) -> None:
        form, files = self._parse(request)
        descriptor = get_descriptor(type(record))
        try:
            decode_values(record, form, descriptor)
        except DecodeError as exc:
            raise DecodeError(f"decode form error: {exc.message}") from exc
        self._assign_files(record, files, descriptor)

    def _parse(self, request: Request) -> tuple[MultiDict[str, str], MultiDict[str, FileStorage]]:
        if "form" in request.__dict__:
            # 请求体已被解析过, 流已耗尽
            return request.form, request.files

        limit = self.memory_limit
        parser = FormDataParser(
            stream_factory=partial(spooled_stream_factory, limit),
            max_form_memory_size=limit,
            max_content_length=request.max_content_length,
            cls=request.parameter_storage_class,
            silent=False,
            max_form_parts=request.max_form_parts,
        )
        try:
            stream, form, files = parser.parse(
                request.stream,
                request.mimetype,
                request.content_length,
                request.mimetype_params,
            )
        except ValueError as exc:
            raise DecodeError(f"parse form error: {exc}") from exc

        # 写回 request, 业务代码仍可通过 request.form / request.files 读取, 不会重复解析
        request.__dict__.update(stream=stream, form=form, files=files)
        return form, files

    @staticmethod
    def _assign_files(record: object, files: MultiDict[str, FileStorage], descriptor: TypeDescriptor) -> None:
        for file_field in descriptor.file_fields:
            uploaded = files.getlist(file_field.form_key)
            if not uploaded:
                continue
            setattr(record, file_field.name, list(uploaded) if file_field.many else uploaded[0])


__all__ = ["FormBinder", "spooled_stream_factory"]
