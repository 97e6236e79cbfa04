from __future__ import annotations

import typing
from contextlib import ExitStack, closing

from urllib3.fields import RequestField
from urllib3.filepost import choose_boundary, encode_multipart_formdata

from ._exceptions import EncodingError, StreamError
from ._models import FileField


def encode_multipart(
    files: typing.Sequence[FileField],
    data: typing.Mapping[str, str] | None = None,
    boundary: str | None = None,
) -> tuple[bytes, str]:
    """
    Build a multipart/form-data body: every file part first, in order, then
    every entry of ``data`` as a plain form field.

    All file streams are closed before this returns, whether or not encoding
    succeeded.

    Returns ``(body, content_type)``.
    """
    fields: list[RequestField] = []
    try:
        with ExitStack() as stack:
            for file in files:
                stack.enter_context(closing(file.content))
            for file in files:
                fields.append(_file_part(file))
    except (OSError, ValueError) as exc:
        raise StreamError(f"failed to read upload stream: {exc}") from exc

    for name, value in (data or {}).items():
        part = RequestField(name=name, data=value)
        part.make_multipart()
        fields.append(part)

    try:
        return encode_multipart_formdata(fields, boundary=boundary or choose_boundary())
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"failed to finalize multipart body: {exc}") from exc


def _file_part(file: FileField) -> RequestField:
    content = file.content.read()
    if isinstance(content, str):
        content = content.encode("utf-8")
    part = RequestField(name=file.field_name, data=content, filename=file.file_name)
    part.make_multipart(content_type="application/octet-stream")
    return part
