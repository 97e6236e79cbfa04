"""
Request options.

Each function here returns an :data:`Option`, a callable that applies one
concern to a :class:`~httpopts.RequestArguments`. Options are applied in the
order they are given::

    >>> import httpopts
    >>> request = httpopts.request(
    ...     "POST",
    ...     "https://example.org/items",
    ...     httpopts.params({"page": "2"}),
    ...     httpopts.auth("user", "secret"),
    ...     httpopts.data({"a": "1"}),
    ...     httpopts.data({"b": "2"}),
    ... )

Map-valued options (``headers``, ``params``, ``cookies``, ``data``) merge
into what earlier options set, later keys winning. Everything else replaces
the previous value.
"""

from __future__ import annotations

import datetime
import os
import typing
from contextlib import closing
from pathlib import Path

import httpx

from ._config import TimeoutTypes
from ._exceptions import StreamError
from ._models import (
    BodyTypes,
    FileField,
    JarTypes,
    JSONSource,
    RawBytes,
    RawText,
    RequestArguments,
    Structured,
)

Option = typing.Callable[[RequestArguments], None]


def apply_options(args: RequestArguments, options: typing.Iterable[Option]) -> RequestArguments:
    for option in options:
        option(args)
    return args


def headers(values: typing.Mapping[str, str]) -> Option:
    values = dict(values)

    def apply(args: RequestArguments) -> None:
        args.headers.update(values)

    return apply


def header(name: str, value: str) -> Option:
    return headers({name: value})


def params(values: typing.Mapping[str, typing.Any]) -> Option:
    values = {key: str(value) for key, value in values.items()}

    def apply(args: RequestArguments) -> None:
        args.params.update(values)

    return apply


def object_param(obj: typing.Any) -> Option:
    """
    Query parameters taken from a dataclass instance or a mapping. Ignored
    when :func:`params` has set anything.
    """

    def apply(args: RequestArguments) -> None:
        args.object_param = obj

    return apply


def auth(username: str, password: str) -> Option:
    credentials = (username, password)

    def apply(args: RequestArguments) -> None:
        args.auth = credentials

    return apply


def cookies(values: typing.Mapping[str, str]) -> Option:
    values = dict(values)

    def apply(args: RequestArguments) -> None:
        args.cookies.update(values)

    return apply


def cookie_jar(jar: JarTypes) -> Option:
    def apply(args: RequestArguments) -> None:
        args.jar = jar

    return apply


def body(content: BodyTypes) -> Option:
    """
    Send ``content`` as-is. Takes priority over every other body option and
    sets no Content-Type.
    """

    def apply(args: RequestArguments) -> None:
        args.body = content

    return apply


def json(value: typing.Any) -> Option:
    """
    Send a JSON body. ``str`` and ``bytes`` are taken as already-serialized
    JSON, anything else is serialized.
    """
    source: JSONSource
    if isinstance(value, (RawText, RawBytes, Structured)):
        source = value
    elif isinstance(value, str):
        source = RawText(value)
    elif isinstance(value, (bytes, bytearray)):
        source = RawBytes(bytes(value))
    else:
        source = Structured(value)

    def apply(args: RequestArguments) -> None:
        args.json = source

    return apply


def data(values: typing.Mapping[str, typing.Any]) -> Option:
    values = {key: str(value) for key, value in values.items()}

    def apply(args: RequestArguments) -> None:
        args.data.update(values)

    return apply


def files(*fields: FileField) -> Option:
    def apply(args: RequestArguments) -> None:
        args.files.extend(fields)

    return apply


def file_content(path: str | os.PathLike[str]) -> Option:
    """
    Use the bytes of the file at ``path`` as the request body.
    """
    path = Path(path)

    def apply(args: RequestArguments) -> None:
        try:
            args.body = path.read_bytes()
        except OSError as exc:
            raise StreamError(f"failed to read {str(path)!r}: {exc}") from exc

    return apply


def multipart_form(form: typing.Mapping[str, typing.Any]) -> Option:
    """
    A multipart form from field name -> value. Readers opened on a named file
    become file parts; other readers, strings and bytes become plain fields.
    """

    def apply(args: RequestArguments) -> None:
        args.multipart = True
        for name, value in form.items():
            if hasattr(value, "read"):
                file_name = getattr(value, "name", None)
                if isinstance(file_name, str):
                    args.files.append(FileField(name, os.path.basename(file_name), value))
                    continue
                value = _read_field(name, value)
            if isinstance(value, bytes):
                value = value.decode("utf-8")
            args.data[name] = str(value)

    return apply


def _read_field(name: str, reader: typing.IO[typing.Any]) -> typing.Any:
    try:
        with closing(reader):
            return reader.read()
    except (OSError, ValueError) as exc:
        raise StreamError(f"failed to read form field {name!r}: {exc}") from exc


def client(value: httpx.Client) -> Option:
    def apply(args: RequestArguments) -> None:
        args.client = value

    return apply


def timeout(value: TimeoutTypes) -> Option:
    seconds = value.total_seconds() if isinstance(value, datetime.timedelta) else value
    if isinstance(seconds, (int, float)) and seconds < 0:
        raise ValueError("timeout must be >= 0")

    def apply(args: RequestArguments) -> None:
        args.timeout = value

    return apply


def redirect_limit(limit: int) -> Option:
    if limit < 0:
        raise ValueError("redirect_limit must be >= 0")

    def apply(args: RequestArguments) -> None:
        args.redirect_limit = limit

    return apply
