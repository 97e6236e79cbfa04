from __future__ import annotations

import json as _json
import typing
from dataclasses import dataclass, field
from http.cookiejar import CookieJar

import httpx

from ._config import Defaults, TimeoutTypes
from ._exceptions import EncodingError

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

BodyTypes = typing.Union[bytes, str, typing.IO[bytes], typing.Iterable[bytes]]
JarTypes = typing.Union[CookieJar, httpx.Cookies]


class RawText:
    """JSON that is already serialized, as text."""

    __slots__ = ("text",)

    def __init__(self, text: str) -> None:
        self.text = text

    def encode(self) -> bytes:
        return self.text.encode("utf-8")

    def __eq__(self, other: typing.Any) -> bool:
        return isinstance(other, RawText) and other.text == self.text

    def __repr__(self) -> str:
        return f"RawText({self.text!r})"


class RawBytes:
    """JSON that is already serialized, as bytes."""

    __slots__ = ("data",)

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)

    def encode(self) -> bytes:
        return self.data

    def __eq__(self, other: typing.Any) -> bool:
        return isinstance(other, RawBytes) and other.data == self.data

    def __repr__(self) -> str:
        return f"RawBytes({self.data!r})"


class Structured:
    """An arbitrary value to serialize as JSON."""

    __slots__ = ("value",)

    def __init__(self, value: typing.Any) -> None:
        self.value = value

    def encode(self) -> bytes:
        try:
            text = _json.dumps(
                self.value,
                ensure_ascii=False,
                separators=(",", ":"),
                allow_nan=False,
            )
        except (TypeError, ValueError) as exc:
            raise EncodingError(f"value is not JSON serializable: {exc}") from exc
        return text.encode("utf-8")

    def __eq__(self, other: typing.Any) -> bool:
        return isinstance(other, Structured) and other.value == self.value

    def __repr__(self) -> str:
        return f"Structured({self.value!r})"


JSONSource = typing.Union[RawText, RawBytes, Structured]


@dataclass
class FileField:
    """
    One file part of a multipart upload.

    The stream is handed over to the body encoder, which closes it once it
    has been copied.
    """

    field_name: str
    file_name: str
    content: typing.IO[bytes]


@dataclass
class EncodedBody:
    content: BodyTypes | None = None
    content_type: str | None = None


@dataclass
class RequestArguments:
    """
    Everything that shapes one outgoing request.

    Option functions mutate an instance of this; the request assembler
    reads it. No behaviour lives here.
    """

    client: httpx.Client | None = None
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, str] = field(default_factory=dict)
    object_param: typing.Any = None
    auth: tuple[str, str] | None = None
    cookies: dict[str, str] = field(default_factory=dict)
    jar: JarTypes | None = None
    body: BodyTypes | None = None
    json: JSONSource | None = None
    files: list[FileField] = field(default_factory=list)
    multipart: bool = False
    data: dict[str, str] = field(default_factory=dict)
    redirect_limit: int = 0
    default_redirect_limit: int = 0
    timeout: TimeoutTypes = None

    @classmethod
    def from_defaults(
        cls, defaults: Defaults | None = None, **kwargs: typing.Any
    ) -> RequestArguments:
        """
        New arguments seeded from ``defaults``. Headers are copied so that
        later option calls never write through to the shared defaults.
        """
        if defaults is None:
            defaults = Defaults()
        kwargs.setdefault("headers", dict(defaults.headers))
        kwargs.setdefault("redirect_limit", defaults.redirect_limit)
        kwargs.setdefault("default_redirect_limit", defaults.redirect_limit)
        kwargs.setdefault("timeout", defaults.timeout)
        return cls(**kwargs)
