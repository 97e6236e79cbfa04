"""
Flatten structured objects into query string values.

Dataclass fields are read in declaration order. A field's ``"query"``
metadata entry controls its name and options, e.g.::

    @dataclass
    class Search:
        text: str = field(metadata={"query": "q"})
        page: int | None = field(default=None, metadata={"query": ",omitempty"})
        tags: list[str] = field(default_factory=list)
        debug: bool = field(default=False, metadata={"query": "-"})
"""

from __future__ import annotations

import dataclasses
import datetime
import enum
import typing

from ._exceptions import EncodingError

QUERY_METADATA_KEY = "query"


def query_values(obj: typing.Any) -> list[tuple[str, str]]:
    """
    Return ``(key, value)`` pairs for ``obj``. A key is repeated once per
    value for list and tuple fields.
    """
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return _dataclass_values(obj, scope="")
    if isinstance(obj, typing.Mapping):
        pairs: list[tuple[str, str]] = []
        for key, value in obj.items():
            _append(pairs, str(key), value, omitempty=False)
        return pairs
    raise EncodingError(
        f"query values expect a dataclass instance or a mapping, got {type(obj).__name__}"
    )


def _dataclass_values(obj: typing.Any, scope: str) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for f in dataclasses.fields(obj):
        name, omitempty = _parse_tag(f)
        if name is None:
            continue
        if scope:
            name = f"{scope}[{name}]"
        _append(pairs, name, getattr(obj, f.name), omitempty=omitempty)
    return pairs


def _parse_tag(f: dataclasses.Field) -> tuple[str | None, bool]:
    tag = f.metadata.get(QUERY_METADATA_KEY, "")
    if tag == "-":
        return None, False
    name, _, options = tag.partition(",")
    return name or f.name, "omitempty" in options.split(",")


def _is_empty(value: typing.Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes, list, tuple, dict)):
        return len(value) == 0
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    return False


def _append(
    pairs: list[tuple[str, str]], name: str, value: typing.Any, *, omitempty: bool
) -> None:
    if omitempty and _is_empty(value):
        return
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        pairs.extend(_dataclass_values(value, scope=name))
    elif isinstance(value, (list, tuple)):
        for item in value:
            pairs.append((name, _primitive(item)))
    else:
        pairs.append((name, _primitive(value)))


def _primitive(value: typing.Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return _primitive(value.value)
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise EncodingError(f"query value is not valid UTF-8: {exc}") from exc
    if isinstance(value, (str, int, float)):
        return str(value)
    raise EncodingError(f"cannot encode {type(value).__name__} as a query value")
