from __future__ import annotations

import re
import typing
from urllib.parse import parse_qsl, urlencode

import httpx

from ._exceptions import MalformedURLError
from ._querystring import query_values

INVALID_PERCENT_ESCAPE_REGEX = re.compile("%(?![A-Fa-f0-9]{2})")

QueryValues = typing.Dict[str, typing.List[str]]


def parse_url(url: str | httpx.URL) -> httpx.URL:
    try:
        return httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise MalformedURLError(f"invalid URL {str(url)!r}: {exc}") from exc


def parse_query(query: str) -> QueryValues:
    """
    Parse a raw query string into key -> values, preserving value order.

    Semicolon separators and broken percent escapes are rejected rather than
    silently reinterpreted.
    """
    if ";" in query:
        raise MalformedURLError(f"invalid semicolon separator in query {query!r}")
    match = INVALID_PERCENT_ESCAPE_REGEX.search(query)
    if match is not None:
        raise MalformedURLError(
            f"invalid percent escape in query {query!r} at position {match.start()}"
        )

    values: QueryValues = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        values.setdefault(key, []).append(value)
    return values


def encode_query(values: QueryValues) -> str:
    """
    Encode sorted by key. Values of a repeated key keep their order.
    """
    return urlencode([(key, value) for key in sorted(values) for value in values[key]])


def _rebuild(url: httpx.URL, values: QueryValues) -> str:
    query = encode_query(values)
    return str(url.copy_with(query=query.encode("ascii") if query else None))


def merge_params(url: str | httpx.URL, params: typing.Mapping[str, str]) -> str:
    """
    Set every key of ``params`` on the URL's query, replacing any value the
    URL already had for that key.
    """
    if not params:
        return str(url)

    parsed = parse_url(url)
    values = parse_query(parsed.query.decode("ascii"))
    for key, value in params.items():
        values[key] = [str(value)]
    return _rebuild(parsed, values)


def merge_object(url: str | httpx.URL, obj: typing.Any) -> str:
    """
    Add the query values of a structured object to the URL's query. Existing
    values are kept; repeated fields contribute every value.
    """
    parsed = parse_url(url)
    values = parse_query(parsed.query.decode("ascii"))
    for key, value in query_values(obj):
        values.setdefault(key, []).append(value)
    return _rebuild(parsed, values)
