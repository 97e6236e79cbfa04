from __future__ import annotations

import httpx

from ._config import Defaults
from ._models import RequestArguments
from ._options import Option, apply_options
from ._request import build_request, execute

__all__ = [
    "delete",
    "get",
    "head",
    "options",
    "patch",
    "post",
    "put",
    "request",
    "send",
]


def request(
    method: str,
    url: str | httpx.URL,
    *options: Option,
    defaults: Defaults | None = None,
) -> httpx.Request:
    """
    Build a request without sending it.

    **Parameters:**

    * **method** - HTTP method for the new `Request` object: `GET`, `OPTIONS`,
    `HEAD`, `POST`, `PUT`, `PATCH`, or `DELETE`.
    * **url** - URL for the new `Request` object.
    * **options** - *(optional)* Option values such as `params(...)`,
    `headers(...)`, `json(...)`, applied left to right.
    * **defaults** - *(optional)* Starting headers, redirect limit and timeout.

    **Returns:** `httpx.Request`

    Usage:

    ```
    >>> import httpopts
    >>> req = httpopts.request("GET", "https://example.org/search", httpopts.params({"q": "1"}))
    >>> req.url
    URL('https://example.org/search?q=1')
    ```
    """
    args = apply_options(RequestArguments.from_defaults(defaults), options)
    return build_request(method, url, args)


def send(
    method: str,
    url: str | httpx.URL,
    *options: Option,
    defaults: Defaults | None = None,
) -> httpx.Response:
    """
    Build and send a request. Without a `client(...)` option a private client
    is opened for this call and closed once the response has been read.
    """
    args = apply_options(RequestArguments.from_defaults(defaults), options)
    if args.client is not None:
        return execute(method, url, args)
    with httpx.Client() as client:
        args.client = client
        return execute(method, url, args)


def get(
    url: str | httpx.URL, *options: Option, defaults: Defaults | None = None
) -> httpx.Response:
    return send("GET", url, *options, defaults=defaults)


def options(
    url: str | httpx.URL, *options: Option, defaults: Defaults | None = None
) -> httpx.Response:
    return send("OPTIONS", url, *options, defaults=defaults)


def head(
    url: str | httpx.URL, *options: Option, defaults: Defaults | None = None
) -> httpx.Response:
    return send("HEAD", url, *options, defaults=defaults)


def post(
    url: str | httpx.URL, *options: Option, defaults: Defaults | None = None
) -> httpx.Response:
    return send("POST", url, *options, defaults=defaults)


def put(
    url: str | httpx.URL, *options: Option, defaults: Defaults | None = None
) -> httpx.Response:
    return send("PUT", url, *options, defaults=defaults)


def patch(
    url: str | httpx.URL, *options: Option, defaults: Defaults | None = None
) -> httpx.Response:
    return send("PATCH", url, *options, defaults=defaults)


def delete(
    url: str | httpx.URL, *options: Option, defaults: Defaults | None = None
) -> httpx.Response:
    return send("DELETE", url, *options, defaults=defaults)
