from __future__ import annotations

import logging
import re
import typing
from contextlib import contextmanager

import httpx

from ._config import DEFAULT_REDIRECT_LIMIT, to_httpx_timeout
from ._content import encode_body
from ._exceptions import (
    HTTPOptsError,
    RequestConstructionError,
    TooManyRedirectsError,
)
from ._models import EncodedBody, JarTypes, RequestArguments
from ._urlparse import merge_object, merge_params

logger = logging.getLogger("httpopts.request")

# RFC 7230 token characters.
METHOD_REGEX = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


@contextmanager
def _stage(name: str) -> typing.Iterator[None]:
    try:
        yield
    except HTTPOptsError as exc:
        raise exc.with_stage(name) from exc


def build_request(
    method: str, url: str | httpx.URL, args: RequestArguments
) -> httpx.Request:
    """
    Assemble the outgoing request described by ``args``.

    Steps run in a fixed order: query merge, body, transport request, basic
    auth, headers, cookies. Headers therefore override both the inferred
    Content-Type and the Authorization header set by ``auth``.
    """
    with _stage("url"):
        if args.params:
            url = merge_params(url, args.params)
        elif args.object_param is not None:
            url = merge_object(url, args.object_param)

    with _stage("body"):
        encoded = encode_body(args)

    with _stage("transport"):
        request = _new_request(method, url, encoded)

    if args.auth is not None:
        set_basic_auth(request, *args.auth)

    for name, value in args.headers.items():
        request.headers[name] = value

    inject_cookies(args, request)

    timeout = to_httpx_timeout(args.timeout)
    if timeout is not None:
        request.extensions["timeout"] = timeout.as_dict()

    logger.debug("built %s %s", request.method, request.url)
    return request


def _new_request(
    method: str, url: str | httpx.URL, encoded: EncodedBody
) -> httpx.Request:
    if not isinstance(method, str) or not METHOD_REGEX.fullmatch(method):
        raise RequestConstructionError(f"invalid method {method!r}")

    headers = {}
    if encoded.content_type is not None:
        headers["Content-Type"] = encoded.content_type

    try:
        request = httpx.Request(method, url, headers=headers, content=encoded.content)
    except (httpx.InvalidURL, TypeError) as exc:
        raise RequestConstructionError(f"invalid URL {str(url)!r}: {exc}") from exc

    if not request.url.scheme or not request.url.host:
        raise RequestConstructionError(
            f"URL {str(url)!r} must be absolute, with a scheme and a host"
        )
    return request


def set_basic_auth(request: httpx.Request, username: str, password: str) -> None:
    next(httpx.BasicAuth(username, password).auth_flow(request))


def as_cookies(jar: JarTypes) -> httpx.Cookies:
    """
    Wrap a cookie jar without copying it.
    """
    if isinstance(jar, httpx.Cookies):
        return jar
    return httpx.Cookies(jar)


def cookie_domain(host: str) -> str:
    # http.cookiejar matches hosts without a dot as "<host>.local".
    if "." not in host:
        return f"{host}.local"
    return host


def inject_cookies(args: RequestArguments, request: httpx.Request) -> None:
    """
    Put the request's cookies in place.

    An explicit jar wins and is used untouched. Otherwise the cookie map, if
    any, is written into the client's jar for the request's host, and the
    Cookie header is taken from that jar.
    """
    if args.jar is not None:
        jar = as_cookies(args.jar)
    else:
        jar = args.client.cookies if args.client is not None else httpx.Cookies()
        if args.cookies:
            domain = cookie_domain(request.url.host)
            for name, value in args.cookies.items():
                jar.set(name, value, domain=domain, path="/")

    jar.set_cookie_header(request)


def install_redirect_limit(
    client: httpx.Client, limit: int, default: int = DEFAULT_REDIRECT_LIMIT
) -> None:
    """
    Cap the number of redirects ``client`` follows. Zero selects ``default``,
    and a zero ``default`` selects ``DEFAULT_REDIRECT_LIMIT``.
    """
    client.max_redirects = limit or default or DEFAULT_REDIRECT_LIMIT


@contextmanager
def _call_scope(client: httpx.Client, args: RequestArguments) -> typing.Iterator[None]:
    # Per-call redirect limit and jar, restored once the call is done.
    max_redirects = client.max_redirects
    jar = client.cookies.jar
    install_redirect_limit(client, args.redirect_limit, args.default_redirect_limit)
    if args.jar is not None:
        client.cookies = as_cookies(args.jar).jar
    try:
        yield
    finally:
        client.max_redirects = max_redirects
        if args.jar is not None:
            client.cookies = jar


def send_request(
    client: httpx.Client, request: httpx.Request, args: RequestArguments
) -> httpx.Response:
    request.extensions.setdefault("timeout", client.timeout.as_dict())
    with _call_scope(client, args):
        logger.debug("sending %s %s", request.method, request.url)
        try:
            return client.send(request, follow_redirects=True)
        except httpx.TooManyRedirects as exc:
            raise TooManyRedirectsError(
                f"exceeded {client.max_redirects} redirect(s): {exc}",
                request=request,
            ) from exc


def execute(
    method: str, url: str | httpx.URL, args: RequestArguments
) -> httpx.Response:
    """
    Build the request from ``args`` and send it with ``args.client``.
    """
    if args.client is None:
        raise ValueError("execute() requires args.client to be set")
    request = build_request(method, url, args)
    return send_request(args.client, request, args)
