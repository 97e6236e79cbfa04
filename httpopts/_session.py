from __future__ import annotations

import logging
import typing
from http.cookiejar import CookieJar

import httpx

from ._config import Defaults
from ._models import JarTypes, RequestArguments
from ._options import Option, apply_options
from ._request import as_cookies, build_request, execute

logger = logging.getLogger("httpopts.session")


class Session:
    """
    One client and one cookie jar reused across calls.

    Cookies stored by a response are sent again on later calls through the
    same session. Per-call options never change the session itself; a
    :func:`~httpopts.cookie_jar` option swaps the client's jar only for the
    duration of that call.

    The session adds no locking. Sharing one across threads is only safe
    when no call uses per-call jar or redirect-limit options.

    Usage::

        with httpopts.Session() as session:
            session.get("https://example.org/login", httpopts.auth("me", "pw"))
            response = session.get("https://example.org/profile")
    """

    def __init__(
        self,
        defaults: Defaults | None = None,
        *,
        client: httpx.Client | None = None,
        jar: JarTypes | None = None,
    ) -> None:
        self._defaults = defaults if defaults is not None else Defaults()
        self._owns_client = client is None
        self._replaced_jar: CookieJar | None = None
        if client is None:
            client = httpx.Client()
        if jar is not None:
            if not self._owns_client:
                self._replaced_jar = client.cookies.jar
            client.cookies = as_cookies(jar).jar
        self._client = client

    @property
    def defaults(self) -> Defaults:
        return self._defaults

    @property
    def client(self) -> httpx.Client:
        return self._client

    @property
    def jar(self) -> CookieJar:
        return self._client.cookies.jar

    def _arguments(self, options: typing.Iterable[Option]) -> RequestArguments:
        args = RequestArguments.from_defaults(self._defaults, client=self._client)
        return apply_options(args, options)

    def build_request(
        self, method: str, url: str | httpx.URL, *options: Option
    ) -> httpx.Request:
        return build_request(method, url, self._arguments(options))

    def request(
        self, method: str, url: str | httpx.URL, *options: Option
    ) -> httpx.Response:
        args = self._arguments(options)
        if args.client is not self._client:
            logger.debug("per-call client overrides the session client")
        return execute(method, url, args)

    def get(self, url: str | httpx.URL, *options: Option) -> httpx.Response:
        return self.request("GET", url, *options)

    def options(self, url: str | httpx.URL, *options: Option) -> httpx.Response:
        return self.request("OPTIONS", url, *options)

    def head(self, url: str | httpx.URL, *options: Option) -> httpx.Response:
        return self.request("HEAD", url, *options)

    def post(self, url: str | httpx.URL, *options: Option) -> httpx.Response:
        return self.request("POST", url, *options)

    def put(self, url: str | httpx.URL, *options: Option) -> httpx.Response:
        return self.request("PUT", url, *options)

    def patch(self, url: str | httpx.URL, *options: Option) -> httpx.Response:
        return self.request("PATCH", url, *options)

    def delete(self, url: str | httpx.URL, *options: Option) -> httpx.Response:
        return self.request("DELETE", url, *options)

    def close(self) -> None:
        """
        Close the underlying client if this session created it. A borrowed
        client gets back the jar it had before the session installed its own.
        """
        if self._owns_client:
            self._client.close()
            logger.info("session closed")
        elif self._replaced_jar is not None:
            self._client.cookies = self._replaced_jar
            self._replaced_jar = None

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *exc_info: typing.Any) -> None:
        self.close()
