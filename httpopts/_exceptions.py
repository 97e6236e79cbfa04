"""
Our exception hierarchy:

* HTTPOptsError
  + MalformedURLError
  + EncodingError
  + StreamError
  + RequestConstructionError
  + TooManyRedirectsError

Errors raised while a request is being assembled carry the ``stage`` they
happened in: ``"url"``, ``"body"`` or ``"transport"``.
"""

from __future__ import annotations

import typing

if typing.TYPE_CHECKING:
    import httpx

__all__ = [
    "EncodingError",
    "HTTPOptsError",
    "MalformedURLError",
    "RequestConstructionError",
    "StreamError",
    "TooManyRedirectsError",
]


class HTTPOptsError(Exception):
    """
    Base class for everything raised while building or sending a request.
    """

    def __init__(
        self,
        message: str,
        *,
        stage: str | None = None,
        request: httpx.Request | None = None,
    ) -> None:
        super().__init__(message)
        self.stage = stage
        self._request = request

    @property
    def request(self) -> httpx.Request:
        if self._request is None:
            raise RuntimeError("The .request property has not been set.")
        return self._request

    @request.setter
    def request(self, request: httpx.Request) -> None:
        self._request = request

    def with_stage(self, stage: str) -> HTTPOptsError:
        """
        Return a copy of this error labelled with the assembly stage.
        """
        return type(self)(f"{stage}: {self}", stage=stage, request=self._request)


class MalformedURLError(HTTPOptsError):
    """
    The URL or its query string could not be parsed.
    """


class EncodingError(HTTPOptsError):
    """
    A JSON value, a query object or a multipart body could not be encoded.
    """


class StreamError(HTTPOptsError):
    """
    Reading or closing an upload stream failed.
    """


class RequestConstructionError(HTTPOptsError):
    """
    The method or URL was rejected when creating the transport request.
    """


class TooManyRedirectsError(HTTPOptsError):
    """
    The configured redirect limit was exceeded.
    """
