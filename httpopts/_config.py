from __future__ import annotations

import datetime
import os
import typing
from dataclasses import dataclass, field

import httpx

from .__version__ import __version__

DEFAULT_REDIRECT_LIMIT = 10
DEFAULT_USER_AGENT = f"httpopts/{__version__}"

ENV_USER_AGENT = "HTTPOPTS_USER_AGENT"
ENV_REDIRECT_LIMIT = "HTTPOPTS_REDIRECT_LIMIT"
ENV_TIMEOUT = "HTTPOPTS_TIMEOUT"

TimeoutTypes = typing.Union[float, int, datetime.timedelta, httpx.Timeout, None]


def _default_headers() -> dict[str, str]:
    return {"User-Agent": DEFAULT_USER_AGENT}


@dataclass(frozen=True)
class Defaults:
    """
    Values every fresh set of request arguments starts from.

    Build one and hand it to :class:`~httpopts.Session` or
    :func:`~httpopts.request`; nothing in the package keeps module-level
    mutable defaults.
    """

    headers: typing.Mapping[str, str] = field(default_factory=_default_headers)
    redirect_limit: int = DEFAULT_REDIRECT_LIMIT
    timeout: TimeoutTypes = None

    def __post_init__(self) -> None:
        if self.redirect_limit < 0:
            raise ValueError("redirect_limit must be >= 0")

    @classmethod
    def from_environ(
        cls, environ: typing.Mapping[str, str] | None = None
    ) -> Defaults:
        """
        Read ``HTTPOPTS_USER_AGENT``, ``HTTPOPTS_REDIRECT_LIMIT`` and
        ``HTTPOPTS_TIMEOUT``. Unset variables keep the built-in values.
        """
        if environ is None:
            environ = os.environ

        headers = _default_headers()
        user_agent = environ.get(ENV_USER_AGENT)
        if user_agent:
            headers["User-Agent"] = user_agent

        redirect_limit = DEFAULT_REDIRECT_LIMIT
        raw_limit = environ.get(ENV_REDIRECT_LIMIT)
        if raw_limit:
            try:
                redirect_limit = int(raw_limit)
            except ValueError:
                raise ValueError(
                    f"{ENV_REDIRECT_LIMIT} must be an integer, got {raw_limit!r}"
                ) from None

        timeout: float | None = None
        raw_timeout = environ.get(ENV_TIMEOUT)
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ValueError(
                    f"{ENV_TIMEOUT} must be a number of seconds, got {raw_timeout!r}"
                ) from None

        return cls(headers=headers, redirect_limit=redirect_limit, timeout=timeout)


def to_httpx_timeout(value: TimeoutTypes) -> httpx.Timeout | None:
    """
    Normalise a timeout option. ``None`` and zero mean "no override".
    """
    if value is None:
        return None
    if isinstance(value, httpx.Timeout):
        return value
    if isinstance(value, datetime.timedelta):
        value = value.total_seconds()
    if value == 0:
        return None
    return httpx.Timeout(float(value))
