from .__version__ import __description__, __title__, __version__
from ._api import delete, get, head, options, patch, post, put, request, send
from ._config import DEFAULT_REDIRECT_LIMIT, Defaults
from ._exceptions import (
    EncodingError,
    HTTPOptsError,
    MalformedURLError,
    RequestConstructionError,
    StreamError,
    TooManyRedirectsError,
)
from ._models import FileField, RawBytes, RawText, RequestArguments, Structured
from ._options import (
    Option,
    auth,
    body,
    client,
    cookie_jar,
    cookies,
    data,
    file_content,
    files,
    header,
    headers,
    json,
    multipart_form,
    object_param,
    params,
    redirect_limit,
    timeout,
)
from ._session import Session

try:
    from .cli import main
except ImportError:  # pragma: no cover

    def main() -> None:  # type: ignore[misc]
        import sys

        print(
            'The "httpopts" command requires the CLI extra. '
            'Install it with: pip install "httpopts[cli]"',
            file=sys.stderr,
        )
        sys.exit(1)


_EXCLUDED_FROM_ALL = {"cli", "main"}

__all__ = sorted(
    (
        member
        for member in list(vars().keys())
        if (
            not member.startswith("_")
            or member in ["__description__", "__title__", "__version__"]
        )
        and member not in _EXCLUDED_FROM_ALL
    ),
    key=str.casefold,
)
