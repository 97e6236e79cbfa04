from __future__ import annotations

import logging
import typing
from urllib.parse import urlencode

from ._models import (
    FORM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    EncodedBody,
    RequestArguments,
)
from ._multipart import encode_multipart

logger = logging.getLogger("httpopts.content")


def encode_form(data: typing.Mapping[str, str]) -> bytes:
    """URL-encode ``data`` with keys in sorted order."""
    return urlencode(sorted(data.items())).encode("ascii")


def encode_body(args: RequestArguments) -> EncodedBody:
    """
    Pick the one body strategy that applies to ``args``, in priority order:
    explicit body, JSON, multipart files, URL-encoded form data.
    """
    if args.body is not None:
        logger.debug("body: explicit content")
        return EncodedBody(content=args.body)

    if args.json is not None:
        logger.debug("body: json (%s)", type(args.json).__name__)
        return EncodedBody(content=args.json.encode(), content_type=JSON_CONTENT_TYPE)

    if args.files or args.multipart:
        logger.debug("body: multipart, %d file(s)", len(args.files))
        content, content_type = encode_multipart(args.files, args.data)
        return EncodedBody(content=content, content_type=content_type)

    if args.data:
        logger.debug("body: form, %d field(s)", len(args.data))
        return EncodedBody(content=encode_form(args.data), content_type=FORM_CONTENT_TYPE)

    return EncodedBody()
