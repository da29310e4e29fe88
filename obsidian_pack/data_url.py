"""
Helpers for "data:<mime>;base64,<payload>" strings.
"""

import base64
import binascii
from typing import Tuple
from urllib.parse import unquote_to_bytes

from .exceptions import InvalidDataUrl

DEFAULT_MIME = "application/octet-stream"


def build_data_url(mime: str, data: bytes) -> str:
    return "data:" + mime + ";base64," + base64.b64encode(data).decode("ascii")


def parse_data_url(url: str) -> Tuple[str, bytes]:
    """Split a data URL into its MIME type and decoded payload.

    Parameters of the media type (``;charset=...``) are dropped from the
    returned MIME. A URL without ``;base64`` is read as percent-encoded text.
    An empty media type gives ``application/octet-stream``. Whitespace and
    missing ``=`` padding in a base64 payload are tolerated; any other
    character outside the base64 alphabet raises InvalidDataUrl.
    """
    if not url.startswith("data:"):
        raise InvalidDataUrl("Data URL must start with 'data:'")

    head, sep, payload = url[5:].partition(",")
    if not sep:
        raise InvalidDataUrl("Data URL has no ',' before its payload")

    params = head.split(";")
    mime = params[0].strip() or DEFAULT_MIME

    if params[-1].strip().lower() == "base64":
        payload = "".join(payload.split())
        payload += "=" * (-len(payload) % 4)
        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidDataUrl(f"Invalid base64 payload: {e}") from e
    else:
        data = unquote_to_bytes(payload)

    return mime, data
