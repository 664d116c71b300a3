"""Request headers for a connection descriptor's auth variant."""

from __future__ import annotations

import base64

from errors import EncodingError
from models import ApiKeyAuth, BasicAuth, ConnectionDescriptor

BASE_HEADERS = {"Content-Type": "application/json"}


def _checked(value: str) -> str:
    """Reject values that cannot travel as an HTTP header (non-ASCII, control chars).

    Horizontal tab is a legal field-value character and passes through.
    """
    if not value.isascii() or any(
        (ord(ch) < 0x20 and ch != "\t") or ord(ch) == 0x7F for ch in value
    ):
        raise EncodingError(
            "Invalid Authorization header value: credentials contain characters "
            "that cannot be sent in an HTTP header"
        )
    return value


def build_auth_headers(conn: ConnectionDescriptor) -> dict[str, str]:
    headers = dict(BASE_HEADERS)
    auth = conn.auth

    if isinstance(auth, BasicAuth):
        if auth.username is not None and auth.password is not None:
            token = base64.b64encode(f"{auth.username}:{auth.password}".encode()).decode("ascii")
            headers["Authorization"] = _checked(f"Basic {token}")
    elif isinstance(auth, ApiKeyAuth):
        if auth.api_key is not None:
            headers["Authorization"] = _checked(f"ApiKey {auth.api_key}")

    return headers
