"""Gateway error taxonomy.

Every operation failure is raised as one of these. ``str(exc)`` is the
user-facing message; ``kind`` is a stable tag for logs and metrics.
"""

from __future__ import annotations


class GatewayError(Exception):
    kind = "gateway"


class NotConnectedError(GatewayError):
    kind = "not_connected"

    def __init__(self, message: str = "Not connected to Elasticsearch") -> None:
        super().__init__(message)


class ClusterConnectionError(GatewayError):
    """Transport-level failure: DNS, TLS, refused connection, timeout."""

    kind = "connection"


class ServerError(GatewayError):
    """The cluster answered with a non-success HTTP status."""

    kind = "server"

    def __init__(self, action: str, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"{action} - Elasticsearch returned status {status_code}, response: {body}"
        )


class ResponseParseError(GatewayError):
    kind = "response_parse"


class QuerySyntaxError(GatewayError):
    """Caller-supplied JSON text could not be parsed."""

    kind = "query_syntax"


class EncodingError(GatewayError):
    kind = "encoding"
