"""Shared gateway state: the active connection and the reusable HTTP client.

Both holders guard their value with a ``threading.Lock`` held only for the
read or write itself. Callers copy what they need out of the locked section
before awaiting any network I/O.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

import httpx

from config import REQUEST_TIMEOUT, VERIFY_CERTS
from errors import NotConnectedError
from models import ConnectionDescriptor

log = logging.getLogger(__name__)


class SessionStore:
    """Holds at most one active ConnectionDescriptor."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active: Optional[ConnectionDescriptor] = None

    def set(self, conn: ConnectionDescriptor) -> None:
        with self._lock:
            self._active = conn

    def clear(self) -> None:
        with self._lock:
            self._active = None

    def get(self) -> Optional[ConnectionDescriptor]:
        with self._lock:
            return self._active

    def require(self) -> ConnectionDescriptor:
        conn = self.get()
        if conn is None:
            raise NotConnectedError()
        return conn


def _build_client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        verify=VERIFY_CERTS,
        timeout=REQUEST_TIMEOUT,
        transport=transport,
    )


class ClientProvider:
    """Lazily builds one shared httpx.AsyncClient and hands it out."""

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        factory: Callable[..., httpx.AsyncClient] = _build_client,
    ) -> None:
        self._lock = threading.Lock()
        self._client: Optional[httpx.AsyncClient] = None
        self._transport = transport
        self._factory = factory

    def get(self) -> httpx.AsyncClient:
        with self._lock:
            if self._client is None:
                try:
                    self._client = self._factory(self._transport)
                except Exception:
                    log.warning("Configured HTTP client could not be built, using defaults", exc_info=True)
                    self._client = httpx.AsyncClient(transport=self._transport)
            return self._client

    async def aclose(self) -> None:
        with self._lock:
            client, self._client = self._client, None
        if client is not None:
            await client.aclose()
