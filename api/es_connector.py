"""Elasticsearch session gateway.

Holds one active cluster connection at a time and runs every operation as a
single authenticated HTTP request whose response is normalized into a
connector model. Failures raise ``errors.GatewayError`` subclasses; nothing
is retried.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from auth_headers import build_auth_headers
from connector_models import (
    AcknowledgedResult,
    ClusterHealth,
    ConnectResult,
    CreateIndexResult,
    DeleteByQueryResult,
    DocumentWriteResult,
    IndexSummary,
    QueryResult,
    SessionInfo,
)
from errors import ClusterConnectionError, QuerySyntaxError, ResponseParseError, ServerError
from lenient import dig, lenient_str
from models import ConnectionDescriptor
from prometheus_exporter import track
from session_store import ClientProvider, SessionStore

log = logging.getLogger(__name__)

CONNECTION_HINT = (
    "This may be due to an invalid SSL certificate, network issue, "
    "or incorrect connection details."
)


def _index_path(index: str) -> str:
    """Percent-encode an index expression for use as a path segment."""
    return quote(index, safe=",*")


def _parse_json_text(text: str, what: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise QuerySyntaxError(f"Invalid JSON in {what}: {e}") from e


def _index_section(body: Any, index: str, section: str) -> dict:
    """Pick ``body[index][section]`` from a per-index response.

    Aliases come back keyed by the concrete index name, so a single entry is
    accepted under any key.
    """
    if not isinstance(body, dict):
        raise ResponseParseError(f"Invalid {section} response: expected a JSON object")
    entry = body.get(index)
    if entry is None and len(body) == 1:
        entry = next(iter(body.values()))
    value = dig(entry, section)
    if not isinstance(value, dict):
        raise ResponseParseError(f"Invalid {section} response: no {section} for index '{index}'")
    return value


class ClusterGateway:
    """Operation handlers over a session store and a shared HTTP client."""

    def __init__(
        self,
        session: Optional[SessionStore] = None,
        clients: Optional[ClientProvider] = None,
    ) -> None:
        self.session = session or SessionStore()
        self.clients = clients or ClientProvider()

    async def aclose(self) -> None:
        await self.clients.aclose()

    # ── Request helpers ──────────────────────────────────────────────

    async def _send(
        self,
        conn: ConnectionDescriptor,
        method: str,
        path: str,
        action: str,
        *,
        json_body: Any = None,
        params: Optional[dict] = None,
    ) -> httpx.Response:
        """Issue one request; map request failures and non-2xx statuses."""
        headers = build_auth_headers(conn)
        client = self.clients.get()
        url = f"{conn.base_url}{path}"
        log.debug("%s %s", method, url)
        try:
            response = await client.request(
                method, url, headers=headers, json=json_body, params=params,
            )
        except httpx.DecodingError as e:
            log.warning("%s: undecodable response body from %s (%s)", action, conn.base_url, e)
            raise ResponseParseError(f"{action}: response body could not be decoded: {e}") from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            reason = str(e) or type(e).__name__
            log.warning("%s: cannot reach %s (%s)", action, conn.base_url, reason)
            raise ClusterConnectionError(
                f"Error connecting to Elasticsearch at {conn.base_url}: {reason}. {CONNECTION_HINT}"
            ) from e

        if not response.is_success:
            log.warning("%s: %s %s returned %d", action, method, url, response.status_code)
            raise ServerError(action, response.status_code, response.text)
        return response

    @staticmethod
    def _json(response: httpx.Response, action: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ResponseParseError(f"{action}: response is not valid JSON: {e}") from e

    @classmethod
    def _json_object(cls, response: httpx.Response, action: str) -> dict:
        body = cls._json(response, action)
        if not isinstance(body, dict):
            raise ResponseParseError(f"{action}: expected a JSON object")
        return body

    # ── Session ──────────────────────────────────────────────────────

    async def connect(self, candidate: ConnectionDescriptor) -> ConnectResult:
        """Verify a cluster via its health endpoint, then make it the active session.

        The store is written only after a successful, parsable health check;
        any failure leaves the previous session as it was.
        """
        with track("connect"):
            response = await self._send(candidate, "GET", "/_cluster/health", "Failed to connect")
            health = self._json_object(
                response, "Connected to Elasticsearch but couldn't parse health data",
            )
            cluster_name = lenient_str(health.get("cluster_name"), "unknown")
            status = lenient_str(health.get("status"), "unknown")

            self.session.set(candidate)
            log.info(
                "Connected to Elasticsearch cluster %s (status=%s) at %s",
                cluster_name, status, candidate.base_url,
            )
            return ConnectResult(
                cluster_name=cluster_name,
                status=status,
                connection=candidate,
                health=health,
            )

    async def disconnect(self) -> bool:
        with track("disconnect"):
            self.session.clear()
            log.info("Disconnected from Elasticsearch")
            return True

    def current(self) -> SessionInfo:
        conn = self.session.get()
        return SessionInfo(connected=conn is not None, connection=conn)

    # ── Queries ──────────────────────────────────────────────────────

    async def list_indices(self) -> list[IndexSummary]:
        with track("list_indices"):
            conn = self.session.require()
            response = await self._send(
                conn, "GET", "/_cat/indices", "Failed to get indices",
                params={"format": "json", "v": "true"},
            )
            return IndexSummary.list_from_cat(self._json(response, "Failed to get indices"))

    async def execute_query(self, index: str, query: str) -> QueryResult:
        """Run a search; the query text is validated before anything else."""
        with track("execute_query"):
            body = _parse_json_text(query, "query")
            conn = self.session.require()
            response = await self._send(
                conn, "POST", f"/{_index_path(index)}/_search", "Failed to execute query",
                json_body=body,
            )
            return QueryResult.from_search_response(
                self._json(response, "Failed to execute query"),
            )

    async def get_cluster_health(self) -> ClusterHealth:
        with track("cluster_health"):
            conn = self.session.require()
            response = await self._send(
                conn, "GET", "/_cluster/health", "Failed to get cluster health",
            )
            return ClusterHealth.from_health(
                self._json_object(response, "Failed to get cluster health"),
            )

    # ── Index administration ─────────────────────────────────────────

    async def create_index(self, index: str, body: Optional[str] = None) -> CreateIndexResult:
        """Create an index, optionally with a settings/mappings body."""
        with track("create_index"):
            payload = _parse_json_text(body, "index body") if body and body.strip() else None
            conn = self.session.require()
            response = await self._send(
                conn, "PUT", f"/{_index_path(index)}", "Failed to create index",
                json_body=payload,
            )
            log.info("Created index %s", index)
            return CreateIndexResult.from_body(
                self._json_object(response, "Failed to create index"),
            )

    async def delete_index(self, index: str) -> AcknowledgedResult:
        with track("delete_index"):
            conn = self.session.require()
            response = await self._send(
                conn, "DELETE", f"/{_index_path(index)}", "Failed to delete index",
            )
            log.info("Deleted index %s", index)
            return AcknowledgedResult.from_body(
                self._json_object(response, "Failed to delete index"),
            )

    async def get_index_mappings(self, index: str) -> dict:
        with track("get_index_mappings"):
            conn = self.session.require()
            response = await self._send(
                conn, "GET", f"/{_index_path(index)}/_mapping", "Failed to get index mappings",
            )
            return _index_section(
                self._json(response, "Failed to get index mappings"), index, "mappings",
            )

    async def get_index_settings(self, index: str) -> dict:
        with track("get_index_settings"):
            conn = self.session.require()
            response = await self._send(
                conn, "GET", f"/{_index_path(index)}/_settings", "Failed to get index settings",
            )
            return _index_section(
                self._json(response, "Failed to get index settings"), index, "settings",
            )

    # ── Documents ────────────────────────────────────────────────────

    async def create_document(
        self,
        index: str,
        document: str,
        doc_id: Optional[str] = None,
    ) -> DocumentWriteResult:
        """Index one document; without an id the cluster assigns one."""
        with track("create_document"):
            payload = _parse_json_text(document, "document")
            conn = self.session.require()
            if doc_id:
                method, path = "PUT", f"/{_index_path(index)}/_doc/{quote(doc_id, safe='')}"
            else:
                method, path = "POST", f"/{_index_path(index)}/_doc"
            response = await self._send(
                conn, method, path, "Failed to create document",
                json_body=payload, params={"refresh": "true"},
            )
            return DocumentWriteResult.from_body(
                self._json_object(response, "Failed to create document"),
            )

    async def delete_documents(self, index: str, ids: list[str]) -> DeleteByQueryResult:
        with track("delete_documents"):
            conn = self.session.require()
            result = await self._delete_by_query(conn, index, {"ids": {"values": list(ids)}})
            log.info("Deleted %d of %d requested documents from %s", result.deleted, len(ids), index)
            return result

    async def delete_all_documents(self, index: str) -> DeleteByQueryResult:
        with track("delete_all_documents"):
            conn = self.session.require()
            result = await self._delete_by_query(conn, index, {"match_all": {}})
            log.info("Deleted all %d documents from %s", result.deleted, index)
            return result

    async def _delete_by_query(
        self,
        conn: ConnectionDescriptor,
        index: str,
        query: dict,
    ) -> DeleteByQueryResult:
        response = await self._send(
            conn, "POST", f"/{_index_path(index)}/_delete_by_query", "Failed to delete documents",
            json_body={"query": query}, params={"refresh": "true"},
        )
        return DeleteByQueryResult.from_body(
            self._json_object(response, "Failed to delete documents"),
        )
