"""Pydantic models for normalized cluster responses.

Each model is built from a raw wire payload through the ``lenient`` helpers,
so missing fields take typed defaults. Shape violations that make a payload
meaningless raise ``ResponseParseError``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from errors import ResponseParseError
from lenient import dig, lenient_bool, lenient_int, lenient_str
from models import ConnectionDescriptor


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# -- Session ----------------------------------------------------------------


class ConnectResult(_Frozen):
    connected: bool = True
    cluster_name: str
    status: str
    connection: ConnectionDescriptor
    health: dict[str, Any]


class SessionInfo(_Frozen):
    connected: bool
    connection: ConnectionDescriptor | None = None


# -- Indices ----------------------------------------------------------------


class IndexSummary(_Frozen):
    name: str = ""
    health: str = ""
    status: str = ""
    docs_count: int = 0
    docs_deleted: int = 0
    primary_shards: int = 0
    replica_shards: int = 0
    storage_size: str = ""

    @classmethod
    def from_cat_row(cls, row: dict) -> "IndexSummary":
        """Map one ``_cat/indices?format=json`` row; counts arrive as strings."""
        return cls(
            name=lenient_str(row.get("index")),
            health=lenient_str(row.get("health")),
            status=lenient_str(row.get("status")),
            docs_count=lenient_int(row.get("docs.count")),
            docs_deleted=lenient_int(row.get("docs.deleted")),
            primary_shards=lenient_int(row.get("pri")),
            replica_shards=lenient_int(row.get("rep")),
            storage_size=lenient_str(row.get("store.size")),
        )

    @classmethod
    def list_from_cat(cls, payload: Any) -> list["IndexSummary"]:
        if not isinstance(payload, list):
            raise ResponseParseError("Invalid indices response: expected a JSON array")
        summaries = []
        for row in payload:
            if not isinstance(row, dict):
                raise ResponseParseError("Invalid indices response: expected an array of objects")
            summaries.append(cls.from_cat_row(row))
        return summaries


# -- Search -----------------------------------------------------------------


class QueryShards(_Frozen):
    total: int = 0
    successful: int = 0
    failed: int = 0
    skipped: int = 0


class QueryResult(_Frozen):
    hits: list[Any] = Field(default_factory=list)
    total: int = 0
    took: int = 0
    timed_out: bool = False
    shards: QueryShards = Field(default_factory=QueryShards)

    @classmethod
    def from_search_response(cls, body: Any) -> "QueryResult":
        hits = dig(body, "hits", "hits")
        if not isinstance(hits, list):
            raise ResponseParseError("Invalid search response: missing hits.hits array")

        # 7.x+ wraps the count as {"value": n, "relation": ...}; 6.x sends a bare number
        raw_total = dig(body, "hits", "total")
        if isinstance(raw_total, dict):
            total = lenient_int(raw_total.get("value"))
        else:
            total = lenient_int(raw_total)

        shards = body.get("_shards")
        return cls(
            hits=hits,
            total=total,
            took=lenient_int(body.get("took")),
            timed_out=lenient_bool(body.get("timed_out")),
            shards=QueryShards(
                total=lenient_int(dig(shards, "total")),
                successful=lenient_int(dig(shards, "successful")),
                failed=lenient_int(dig(shards, "failed")),
                skipped=lenient_int(dig(shards, "skipped")),
            ),
        )


# -- Cluster ----------------------------------------------------------------


class ClusterHealth(_Frozen):
    cluster_name: str = ""
    status: str = ""
    number_of_nodes: int = 0
    number_of_data_nodes: int = 0
    active_primary_shards: int = 0
    active_shards: int = 0
    relocating_shards: int = 0
    initializing_shards: int = 0
    unassigned_shards: int = 0
    pending_tasks: int = 0

    @classmethod
    def from_health(cls, body: dict) -> "ClusterHealth":
        return cls(
            cluster_name=lenient_str(body.get("cluster_name")),
            status=lenient_str(body.get("status")),
            number_of_nodes=lenient_int(body.get("number_of_nodes")),
            number_of_data_nodes=lenient_int(body.get("number_of_data_nodes")),
            active_primary_shards=lenient_int(body.get("active_primary_shards")),
            active_shards=lenient_int(body.get("active_shards")),
            relocating_shards=lenient_int(body.get("relocating_shards")),
            initializing_shards=lenient_int(body.get("initializing_shards")),
            unassigned_shards=lenient_int(body.get("unassigned_shards")),
            pending_tasks=lenient_int(body.get("number_of_pending_tasks")),
        )


# -- Administrative results -------------------------------------------------


class AcknowledgedResult(_Frozen):
    acknowledged: bool = False

    @classmethod
    def from_body(cls, body: dict) -> "AcknowledgedResult":
        return cls(acknowledged=lenient_bool(body.get("acknowledged")))


class CreateIndexResult(_Frozen):
    acknowledged: bool = False
    shards_acknowledged: bool = False
    index: str = ""

    @classmethod
    def from_body(cls, body: dict) -> "CreateIndexResult":
        return cls(
            acknowledged=lenient_bool(body.get("acknowledged")),
            shards_acknowledged=lenient_bool(body.get("shards_acknowledged")),
            index=lenient_str(body.get("index")),
        )


class DocumentWriteResult(_Frozen):
    id: str
    index: str = ""
    result: str = ""
    version: int = 0

    @classmethod
    def from_body(cls, body: dict) -> "DocumentWriteResult":
        doc_id = body.get("_id")
        if not isinstance(doc_id, str):
            raise ResponseParseError("Invalid document response: missing _id")
        return cls(
            id=doc_id,
            index=lenient_str(body.get("_index")),
            result=lenient_str(body.get("result")),
            version=lenient_int(body.get("_version")),
        )


class DeleteByQueryResult(_Frozen):
    deleted: int = 0
    total: int = 0
    took: int = 0
    timed_out: bool = False

    @classmethod
    def from_body(cls, body: dict) -> "DeleteByQueryResult":
        return cls(
            deleted=lenient_int(body.get("deleted")),
            total=lenient_int(body.get("total")),
            took=lenient_int(body.get("took")),
            timed_out=lenient_bool(body.get("timed_out")),
        )
