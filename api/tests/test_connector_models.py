"""Tests for connector_models.py — normalization of cluster responses."""

import pytest


class TestIndexSummaryFromCatRow:
    def test_partial_row_defaults(self):
        from connector_models import IndexSummary
        row = {"index": "logs", "health": "green", "status": "open",
               "docs.count": "1000", "pri": "3"}
        s = IndexSummary.from_cat_row(row)
        assert s.name == "logs"
        assert s.health == "green"
        assert s.status == "open"
        assert s.docs_count == 1000
        assert s.primary_shards == 3
        assert s.docs_deleted == 0
        assert s.replica_shards == 0
        assert s.storage_size == ""

    def test_full_row(self):
        from connector_models import IndexSummary
        row = {"health": "yellow", "status": "open", "index": "app-logs",
               "uuid": "u1", "pri": "1", "rep": "1", "docs.count": "42",
               "docs.deleted": "2", "store.size": "12.3kb", "pri.store.size": "12.3kb"}
        s = IndexSummary.from_cat_row(row)
        assert s.replica_shards == 1
        assert s.docs_deleted == 2
        assert s.storage_size == "12.3kb"

    def test_unparsable_count_falls_back(self):
        from connector_models import IndexSummary
        s = IndexSummary.from_cat_row({"index": "closed", "docs.count": None, "pri": "x"})
        assert s.docs_count == 0
        assert s.primary_shards == 0

    def test_list_requires_array(self):
        from connector_models import IndexSummary
        from errors import ResponseParseError
        with pytest.raises(ResponseParseError):
            IndexSummary.list_from_cat({"index": "logs"})

    def test_list_requires_objects(self):
        from connector_models import IndexSummary
        from errors import ResponseParseError
        with pytest.raises(ResponseParseError):
            IndexSummary.list_from_cat(["logs"])

    def test_list_preserves_order(self):
        from connector_models import IndexSummary
        names = [s.name for s in IndexSummary.list_from_cat([{"index": "b"}, {"index": "a"}])]
        assert names == ["b", "a"]


class TestQueryResultFromSearchResponse:
    def test_object_wrapped_total(self):
        from connector_models import QueryResult
        body = {
            "hits": {"total": {"value": 5, "relation": "eq"}, "hits": [{"_id": "1"}]},
            "took": 12,
            "timed_out": False,
            "_shards": {"total": 1, "successful": 1, "failed": 0, "skipped": 0},
        }
        r = QueryResult.from_search_response(body)
        assert r.total == 5
        assert r.took == 12
        assert r.timed_out is False
        assert r.hits == [{"_id": "1"}]
        assert r.shards.total == 1
        assert r.shards.successful == 1

    def test_scalar_total(self):
        from connector_models import QueryResult
        r = QueryResult.from_search_response({"hits": {"total": 5, "hits": []}})
        assert r.total == 5
        assert r.hits == []

    def test_both_total_forms_normalize_identically(self):
        from connector_models import QueryResult
        wrapped = QueryResult.from_search_response({"hits": {"total": {"value": 5}, "hits": []}})
        scalar = QueryResult.from_search_response({"hits": {"total": 5, "hits": []}})
        assert wrapped == scalar

    def test_missing_fields_default(self):
        from connector_models import QueryResult
        r = QueryResult.from_search_response({"hits": {"hits": []}})
        assert r.total == 0
        assert r.took == 0
        assert r.timed_out is False
        assert r.shards.failed == 0
        assert r.shards.skipped == 0

    def test_missing_hits_is_parse_error(self):
        from connector_models import QueryResult
        from errors import ResponseParseError
        with pytest.raises(ResponseParseError):
            QueryResult.from_search_response({"took": 3, "hits": {"total": 0}})

    def test_non_object_body_is_parse_error(self):
        from connector_models import QueryResult
        from errors import ResponseParseError
        with pytest.raises(ResponseParseError):
            QueryResult.from_search_response([1, 2])


class TestClusterHealthFromHealth:
    def test_full_payload(self, health_payload):
        from connector_models import ClusterHealth
        h = ClusterHealth.from_health(health_payload)
        assert h.cluster_name == "docker-cluster"
        assert h.status == "green"
        assert h.number_of_nodes == 3
        assert h.unassigned_shards == 2
        assert h.pending_tasks == 4

    def test_empty_payload_defaults(self):
        from connector_models import ClusterHealth
        h = ClusterHealth.from_health({})
        assert h.cluster_name == ""
        assert h.status == ""
        assert h.number_of_nodes == 0
        assert h.pending_tasks == 0


class TestAdminResults:
    def test_document_write_requires_id(self):
        from connector_models import DocumentWriteResult
        from errors import ResponseParseError
        with pytest.raises(ResponseParseError):
            DocumentWriteResult.from_body({"result": "created"})

    def test_document_write(self):
        from connector_models import DocumentWriteResult
        r = DocumentWriteResult.from_body(
            {"_index": "logs", "_id": "abc", "_version": 1, "result": "created"}
        )
        assert (r.id, r.index, r.version, r.result) == ("abc", "logs", 1, "created")

    def test_delete_by_query(self):
        from connector_models import DeleteByQueryResult
        r = DeleteByQueryResult.from_body({"took": 9, "deleted": 3, "total": 3, "timed_out": False})
        assert r.deleted == 3
        assert r.total == 3

    def test_create_index(self):
        from connector_models import CreateIndexResult
        r = CreateIndexResult.from_body(
            {"acknowledged": True, "shards_acknowledged": True, "index": "logs"}
        )
        assert r.acknowledged and r.shards_acknowledged
        assert r.index == "logs"
