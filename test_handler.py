#!/usr/bin/env python3
"""Tests for the single-document Data API operations."""

import pytest

from atlas_client.config import AppConfig, DataApiConfig, TransportConfig
from atlas_client.errors import ConfigurationError, TransportError
from atlas_client.handler import MongoHandler, mongo_handler
from atlas_client.models import Query
from atlas_client.transports import HttpTransport, MockTransport

OID = "507f1f77bcf86cd799439011"

CONFIG = AppConfig(
    data_api=DataApiConfig(
        api_key="test-key",
        api_base_url="https://data.example.test/app/test",
        cluster_name="Cluster0",
    ),
    transport=TransportConfig(type="mock"),
)

TARGET = {"dataSource": "Cluster0", "database": "shop", "collection": "orders"}


@pytest.fixture
def transport():
    return MockTransport()


@pytest.fixture
def handler(transport):
    return MongoHandler("shop", "orders", CONFIG, transport=transport)


def test_find_one_normalizes_identity(handler, transport):
    transport.queue({"document": {"_id": OID, "total": 12}})

    document = handler.find_one(Query(filter={"total": 12}))

    assert document == {"id": OID, "total": 12}
    call = transport.calls[0]
    assert call.action == "findOne"
    assert call.body == {**TARGET, "filter": {"total": 12}}


def test_find_one_with_no_match_returns_none(handler, transport):
    transport.queue({"document": None})

    assert handler.find_one(Query(filter={"total": -1})) is None


def test_find_one_defaults_missing_filter_to_empty(handler, transport):
    transport.queue({"document": None})

    handler.find_one()

    assert transport.calls[0].body["filter"] == {}


def test_find_one_accepts_plain_dict_query(handler, transport):
    transport.queue({"document": {"_id": OID}})

    handler.find_one({"filter": {"status": "open"}})

    assert transport.calls[0].body["filter"] == {"status": "open"}


def test_find_many_preserves_store_order(handler, transport):
    transport.queue(
        {
            "documents": [
                {"_id": "b", "rank": 2},
                {"_id": "a", "rank": 1},
                {"_id": "c", "rank": 3},
            ]
        }
    )

    documents = handler.find_many(Query(filter={}, sort={"rank": -1}))

    assert [document["id"] for document in documents] == ["b", "a", "c"]
    assert all("_id" not in document for document in documents)
    assert transport.calls[0].action == "find"
    assert transport.calls[0].body["sort"] == {"rank": -1}


def test_find_many_sends_empty_filter_and_sort(handler, transport):
    transport.queue({"documents": []})

    assert handler.find_many() == []
    body = transport.calls[0].body
    assert body["filter"] == {}
    assert body["sort"] == {}


def test_find_many_tolerates_missing_documents_field(handler, transport):
    transport.queue({})

    assert handler.find_many(Query(filter={"x": 1})) == []


def test_find_by_id_wraps_object_id(handler, transport):
    transport.queue({"document": {"_id": OID, "total": 3}})

    document = handler.find_by_id(OID)

    assert document["id"] == OID
    assert transport.calls[0].body["filter"] == {"_id": {"$oid": OID}}


@pytest.mark.parametrize("method,action", [("update_one", "updateOne"), ("update_many", "updateMany")])
def test_update_reports_modified(handler, transport, method, action):
    transport.queue({"matchedCount": 1, "modifiedCount": 1})

    modified = getattr(handler, method)(
        Query(filter={"status": "open"}, update={"$set": {"status": "closed"}}), upsert=True
    )

    assert modified is True
    call = transport.calls[0]
    assert call.action == action
    assert call.body == {
        **TARGET,
        "filter": {"status": "open"},
        "update": {"$set": {"status": "closed"}},
        "upsert": True,
    }


def test_update_with_no_match_returns_false(handler, transport):
    transport.queue({"matchedCount": 0, "modifiedCount": 0})

    assert handler.update_one(Query(filter={"missing": True}, update={"$set": {"a": 1}})) is False
    assert transport.calls[0].body["upsert"] is False


def test_update_defaults_missing_update_to_empty(handler, transport):
    transport.queue({"modifiedCount": 0})

    handler.update_many(Query(filter={"a": 1}))

    assert transport.calls[0].body["update"] == {}


@pytest.mark.parametrize("method,action", [("delete_one", "deleteOne"), ("delete_many", "deleteMany")])
def test_delete_reports_deleted_count(handler, transport, method, action):
    transport.queue({"deletedCount": 2})

    assert getattr(handler, method)(Query(filter={"status": "stale"})) is True
    assert transport.calls[0].action == action
    assert transport.calls[0].body == {**TARGET, "filter": {"status": "stale"}}


def test_delete_with_no_match_returns_false(handler, transport):
    transport.queue({"deletedCount": 0})

    assert handler.delete_one(Query(filter={"missing": True})) is False


def test_insert_one_returns_new_id(handler, transport):
    transport.queue({"insertedId": OID})

    assert handler.insert_one({"total": 5}) == OID
    assert transport.actions == ["insertOne"]
    assert transport.calls[0].body == {**TARGET, "document": {"total": 5}}


def test_insert_one_unwraps_extended_json_id(handler, transport):
    transport.queue({"insertedId": {"$oid": OID}})

    assert handler.insert_one({"total": 5}) == OID


def test_insert_one_with_return_document_refetches(handler, transport):
    transport.queue({"insertedId": OID}, {"document": {"_id": OID, "total": 5}})

    document = handler.insert_one({"total": 5}, return_document=True)

    assert document == {"id": OID, "total": 5}
    assert transport.actions == ["insertOne", "findOne"]
    assert transport.calls[1].body["filter"] == {"_id": {"$oid": OID}}


def test_insert_one_refetch_racing_a_delete_returns_none(handler, transport):
    transport.queue({"insertedId": OID}, {"document": None})

    assert handler.insert_one({"total": 5}, return_document=True) is None


def test_insert_many_returns_ids(handler, transport):
    transport.queue({"insertedIds": ["a1", "a2"]})

    assert handler.insert_many([{"n": 1}, {"n": 2}]) == ["a1", "a2"]
    assert transport.calls[0].body["documents"] == [{"n": 1}, {"n": 2}]


def test_transport_failure_propagates(handler, transport):
    transport.queue(TransportError("boom", action="findOne"))

    with pytest.raises(TransportError):
        handler.find_one(Query(filter={"a": 1}))


def test_handler_builds_transport_from_config():
    config = AppConfig(
        data_api=CONFIG.data_api,
        transport=TransportConfig(type="http", params={"timeout": 3}),
    )

    handler = MongoHandler("shop", "orders", config)

    assert isinstance(handler._transport, HttpTransport)
    assert handler.target.data_source == "Cluster0"


def test_unknown_transport_type_is_rejected():
    config = AppConfig(data_api=CONFIG.data_api, transport=TransportConfig(type="carrier-pigeon"))

    with pytest.raises(ConfigurationError):
        MongoHandler("shop", "orders", config)


def test_mongo_handler_builds_from_scripted_config():
    config = AppConfig(
        data_api=CONFIG.data_api,
        transport=TransportConfig(type="mock", params={"responses": [{"document": None}]}),
    )

    handler = mongo_handler("shop", "orders", config)

    assert handler.find_one(Query(filter={"a": 1})) is None


@pytest.mark.parametrize(
    "method,args",
    [
        ("delete_many", ({"status": "stale"},)),
        ("delete_one", ({"status": "stale"},)),
        ("update_many", ({"name": "x", "update": {"$set": {"a": 1}}},)),
        ("find_one", ({"total": 12},)),
    ],
)
def test_bare_filter_mapping_is_rejected(handler, transport, method, args):
    """A filter passed without its "filter" key must not widen to the whole collection."""
    transport.queue({"deletedCount": 42})

    with pytest.raises(ValueError):
        getattr(handler, method)(*args)

    assert transport.calls == []


def test_insert_one_without_inserted_id_raises(handler, transport):
    transport.queue({}, {"document": None})

    with pytest.raises(TransportError, match="insertedId"):
        handler.insert_one({"total": 5}, return_document=True)

    assert transport.actions == ["insertOne"]
