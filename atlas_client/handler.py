"""Single-document operations against one Data API collection."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .bulk import BulkMaterializer
from .config import AppConfig, StoreTarget
from .errors import TransportError
from .identity import to_public, to_store_filter, unwrap_object_id
from .interfaces import Transport
from .models import (
    ActionResponse,
    Document,
    FindOneAndDeleteResult,
    FindOneAndUpdateResult,
    Query,
)
from .orchestrator import FindOneAndDelete, FindOneAndUpdate
from .transports.registry import build_default_factory

logger = logging.getLogger(__name__)

QueryLike = Union[Query, Mapping[str, Any], None]


class MongoHandler:
    """Client for one ``(database, collection)`` pair.

    Holds nothing but the store target and the transport, so instances can be
    created and thrown away freely. Every primitive is exactly one round trip
    except ``insert_one``/``insert_many`` with documents requested.
    """

    def __init__(
        self,
        database: str,
        collection: str,
        config: AppConfig,
        transport: Optional[Transport] = None,
        bulk_workers: int = 1,
    ) -> None:
        self._target = StoreTarget(
            data_source=config.data_api.cluster_name,
            database=database,
            collection=collection,
        )
        if transport is None:
            transport = build_default_factory().create(config.data_api, config.transport)
        self._transport = transport
        self._materializer = BulkMaterializer(self.find_by_id, max_workers=bulk_workers)

        logger.info(
            "Initialized Data API handler for %s/%s on %s",
            database,
            collection,
            self._target.data_source,
        )

    @property
    def target(self) -> StoreTarget:
        return self._target

    def _execute(self, action: str, **fields: Any) -> ActionResponse:
        body: Dict[str, Any] = self._target.to_body()
        body.update(fields)
        logger.debug(
            "%s on %s.%s", action, self._target.database, self._target.collection
        )
        return ActionResponse.from_json(self._transport.send(action, body))

    # Reads

    def find_one(self, query: QueryLike = None) -> Optional[Document]:
        """Return the first matching document, or ``None`` when nothing matches."""
        query = Query.coerce(query)
        response = self._execute("findOne", filter=query.filter_or_empty())
        if response.document is None:
            return None
        return to_public(response.document)

    def find_many(self, query: QueryLike = None) -> List[Document]:
        """Return every matching document in the order the store sent them."""
        query = Query.coerce(query)
        response = self._execute(
            "find", filter=query.filter_or_empty(), sort=query.sort_or_empty()
        )
        return [to_public(document) for document in response.documents]

    def find_by_id(self, document_id: str) -> Optional[Document]:
        return self.find_one(Query(filter=to_store_filter(document_id)))

    # Writes

    def update_one(self, query: QueryLike, upsert: bool = False) -> bool:
        return self._update("updateOne", Query.coerce(query), upsert)

    def update_many(self, query: QueryLike, upsert: bool = False) -> bool:
        return self._update("updateMany", Query.coerce(query), upsert)

    def _update(self, action: str, query: Query, upsert: bool) -> bool:
        response = self._execute(
            action,
            filter=query.filter_or_empty(),
            update=query.update_or_empty(),
            upsert=upsert,
        )
        return response.modified_count > 0

    def delete_one(self, query: QueryLike) -> bool:
        return self._delete("deleteOne", Query.coerce(query))

    def delete_many(self, query: QueryLike) -> bool:
        return self._delete("deleteMany", Query.coerce(query))

    def _delete(self, action: str, query: Query) -> bool:
        response = self._execute(action, filter=query.filter_or_empty())
        return response.removed_count > 0

    def insert_one(
        self, document: Document, return_document: bool = False
    ) -> Union[str, Optional[Document]]:
        """Insert ``document`` and return its new id, or the stored document.

        The re-fetch for ``return_document=True`` is a second request. A
        concurrent delete in between yields ``None``.
        """
        response = self._execute("insertOne", document=document)
        if response.inserted_id is None:
            raise TransportError("insertOne response has no insertedId", action="insertOne")
        inserted_id = unwrap_object_id(response.inserted_id)
        if not return_document:
            return inserted_id
        return self.find_by_id(inserted_id)

    def insert_many(
        self, documents: Sequence[Document], return_documents: bool = False
    ) -> List[Any]:
        """Insert ``documents`` in one request.

        Returns the new ids in input order. With ``return_documents=True`` each
        id is looked up with its own ``findOne`` and the documents are
        returned in the same order.
        """
        response = self._execute("insertMany", documents=list(documents))
        inserted_ids = [unwrap_object_id(value) for value in response.inserted_ids]
        if not return_documents:
            return inserted_ids
        return self._materializer.materialize(inserted_ids)

    # Composite operations

    def find_one_and_update(
        self, query: QueryLike, return_updated: bool = False, upsert: bool = False
    ) -> FindOneAndUpdateResult:
        operation = FindOneAndUpdate(
            self, Query.coerce(query), return_updated=return_updated, upsert=upsert
        )
        return operation.run()

    def find_one_and_delete(self, query: QueryLike) -> FindOneAndDeleteResult:
        return FindOneAndDelete(self, Query.coerce(query)).run()

    def find_by_id_and_update(
        self,
        document_id: str,
        update: Dict[str, Any],
        return_updated: bool = False,
        upsert: bool = False,
    ) -> FindOneAndUpdateResult:
        query = Query(filter=to_store_filter(document_id), update=update)
        return self.find_one_and_update(query, return_updated=return_updated, upsert=upsert)

    def find_by_id_and_delete(self, document_id: str) -> FindOneAndDeleteResult:
        return self.find_one_and_delete(Query(filter=to_store_filter(document_id)))


def mongo_handler(
    database: str,
    collection: str,
    config: AppConfig,
    transport: Optional[Transport] = None,
) -> MongoHandler:
    """Build a handler, warning first about any missing Data API settings."""
    config.data_api.warn_if_incomplete()
    return MongoHandler(database, collection, config, transport=transport)
