"""Mapping between the store's ``_id`` field and the public ``id`` field."""

from __future__ import annotations

from typing import Any, Dict, Mapping

STORE_ID_FIELD = "_id"
PUBLIC_ID_FIELD = "id"
OBJECT_ID_KEY = "$oid"


def unwrap_object_id(value: Any) -> Any:
    """Return the hex string inside an Extended JSON ``{"$oid": ...}`` reference."""
    if isinstance(value, Mapping) and set(value) == {OBJECT_ID_KEY}:
        return value[OBJECT_ID_KEY]
    return value


def to_public(document: Mapping[str, Any]) -> Dict[str, Any]:
    """Rename ``_id`` to ``id`` on a document coming back from the store.

    A document without ``_id`` is returned unchanged (as a copy).
    """
    public = dict(document)
    if STORE_ID_FIELD not in public:
        return public
    public[PUBLIC_ID_FIELD] = unwrap_object_id(public.pop(STORE_ID_FIELD))
    return public


def to_store_filter(document_id: str) -> Dict[str, Any]:
    """Build the filter matching a single document by its public id."""
    return {STORE_ID_FIELD: {OBJECT_ID_KEY: f"{document_id}"}}
