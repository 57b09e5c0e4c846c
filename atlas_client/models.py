"""Value types exchanged between callers, the handler and the transport."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

Document = Dict[str, Any]
QUERY_KEYS = frozenset({"filter", "sort", "update"})


@dataclass
class Query:
    """Filter, sort and update specs passed through to the store untouched."""

    filter: Optional[Dict[str, Any]] = None
    sort: Optional[Dict[str, Any]] = None
    update: Optional[Dict[str, Any]] = None

    @classmethod
    def coerce(cls, value: Union["Query", Mapping[str, Any], None]) -> "Query":
        """Accept a ``Query`` or a plain ``{"filter": ..., "sort": ..., "update": ...}`` dict."""
        if value is None:
            return cls()
        if isinstance(value, Query):
            return value
        unknown = set(value) - QUERY_KEYS
        if unknown:
            raise ValueError(
                f"Query mappings take only {sorted(QUERY_KEYS)} keys, got {sorted(unknown)}; "
                "wrap a bare filter as {\"filter\": ...}"
            )
        return cls(
            filter=value.get("filter"),
            sort=value.get("sort"),
            update=value.get("update"),
        )

    def filter_or_empty(self) -> Dict[str, Any]:
        return self.filter if self.filter else {}

    def sort_or_empty(self) -> Dict[str, Any]:
        return self.sort if self.sort else {}

    def update_or_empty(self) -> Dict[str, Any]:
        return self.update if self.update else {}


@dataclass
class FindOneAndUpdateResult:
    found: bool = False
    updated: bool = False
    document: Optional[Document] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "found": self.found,
            "updated": self.updated,
            "document": self.document,
        }


@dataclass
class FindOneAndDeleteResult:
    found: bool = False
    deleted: bool = False
    document: Optional[Document] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "found": self.found,
            "deleted": self.deleted,
            "document": self.document,
        }


@dataclass
class ActionResponse:
    """The recognised subset of a Data API response body.

    Any other field the store sends back is ignored.
    """

    document: Optional[Document] = None
    documents: List[Document] = field(default_factory=list)
    inserted_id: Optional[Any] = None
    inserted_ids: List[Any] = field(default_factory=list)
    matched_count: int = 0
    modified_count: int = 0
    deleted_count: Optional[int] = None
    upserted_id: Optional[Any] = None

    @classmethod
    def from_json(cls, payload: Optional[Dict[str, Any]]) -> "ActionResponse":
        data = payload or {}
        deleted = data.get("deletedCount")
        return cls(
            document=data.get("document"),
            documents=list(data.get("documents") or []),
            inserted_id=data.get("insertedId"),
            inserted_ids=list(data.get("insertedIds") or []),
            matched_count=int(data.get("matchedCount") or 0),
            modified_count=int(data.get("modifiedCount") or 0),
            deleted_count=int(deleted) if deleted is not None else None,
            upserted_id=data.get("upsertedId"),
        )

    @property
    def removed_count(self) -> int:
        """Deleted documents, falling back to ``modifiedCount`` when absent."""
        if self.deleted_count is not None:
            return self.deleted_count
        return self.modified_count
