"""Composite operations built from single-round-trip primitives.

Each composite call walks a short state machine::

    LOCATE -> MUTATE -> RESOLVE -> DONE
       |
       +-- no match --------------> DONE

LOCATE runs ``findOne`` with the caller's filter. MUTATE runs ``updateOne`` or
``deleteOne`` with the same filter. RESOLVE picks the document handed back.

The Data API has no multi-action transactions and nothing here adds locks or
version checks. The document located in LOCATE is not re-verified before
MUTATE. If another writer deletes it in between, MUTATE touches nothing and
the result reads ``found=True`` with ``updated=False`` / ``deleted=False``.
Any exception raised by a step aborts the run; callers never see a partial
result.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Generic, Optional, TypeVar

from .models import Document, FindOneAndDeleteResult, FindOneAndUpdateResult, Query

if TYPE_CHECKING:
    from .handler import MongoHandler

logger = logging.getLogger(__name__)

R = TypeVar("R")


class Step(Enum):
    LOCATE = "locate"
    MUTATE = "mutate"
    RESOLVE = "resolve"
    DONE = "done"


class CompositeOperation(ABC, Generic[R]):
    """One run of a composite operation. Not reusable across calls."""

    name = "composite"

    def __init__(self, handler: "MongoHandler", query: Query) -> None:
        self._handler = handler
        self._query = query
        self._snapshot: Optional[Document] = None
        self.step = Step.LOCATE
        self.result = self._initial_result()

    @abstractmethod
    def _initial_result(self) -> R:
        ...

    @abstractmethod
    def _mutate(self) -> Step:
        ...

    @abstractmethod
    def _resolve(self) -> Step:
        ...

    def _locate_query(self) -> Query:
        return Query(filter=self._query.filter)

    def _locate(self) -> Step:
        self._snapshot = self._handler.find_one(self._locate_query())
        if self._snapshot is None:
            return Step.DONE
        self.result.found = True
        return Step.MUTATE

    def run(self) -> R:
        transitions: Dict[Step, Callable[[], Step]] = {
            Step.LOCATE: self._locate,
            Step.MUTATE: self._mutate,
            Step.RESOLVE: self._resolve,
        }
        while self.step is not Step.DONE:
            current = self.step
            self.step = transitions[current]()
            logger.debug("%s: %s -> %s", self.name, current.value, self.step.value)
        return self.result


class FindOneAndUpdate(CompositeOperation[FindOneAndUpdateResult]):
    """Locate, update, then hand back either the snapshot or a fresh re-fetch."""

    name = "findOneAndUpdate"

    def __init__(
        self,
        handler: "MongoHandler",
        query: Query,
        return_updated: bool = False,
        upsert: bool = False,
    ) -> None:
        super().__init__(handler, query)
        self._return_updated = return_updated
        self._upsert = upsert

    def _initial_result(self) -> FindOneAndUpdateResult:
        return FindOneAndUpdateResult()

    def _mutate(self) -> Step:
        self.result.updated = self._handler.update_one(self._query, upsert=self._upsert)
        return Step.RESOLVE

    def _resolve(self) -> Step:
        if self._return_updated:
            self.result.document = self._handler.find_one(self._locate_query())
        else:
            self.result.document = self._snapshot
        return Step.DONE


class FindOneAndDelete(CompositeOperation[FindOneAndDeleteResult]):
    """Locate, delete, then hand back the document as it was before deletion."""

    name = "findOneAndDelete"

    def _initial_result(self) -> FindOneAndDeleteResult:
        return FindOneAndDeleteResult()

    def _mutate(self) -> Step:
        self.result.deleted = self._handler.delete_one(self._query)
        return Step.RESOLVE

    def _resolve(self) -> Step:
        self.result.document = self._snapshot
        return Step.DONE
