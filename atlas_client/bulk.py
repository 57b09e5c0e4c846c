"""Re-fetching freshly inserted documents one id at a time."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, List, Optional, Sequence

from .models import Document

logger = logging.getLogger(__name__)

FindById = Callable[[str], Optional[Document]]


class BulkMaterializer:
    """Turns the ids returned by ``insertMany`` into full documents.

    One ``findOne`` per id, no multi-get: a single ``find`` with ``$in`` would
    have to reconcile partial matches against the id list. Results keep the
    order of the ids. A document deleted before its lookup comes back as
    ``None`` in its slot.

    With ``max_workers`` above one the lookups run on a thread pool. They are
    read-only, so only the per-id association has to be preserved.
    """

    def __init__(self, find_by_id: FindById, max_workers: int = 1) -> None:
        self._find_by_id = find_by_id
        self._max_workers = max(int(max_workers), 1)

    def materialize(self, ids: Sequence[str]) -> List[Optional[Document]]:
        if self._max_workers == 1 or len(ids) <= 1:
            return self._sequential(ids)
        return self._parallel(ids)

    def _sequential(self, ids: Sequence[str]) -> List[Optional[Document]]:
        documents: List[Optional[Document]] = []
        for document_id in ids:
            documents.append(self._find_by_id(document_id))
        logger.debug("Materialized %d inserted documents sequentially", len(documents))
        return documents

    def _parallel(self, ids: Sequence[str]) -> List[Optional[Document]]:
        slots: Dict[int, Optional[Document]] = {}
        workers = min(self._max_workers, len(ids))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_index = {
                executor.submit(self._find_by_id, document_id): index
                for index, document_id in enumerate(ids)
            }
            for future in as_completed(future_to_index):
                slots[future_to_index[future]] = future.result()
        logger.debug(
            "Materialized %d inserted documents with %d workers", len(slots), workers
        )
        return [slots[index] for index in range(len(ids))]
