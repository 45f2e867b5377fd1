# search/store.py
"""
Record store contract consumed by the search executors.

Implementations raise ``StoreUnavailableError`` when the backend cannot be
reached and ``QueryRejectedError`` when it refuses a query (malformed
predicate, missing index). ``max_time_ms`` is a server-side time limit derived
from the caller's deadline; ``None`` means unlimited.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from search.predicates import Predicate
from search.sorting import SortSpec


@dataclass(frozen=True)
class VectorQuery:
    """Approximate nearest-neighbour request"""

    vector: Sequence[float]
    num_candidates: int
    candidate_limit: int


class RecordStore(ABC):
    @abstractmethod
    def vector_search(
        self,
        query: VectorQuery,
        predicate: Predicate,
        sort: Optional[SortSpec],
        skip: int,
        limit: int,
        exclude_fields: Sequence[str] = (),
        max_time_ms: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """ANN retrieval, then filter, optional re-sort, and pagination"""

    @abstractmethod
    def count_vector_matches(
        self,
        query: VectorQuery,
        predicate: Predicate,
        max_time_ms: Optional[int] = None,
    ) -> int:
        """Number of ANN candidates that satisfy the predicate"""

    @abstractmethod
    def text_search(
        self,
        predicate: Predicate,
        sort: Optional[SortSpec],
        skip: int,
        limit: int,
        exclude_fields: Sequence[str] = (),
        max_time_ms: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Lexical retrieval with native relevance scoring"""

    @abstractmethod
    def count(self, predicate: Predicate, max_time_ms: Optional[int] = None) -> int:
        """Exact number of records matching the predicate"""

    @abstractmethod
    def get(self, record_id: Any) -> Optional[Dict[str, Any]]:
        """Single record by primary key, or None"""

    @abstractmethod
    def distinct(self, field: str) -> List[Any]:
        """Distinct values at ``field``; list values are flattened"""

    @abstractmethod
    def numeric_stats(self, field: str) -> Optional[Dict[str, float]]:
        """``min``/``max``/``avg`` over numeric values at ``field``, None if empty"""
