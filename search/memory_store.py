# search/memory_store.py
"""
In-process record store.

Implements the ``RecordStore`` contract over a list of plain dicts so the
search pipeline can run without MongoDB (local development and tests).
Vector similarity is exact cosine similarity computed with numpy; records
without an embedding are invisible to vector retrieval.
"""

import copy
from typing import Any, Dict, Iterable, List, Optional, Sequence

import numpy as np
from bson import ObjectId

from core.custom_logger import CustomLogger
from search.predicates import (
    And,
    Or,
    Predicate,
    TextSearch,
    evaluate,
    get_path,
    text_score,
    values_at,
)
from search.sorting import SortSpec, TEXT_SCORE
from search.store import RecordStore, VectorQuery

logger = CustomLogger().get_logger("memory_store")


def _text_queries(predicate: Predicate) -> List[str]:
    if isinstance(predicate, TextSearch):
        return [predicate.query]
    if isinstance(predicate, (And, Or)):
        return [q for child in predicate.children for q in _text_queries(child)]
    return []


def _sort_records(
    records: List[Dict[str, Any]], sort: SortSpec
) -> List[Dict[str, Any]]:
    ordered = list(records)
    # Stable sorts applied from the least to the most significant key
    for key in reversed(sort.keys):
        field = "score" if key.field == TEXT_SCORE else key.field

        def sort_value(record, field=field):
            value = get_path(record, field)
            return (value is not None, value if value is not None else 0)

        ordered.sort(key=sort_value, reverse=key.direction < 0)
    return ordered


def _project(record: Dict[str, Any], exclude_fields: Sequence[str]) -> Dict[str, Any]:
    return {
        key: copy.deepcopy(value)
        for key, value in record.items()
        if key not in exclude_fields
    }


class InMemoryRecordStore(RecordStore):
    def __init__(
        self, records: Iterable[Dict[str, Any]] = (), vector_field: str = "embeddings"
    ):
        self.vector_field = vector_field
        self._records: List[Dict[str, Any]] = []
        for record in records:
            self.add(record)

    def add(self, record: Dict[str, Any]) -> Dict[str, Any]:
        stored = copy.deepcopy(record)
        stored.setdefault("_id", ObjectId())
        self._records.append(stored)
        return stored

    def __len__(self) -> int:
        return len(self._records)

    def _ann_candidates(self, query: VectorQuery) -> List[Dict[str, Any]]:
        query_vector = np.asarray(query.vector, dtype=float)
        query_norm = np.linalg.norm(query_vector)
        scored = []
        for position, record in enumerate(self._records):
            stored = record.get(self.vector_field)
            if not stored or len(stored) != len(query_vector):
                continue
            vector = np.asarray(stored, dtype=float)
            denominator = np.linalg.norm(vector) * query_norm
            similarity = (
                float(np.dot(vector, query_vector) / denominator)
                if denominator
                else 0.0
            )
            scored.append((similarity, position, record))
        scored.sort(key=lambda item: (-item[0], item[1]))
        candidates = []
        for similarity, _, record in scored[: query.candidate_limit]:
            candidate = dict(record)
            candidate["score"] = similarity
            candidates.append(candidate)
        return candidates

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
        matches = [r for r in self._ann_candidates(query) if evaluate(predicate, r)]
        if sort is not None:
            matches = _sort_records(matches, sort)
        page = matches[skip : skip + limit]
        logger.debug(f"Vector search returned {len(page)} of {len(matches)} candidates")
        return [_project(record, exclude_fields) for record in page]

    def count_vector_matches(
        self,
        query: VectorQuery,
        predicate: Predicate,
        max_time_ms: Optional[int] = None,
    ) -> int:
        return sum(1 for r in self._ann_candidates(query) if evaluate(predicate, r))

    def text_search(
        self,
        predicate: Predicate,
        sort: Optional[SortSpec],
        skip: int,
        limit: int,
        exclude_fields: Sequence[str] = (),
        max_time_ms: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        queries = _text_queries(predicate)
        matches = []
        for record in self._records:
            if not evaluate(predicate, record):
                continue
            match = dict(record)
            if queries:
                match["score"] = sum(text_score(q, record) for q in queries)
            matches.append(match)
        if sort is not None:
            matches = _sort_records(matches, sort)
        page = matches[skip : skip + limit]
        return [_project(record, exclude_fields) for record in page]

    def count(self, predicate: Predicate, max_time_ms: Optional[int] = None) -> int:
        return sum(1 for record in self._records if evaluate(predicate, record))

    def get(self, record_id: Any) -> Optional[Dict[str, Any]]:
        for record in self._records:
            if record.get("_id") == record_id:
                return copy.deepcopy(record)
        return None

    def distinct(self, field: str) -> List[Any]:
        seen = []
        for record in self._records:
            for value in values_at(record, field):
                if value not in seen:
                    seen.append(value)
        return seen

    def numeric_stats(self, field: str) -> Optional[Dict[str, float]]:
        numbers = [
            value
            for record in self._records
            for value in values_at(record, field)
            if isinstance(value, (int, float)) and not isinstance(value, bool)
        ]
        if not numbers:
            return None
        return {
            "min": min(numbers),
            "max": max(numbers),
            "avg": float(np.mean(numbers)),
        }
