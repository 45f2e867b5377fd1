# mangodatabase/record_store.py
"""MongoDB-backed record store: Atlas ``$vectorSearch`` plus ``$text``/regex find."""

from typing import Any, Dict, List, Optional, Sequence

from pymongo.collection import Collection
from pymongo.errors import (
    ConnectionFailure,
    ExecutionTimeout,
    OperationFailure,
    PyMongoError,
)

from core.config import AppConfig
from core.custom_logger import CustomLogger
from core.exceptions import (
    QueryRejectedError,
    SearchDeadlineExceededError,
    StoreUnavailableError,
)
from mangodatabase.query_renderer import (
    SCORE_FIELD,
    VECTOR_SCORE_META,
    exclusion_projection,
    render_predicate,
    render_sort,
    render_sort_stage,
)
from search.predicates import Predicate, contains_text_search
from search.sorting import SortSpec
from search.store import RecordStore, VectorQuery

logger = CustomLogger().get_logger("mongo_record_store")


def _translate(error: PyMongoError, operation: str) -> Exception:
    """Map a driver error onto the service's error taxonomy"""
    if isinstance(error, ExecutionTimeout):
        return SearchDeadlineExceededError(
            f"{operation} exceeded its time limit", details={"error": str(error)}
        )
    if isinstance(error, ConnectionFailure):
        return StoreUnavailableError(
            f"MongoDB unreachable during {operation}", details={"error": str(error)}
        )
    if isinstance(error, OperationFailure):
        return QueryRejectedError(
            f"MongoDB rejected {operation}: {error}",
            details={"code": error.code, "error": str(error)},
        )
    return StoreUnavailableError(
        f"MongoDB error during {operation}: {error}", details={"error": str(error)}
    )


class MongoRecordStore(RecordStore):
    def __init__(
        self,
        collection: Collection,
        vector_field: str = AppConfig.VECTOR_FIELD,
        index_name: str = AppConfig.VECTOR_INDEX_NAME,
    ):
        self.collection = collection
        self.vector_field = vector_field
        self.index_name = index_name

    def _vector_stage(self, query: VectorQuery) -> Dict[str, Any]:
        return {
            "$vectorSearch": {
                "index": self.index_name,
                "path": self.vector_field,
                "queryVector": list(query.vector),
                "numCandidates": query.num_candidates,
                "limit": query.candidate_limit,
            }
        }

    def _vector_base(
        self, query: VectorQuery, predicate: Predicate
    ) -> List[Dict[str, Any]]:
        # $vectorSearch must be the first stage; filters apply to its candidates
        pipeline = [
            self._vector_stage(query),
            {"$addFields": {SCORE_FIELD: VECTOR_SCORE_META}},
        ]
        match = render_predicate(predicate)
        if match:
            pipeline.append({"$match": match})
        return pipeline

    def build_vector_pipeline(
        self,
        query: VectorQuery,
        predicate: Predicate,
        sort: Optional[SortSpec],
        skip: int,
        limit: int,
        exclude_fields: Sequence[str] = (),
    ) -> List[Dict[str, Any]]:
        pipeline = self._vector_base(query, predicate)
        sort_stage = render_sort_stage(sort)
        if sort_stage:
            pipeline.append(sort_stage)
        pipeline.append({"$skip": skip})
        pipeline.append({"$limit": limit})
        projection = exclusion_projection(exclude_fields)
        if projection:
            pipeline.append({"$project": projection})
        return pipeline

    def build_vector_count_pipeline(
        self, query: VectorQuery, predicate: Predicate
    ) -> List[Dict[str, Any]]:
        return self._vector_base(query, predicate) + [{"$count": "total"}]

    @staticmethod
    def _time_limit(max_time_ms: Optional[int]) -> Dict[str, Any]:
        return {"maxTimeMS": max_time_ms} if max_time_ms else {}

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
        pipeline = self.build_vector_pipeline(
            query, predicate, sort, skip, limit, exclude_fields
        )
        logger.debug(f"Vector pipeline: {[next(iter(stage)) for stage in pipeline]}")
        try:
            return list(
                self.collection.aggregate(pipeline, **self._time_limit(max_time_ms))
            )
        except PyMongoError as e:
            raise _translate(e, "vector search") from e

    def count_vector_matches(
        self,
        query: VectorQuery,
        predicate: Predicate,
        max_time_ms: Optional[int] = None,
    ) -> int:
        pipeline = self.build_vector_count_pipeline(query, predicate)
        try:
            counted = list(
                self.collection.aggregate(pipeline, **self._time_limit(max_time_ms))
            )
        except PyMongoError as e:
            raise _translate(e, "vector count") from e
        return counted[0]["total"] if counted else 0

    def text_search(
        self,
        predicate: Predicate,
        sort: Optional[SortSpec],
        skip: int,
        limit: int,
        exclude_fields: Sequence[str] = (),
        max_time_ms: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        text_score = contains_text_search(predicate)
        sort_pairs = render_sort(sort)
        try:
            cursor = self.collection.find(
                render_predicate(predicate),
                exclusion_projection(exclude_fields, text_score=text_score),
            )
            if sort_pairs:
                cursor = cursor.sort(sort_pairs)
            cursor = cursor.skip(skip).limit(limit)
            if max_time_ms:
                cursor = cursor.max_time_ms(max_time_ms)
            return list(cursor)
        except PyMongoError as e:
            raise _translate(e, "text search") from e

    def count(self, predicate: Predicate, max_time_ms: Optional[int] = None) -> int:
        try:
            return self.collection.count_documents(
                render_predicate(predicate), **self._time_limit(max_time_ms)
            )
        except PyMongoError as e:
            raise _translate(e, "count") from e

    def get(self, record_id: Any) -> Optional[Dict[str, Any]]:
        try:
            return self.collection.find_one({"_id": record_id})
        except PyMongoError as e:
            raise _translate(e, "record lookup") from e

    def distinct(self, field: str) -> List[Any]:
        try:
            return self.collection.distinct(field)
        except PyMongoError as e:
            raise _translate(e, f"distinct on {field}") from e

    def numeric_stats(self, field: str) -> Optional[Dict[str, float]]:
        pipeline = [
            {
                "$group": {
                    "_id": None,
                    "min": {"$min": f"${field}"},
                    "max": {"$max": f"${field}"},
                    "avg": {"$avg": f"${field}"},
                }
            }
        ]
        try:
            stats = list(self.collection.aggregate(pipeline))
        except PyMongoError as e:
            raise _translate(e, f"stats on {field}") from e
        if not stats or stats[0].get("avg") is None:
            return None
        return {key: stats[0][key] for key in ("min", "max", "avg")}
