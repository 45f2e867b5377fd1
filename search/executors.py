# search/executors.py
"""
Retrieval strategies.

Each executor makes at most one attempt and reports strategy failures as an
``Err`` rather than raising, so the orchestrator can decide whether to fall
back. Deadline and cancellation errors are not strategy failures and are
raised straight through.
"""

from typing import Optional, Sequence

from core.config import AppConfig
from core.custom_logger import CustomLogger
from core.exceptions import (
    EmbeddingUnavailableError,
    QueryRejectedError,
    StoreUnavailableError,
)
from core.helpers import heavy_fields
from search.deadline import Deadline
from search.predicates import Predicate, conjoin, contains_text_search, describe
from search.result import Err, FailureKind, Ok, Page, Result
from search.sorting import SortSpec, default_sort
from search.store import RecordStore, VectorQuery
from search.text_query import build_text_query

logger = CustomLogger().get_logger("search_executors")


def _store_failure(error: Exception) -> Err:
    if isinstance(error, StoreUnavailableError):
        return Err(FailureKind.STORE_UNAVAILABLE, error.message, error)
    return Err(FailureKind.QUERY_REJECTED, error.message, error)


class VectorSearchExecutor:
    """Embed the query, run ANN retrieval with oversampling, filter, sort, page"""

    def __init__(
        self,
        store: RecordStore,
        embedder,
        min_candidates: int = AppConfig.MIN_VECTOR_CANDIDATES,
        candidate_multiplier: int = AppConfig.CANDIDATE_MULTIPLIER,
        result_pool_multiplier: int = AppConfig.RESULT_POOL_MULTIPLIER,
        exclude_fields: Sequence[str] = heavy_fields(),
    ):
        self.store = store
        self.embedder = embedder
        self.min_candidates = min_candidates
        self.candidate_multiplier = candidate_multiplier
        self.result_pool_multiplier = result_pool_multiplier
        self.exclude_fields = tuple(exclude_fields)

    def vector_query(self, vector, limit: int, skip: int = 0) -> VectorQuery:
        # The pool reaches past the requested page so deep pages stay reachable
        candidate_limit = (skip + limit) * self.result_pool_multiplier
        # $vectorSearch rejects numCandidates below its limit
        num_candidates = max(
            self.min_candidates, limit * self.candidate_multiplier, candidate_limit
        )
        return VectorQuery(
            vector=vector,
            num_candidates=num_candidates,
            candidate_limit=candidate_limit,
        )

    def embed(self, query: str, deadline: Deadline) -> Result:
        deadline.check("embedding")
        try:
            vector = self.embedder.generate_embedding(
                query, timeout=deadline.remaining()
            )
            return Ok(vector)
        except EmbeddingUnavailableError as e:
            return Err(FailureKind.EMBEDDING_UNAVAILABLE, e.message, e)

    def execute(
        self,
        query_embedding,
        predicate: Predicate,
        sort: Optional[SortSpec],
        page: int,
        limit: int,
        deadline: Optional[Deadline] = None,
    ) -> Result:
        deadline = deadline or Deadline.unbounded()
        skip = (page - 1) * limit
        vector_query = self.vector_query(query_embedding, limit, skip)
        logger.debug(
            f"Vector search: candidates={vector_query.num_candidates} "
            f"pool={vector_query.candidate_limit} filter={describe(predicate)} "
            f"skip={skip} limit={limit}"
        )
        try:
            deadline.check("vector retrieval")
            records = self.store.vector_search(
                vector_query,
                predicate,
                sort,
                skip,
                limit,
                exclude_fields=self.exclude_fields,
                max_time_ms=deadline.max_time_ms(),
            )
            # Separate count over the filtered, unpaginated candidate set
            deadline.check("vector count")
            total = self.store.count_vector_matches(
                vector_query, predicate, max_time_ms=deadline.max_time_ms()
            )
        except (StoreUnavailableError, QueryRejectedError) as e:
            logger.error(f"Vector retrieval failed: {e.message}")
            return _store_failure(e)
        return Ok(Page(records=records, total=total))

    def search(
        self,
        query: str,
        predicate: Predicate,
        sort: Optional[SortSpec],
        page: int,
        limit: int,
        deadline: Optional[Deadline] = None,
    ) -> Result:
        """Embed then retrieve; the two steps run in sequence"""
        deadline = deadline or Deadline.unbounded()
        embedded = self.embed(query, deadline)
        if not embedded.ok:
            return embedded
        return self.execute(embedded.value, predicate, sort, page, limit, deadline)


class TextSearchExecutor:
    """Lexical retrieval combined with the compiled filters"""

    def __init__(
        self, store: RecordStore, exclude_fields: Sequence[str] = heavy_fields()
    ):
        self.store = store
        self.exclude_fields = tuple(exclude_fields)

    def execute(
        self,
        query: Optional[str],
        predicate: Predicate,
        sort: Optional[SortSpec],
        page: int,
        limit: int,
        deadline: Optional[Deadline] = None,
    ) -> Result:
        deadline = deadline or Deadline.unbounded()
        combined = conjoin([build_text_query(query), predicate])
        has_text_score = contains_text_search(combined)
        if sort is None or (sort.uses_text_score and not has_text_score):
            # No text score without an indexed-text predicate
            sort = default_sort()
        skip = (page - 1) * limit
        logger.debug(
            f"Text search: filter={describe(combined)} skip={skip} limit={limit}"
        )
        try:
            deadline.check("text retrieval")
            records = self.store.text_search(
                combined,
                sort,
                skip,
                limit,
                exclude_fields=self.exclude_fields,
                max_time_ms=deadline.max_time_ms(),
            )
            deadline.check("text count")
            total = self.store.count(combined, max_time_ms=deadline.max_time_ms())
        except (StoreUnavailableError, QueryRejectedError) as e:
            logger.error(f"Text retrieval failed: {e.message}")
            return _store_failure(e)
        return Ok(Page(records=records, total=total))
