# search/orchestrator.py
"""
Hybrid search orchestration.

PLAN       validate, compile filters once, decide whether vector is eligible
TRY_VECTOR embed + ANN retrieval (only with a query and searchType auto/vector)
TRY_TEXT   lexical retrieval; runs when vector was ineligible or fell through
RESPOND    sanitize every record and report the method actually used

A vector failure is fatal when vector search was requested explicitly and
falls through to text search under ``auto``. A text failure is always fatal.
"""

import asyncio
from typing import Any, Dict, Optional, Sequence

from core.custom_logger import CustomLogger
from core.exceptions import (
    InvalidRequestError,
    SearchDeadlineExceededError,
    StoreUnavailableError,
    TextSearchFailedError,
    VectorSearchFailedError,
)
from core.helpers import format_record, heavy_fields
from search.deadline import Deadline
from search.executors import TextSearchExecutor, VectorSearchExecutor
from search.filters import compile_filters
from search.models import SearchMethod, SearchRequest, SearchResponse, SearchType
from search.predicates import describe, is_unconstrained
from search.result import Err, FailureKind, Page
from search.sorting import resolve_sort
from search.store import RecordStore

logger = CustomLogger().get_logger("search_orchestrator")


class SearchOrchestrator:
    def __init__(
        self,
        store: RecordStore,
        embedder,
        vector_executor: Optional[VectorSearchExecutor] = None,
        text_executor: Optional[TextSearchExecutor] = None,
        drop_fields: Sequence[str] = heavy_fields(),
    ):
        self.store = store
        self.embedder = embedder
        self.vector_executor = vector_executor or VectorSearchExecutor(store, embedder)
        self.text_executor = text_executor or TextSearchExecutor(store)
        self.drop_fields = tuple(drop_fields)

    async def search(
        self, request: SearchRequest, deadline: Optional[Deadline] = None
    ) -> SearchResponse:
        """
        Run a search without blocking the event loop.

        The blocking embed/retrieve calls run in a worker thread. If the
        caller cancels, or the deadline lapses, the deadline is cancelled so
        the worker issues no further store calls and its result is dropped.
        """
        deadline = deadline or Deadline.unbounded()
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.run, request, deadline),
                timeout=deadline.remaining(),
            )
        except asyncio.TimeoutError as e:
            deadline.cancel()
            logger.warning("Search deadline exceeded; partial results discarded")
            raise SearchDeadlineExceededError("Search deadline exceeded") from e
        except asyncio.CancelledError:
            deadline.cancel()
            logger.info("Search cancelled by caller; partial results discarded")
            raise

    def run(
        self, request: SearchRequest, deadline: Optional[Deadline] = None
    ) -> SearchResponse:
        """Execute the search state machine synchronously"""
        deadline = deadline or Deadline.unbounded()
        query = request.search_text

        # PLAN
        predicate = compile_filters(request.filters)
        if query is None and is_unconstrained(predicate):
            raise InvalidRequestError(
                "Search requires either a query or filters",
                details={
                    "message": "Please provide a search query or at least one filter"
                },
            )
        vector_eligible = query is not None and request.search_type in (
            SearchType.AUTO,
            SearchType.VECTOR,
        )
        logger.info(
            f"Search plan: type={request.search_type.value} "
            f"vector_eligible={vector_eligible} filter={describe(predicate)} "
            f"page={request.page} limit={request.limit}"
        )

        page: Optional[Page] = None
        method: Optional[SearchMethod] = None

        # TRY_VECTOR
        if vector_eligible:
            outcome = self.vector_executor.search(
                query,
                predicate,
                resolve_sort(request.sort_by, request.sort_order, for_vector_path=True),
                request.page,
                request.limit,
                deadline,
            )
            if outcome.ok:
                page, method = outcome.value, SearchMethod.VECTOR
            elif request.search_type == SearchType.VECTOR:
                logger.error(f"Vector search failed: {outcome.message}")
                raise VectorSearchFailedError(
                    f"Vector search failed: {outcome.message}",
                    details={"reason": outcome.kind.value},
                ) from outcome.cause
            else:
                logger.warning(
                    f"Vector search failed ({outcome.kind.value}): {outcome.message}. "
                    "Falling back to text search..."
                )

        # TRY_TEXT
        if page is None:
            outcome = self.text_executor.execute(
                query,
                predicate,
                resolve_sort(request.sort_by, request.sort_order, False),
                request.page,
                request.limit,
                deadline,
            )
            if not outcome.ok:
                raise self._text_failure(outcome)
            page, method = outcome.value, SearchMethod.TEXT

        # RESPOND
        deadline.check("response")
        response = self.respond(request, page, method)
        logger.info(
            f"Search completed: method={method.value} total={response.total} "
            f"count={response.count}"
        )
        return response

    @staticmethod
    def _text_failure(outcome: Err) -> Exception:
        logger.error(f"Text search failed: {outcome.message}")
        details = {"reason": outcome.kind.value}
        if outcome.kind == FailureKind.STORE_UNAVAILABLE:
            error = StoreUnavailableError(
                f"Record store unavailable: {outcome.message}", details=details
            )
        else:
            error = TextSearchFailedError(
                f"Text search failed: {outcome.message}", details=details
            )
        error.__cause__ = outcome.cause
        return error

    def sanitize(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Drop content and raw vectors even if projection missed them"""
        return format_record(record, drop_fields=self.drop_fields)

    def respond(
        self, request: SearchRequest, page: Page, method: SearchMethod
    ) -> SearchResponse:
        results = [self.sanitize(record) for record in page.records]
        return SearchResponse(
            count=len(results),
            total=page.total,
            page=request.page,
            total_pages=SearchResponse.page_count(page.total, request.limit),
            search_method=method,
            query=request.query,
            filters=request.filters.echo(),
            results=results,
        )
