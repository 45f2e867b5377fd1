import asyncio
import threading

import pytest

from cv_factories import FailingEmbedder, FakeEmbedder, make_record
from core.exceptions import (
    InvalidRequestError,
    QueryRejectedError,
    SearchCancelledError,
    SearchDeadlineExceededError,
    StoreUnavailableError,
    TextSearchFailedError,
    VectorSearchFailedError,
)
from search.deadline import Deadline
from search.memory_store import InMemoryRecordStore
from search.models import SearchRequest
from search.orchestrator import SearchOrchestrator


class CountingStore(InMemoryRecordStore):
    """Records which retrieval paths were used"""

    def __init__(self, records=(), vector_error=None, text_error=None):
        super().__init__(records)
        self.vector_error = vector_error
        self.text_error = text_error
        self.vector_calls = 0
        self.text_calls = 0

    def vector_search(self, *args, **kwargs):
        self.vector_calls += 1
        if self.vector_error:
            raise self.vector_error
        return super().vector_search(*args, **kwargs)

    def text_search(self, *args, **kwargs):
        self.text_calls += 1
        if self.text_error:
            raise self.text_error
        return super().text_search(*args, **kwargs)


class LeakyStore(InMemoryRecordStore):
    """Ignores projection, returning heavy fields anyway"""

    def vector_search(self, query, predicate, sort, skip, limit, **kwargs):
        kwargs["exclude_fields"] = ()
        return super().vector_search(query, predicate, sort, skip, limit, **kwargs)

    def text_search(self, predicate, sort, skip, limit, **kwargs):
        kwargs["exclude_fields"] = ()
        return super().text_search(predicate, sort, skip, limit, **kwargs)


class BlockingStore(InMemoryRecordStore):
    def __init__(self, records=()):
        super().__init__(records)
        self.release = threading.Event()

    def text_search(self, *args, **kwargs):
        self.release.wait(timeout=2)
        return super().text_search(*args, **kwargs)


def request(**fields):
    return SearchRequest.model_validate(fields)


def test_pagination_reports_true_totals():
    store = InMemoryRecordStore([make_record(i) for i in range(23)])
    orchestrator = SearchOrchestrator(store, FakeEmbedder())
    response = orchestrator.run(request(query="react", limit=10, page=3))
    assert response.search_method.value == "vector"
    assert response.total == 23
    assert response.count == 3
    assert response.total_pages == 3
    assert response.page == 3


def test_page_past_the_end_is_empty_with_total():
    store = InMemoryRecordStore([make_record(i) for i in range(23)])
    orchestrator = SearchOrchestrator(store, FakeEmbedder())
    response = orchestrator.run(request(query="react", limit=10, page=4))
    assert response.count == 0
    assert response.total == 23
    assert response.results == []


def test_no_query_and_no_filters_is_rejected_before_any_store_call():
    store = CountingStore([make_record(0)])
    embedder = FakeEmbedder()
    orchestrator = SearchOrchestrator(store, embedder)
    for blank in (None, "", "   "):
        with pytest.raises(InvalidRequestError):
            orchestrator.run(request(query=blank, filters={}))
    assert store.vector_calls == store.text_calls == 0
    assert embedder.calls == []


def test_empty_sub_filters_do_not_count_as_filters():
    orchestrator = SearchOrchestrator(CountingStore(), FakeEmbedder())
    with pytest.raises(InvalidRequestError):
        orchestrator.run(request(filters={"skills": [], "experience": {}}))


def test_auto_falls_back_to_text_when_embedding_fails(sample_records):
    store = CountingStore(sample_records)
    embedder = FailingEmbedder()
    response = SearchOrchestrator(store, embedder).run(request(query="react"))
    assert response.search_method.value == "text"
    assert response.total == 3
    assert embedder.calls == ["react"]
    assert store.vector_calls == 0
    assert store.text_calls == 1


def test_auto_falls_back_to_text_when_vector_query_is_rejected(sample_records):
    store = CountingStore(sample_records, vector_error=QueryRejectedError("no index"))
    response = SearchOrchestrator(store, FakeEmbedder()).run(request(query="react"))
    assert response.search_method.value == "text"
    assert store.vector_calls == 1
    assert store.text_calls == 1


def test_explicit_vector_failure_is_fatal(sample_records):
    store = CountingStore(sample_records)
    orchestrator = SearchOrchestrator(store, FailingEmbedder())
    with pytest.raises(VectorSearchFailedError) as exc_info:
        orchestrator.run(request(query="react", searchType="vector"))
    assert exc_info.value.details["reason"] == "embedding_unavailable"
    assert store.text_calls == 0


def test_explicit_vector_store_failure_is_fatal(sample_records):
    store = CountingStore(sample_records, vector_error=StoreUnavailableError("down"))
    orchestrator = SearchOrchestrator(store, FakeEmbedder())
    with pytest.raises(VectorSearchFailedError):
        orchestrator.run(request(query="react", searchType="vector"))
    assert store.text_calls == 0


def test_text_search_type_never_embeds(sample_records):
    embedder = FakeEmbedder()
    store = CountingStore(sample_records)
    response = SearchOrchestrator(store, embedder).run(
        request(query="react", searchType="text")
    )
    assert response.search_method.value == "text"
    assert embedder.calls == []
    assert store.vector_calls == 0


def test_filters_only_uses_text_path(sample_records):
    embedder = FakeEmbedder()
    response = SearchOrchestrator(InMemoryRecordStore(sample_records), embedder).run(
        request(filters={"skills": ["React"]}, searchType="vector")
    )
    assert response.search_method.value == "text"
    assert response.total == 3
    assert embedder.calls == []


def test_text_store_unavailable_surfaces_as_store_error(sample_records):
    store = CountingStore(sample_records, text_error=StoreUnavailableError("down"))
    with pytest.raises(StoreUnavailableError):
        SearchOrchestrator(store, FailingEmbedder()).run(request(query="react"))


def test_text_query_rejected_surfaces_as_text_failure(sample_records):
    store = CountingStore(sample_records, text_error=QueryRejectedError("bad"))
    with pytest.raises(TextSearchFailedError):
        SearchOrchestrator(store, FakeEmbedder()).run(
            request(query="react", searchType="text")
        )


def test_results_never_carry_content_or_embeddings(sample_records):
    orchestrator = SearchOrchestrator(LeakyStore(sample_records), FakeEmbedder())
    for search_type in ("vector", "text"):
        response = orchestrator.run(request(query="react", searchType=search_type))
        assert response.results
        for record in response.results:
            assert "content" not in record
            assert "embeddings" not in record
            assert isinstance(record["_id"], str)


def test_filters_are_applied_and_echoed(sample_records):
    store = InMemoryRecordStore(sample_records)
    orchestrator = SearchOrchestrator(store, FakeEmbedder())
    response = orchestrator.run(
        request(
            query="developer",
            filters={"skills": ["React", "Python"], "skillsLogic": "AND"},
        )
    )
    assert response.filters["skills"] == ["React", "Python"]
    assert response.filters["skillsLogic"] == "AND"
    assert response.query == "developer"
    # Record 4 has both skills but no embedding, so it is not a vector candidate
    assert response.search_method.value == "vector"
    assert response.total == 0


def test_identical_requests_give_identical_results(sample_records):
    store = InMemoryRecordStore(sample_records)
    orchestrator = SearchOrchestrator(store, FakeEmbedder())
    for search_type in ("vector", "text"):
        search = request(query="react", searchType=search_type, limit=2)
        first, second = orchestrator.run(search), orchestrator.run(search)
        assert first.total == second.total
        assert first.count == second.count
        assert [r["_id"] for r in first.results] == [r["_id"] for r in second.results]


def test_expired_deadline_stops_before_retrieval(sample_records):
    now = [0.0]
    deadline = Deadline(timeout=1.0, clock=lambda: now[0])
    now[0] = 5.0
    store = CountingStore(sample_records)
    with pytest.raises(SearchDeadlineExceededError):
        SearchOrchestrator(store, FakeEmbedder()).run(
            request(query="react"), deadline
        )
    assert store.vector_calls == store.text_calls == 0


def test_cancelled_deadline_is_not_a_fallback_trigger(sample_records):
    deadline = Deadline()
    deadline.cancel()
    store = CountingStore(sample_records)
    with pytest.raises(SearchCancelledError):
        SearchOrchestrator(store, FakeEmbedder()).run(request(query="react"), deadline)
    assert store.text_calls == 0


async def test_async_search_returns_response(sample_records):
    store = InMemoryRecordStore(sample_records)
    orchestrator = SearchOrchestrator(store, FakeEmbedder())
    response = await orchestrator.search(request(query="python"))
    assert response.search_method.value == "vector"
    assert response.results[0]["metadata"]["skills"] == ["Python", "Django"]


async def test_async_search_times_out(sample_records):
    store = BlockingStore(sample_records)
    orchestrator = SearchOrchestrator(store, FakeEmbedder())
    deadline = Deadline(timeout=0.05)
    try:
        with pytest.raises(SearchDeadlineExceededError):
            await orchestrator.search(
                request(query="react", searchType="text"), deadline
            )
        assert deadline.cancelled
    finally:
        store.release.set()


async def test_async_search_cancellation_cancels_deadline(sample_records):
    store = BlockingStore(sample_records)
    orchestrator = SearchOrchestrator(store, FakeEmbedder())
    deadline = Deadline()
    task = asyncio.ensure_future(
        orchestrator.search(request(query="react", searchType="text"), deadline)
    )
    await asyncio.sleep(0.05)
    task.cancel()
    try:
        with pytest.raises(asyncio.CancelledError):
            await task
        assert deadline.cancelled
    finally:
        store.release.set()


def test_skills_logic_over_stored_records(sample_records):
    store = InMemoryRecordStore(sample_records)
    orchestrator = SearchOrchestrator(store, FakeEmbedder())
    skills = ["React", "Node.js"]
    either = orchestrator.run(request(filters={"skills": skills}))
    both = orchestrator.run(request(filters={"skills": skills, "skillsLogic": "AND"}))
    # React-only records drop out once every skill is required
    assert either.total == 3
    assert both.total == 1
    assert both.results[0]["metadata"]["skills"] == ["React", "Node.js"]


def test_experience_range_over_stored_records(sample_records):
    store = InMemoryRecordStore(sample_records)
    orchestrator = SearchOrchestrator(store, FakeEmbedder())
    response = orchestrator.run(
        request(
            filters={"experience": {"min": 2, "max": 5}},
            sortBy="experience",
            sortOrder="asc",
        )
    )
    assert [r["metadata"]["experience"] for r in response.results] == [2, 3, 4, 5]


def test_deep_vector_pages_stay_reachable():
    store = InMemoryRecordStore([make_record(i) for i in range(60)])
    orchestrator = SearchOrchestrator(store, FakeEmbedder())
    response = orchestrator.run(request(query="react", limit=10, page=6))
    assert response.search_method.value == "vector"
    assert response.total == 60
    assert response.total_pages == 6
    assert response.count == 10
