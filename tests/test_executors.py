import pytest

from cv_factories import make_record
from core.exceptions import (
    QueryRejectedError,
    SearchCancelledError,
    StoreUnavailableError,
)
from search.deadline import Deadline
from search.executors import TextSearchExecutor, VectorSearchExecutor
from search.memory_store import InMemoryRecordStore
from search.predicates import AnyOf, MatchAll
from search.result import FailureKind
from search.sorting import default_sort, resolve_sort


class BrokenStore(InMemoryRecordStore):
    def __init__(self, error):
        super().__init__()
        self.error = error

    def vector_search(self, *args, **kwargs):
        raise self.error

    def text_search(self, *args, **kwargs):
        raise self.error


class RecordingStore(InMemoryRecordStore):
    def __init__(self, records=()):
        super().__init__(records)
        self.vector_calls = []
        self.text_calls = []

    def vector_search(self, query, predicate, sort, skip, limit, **kwargs):
        self.vector_calls.append((query, predicate, sort, skip, limit, kwargs))
        return super().vector_search(query, predicate, sort, skip, limit, **kwargs)

    def text_search(self, predicate, sort, skip, limit, **kwargs):
        self.text_calls.append((predicate, sort, skip, limit, kwargs))
        return super().text_search(predicate, sort, skip, limit, **kwargs)


def test_candidate_oversampling(store, embedder):
    executor = VectorSearchExecutor(store, embedder)
    small = executor.vector_query([1.0], limit=10)
    assert small.num_candidates == 100
    assert small.candidate_limit == 50
    large = executor.vector_query([1.0], limit=50)
    assert large.candidate_limit == 250
    assert large.num_candidates >= max(100, 50 * 3)
    assert large.num_candidates >= large.candidate_limit
    deep = executor.vector_query([1.0], limit=10, skip=50)
    assert deep.candidate_limit == 300
    assert deep.num_candidates == 300


def test_vector_search_orders_by_similarity(store, embedder):
    executor = VectorSearchExecutor(store, embedder)
    outcome = executor.search("react", MatchAll(), None, 1, 10)
    assert outcome.ok
    skills = [r["metadata"]["skills"] for r in outcome.value.records]
    assert skills[0] == ["React", "Node.js"]
    # Records without an embedding are not vector candidates
    assert outcome.value.total == 4


def test_vector_search_projects_out_heavy_fields(embedder):
    store = RecordingStore([make_record(i) for i in range(3)])
    executor = VectorSearchExecutor(store, embedder)
    outcome = executor.search("react", MatchAll(), None, 1, 2)
    assert outcome.ok
    kwargs = store.vector_calls[0][-1]
    assert "content" in kwargs["exclude_fields"]
    assert "embeddings" in kwargs["exclude_fields"]
    for record in outcome.value.records:
        assert "content" not in record
        assert "embeddings" not in record


def test_vector_total_counts_filtered_candidates_not_page(embedder):
    records = [make_record(i, skills=("React",)) for i in range(7)]
    records += [make_record(7 + i, skills=("Go",)) for i in range(3)]
    executor = VectorSearchExecutor(InMemoryRecordStore(records), embedder)
    outcome = executor.search(
        "react", AnyOf("metadata.skills", ("React",)), None, 2, 5
    )
    assert outcome.ok
    assert outcome.value.total == 7
    assert len(outcome.value.records) == 2


def test_vector_search_non_relevance_sort_overrides_similarity(store, embedder):
    executor = VectorSearchExecutor(store, embedder)
    sort = resolve_sort("experience", "asc", for_vector_path=True)
    outcome = executor.search("react", MatchAll(), sort, 1, 10)
    experience = [r["metadata"]["experience"] for r in outcome.value.records]
    assert experience == sorted(experience)


def test_embedding_failure_is_reported_not_raised(store, failing_embedder):
    executor = VectorSearchExecutor(store, failing_embedder)
    outcome = executor.search("react", MatchAll(), None, 1, 10)
    assert not outcome.ok
    assert outcome.kind == FailureKind.EMBEDDING_UNAVAILABLE


@pytest.mark.parametrize(
    "error, kind",
    [
        (StoreUnavailableError("down"), FailureKind.STORE_UNAVAILABLE),
        (QueryRejectedError("no index"), FailureKind.QUERY_REJECTED),
    ],
)
def test_store_failures_are_reported_not_raised(embedder, error, kind):
    vector = VectorSearchExecutor(BrokenStore(error), embedder)
    text = TextSearchExecutor(BrokenStore(error))
    assert vector.search("react", MatchAll(), None, 1, 10).kind == kind
    assert text.execute("react", MatchAll(), None, 1, 10).kind == kind


def test_cancelled_deadline_raises_before_store_call(embedder):
    store = RecordingStore([make_record(0)])
    deadline = Deadline()
    deadline.cancel()
    with pytest.raises(SearchCancelledError):
        VectorSearchExecutor(store, embedder).search(
            "react", MatchAll(), None, 1, 10, deadline
        )
    assert store.vector_calls == []
    assert embedder.calls == []


def test_text_search_combines_query_and_filters(store):
    executor = TextSearchExecutor(store)
    outcome = executor.execute(
        "react", AnyOf("metadata.experience", (5,)), default_sort(), 1, 10
    )
    assert outcome.ok
    assert outcome.value.total == 1
    assert outcome.value.records[0]["metadata"]["experience"] == 5


def test_text_relevance_without_text_index_uses_default_sort():
    store = RecordingStore([make_record(i) for i in range(3)])
    executor = TextSearchExecutor(store)
    relevance = resolve_sort("relevance", "desc", for_vector_path=False)
    outcome = executor.execute(None, MatchAll(), relevance, 1, 10)
    assert outcome.ok
    assert store.text_calls[0][1] == default_sort()
    dates = [r["uploadDate"] for r in outcome.value.records]
    assert dates == sorted(dates, reverse=True)


def test_text_relevance_orders_by_score(store):
    executor = TextSearchExecutor(store)
    relevance = resolve_sort("relevance", "desc", for_vector_path=False)
    outcome = executor.execute("react", MatchAll(), relevance, 1, 10)
    scores = [r["score"] for r in outcome.value.records]
    assert scores == sorted(scores, reverse=True)
    assert outcome.value.total == 3


def test_text_search_pagination(store):
    executor = TextSearchExecutor(store)
    first = executor.execute(None, MatchAll(), default_sort(), 1, 2).value
    third = executor.execute(None, MatchAll(), default_sort(), 3, 2).value
    assert first.total == third.total == 5
    assert len(first.records) == 2
    assert len(third.records) == 1
