# search/__init__.py
"""
Hybrid CV search.

Main Components:
- SearchOrchestrator: plans a search, tries vector retrieval when eligible and
  falls back to text retrieval under ``searchType=auto``
- compile_filters: FilterSpec -> store-neutral predicate tree
- resolve_sort: logical sort key -> concrete ordering
- RecordStore: storage contract, implemented by ``InMemoryRecordStore`` here
  and by ``mangodatabase.record_store.MongoRecordStore`` for MongoDB Atlas
"""

from .deadline import Deadline
from .filters import compile_filters
from .memory_store import InMemoryRecordStore
from .models import (
    DateRange,
    ExperienceRange,
    FilterSpec,
    SearchMethod,
    SearchRequest,
    SearchResponse,
    SearchType,
)
from .orchestrator import SearchOrchestrator
from .sorting import resolve_sort
from .store import RecordStore, VectorQuery

__all__ = [
    "DateRange",
    "Deadline",
    "ExperienceRange",
    "FilterSpec",
    "InMemoryRecordStore",
    "RecordStore",
    "SearchMethod",
    "SearchOrchestrator",
    "SearchRequest",
    "SearchResponse",
    "SearchType",
    "VectorQuery",
    "compile_filters",
    "resolve_sort",
]
