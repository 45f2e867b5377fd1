import os
import sys

import pytest

# Add project root to path so tests run without an install
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cv_factories import FailingEmbedder, FakeEmbedder, make_record  # noqa: E402
from search.memory_store import InMemoryRecordStore  # noqa: E402
from search.orchestrator import SearchOrchestrator  # noqa: E402


@pytest.fixture
def sample_records():
    return [
        make_record(
            0,
            skills=("React", "Node.js"),
            experience=5,
            job_titles=("Senior Frontend Developer",),
            embedding=(0.9, 0.1, 0.0),
        ),
        make_record(
            1,
            skills=("Python", "Django"),
            experience=2,
            job_titles=("Backend Developer",),
            education=("MSc Data Science",),
            embedding=(0.1, 0.9, 0.0),
        ),
        make_record(
            2,
            skills=("React", "TypeScript"),
            experience=3,
            embedding=(0.8, 0.2, 0.1),
        ),
        make_record(
            3,
            skills=("Figma",),
            experience=7,
            job_titles=("Product Designer",),
            education=("BA Design",),
            embedding=(0.0, 0.1, 0.9),
        ),
        make_record(
            4,
            skills=("Python", "React"),
            experience=4,
            job_titles=("Full Stack Developer",),
            embedding=None,
        ),
    ]


@pytest.fixture
def store(sample_records):
    return InMemoryRecordStore(sample_records)


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def failing_embedder():
    return FailingEmbedder()


@pytest.fixture
def orchestrator(store, embedder):
    return SearchOrchestrator(store, embedder)
