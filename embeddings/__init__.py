# embeddings/__init__.py
"""
Query embedding module for the CV search service.

Main Components:
- EmbeddingManager: wraps the configured provider; the search orchestrator
  calls ``generate_embedding`` once per vector search
- OpenAIEmbeddingProvider: OpenAI embeddings through langchain-openai (default)
- SentenceTransformerProvider: local sentence-transformers model

Usage:
    from embeddings import get_default_embedding_manager

    manager = get_default_embedding_manager()
    vector = manager.generate_embedding("senior react developer")
"""

from .base import BaseEmbeddingProvider
from .config import EmbeddingConfig
from .manager import EmbeddingManager
from .providers import (
    EmbeddingProviderFactory,
    OpenAIEmbeddingProvider,
    SentenceTransformerProvider,
)

__all__ = [
    "BaseEmbeddingProvider",
    "EmbeddingConfig",
    "EmbeddingManager",
    "EmbeddingProviderFactory",
    "OpenAIEmbeddingProvider",
    "SentenceTransformerProvider",
    "get_default_embedding_manager",
]

# Process-wide instance, created at startup
_default_manager = None


def get_default_embedding_manager() -> EmbeddingManager:
    """Get the default embedding manager instance (singleton)"""
    global _default_manager
    if _default_manager is None:
        _default_manager = EmbeddingManager()
    return _default_manager
