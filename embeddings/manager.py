# embeddings/manager.py
from typing import List, Optional
import logging

from .base import BaseEmbeddingProvider
from .providers import EmbeddingProviderFactory

logger = logging.getLogger(__name__)


class EmbeddingManager:
    """Centralized embedding management"""

    def __init__(self, provider: Optional[BaseEmbeddingProvider] = None):
        self.provider = provider or EmbeddingProviderFactory.create_default_provider()
        logger.info(
            "EmbeddingManager initialized with provider: "
            f"{self.provider.get_provider_name()}"
        )

    def generate_embedding(
        self, text: str, timeout: Optional[float] = None
    ) -> List[float]:
        """Generate vector embedding for the given text"""
        return self.provider.generate_embedding(text, timeout=timeout)

    def get_embedding_dimension(self) -> int:
        """Get the dimension of embeddings"""
        return self.provider.get_embedding_dimension()

    def get_provider_info(self) -> str:
        """Get information about the current provider"""
        return self.provider.get_provider_name()
