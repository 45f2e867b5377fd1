# embeddings/base.py
from abc import ABC, abstractmethod
from typing import List, Optional


class BaseEmbeddingProvider(ABC):
    """Turns a piece of text into a dense vector.

    ``generate_embedding`` raises ``EmbeddingUnavailableError`` on quota,
    network or model failures; it never returns a placeholder vector.
    """

    @abstractmethod
    def generate_embedding(
        self, text: str, timeout: Optional[float] = None
    ) -> List[float]:
        """Generate vector embedding for the given text"""

    @abstractmethod
    def get_embedding_dimension(self) -> int:
        """Get the dimension of embeddings generated by this provider"""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Get the name of the embedding provider"""
