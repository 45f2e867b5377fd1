# embeddings/providers.py
import os
import logging
from typing import List, Optional

from langchain_openai import OpenAIEmbeddings

from core.exceptions import EmbeddingUnavailableError
from .base import BaseEmbeddingProvider

logger = logging.getLogger(__name__)


def _require_text(text: str) -> str:
    if not text or not text.strip():
        raise EmbeddingUnavailableError("Cannot embed empty text")
    return text


class SentenceTransformerProvider(BaseEmbeddingProvider):
    """SentenceTransformer-based embedding provider (local model)"""

    def __init__(
        self,
        model_name: str = "all-MiniLM-L6-v2",
        device: str = "cpu",
        trust_remote_code: bool = False,
        embedding_dim: int = 384,
    ):
        self.model_name = model_name
        self.device = device
        self.trust_remote_code = trust_remote_code
        self.embedding_dim = embedding_dim
        self.cache_dir = self._get_model_cache_dir()
        self._model = None

    def _get_model_cache_dir(self) -> str:
        """Get the local cache directory for models"""
        models_dir = os.getenv(
            "MODEL_CACHE_DIR",
            os.path.join(
                os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "emmodels"
            ),
        )
        # Sanitize model name for the filesystem
        model_dir_name = self.model_name.replace("/", "_").replace(":", "_")
        return os.path.join(models_dir, model_dir_name)

    @property
    def model(self):
        """Lazy loading of the model"""
        if self._model is None:
            from sentence_transformers import SentenceTransformer

            logger.info(f"Loading SentenceTransformer model: {self.model_name}")
            self._model = SentenceTransformer(
                self.model_name,
                device=self.device,
                trust_remote_code=self.trust_remote_code,
                cache_folder=self.cache_dir,
            )
        return self._model

    def generate_embedding(
        self, text: str, timeout: Optional[float] = None
    ) -> List[float]:
        """Generate vector embedding for the given text"""
        _require_text(text)
        try:
            return self.model.encode(text).tolist()
        except Exception as e:
            logger.error(f"Error generating embedding with {self.model_name}: {e}")
            raise EmbeddingUnavailableError(
                f"Embedding model {self.model_name} failed: {e}",
                details={"provider": self.get_provider_name()},
            ) from e

    def get_embedding_dimension(self) -> int:
        return self.embedding_dim

    def get_provider_name(self) -> str:
        return f"SentenceTransformer ({self.model_name})"


class OpenAIEmbeddingProvider(BaseEmbeddingProvider):
    """OpenAI-based embedding provider"""

    def __init__(
        self,
        model_name: str = "text-embedding-ada-002",
        api_key: Optional[str] = None,
        embedding_dim: int = 1536,
    ):
        self.model_name = model_name
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.embedding_dim = embedding_dim

        if not self.api_key:
            # Startup continues; searches degrade to text search in auto mode
            logger.warning("OpenAI API key is missing, query embeddings will fail")

    def _client(self, timeout: Optional[float] = None):
        # At most one attempt per request
        return OpenAIEmbeddings(
            model=self.model_name,
            api_key=self.api_key,
            max_retries=0,
            timeout=timeout,
        )

    def generate_embedding(
        self, text: str, timeout: Optional[float] = None
    ) -> List[float]:
        """Generate vector embedding for the given text using OpenAI"""
        _require_text(text)
        if not self.api_key:
            raise EmbeddingUnavailableError(
                "OpenAI API key is not configured",
                details={"provider": self.get_provider_name()},
            )
        try:
            return self._client(timeout).embed_query(text)
        except Exception as e:
            logger.error(f"Error generating OpenAI embedding: {e}")
            raise EmbeddingUnavailableError(
                f"Failed to generate embeddings: {e}",
                details={"provider": self.get_provider_name()},
            ) from e

    def get_embedding_dimension(self) -> int:
        return self.embedding_dim

    def get_provider_name(self) -> str:
        return f"OpenAI ({self.model_name})"


class EmbeddingProviderFactory:
    """Factory for creating embedding providers"""

    @staticmethod
    def create_provider(
        provider_type: str = "openai", **kwargs
    ) -> BaseEmbeddingProvider:
        """Create an embedding provider based on type"""
        provider_type = provider_type.lower()

        if provider_type == "sentence_transformer":
            return SentenceTransformerProvider(
                model_name=kwargs.get("model_name", "all-MiniLM-L6-v2"),
                device=kwargs.get("device", "cpu"),
                trust_remote_code=kwargs.get("trust_remote_code", False),
                embedding_dim=kwargs.get("embedding_dim", 384),
            )

        elif provider_type == "openai":
            return OpenAIEmbeddingProvider(
                model_name=kwargs.get("model_name", "text-embedding-ada-002"),
                api_key=kwargs.get("api_key"),
                embedding_dim=kwargs.get("embedding_dim", 1536),
            )

        else:
            raise ValueError(f"Unsupported embedding provider: {provider_type}")

    @staticmethod
    def create_default_provider() -> BaseEmbeddingProvider:
        """Create default embedding provider based on environment"""
        from .config import EmbeddingConfig

        config = EmbeddingConfig.from_env()
        config.validate()
        return EmbeddingProviderFactory.create_provider(
            config.provider,
            model_name=config.model_name,
            device=config.device,
            trust_remote_code=config.trust_remote_code,
            api_key=config.api_key,
            embedding_dim=config.embedding_dimension,
        )
