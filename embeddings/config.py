# embeddings/config.py
"""
Configuration management for embedding providers
"""

import os
from typing import Dict, Any, Optional
from dataclasses import dataclass

# Known output sizes, used when EMBEDDING_DIMENSIONS is not set
MODEL_DIMENSIONS = {
    "text-embedding-ada-002": 1536,
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "all-MiniLM-L6-v2": 384,
    "all-mpnet-base-v2": 768,
    "BAAI/bge-large-en-v1.5": 1024,
}


@dataclass
class EmbeddingConfig:
    """Configuration for embedding providers"""

    provider: str = "openai"
    model_name: str = "text-embedding-ada-002"
    embedding_dimension: int = 1536
    device: str = "cpu"
    api_key: Optional[str] = None
    trust_remote_code: bool = False

    @classmethod
    def from_env(cls) -> "EmbeddingConfig":
        """Create configuration from environment variables"""
        provider = os.getenv("EMBEDDING_PROVIDER", "openai").lower()

        if provider == "sentence_transformer":
            model_name = os.getenv("SENTENCE_TRANSFORMER_MODEL", "all-MiniLM-L6-v2")
            return cls(
                provider=provider,
                model_name=model_name,
                embedding_dimension=cls._dimension_for(model_name, 384),
                device=os.getenv("EMBEDDING_DEVICE", "cpu"),
                trust_remote_code=os.getenv("TRUST_REMOTE_CODE", "false").lower()
                == "true",
            )

        model_name = os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-ada-002")
        return cls(
            provider="openai",
            model_name=model_name,
            embedding_dimension=cls._dimension_for(model_name, 1536),
            api_key=os.getenv("OPENAI_API_KEY"),
        )

    @staticmethod
    def _dimension_for(model_name: str, fallback: int) -> int:
        configured = os.getenv("EMBEDDING_DIMENSIONS")
        if configured:
            return int(configured)
        return MODEL_DIMENSIONS.get(model_name, fallback)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, without secrets"""
        return {
            "provider": self.provider,
            "model_name": self.model_name,
            "embedding_dimension": self.embedding_dimension,
            "device": self.device,
            "api_key_configured": bool(self.api_key),
            "trust_remote_code": self.trust_remote_code,
        }

    def validate(self) -> bool:
        """Validate the configuration"""
        if self.provider not in ("openai", "sentence_transformer"):
            raise ValueError(f"Unsupported embedding provider: {self.provider}")

        if self.embedding_dimension <= 0:
            raise ValueError("Embedding dimension must be positive")

        return True
