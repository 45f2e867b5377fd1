# Configuration settings for the application
import os
import re
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name, "").strip()
    return float(value) if value else None


class AppConfig:
    """Application configuration settings"""

    # Environment
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()

    # MongoDB Configuration
    MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://127.0.0.1:27017")
    DB_NAME = os.getenv("DB_NAME", "cvDatabase")
    COLLECTION_NAME = os.getenv("COLLECTION_NAME", "cvs")
    SERVER_SELECTION_TIMEOUT_MS = int(
        os.getenv("SERVER_SELECTION_TIMEOUT_MS", "5000")
    )
    TEXT_INDEX_NAME = os.getenv("TEXT_INDEX_NAME", "cvTextIndex")

    # Vector Search Configuration
    VECTOR_FIELD = os.getenv("VECTOR_FIELD", "embeddings")
    VECTOR_INDEX_NAME = os.getenv("VECTOR_INDEX_NAME", "vectorIndex")
    DIMENSIONS = int(os.getenv("EMBEDDING_DIMENSIONS", "1536"))

    # Candidate oversampling for $vectorSearch
    MIN_VECTOR_CANDIDATES = int(os.getenv("MIN_VECTOR_CANDIDATES", "100"))
    CANDIDATE_MULTIPLIER = int(os.getenv("CANDIDATE_MULTIPLIER", "3"))
    RESULT_POOL_MULTIPLIER = int(os.getenv("RESULT_POOL_MULTIPLIER", "5"))

    # Per-request deadline applied at the HTTP boundary (seconds, unset = none)
    SEARCH_TIMEOUT_SECONDS = _optional_float("SEARCH_TIMEOUT_SECONDS")

    # Logging Configuration
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR = os.getenv("LOG_DIR", "logs")

    # Variables the service expects to find in the environment
    REQUIRED_ENV_VARS = ["MONGODB_URI"]

    @classmethod
    def is_development(cls) -> bool:
        return cls.ENVIRONMENT == "development"

    @classmethod
    def missing_env_vars(cls) -> list:
        """Return required variables that are not set in the environment"""
        required = list(cls.REQUIRED_ENV_VARS)
        if os.getenv("EMBEDDING_PROVIDER", "openai").lower() == "openai":
            required.append("OPENAI_API_KEY")
        return [name for name in required if not os.getenv(name)]

    @classmethod
    def masked_uri(cls, uri: Optional[str] = None) -> str:
        """Connection string with credentials replaced, safe for logs"""
        return re.sub(r"//([^:/@]+):[^@]+@", "//***:***@", uri or cls.MONGODB_URI)

    @classmethod
    def get_connection_info(cls) -> dict:
        """Get connection information for debugging"""
        return {
            "environment": cls.ENVIRONMENT,
            "mongodb_uri": cls.masked_uri(),
            "database": cls.DB_NAME,
            "collection": cls.COLLECTION_NAME,
            "vector_field": cls.VECTOR_FIELD,
            "vector_index": cls.VECTOR_INDEX_NAME,
            "log_level": cls.LOG_LEVEL,
        }


# Global config instance
config = AppConfig()
