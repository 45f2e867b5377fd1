import pytest

from core.exceptions import EmbeddingUnavailableError
from embeddings import (
    EmbeddingConfig,
    EmbeddingManager,
    EmbeddingProviderFactory,
    OpenAIEmbeddingProvider,
    SentenceTransformerProvider,
)


def test_default_config_is_openai(monkeypatch):
    monkeypatch.delenv("EMBEDDING_PROVIDER", raising=False)
    monkeypatch.delenv("OPENAI_EMBEDDING_MODEL", raising=False)
    monkeypatch.delenv("EMBEDDING_DIMENSIONS", raising=False)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    config = EmbeddingConfig.from_env()
    assert config.provider == "openai"
    assert config.model_name == "text-embedding-ada-002"
    assert config.embedding_dimension == 1536
    assert config.to_dict()["api_key_configured"] is True
    assert "api_key" not in config.to_dict()


def test_sentence_transformer_config(monkeypatch):
    monkeypatch.setenv("EMBEDDING_PROVIDER", "sentence_transformer")
    monkeypatch.setenv("SENTENCE_TRANSFORMER_MODEL", "all-mpnet-base-v2")
    monkeypatch.delenv("EMBEDDING_DIMENSIONS", raising=False)
    config = EmbeddingConfig.from_env()
    assert config.provider == "sentence_transformer"
    assert config.embedding_dimension == 768


def test_invalid_config_is_rejected():
    with pytest.raises(ValueError):
        EmbeddingConfig(provider="word2vec").validate()
    with pytest.raises(ValueError):
        EmbeddingConfig(embedding_dimension=0).validate()


def test_factory_builds_providers():
    openai = EmbeddingProviderFactory.create_provider("openai", api_key="sk-test")
    assert isinstance(openai, OpenAIEmbeddingProvider)
    local = EmbeddingProviderFactory.create_provider("sentence_transformer")
    assert isinstance(local, SentenceTransformerProvider)
    assert local.get_embedding_dimension() == 384
    with pytest.raises(ValueError):
        EmbeddingProviderFactory.create_provider("word2vec")


def test_openai_without_key_raises_unavailable(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    provider = OpenAIEmbeddingProvider(api_key=None)
    with pytest.raises(EmbeddingUnavailableError):
        provider.generate_embedding("react developer")


def test_openai_client_failure_raises_unavailable():
    class BrokenClient:
        def embed_query(self, text):
            raise RuntimeError("quota exceeded")

    provider = OpenAIEmbeddingProvider(api_key="sk-test")
    provider._client = lambda timeout=None: BrokenClient()
    with pytest.raises(EmbeddingUnavailableError) as exc_info:
        provider.generate_embedding("react developer")
    assert "quota exceeded" in exc_info.value.message


def test_openai_client_is_single_attempt_with_timeout():
    provider = OpenAIEmbeddingProvider(api_key="sk-test")
    client = provider._client(timeout=2.5)
    assert client.max_retries == 0
    assert client.request_timeout == 2.5


def test_empty_text_is_rejected():
    provider = OpenAIEmbeddingProvider(api_key="sk-test")
    with pytest.raises(EmbeddingUnavailableError):
        provider.generate_embedding("   ")


def test_manager_delegates_to_provider():
    class StaticProvider(OpenAIEmbeddingProvider):
        def generate_embedding(self, text, timeout=None):
            return [0.5, 0.5]

    manager = EmbeddingManager(StaticProvider(api_key="sk-test"))
    assert manager.generate_embedding("anything") == [0.5, 0.5]
    assert manager.get_embedding_dimension() == 1536
    assert manager.get_provider_info() == "OpenAI (text-embedding-ada-002)"
