"""Tests for settings and the component factory."""

import logging
from pathlib import Path

import pytest
from fakes import FakeChat, FakeEmbedder
from pydantic import ValidationError

from minirag.config import Settings
from minirag.core.chroma_store import ChromaVectorStore
from minirag.core.chunker import TextChunker, WordTokenizer
from minirag.core.ollama_client import OllamaClient
from minirag.core.vector_store import VectorStore
from minirag.factory import create_ollama_client, create_orchestrator, create_vector_store


def test_default_settings():
    settings = Settings()

    assert settings.max_chunk_tokens == 400
    assert settings.vector_backend == "memory"
    assert settings.collection_name == "documents"
    assert settings.default_top_k == 5
    assert settings.per_collection_locks is False


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("MAX_CHUNK_TOKENS", "128")
    monkeypatch.setenv("VECTOR_BACKEND", "chroma")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings()

    assert settings.max_chunk_tokens == 128
    assert settings.vector_backend == "chroma"
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_chunk_tokens": 0},
        {"default_top_k": 101},
        {"vector_backend": "qdrant"},
        {"log_level": "VERBOSE"},
        {"ollama_temperature": 3.0},
    ],
)
def test_invalid_settings(overrides: dict):
    with pytest.raises(ValidationError):
        Settings(**overrides)


def test_chroma_path_is_created(temp_dir: Path):
    target = temp_dir / "nested" / "chroma"
    settings = Settings(chroma_db_path=str(target))

    assert target.is_dir()
    assert Path(settings.chroma_db_path).is_absolute()


def test_create_vector_store_backends(temp_dir: Path):
    memory = create_vector_store(Settings(per_collection_locks=True))
    assert isinstance(memory, VectorStore)

    chroma = create_vector_store(
        Settings(vector_backend="chroma", chroma_db_path=str(temp_dir / "db"))
    )
    assert isinstance(chroma, ChromaVectorStore)


def test_create_ollama_client(test_settings: Settings):
    client = create_ollama_client(test_settings)

    assert client.embedding_model == test_settings.ollama_embedding_model
    assert client.max_retries == test_settings.ollama_max_retries


def test_create_orchestrator_defaults_to_ollama(test_settings: Settings):
    orchestrator = create_orchestrator(
        test_settings, chunker=TextChunker(max_tokens=20, tokenizer=WordTokenizer())
    )

    assert isinstance(orchestrator.embedder, OllamaClient)
    assert orchestrator.chat is orchestrator.embedder
    assert isinstance(orchestrator.store, VectorStore)
    assert orchestrator.collection_name == "test_documents"
    assert orchestrator.top_k == 3


@pytest.mark.asyncio
async def test_create_orchestrator_with_injected_collaborators(
    test_settings: Settings, sample_text: str
):
    embedder, chat = FakeEmbedder(), FakeChat()
    orchestrator = create_orchestrator(
        test_settings,
        embedder=embedder,
        chat=chat,
        chunker=TextChunker(max_tokens=test_settings.max_chunk_tokens, tokenizer=WordTokenizer()),
    )

    result = await orchestrator.ingest(sample_text)
    answer = await orchestrator.answer("Tell me about music")

    assert result.collection_name == "test_documents"
    assert answer.context
    assert chat.calls


def test_create_orchestrator_applies_log_level(test_settings: Settings):
    create_orchestrator(
        test_settings,
        embedder=FakeEmbedder(),
        chunker=TextChunker(max_tokens=20, tokenizer=WordTokenizer()),
    )

    store_logger = logging.getLogger("minirag.core.vector_store")
    assert store_logger.level == logging.WARNING
    assert all(h.level == logging.WARNING for h in store_logger.handlers)


def test_create_orchestrator_without_chat(test_settings: Settings):
    orchestrator = create_orchestrator(
        test_settings,
        embedder=FakeEmbedder(),
        chunker=TextChunker(max_tokens=20, tokenizer=WordTokenizer()),
    )
    assert orchestrator.chat is None
