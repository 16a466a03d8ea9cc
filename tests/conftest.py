"""Pytest configuration and fixtures for minirag tests."""

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest
from fakes import FakeChat, FakeEmbedder

from minirag.config import Settings
from minirag.core.chunker import TextChunker, WordTokenizer
from minirag.core.orchestrator import RetrievalOrchestrator
from minirag.core.vector_store import VectorStore


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_text() -> str:
    """Provide sample text for testing."""
    return """
    Python is a programming language. People write code in Python for data analysis,
    web services and automation. Good programming habits make code easier to read.

    Cooking is the craft of preparing food. A recipe lists the ingredients and the
    steps. Some recipe books focus on quick food for busy evenings.

    Music is organised sound. A band plays a song together, and every song has a
    structure of verses and choruses.
    """.strip()


@pytest.fixture
def sample_txt_file(temp_dir: Path, sample_text: str) -> Path:
    """Create a sample .txt file for testing."""
    file_path = temp_dir / "sample.txt"
    file_path.write_text(sample_text, encoding="utf-8")
    return file_path


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        max_chunk_tokens=20,
        collection_name="test_documents",
        default_top_k=3,
        log_level="WARNING",
    )


@pytest.fixture
def chunker() -> TextChunker:
    """TextChunker with a word tokenizer so tests need no BPE download."""
    return TextChunker(max_tokens=20, tokenizer=WordTokenizer())


@pytest.fixture(params=[False, True], ids=["global-lock", "per-collection-locks"])
def vector_store(request) -> VectorStore:
    """In-memory VectorStore, once per lock strategy."""
    return VectorStore(per_collection_locks=request.param)


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def chat() -> FakeChat:
    return FakeChat()


@pytest.fixture
def orchestrator(
    vector_store: VectorStore,
    embedder: FakeEmbedder,
    chunker: TextChunker,
    chat: FakeChat,
) -> RetrievalOrchestrator:
    return RetrievalOrchestrator(
        store=vector_store,
        embedder=embedder,
        chunker=chunker,
        chat=chat,
        collection_name="test_documents",
        top_k=3,
    )
