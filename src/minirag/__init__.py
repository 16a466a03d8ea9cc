"""minirag - retrieval core for a minimal RAG pipeline: chunking, vector storage and retrieval."""

from .config import Settings, get_settings
from .core import (
    ChromaVectorStore,
    RetrievalOrchestrator,
    TextChunker,
    VectorStore,
)
from .factory import create_orchestrator, create_vector_store
from .models import Chunk, Point, ScoredPoint

__version__ = "0.1.0"

__all__ = [
    "Chunk",
    "ChromaVectorStore",
    "Point",
    "RetrievalOrchestrator",
    "ScoredPoint",
    "Settings",
    "TextChunker",
    "VectorStore",
    "create_orchestrator",
    "create_vector_store",
    "get_settings",
]
