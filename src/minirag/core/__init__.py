"""Core functionality for minirag."""

from .chroma_store import ChromaVectorStore
from .chunker import TextChunker, TiktokenTokenizer, Tokenizer, WordTokenizer, chunk_text
from .collaborators import ChatClient, EmbeddingClient
from .errors import (
    CollaboratorError,
    DimensionMismatchError,
    EmptyEmbeddingBatchError,
    RetrievalError,
    UnknownCollectionError,
    VectorStoreError,
)
from .ollama_client import OllamaClient, OllamaError
from .orchestrator import RetrievalOrchestrator
from .vector_store import PointStore, VectorStore, cosine_similarity

__all__ = [
    "ChatClient",
    "ChromaVectorStore",
    "CollaboratorError",
    "DimensionMismatchError",
    "EmbeddingClient",
    "EmptyEmbeddingBatchError",
    "OllamaClient",
    "OllamaError",
    "PointStore",
    "RetrievalError",
    "RetrievalOrchestrator",
    "TextChunker",
    "TiktokenTokenizer",
    "Tokenizer",
    "UnknownCollectionError",
    "VectorStore",
    "VectorStoreError",
    "WordTokenizer",
    "chunk_text",
    "cosine_similarity",
]
