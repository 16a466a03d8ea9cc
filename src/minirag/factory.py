"""Build vector stores and orchestrators from Settings."""

from pathlib import Path

from .config import Settings, get_settings
from .core.chroma_store import ChromaVectorStore
from .core.chunker import TextChunker
from .core.collaborators import ChatClient, EmbeddingClient
from .core.ollama_client import OllamaClient
from .core.orchestrator import RetrievalOrchestrator
from .core.vector_store import PointStore, VectorStore
from .utils.logger import configure_root_logger, setup_logger

logger = setup_logger(__name__)


def create_vector_store(settings: Settings | None = None) -> PointStore:
    """Instantiate the configured vector store backend."""
    settings = settings or get_settings()

    if settings.vector_backend == "chroma":
        persist = Path(settings.chroma_db_path) if settings.chroma_db_path else None
        return ChromaVectorStore(
            persist_directory=persist,
            per_collection_locks=settings.per_collection_locks,
        )

    return VectorStore(per_collection_locks=settings.per_collection_locks)


def create_ollama_client(settings: Settings | None = None) -> OllamaClient:
    settings = settings or get_settings()
    return OllamaClient(
        base_url=settings.ollama_base_url,
        embedding_model=settings.ollama_embedding_model,
        chat_model=settings.ollama_chat_model,
        timeout=settings.ollama_timeout,
        max_retries=settings.ollama_max_retries,
        temperature=settings.ollama_temperature,
    )


def create_orchestrator(
    settings: Settings | None = None,
    store: PointStore | None = None,
    embedder: EmbeddingClient | None = None,
    chat: ChatClient | None = None,
    chunker: TextChunker | None = None,
) -> RetrievalOrchestrator:
    """
    Wire a RetrievalOrchestrator from settings and apply the configured log level.

    Any component passed explicitly is used as is. Without an ``embedder`` an
    OllamaClient is created, and it also serves as ``chat`` unless one is given.

    Args:
        settings: Settings to use (default: get_settings())
        store: Vector store (default: create_vector_store(settings))
        embedder: Embedding collaborator
        chat: Chat collaborator
        chunker: Text chunker (default: tiktoken with the configured encoding)

    Returns:
        Configured RetrievalOrchestrator
    """
    settings = settings or get_settings()
    configure_root_logger(settings.log_level)

    if embedder is None:
        ollama_client = create_ollama_client(settings)
        embedder = ollama_client
        if chat is None:
            chat = ollama_client

    if store is None:
        store = create_vector_store(settings)

    orchestrator = RetrievalOrchestrator(
        store=store,
        embedder=embedder,
        chunker=chunker
        or TextChunker(
            max_tokens=settings.max_chunk_tokens,
            encoding_name=settings.tokenizer_encoding,
        ),
        chat=chat,
        collection_name=settings.collection_name,
        top_k=settings.default_top_k,
    )

    logger.info(
        f"Created orchestrator (backend={settings.vector_backend}, "
        f"collection={settings.collection_name}, max_chunk_tokens={settings.max_chunk_tokens})"
    )
    return orchestrator
