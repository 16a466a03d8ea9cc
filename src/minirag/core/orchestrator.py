"""Retrieval orchestration: chunk, embed and store text; embed, search and ground queries."""

from collections.abc import Sequence

from ..models.schemas import (
    IngestionResult,
    Point,
    RAGAnswer,
    RetrievalContext,
    ScoredPoint,
)
from ..utils.logger import setup_logger
from .chunker import TextChunker
from .collaborators import ChatClient, EmbeddingClient, IndexedEmbedding
from .errors import CollaboratorError, EmptyEmbeddingBatchError
from .vector_store import PointStore

logger = setup_logger(__name__)

SOURCE_KEY = "source"


class RetrievalOrchestrator:
    """
    Ties the chunker and the embedding collaborator to a vector store.

    Holds no state of its own beyond its collaborators: every ingestion or query
    call works on transient chunk and embedding batches. Collaborator failures
    are wrapped in CollaboratorError and never retried here.
    """

    SYSTEM_PROMPT_TEMPLATE = """You are a helpful assistant. Answer the user's question using only the context below.
If the context does not contain the answer, say that you don't know.

Context:
{context}"""

    CONTEXT_SEPARATOR = "\n\n---\n\n"

    def __init__(
        self,
        store: PointStore,
        embedder: EmbeddingClient,
        chunker: TextChunker,
        chat: ChatClient | None = None,
        collection_name: str = "documents",
        top_k: int = 5,
    ):
        """
        Initialize the orchestrator.

        Args:
            store: Vector store receiving the points
            embedder: Embedding collaborator
            chunker: Text chunker
            chat: Chat collaborator, required only by answer()
            collection_name: Collection used when a call does not name one
            top_k: Number of results used when a call does not give one
        """
        self.store = store
        self.embedder = embedder
        self.chunker = chunker
        self.chat = chat
        self.collection_name = collection_name
        self.top_k = top_k

    async def _embed(self, texts: Sequence[str]) -> list[Sequence[float]]:
        """Embed a batch and return the vectors in request order."""
        try:
            response = await self.embedder.embed(texts)
        except Exception as e:
            logger.error(f"Embedding call failed for batch of {len(texts)}: {e}")
            raise CollaboratorError(f"Embedding failed: {e}", original=e) from e

        return self._order_embeddings(response, len(texts))

    @staticmethod
    def _order_embeddings(
        response: Sequence[IndexedEmbedding], expected: int
    ) -> list[Sequence[float]]:
        if not response:
            raise EmptyEmbeddingBatchError("Embedding collaborator returned no vectors")

        by_index = {index: vector for index, vector in response}
        if len(response) != expected or set(by_index) != set(range(expected)):
            raise CollaboratorError(
                f"Embedding response indexes {sorted(by_index)} do not cover a batch of {expected}"
            )
        return [by_index[i] for i in range(expected)]

    async def ingest(
        self,
        text: str,
        collection_name: str | None = None,
        max_tokens: int | None = None,
    ) -> IngestionResult:
        """
        Chunk, embed and store a text.

        All chunks are embedded in a single batched call. The collection is
        created with the dimension of the first embedding (a no-op when it
        already exists with that dimension), and one point per chunk, keyed by
        chunk index, is upserted with the chunk text as ``source`` payload.

        Args:
            text: Raw text to ingest
            collection_name: Target collection (default: the orchestrator's)
            max_tokens: Token budget per chunk (default: the chunker's)

        Returns:
            IngestionResult with the chunk count and vector dimension

        Raises:
            EmptyEmbeddingBatchError: If no chunks or no embeddings were produced
            CollaboratorError: If the embedding call fails or is malformed
            DimensionMismatchError: If the collection exists with another dimension
        """
        name = self.collection_name if collection_name is None else collection_name
        chunks = list(self.chunker.chunk(text, max_tokens))

        if not chunks:
            raise EmptyEmbeddingBatchError("No chunks produced from input text")

        logger.info(f"Embedding {len(chunks)} chunks for collection '{name}'")
        vectors = await self._embed([chunk.text for chunk in chunks])

        dimension = len(vectors[0])
        self.store.create_collection(name, dimension)

        points = [
            Point(
                id=chunk.index,
                vector=list(vector),
                payload={SOURCE_KEY: chunk.text, "token_count": chunk.token_count},
            )
            for chunk, vector in zip(chunks, vectors)
        ]
        self.store.upsert(name, points)

        logger.info(f"Ingested {len(points)} chunks into '{name}' (dimension={dimension})")
        return IngestionResult(collection_name=name, chunk_count=len(points), dimension=dimension)

    async def search_points(
        self,
        query_text: str,
        collection_name: str | None = None,
        top_k: int | None = None,
    ) -> list[ScoredPoint]:
        """Embed the query and return the ranked points from the store."""
        name = self.collection_name if collection_name is None else collection_name
        limit = self.top_k if top_k is None else top_k

        logger.debug(f"Searching '{name}' for: '{query_text[:100]}'")
        (query_vector,) = await self._embed([query_text])
        return self.store.search(name, query_vector, limit)

    async def retrieve(
        self,
        query_text: str,
        collection_name: str | None = None,
        top_k: int | None = None,
    ) -> RetrievalContext:
        """
        Build the retrieval context for a query.

        Returns:
            Chunk texts of the top results in rank order; points without a
            ``source`` payload are skipped

        Raises:
            CollaboratorError: If embedding the query fails
            UnknownCollectionError: If the collection does not exist
            DimensionMismatchError: If the query vector has the wrong length
        """
        results = await self.search_points(query_text, collection_name, top_k)

        context: RetrievalContext = []
        for hit in results:
            source = (hit.payload or {}).get(SOURCE_KEY)
            if source is None:
                logger.warning(f"Point {hit.id} has no '{SOURCE_KEY}' payload; skipping")
                continue
            context.append(str(source))

        logger.info(f"Retrieved {len(context)} context passages")
        return context

    def render_system_context(self, context: RetrievalContext) -> str:
        return self.SYSTEM_PROMPT_TEMPLATE.format(context=self.CONTEXT_SEPARATOR.join(context))

    async def answer(
        self,
        query_text: str,
        collection_name: str | None = None,
        top_k: int | None = None,
    ) -> RAGAnswer:
        """
        Retrieve context for a query and ask the chat collaborator to answer it.

        Raises:
            RuntimeError: If no chat client was configured
            CollaboratorError: If embedding or generation fails
        """
        if self.chat is None:
            raise RuntimeError("No chat client configured - can't generate answers")

        context = await self.retrieve(query_text, collection_name, top_k)
        system_context = self.render_system_context(context)

        try:
            answer = await self.chat.generate(system_context, query_text)
        except Exception as e:
            logger.error(f"Generation call failed: {e}")
            raise CollaboratorError(f"Generation failed: {e}", original=e) from e

        return RAGAnswer(query=query_text, answer=answer, context=context)
