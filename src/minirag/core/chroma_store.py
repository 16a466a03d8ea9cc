"""ChromaDB-backed vector store implementing the same contract as VectorStore."""

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import chromadb
import numpy as np
from chromadb.config import Settings

from ..models.schemas import (
    CollectionInfo,
    NumericId,
    Point,
    PointIdLike,
    ScoredPoint,
    StringId,
    as_point_id,
)
from ..utils.locks import LockArena
from ..utils.logger import setup_logger
from .errors import DimensionMismatchError, UnknownCollectionError, VectorStoreError
from .vector_store import (
    check_dimensions,
    check_query_vector,
    cosine_scores,
    rank_scored,
    to_float32,
)

logger = setup_logger(__name__)

POINT_ID_KEY = "_point_id"
DIMENSION_KEY = "dimension"


def encode_point_id(point_id: NumericId | StringId) -> str:
    """Chroma ids are strings; keep the id kind in a prefix."""
    prefix = "n" if isinstance(point_id, NumericId) else "s"
    return f"{prefix}:{point_id.value}"


def decode_point_id(raw: str) -> NumericId | StringId:
    prefix, _, value = raw.partition(":")
    if prefix == "n":
        return NumericId(value=int(value))
    if prefix == "s":
        return StringId(value=value)
    raise VectorStoreError(f"Unrecognised point id in Chroma collection: {raw!r}")


class ChromaVectorStore:
    """
    Vector store backed by a ChromaDB client.

    Collections use the cosine HNSW space and record their dimension in the
    collection metadata. Embeddings are always supplied by the caller; no
    Chroma embedding function is attached. Search does not use the approximate
    HNSW index: it scores every stored embedding with exact cosine similarity
    and ranks the hits like VectorStore does, ties by ascending point id.
    """

    def __init__(
        self,
        persist_directory: Path | None = None,
        client: Any | None = None,
        per_collection_locks: bool = False,
    ):
        """
        Initialize the Chroma vector store.

        Args:
            persist_directory: Directory for a persistent client (default: ephemeral)
            client: Pre-built Chroma client; takes precedence over persist_directory
            per_collection_locks: Give each collection its own lock

        Raises:
            VectorStoreError: If the client cannot be created
        """
        self._locks = LockArena(per_collection=per_collection_locks)

        try:
            if client is not None:
                self.client = client
            else:
                settings = Settings(anonymized_telemetry=False, allow_reset=True)
                if persist_directory is not None:
                    Path(persist_directory).mkdir(parents=True, exist_ok=True)
                    logger.info(f"Initializing persistent ChromaDB at {persist_directory}")
                    self.client = chromadb.PersistentClient(
                        path=str(persist_directory), settings=settings
                    )
                else:
                    logger.info("Initializing ephemeral ChromaDB client")
                    self.client = chromadb.EphemeralClient(settings=settings)
        except Exception as e:
            error_msg = f"Failed to initialize Chroma vector store: {e}"
            logger.error(error_msg)
            raise VectorStoreError(error_msg) from e

    def _collection_names(self) -> set[str]:
        # Depending on the chromadb release this returns names or Collection objects
        return {c if isinstance(c, str) else c.name for c in self.client.list_collections()}

    def _open(self, name: str) -> tuple[Any, int]:
        if name not in self._collection_names():
            raise UnknownCollectionError(name)
        collection = self.client.get_collection(name=name, embedding_function=None)
        dimension = (collection.metadata or {}).get(DIMENSION_KEY)
        if not isinstance(dimension, int):
            raise VectorStoreError(f"Chroma collection '{name}' has no recorded dimension")
        return collection, dimension

    def create_collection(self, name: str, dimension: int) -> None:
        """
        Create a collection, or do nothing if it already exists with ``dimension``.

        Raises:
            ValueError: If dimension is not positive
            DimensionMismatchError: If the collection exists with another dimension
        """
        if dimension <= 0:
            raise ValueError(f"Collection dimension must be positive, got {dimension}")

        with self._locks.hold(name):
            if name in self._collection_names():
                _, existing = self._open(name)
                if existing != dimension:
                    raise DimensionMismatchError(name, existing, dimension)
                logger.debug(f"Collection '{name}' already exists (dimension={dimension})")
                return

            self.client.create_collection(
                name=name,
                metadata={"hnsw:space": "cosine", DIMENSION_KEY: dimension},
                embedding_function=None,
            )
            logger.info(f"Created Chroma collection '{name}' (dimension={dimension})")

    def upsert(self, collection_name: str, points: Sequence[Point]) -> None:
        """
        Insert or replace points; validated in full before writing.

        Raises:
            UnknownCollectionError: If the collection does not exist
            DimensionMismatchError: If any vector has the wrong length
        """
        with self._locks.hold(collection_name):
            collection, dimension = self._open(collection_name)
            check_dimensions(collection_name, dimension, points)
            if not points:
                return

            # Repeated ids inside one batch resolve to the last occurrence
            latest: dict[str, Point] = {}
            for point in points:
                latest[encode_point_id(point.id)] = point

            ids = list(latest)
            embeddings = [to_float32(p.vector).tolist() for p in latest.values()]
            metadatas = [{**(p.payload or {}), POINT_ID_KEY: pid} for pid, p in latest.items()]

            # Chroma merges metadata on upsert; replace existing records outright
            existing = collection.get(ids=ids, include=["metadatas"])["ids"]
            if existing:
                collection.delete(ids=list(existing))
            collection.add(ids=ids, embeddings=embeddings, metadatas=metadatas)
            logger.info(f"Upserted {len(ids)} points into Chroma collection '{collection_name}'")

    def delete(self, collection_name: str, ids: Iterable[PointIdLike]) -> int:
        """
        Remove points by id; unknown ids are ignored.

        Returns:
            Number of points actually removed
        """
        encoded = list(dict.fromkeys(encode_point_id(as_point_id(i)) for i in ids))

        with self._locks.hold(collection_name):
            collection, _ = self._open(collection_name)
            if not encoded:
                return 0

            present = collection.get(ids=encoded, include=["metadatas"])["ids"]
            if present:
                collection.delete(ids=list(present))

        logger.info(
            f"Deleted {len(present)} of {len(encoded)} requested points "
            f"from Chroma collection '{collection_name}'"
        )
        return len(present)

    def get(self, collection_name: str, point_id: PointIdLike) -> Point | None:
        """
        Fetch a point by id.

        Raises:
            UnknownCollectionError: If the collection does not exist
        """
        pid = as_point_id(point_id)
        with self._locks.hold(collection_name):
            collection, _ = self._open(collection_name)
            result = collection.get(ids=[encode_point_id(pid)], include=["embeddings", "metadatas"])

        if not result["ids"]:
            return None
        return self._to_point(result["ids"][0], result["embeddings"][0], result["metadatas"][0])

    def search(
        self,
        collection_name: str,
        query_vector: Sequence[float],
        limit: int,
    ) -> list[ScoredPoint]:
        """
        Find the points most similar to ``query_vector``.

        Every stored embedding is scored, so ranking matches VectorStore.

        Raises:
            ValueError: If limit is not positive or the query is not finite
            UnknownCollectionError: If the collection does not exist
            DimensionMismatchError: If the query vector has the wrong length
        """
        if limit <= 0:
            raise ValueError(f"Search limit must be positive, got {limit}")

        with self._locks.hold(collection_name):
            collection, dimension = self._open(collection_name)
            check_query_vector(collection_name, dimension, query_vector)
            result = collection.get(include=["embeddings", "metadatas"])

        if not result["ids"]:
            return []

        points = [
            self._to_point(raw_id, embedding, metadata)
            for raw_id, embedding, metadata in zip(
                result["ids"], result["embeddings"], result["metadatas"]
            )
        ]
        matrix = np.stack([to_float32(p.vector) for p in points])
        scores = cosine_scores(matrix, to_float32(query_vector))

        scored = (
            ScoredPoint(point=point, score=float(score)) for point, score in zip(points, scores)
        )
        results = rank_scored(scored, limit)
        logger.debug(
            f"Chroma search in '{collection_name}' returned {len(results)} of {len(points)} points"
        )
        return results

    def collection_size(self, collection_name: str) -> int:
        """Number of points in the collection; 0 if it does not exist."""
        with self._locks.hold(collection_name):
            if collection_name not in self._collection_names():
                return 0
            collection, _ = self._open(collection_name)
            return collection.count()

    def has_collection(self, name: str) -> bool:
        with self._locks.hold(name):
            return name in self._collection_names()

    def get_collection_info(self, name: str) -> CollectionInfo:
        with self._locks.hold(name):
            collection, dimension = self._open(name)
            return CollectionInfo(name=name, dimension=dimension, points_count=collection.count())

    @staticmethod
    def _to_point(raw_id: str, embedding: Any, metadata: dict | None) -> Point:
        payload = {k: v for k, v in (metadata or {}).items() if k != POINT_ID_KEY}
        return Point(
            id=decode_point_id(raw_id),
            vector=[float(x) for x in embedding],
            payload=payload or None,
        )
