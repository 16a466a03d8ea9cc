"""In-memory vector store with exact cosine similarity search."""

import heapq
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

import numpy as np

from ..models.schemas import CollectionInfo, Point, PointIdLike, ScoredPoint, as_point_id
from ..utils.locks import LockArena
from ..utils.logger import setup_logger
from .errors import DimensionMismatchError, UnknownCollectionError

logger = setup_logger(__name__)


class PointStore(Protocol):
    """Operations shared by every vector store backend."""

    def create_collection(self, name: str, dimension: int) -> None: ...

    def upsert(self, collection_name: str, points: Sequence[Point]) -> None: ...

    def delete(self, collection_name: str, ids: Iterable[PointIdLike]) -> int: ...

    def get(self, collection_name: str, point_id: PointIdLike) -> Point | None: ...

    def search(
        self, collection_name: str, query_vector: Sequence[float], limit: int
    ) -> list[ScoredPoint]: ...

    def collection_size(self, collection_name: str) -> int: ...

    def has_collection(self, name: str) -> bool: ...

    def get_collection_info(self, name: str) -> CollectionInfo: ...


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Compute cosine similarity between two vectors.

    Returns 0.0 when either vector has zero norm.

    Raises:
        ValueError: If the vectors differ in length
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError(f"Vector dimensions don't match: {va.size} vs {vb.size}")

    norm = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0
    return float(np.dot(va, vb)) / norm


def cosine_scores(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """Cosine similarity of every row of ``matrix`` against ``query``."""
    matrix = matrix.astype(np.float64, copy=False)
    query = query.astype(np.float64, copy=False)

    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query
    scores = np.zeros_like(dots)
    np.divide(dots, norms, out=scores, where=norms != 0)
    return scores


def rank_scored(scored: Iterable[ScoredPoint], limit: int) -> list[ScoredPoint]:
    """Top ``limit`` hits by descending score, ties by ascending point id."""
    return heapq.nsmallest(limit, scored, key=lambda sp: (-sp.score, sp.point.id.sort_key()))


def to_float32(vector: Sequence[float]) -> np.ndarray:
    """Vectors are stored as float32."""
    return np.asarray(vector, dtype=np.float32)


def check_query_vector(collection_name: str, dimension: int, query_vector: Sequence[float]) -> None:
    """
    Reject query vectors of the wrong length or with non-finite components.

    Raises:
        DimensionMismatchError: If the length differs from the collection's dimension
        ValueError: If any component is NaN or infinite
    """
    if len(query_vector) != dimension:
        raise DimensionMismatchError(collection_name, dimension, len(query_vector))
    if not np.all(np.isfinite(np.asarray(query_vector, dtype=np.float64))):
        raise ValueError("Query vector components must be finite")


def copy_hits(ranked: Iterable[ScoredPoint]) -> list[ScoredPoint]:
    """Detach search results from stored state."""
    return [ScoredPoint(point=hit.point.model_copy(deep=True), score=hit.score) for hit in ranked]


def check_dimensions(collection_name: str, dimension: int, points: Sequence[Point]) -> None:
    """Raise DimensionMismatchError for the first point of the wrong length."""
    for point in points:
        if len(point.vector) != dimension:
            raise DimensionMismatchError(collection_name, dimension, len(point.vector))


@dataclass
class _Collection:
    name: str
    dimension: int
    points: dict = field(default_factory=dict)
    vectors: dict = field(default_factory=dict)


class VectorStore:
    """
    Process-local vector store holding named collections of points.

    Every point's vector length equals its collection's dimension. All state
    lives in memory and is dropped with the store. Access is serialised through
    a LockArena: one global lock by default, or one lock per collection when
    ``per_collection_locks`` is set.
    """

    def __init__(self, per_collection_locks: bool = False):
        """
        Initialize an empty vector store.

        Args:
            per_collection_locks: Give each collection its own lock instead of
                sharing a single global one
        """
        self._collections: dict[str, _Collection] = {}
        self._locks = LockArena(per_collection=per_collection_locks)

        logger.info(f"Initialized in-memory VectorStore (per_collection_locks={per_collection_locks})")

    def _require(self, name: str) -> _Collection:
        collection = self._collections.get(name)
        if collection is None:
            raise UnknownCollectionError(name)
        return collection

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
            existing = self._collections.get(name)
            if existing is not None:
                if existing.dimension != dimension:
                    raise DimensionMismatchError(name, existing.dimension, dimension)
                logger.debug(f"Collection '{name}' already exists (dimension={dimension})")
                return

            self._collections[name] = _Collection(name=name, dimension=dimension)
            logger.info(f"Created collection '{name}' (dimension={dimension})")

    def upsert(self, collection_name: str, points: Sequence[Point]) -> None:
        """
        Insert points or replace the vector and payload of existing ids.

        The whole batch is validated before the collection is touched, so a
        failing call leaves the collection unchanged.

        Raises:
            UnknownCollectionError: If the collection does not exist
            DimensionMismatchError: If any vector has the wrong length
        """
        with self._locks.hold(collection_name):
            collection = self._require(collection_name)
            check_dimensions(collection_name, collection.dimension, points)

            staged = []
            for point in points:
                vector = to_float32(point.vector)
                stored = point.model_copy(
                    update={"vector": vector.tolist()},
                    deep=True,
                )
                staged.append((stored, vector))

            for stored, vector in staged:
                collection.points[stored.id] = stored
                collection.vectors[stored.id] = vector

            logger.info(f"Upserted {len(staged)} points into '{collection_name}'")

    def delete(self, collection_name: str, ids: Iterable[PointIdLike]) -> int:
        """
        Remove points by id; unknown ids are ignored.

        Returns:
            Number of points actually removed

        Raises:
            UnknownCollectionError: If the collection does not exist
        """
        point_ids = [as_point_id(i) for i in ids]

        with self._locks.hold(collection_name):
            collection = self._require(collection_name)
            removed = 0
            for point_id in point_ids:
                if collection.points.pop(point_id, None) is not None:
                    del collection.vectors[point_id]
                    removed += 1

        logger.info(f"Deleted {removed} of {len(point_ids)} requested points from '{collection_name}'")
        return removed

    def get(self, collection_name: str, point_id: PointIdLike) -> Point | None:
        """
        Fetch a copy of a point by id.

        Raises:
            UnknownCollectionError: If the collection does not exist
        """
        pid = as_point_id(point_id)
        with self._locks.hold(collection_name):
            point = self._require(collection_name).points.get(pid)
            return point.model_copy(deep=True) if point is not None else None

    def search(
        self,
        collection_name: str,
        query_vector: Sequence[float],
        limit: int,
    ) -> list[ScoredPoint]:
        """
        Find the points most similar to ``query_vector``.

        Args:
            collection_name: Collection to search
            query_vector: Vector of the collection's dimension
            limit: Maximum number of results

        Returns:
            At most ``limit`` ScoredPoints, by descending cosine similarity and
            then ascending point id

        Raises:
            ValueError: If limit is not positive or the query is not finite
            UnknownCollectionError: If the collection does not exist
            DimensionMismatchError: If the query vector has the wrong length
        """
        if limit <= 0:
            raise ValueError(f"Search limit must be positive, got {limit}")

        with self._locks.hold(collection_name):
            collection = self._require(collection_name)
            check_query_vector(collection_name, collection.dimension, query_vector)

            if not collection.points:
                return []

            ids = list(collection.points)
            matrix = np.stack([collection.vectors[pid] for pid in ids])
            scores = cosine_scores(matrix, to_float32(query_vector))

            scored = (
                ScoredPoint(point=collection.points[pid], score=float(score))
                for pid, score in zip(ids, scores)
            )
            results = copy_hits(rank_scored(scored, limit))

        logger.debug(f"Search in '{collection_name}' returned {len(results)} of {len(ids)} points")
        return results

    def collection_size(self, collection_name: str) -> int:
        """Number of points in the collection; 0 if it does not exist."""
        with self._locks.hold(collection_name):
            collection = self._collections.get(collection_name)
            return len(collection.points) if collection is not None else 0

    def has_collection(self, name: str) -> bool:
        with self._locks.hold(name):
            return name in self._collections

    def get_collection_info(self, name: str) -> CollectionInfo:
        """
        Snapshot of a collection's name, dimension and size.

        Raises:
            UnknownCollectionError: If the collection does not exist
        """
        with self._locks.hold(name):
            collection = self._require(name)
            return CollectionInfo(
                name=collection.name,
                dimension=collection.dimension,
                points_count=len(collection.points),
            )
