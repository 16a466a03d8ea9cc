"""Data models for minirag."""

from .schemas import (
    Chunk,
    CollectionInfo,
    IngestionResult,
    NumericId,
    Point,
    PointId,
    PointIdLike,
    RAGAnswer,
    RetrievalContext,
    ScoredPoint,
    StringId,
    as_point_id,
)

__all__ = [
    "Chunk",
    "CollectionInfo",
    "IngestionResult",
    "NumericId",
    "Point",
    "PointId",
    "PointIdLike",
    "RAGAnswer",
    "RetrievalContext",
    "ScoredPoint",
    "StringId",
    "as_point_id",
]
