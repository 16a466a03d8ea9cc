"""Exceptions raised by the minirag retrieval core."""


class RetrievalError(Exception):
    """Base class for all retrieval core errors."""

    pass


class VectorStoreError(RetrievalError):
    """Exception raised during vector store operations."""

    pass


class UnknownCollectionError(VectorStoreError):
    """Raised when an operation targets a collection that does not exist."""

    def __init__(self, collection_name: str):
        self.collection_name = collection_name
        super().__init__(f"Collection '{collection_name}' does not exist")


class DimensionMismatchError(VectorStoreError):
    """Raised when a vector length disagrees with a collection's dimension."""

    def __init__(self, collection_name: str, expected: int, actual: int):
        self.collection_name = collection_name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Dimension mismatch for collection '{collection_name}': "
            f"expected {expected}, got {actual}"
        )


class EmptyEmbeddingBatchError(RetrievalError):
    """Raised when ingestion produced no chunks or no embeddings."""

    pass


class CollaboratorError(RetrievalError):
    """Wraps a failure surfaced by the embedding or chat collaborator."""

    def __init__(self, message: str, original: BaseException | None = None):
        self.original = original
        super().__init__(message)
