"""Map retrieval core exceptions to tool error responses."""

from typing import Any

from ..core.errors import (
    CollaboratorError,
    DimensionMismatchError,
    EmptyEmbeddingBatchError,
    UnknownCollectionError,
)
from ..utils.validation import ValidationError

ERROR_KINDS: list[tuple[type[Exception], str]] = [
    (ValidationError, "validation_error"),
    (UnknownCollectionError, "unknown_collection"),
    (DimensionMismatchError, "dimension_mismatch"),
    (EmptyEmbeddingBatchError, "empty_input"),
    (CollaboratorError, "collaborator_failed"),
]


def error_response(error: Exception, fallback_kind: str, fallback_message: str) -> dict[str, Any]:
    """
    Build an ``{"status": "error", ...}`` response.

    Known errors keep their own message; anything else is reported as
    ``fallback_kind`` with ``fallback_message`` prepended.
    """
    for error_type, kind in ERROR_KINDS:
        if isinstance(error, error_type):
            return {"status": "error", "error": kind, "message": str(error)}

    return {
        "status": "error",
        "error": fallback_kind,
        "message": f"{fallback_message}: {error}",
    }


def is_expected(error: Exception) -> bool:
    """True for errors the tools report without a traceback."""
    return any(isinstance(error, error_type) for error_type, _ in ERROR_KINDS)
