"""Input validation utilities for the minirag tool layer.

Checks user-supplied queries, limits, collection names, point ids and file paths
before they reach the retrieval core.
"""

from pathlib import Path
from typing import Any

from ..models.schemas import NumericId, StringId, as_point_id


class ValidationError(Exception):
    """Exception raised when validation fails."""

    pass


def validate_file_path(file_path: str, must_exist: bool = True) -> Path:
    """
    Validate and sanitize a file path.

    Args:
        file_path: File path to validate
        must_exist: Whether the file must exist

    Returns:
        Validated Path object

    Raises:
        ValidationError: If the path is malformed, contains '..', or is not a
            readable file
    """
    try:
        path = Path(file_path).resolve()
    except (TypeError, ValueError, OSError) as e:
        raise ValidationError(f"Invalid file path: {e}") from e

    if ".." in Path(file_path).parts:
        raise ValidationError("Path traversal detected: '..' not allowed in path")

    if must_exist:
        if not path.exists():
            raise ValidationError(f"File not found: {path}")

        if not path.is_file():
            raise ValidationError(f"Path is not a file: {path}")

        try:
            with open(path, "rb") as f:
                f.read(1)
        except OSError as e:
            raise ValidationError(f"File not readable: {path}") from e

    return path


def validate_txt_file(file_path: str) -> Path:
    """
    Validate that a file is an existing .txt file.

    Args:
        file_path: File path to validate

    Returns:
        Validated Path object

    Raises:
        ValidationError: If validation fails
    """
    path = validate_file_path(file_path, must_exist=True)

    if path.suffix.lower() != ".txt":
        raise ValidationError(
            f"Only .txt files supported, got: {path.suffix or 'no extension'}. "
            "Please provide a plain text file."
        )

    return path


def validate_text(text: Any) -> str:
    """Validate raw text for ingestion; returns it unchanged."""
    if not isinstance(text, str):
        raise ValidationError(f"Text must be a string, got {type(text).__name__}")

    if not text.strip():
        raise ValidationError("Text content cannot be empty or only whitespace")

    return text


def validate_query(query: Any, max_length: int = 1000) -> str:
    """
    Validate a search query string.

    Args:
        query: Query string to validate
        max_length: Maximum allowed query length

    Returns:
        Validated and trimmed query string

    Raises:
        ValidationError: If validation fails
    """
    if not isinstance(query, str):
        raise ValidationError(f"Query must be a string, got {type(query).__name__}")

    if not query:
        raise ValidationError("Query cannot be empty")

    query = query.strip()

    if not query:
        raise ValidationError("Query cannot be only whitespace")

    if len(query) > max_length:
        raise ValidationError(
            f"Query too long: {len(query)} characters (max {max_length}). "
            "Please shorten your query."
        )

    return query


def validate_top_k(top_k: Any, max_allowed: int = 100) -> int:
    """
    Validate the number of results requested from a search.

    Raises:
        ValidationError: If top_k is not an int in [1, max_allowed]
    """
    if isinstance(top_k, bool) or not isinstance(top_k, int):
        raise ValidationError(f"top_k must be an integer, got {type(top_k).__name__}")

    if top_k < 1:
        raise ValidationError(f"top_k must be at least 1, got {top_k}")

    if top_k > max_allowed:
        raise ValidationError(
            f"top_k too large: {top_k} (max {max_allowed}). Please request fewer results."
        )

    return top_k


def validate_collection_name(name: Any, max_length: int = 63) -> str:
    """Validate and trim a collection name."""
    if not isinstance(name, str):
        raise ValidationError(f"Collection name must be a string, got {type(name).__name__}")

    name = name.strip()

    if not name:
        raise ValidationError("Collection name cannot be empty")

    if len(name) > max_length:
        raise ValidationError(f"Collection name too long: {len(name)} characters (max {max_length})")

    return name


def validate_point_ids(ids: Any) -> list[NumericId | StringId]:
    """
    Validate a list of raw point ids.

    Returns:
        List of PointId values

    Raises:
        ValidationError: If ids is not a non-empty list of ints/strings
    """
    if not isinstance(ids, (list, tuple)):
        raise ValidationError(f"Point ids must be a list, got {type(ids).__name__}")

    if not ids:
        raise ValidationError("Point id list cannot be empty")

    try:
        return [as_point_id(i) for i in ids]
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid point id: {e}") from e
