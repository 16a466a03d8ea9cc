"""Ingestion tools: raw text and .txt files."""

from typing import Any

from ..core.orchestrator import RetrievalOrchestrator
from ..utils.logger import setup_logger
from ..utils.validation import (
    ValidationError,
    validate_collection_name,
    validate_text,
    validate_txt_file,
)
from .errors import error_response, is_expected

logger = setup_logger(__name__)


def _validate_max_tokens(max_tokens: Any) -> int | None:
    if max_tokens is None:
        return None
    if isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or max_tokens < 1:
        raise ValidationError(f"max_tokens must be a positive integer, got {max_tokens!r}")
    return max_tokens


async def ingest_text_tool(
    text: str,
    orchestrator: RetrievalOrchestrator,
    collection_name: str | None = None,
    max_tokens: int | None = None,
) -> dict[str, Any]:
    """
    Chunk, embed and store raw text content.

    Args:
        text: Raw text content to ingest
        orchestrator: RetrievalOrchestrator instance
        collection_name: Target collection (default: the orchestrator's)
        max_tokens: Token budget per chunk (default: the chunker's)

    Returns:
        Dictionary with ingestion results

    Example Response:
        {
            "status": "success",
            "collection_name": "documents",
            "chunk_count": 42,
            "dimension": 768,
            "text_size_bytes": 18211,
            "message": "Successfully ingested 42 chunks into 'documents'"
        }
    """
    try:
        validate_text(text)
        name = validate_collection_name(
            orchestrator.collection_name if collection_name is None else collection_name
        )
        limit = _validate_max_tokens(max_tokens)

        logger.info(f"Ingesting {len(text)} characters into '{name}'")
        result = await orchestrator.ingest(text, collection_name=name, max_tokens=limit)

        return {
            "status": "success",
            "collection_name": result.collection_name,
            "chunk_count": result.chunk_count,
            "dimension": result.dimension,
            "text_size_bytes": len(text.encode("utf-8")),
            "message": (
                f"Successfully ingested {result.chunk_count} chunks into '{result.collection_name}'"
            ),
        }

    except Exception as e:
        if is_expected(e):
            logger.error(f"Ingestion rejected: {e}")
        else:
            logger.error(f"Ingestion error: {e}", exc_info=True)
        return error_response(e, "ingestion_failed", "Failed to ingest text content")


async def ingest_file_tool(
    file_path: str,
    orchestrator: RetrievalOrchestrator,
    collection_name: str | None = None,
    max_tokens: int | None = None,
) -> dict[str, Any]:
    """
    Ingest the contents of a UTF-8 .txt file.

    Args:
        file_path: Path to the .txt file
        orchestrator: RetrievalOrchestrator instance
        collection_name: Target collection (default: the orchestrator's)
        max_tokens: Token budget per chunk (default: the chunker's)

    Returns:
        Dictionary with ingestion results, including the resolved file path
    """
    try:
        path = validate_txt_file(file_path)
        logger.info(f"Reading {path}")
        text = path.read_text(encoding="utf-8")

    except ValidationError as e:
        logger.error(f"Validation error: {e}")
        return error_response(e, "validation_error", "Invalid file")

    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Failed to read {file_path}: {e}")
        return error_response(e, "read_failed", "Failed to read file")

    result = await ingest_text_tool(
        text=text,
        orchestrator=orchestrator,
        collection_name=collection_name,
        max_tokens=max_tokens,
    )
    if result["status"] == "success":
        result["file_path"] = str(path)
    return result
