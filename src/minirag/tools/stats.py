"""Statistics tool."""

from typing import Any

from ..config import Settings
from ..core.errors import UnknownCollectionError
from ..core.vector_store import PointStore
from ..utils.logger import setup_logger
from ..utils.validation import validate_collection_name
from .errors import error_response

logger = setup_logger(__name__)


async def get_stats_tool(
    store: PointStore,
    settings: Settings,
    collection_name: str | None = None,
) -> dict[str, Any]:
    """
    Get collection statistics and configuration information.

    A collection that does not exist is reported with ``exists: False`` and
    zero points rather than as an error.

    Example Response:
        {
            "status": "success",
            "statistics": {
                "collection_name": "documents",
                "exists": true,
                "points_count": 247,
                "dimension": 768,
                "vector_backend": "memory",
                "embedding_model": "nomic-embed-text",
                "max_chunk_tokens": 400
            }
        }
    """
    try:
        name = validate_collection_name(
            settings.collection_name if collection_name is None else collection_name
        )
        logger.info(f"Collecting statistics for '{name}'")

        # Existence, size and dimension come from one locked read
        try:
            info = store.get_collection_info(name)
        except UnknownCollectionError:
            info = None

        stats = {
            "collection_name": name,
            "exists": info is not None,
            "points_count": info.points_count if info is not None else 0,
            "dimension": info.dimension if info is not None else None,
            "vector_backend": settings.vector_backend,
            "embedding_model": settings.ollama_embedding_model,
            "max_chunk_tokens": settings.max_chunk_tokens,
        }

        logger.info(f"Statistics: {stats['points_count']} points in '{name}'")

        return {
            "status": "success",
            "statistics": stats,
        }

    except Exception as e:
        logger.error(f"Stats error: {e}", exc_info=True)
        return error_response(e, "stats_failed", "Failed to get statistics")
