"""Query and answer tools."""

from typing import Any

from ..core.orchestrator import RetrievalOrchestrator
from ..utils.logger import setup_logger
from ..utils.validation import validate_collection_name, validate_query, validate_top_k
from .errors import error_response, is_expected

logger = setup_logger(__name__)


async def query_documents_tool(
    query: str,
    orchestrator: RetrievalOrchestrator,
    collection_name: str | None = None,
    top_k: int | None = None,
) -> dict[str, Any]:
    """
    Search for the chunks most similar to a natural language query.

    Args:
        query: Natural language search query
        orchestrator: RetrievalOrchestrator instance
        collection_name: Collection to search (default: the orchestrator's)
        top_k: Maximum number of results (default: the orchestrator's)

    Returns:
        Dictionary with search results

    Example Response:
        {
            "status": "success",
            "query": "How to train a model?",
            "results": [
                {
                    "point_id": 5,
                    "content": "Training a model involves...",
                    "similarity_score": 0.8712
                }
            ],
            "total_results": 1
        }
    """
    try:
        validated_query = validate_query(query)
        name = validate_collection_name(
            orchestrator.collection_name if collection_name is None else collection_name
        )
        limit = validate_top_k(top_k if top_k is not None else orchestrator.top_k)

        logger.info(f"Searching '{name}' for: '{validated_query[:100]}'")
        hits = await orchestrator.search_points(validated_query, collection_name=name, top_k=limit)

        results = [
            {
                "point_id": hit.id.value,
                "content": (hit.payload or {}).get("source"),
                "similarity_score": round(hit.score, 4),
            }
            for hit in hits
        ]

        logger.info(f"Found {len(results)} relevant chunks")

        return {
            "status": "success",
            "query": validated_query,
            "collection_name": name,
            "results": results,
            "total_results": len(results),
        }

    except Exception as e:
        if is_expected(e):
            logger.error(f"Query rejected: {e}")
        else:
            logger.error(f"Query error: {e}", exc_info=True)
        return error_response(e, "query_failed", "Failed to execute query")


async def answer_question_tool(
    question: str,
    orchestrator: RetrievalOrchestrator,
    collection_name: str | None = None,
    top_k: int | None = None,
) -> dict[str, Any]:
    """
    Answer a question grounded on the retrieved chunks.

    Returns:
        Dictionary with the answer and the context passages used
    """
    try:
        validated = validate_query(question)
        name = validate_collection_name(
            orchestrator.collection_name if collection_name is None else collection_name
        )
        limit = validate_top_k(top_k if top_k is not None else orchestrator.top_k)

        logger.info(f"Answering question against '{name}'")
        result = await orchestrator.answer(validated, collection_name=name, top_k=limit)

        return {
            "status": "success",
            "query": result.query,
            "answer": result.answer,
            "context": result.context,
            "context_count": len(result.context),
        }

    except Exception as e:
        if is_expected(e):
            logger.error(f"Answer rejected: {e}")
        else:
            logger.error(f"Answer error: {e}", exc_info=True)
        return error_response(e, "answer_failed", "Failed to answer question")
