"""Point management tools (get and delete)."""

from typing import Any

from ..core.vector_store import PointStore
from ..utils.logger import setup_logger
from ..utils.validation import validate_collection_name, validate_point_ids
from .errors import error_response, is_expected

logger = setup_logger(__name__)


async def get_point_tool(
    point_id: int | str,
    collection_name: str,
    store: PointStore,
) -> dict[str, Any]:
    """
    Fetch one point by id.

    Example Response:
        {
            "status": "success",
            "point": {"id": 0, "dimension": 768, "payload": {"source": "..."}}
        }
    """
    try:
        name = validate_collection_name(collection_name)
        (pid,) = validate_point_ids([point_id])

        point = store.get(name, pid)
        if point is None:
            logger.warning(f"Point {pid} not found in '{name}'")
            return {
                "status": "error",
                "error": "not_found",
                "message": f"Point {pid} not found in collection '{name}'",
            }

        return {
            "status": "success",
            "point": {
                "id": point.id.value,
                "dimension": point.dimension,
                "payload": point.payload,
            },
        }

    except Exception as e:
        if is_expected(e):
            logger.error(f"Get point rejected: {e}")
        else:
            logger.error(f"Get point error: {e}", exc_info=True)
        return error_response(e, "get_failed", "Failed to get point")


async def delete_points_tool(
    point_ids: list[int | str],
    collection_name: str,
    store: PointStore,
) -> dict[str, Any]:
    """
    Delete points by id. Ids that are not present are ignored.

    Example Response:
        {
            "status": "success",
            "collection_name": "documents",
            "requested": 3,
            "deleted": 2,
            "message": "Deleted 2 of 3 requested points"
        }
    """
    try:
        name = validate_collection_name(collection_name)
        ids = validate_point_ids(point_ids)

        logger.info(f"Deleting {len(ids)} points from '{name}'")
        deleted = store.delete(name, ids)

        return {
            "status": "success",
            "collection_name": name,
            "requested": len(ids),
            "deleted": deleted,
            "message": f"Deleted {deleted} of {len(ids)} requested points",
        }

    except Exception as e:
        if is_expected(e):
            logger.error(f"Delete rejected: {e}")
        else:
            logger.error(f"Delete error: {e}", exc_info=True)
        return error_response(e, "delete_failed", "Failed to delete points")
