"""Async tools wrapping the retrieval core with validation and status responses."""

from .ingest import ingest_file_tool, ingest_text_tool
from .manage import delete_points_tool, get_point_tool
from .query import answer_question_tool, query_documents_tool
from .stats import get_stats_tool

__all__ = [
    "ingest_text_tool",
    "ingest_file_tool",
    "query_documents_tool",
    "answer_question_tool",
    "get_point_tool",
    "delete_points_tool",
    "get_stats_tool",
]
