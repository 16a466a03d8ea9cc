"""Utility functions for minirag."""

from .locks import LockArena
from .logger import configure_root_logger, setup_logger
from .validation import (
    ValidationError,
    validate_collection_name,
    validate_file_path,
    validate_point_ids,
    validate_query,
    validate_text,
    validate_top_k,
    validate_txt_file,
)

__all__ = [
    "LockArena",
    "configure_root_logger",
    "setup_logger",
    "ValidationError",
    "validate_collection_name",
    "validate_file_path",
    "validate_point_ids",
    "validate_query",
    "validate_text",
    "validate_top_k",
    "validate_txt_file",
]
