"""Configuration management for minirag using Pydantic Settings."""

from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Chunking configuration
    tokenizer_encoding: Annotated[
        str,
        Field(
            default="cl100k_base",
            description="tiktoken encoding used to count tokens",
        ),
    ]

    max_chunk_tokens: Annotated[
        int,
        Field(
            default=400,
            ge=1,
            le=8192,
            description="Maximum chunk size in tokens",
        ),
    ]

    # Vector store configuration
    vector_backend: Annotated[
        Literal["memory", "chroma"],
        Field(
            default="memory",
            description="Vector store implementation: in-process 'memory' or 'chroma'",
        ),
    ]

    chroma_db_path: Annotated[
        str | None,
        Field(
            default=None,
            description="Path for persistent ChromaDB storage (ephemeral when unset)",
        ),
    ]

    per_collection_locks: Annotated[
        bool,
        Field(
            default=False,
            description="Use one lock per collection instead of a single global lock",
        ),
    ]

    collection_name: Annotated[
        str,
        Field(
            default="documents",
            min_length=1,
            description="Default collection for ingestion and retrieval",
        ),
    ]

    default_top_k: Annotated[
        int,
        Field(
            default=5,
            ge=1,
            le=100,
            description="Number of chunks retrieved per query",
        ),
    ]

    # Ollama configuration
    ollama_base_url: Annotated[
        str,
        Field(
            default="http://localhost:11434",
            description="Base URL for Ollama API",
        ),
    ]

    ollama_embedding_model: Annotated[
        str,
        Field(
            default="nomic-embed-text",
            description="Ollama model used for embeddings",
        ),
    ]

    ollama_chat_model: Annotated[
        str,
        Field(
            default="llama3.2:3b",
            description="Ollama model used for answer generation",
        ),
    ]

    ollama_timeout: Annotated[
        float,
        Field(
            default=300.0,
            ge=1.0,
            le=600.0,
            description="Timeout in seconds for each Ollama API call",
        ),
    ]

    ollama_max_retries: Annotated[
        int,
        Field(
            default=3,
            ge=1,
            le=10,
            description="Maximum number of attempts for Ollama requests",
        ),
    ]

    ollama_temperature: Annotated[
        float,
        Field(
            default=0.3,
            ge=0.0,
            le=2.0,
            description="Sampling temperature for answer generation",
        ),
    ]

    # Logging configuration
    log_level: Annotated[
        str,
        Field(
            default="INFO",
            description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        ),
    ]

    @field_validator("chroma_db_path")
    @classmethod
    def validate_chroma_path(cls, v: str | None) -> str | None:
        """Create the ChromaDB directory when persistence is requested."""
        if v is None:
            return None
        path = Path(v)
        path.mkdir(parents=True, exist_ok=True)
        return str(path.absolute())

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
