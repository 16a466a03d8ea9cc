"""Ollama client implementing the embedding and chat collaborators."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

import ollama

from .collaborators import IndexedEmbedding

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_ERRORS = (ollama.ResponseError, ConnectionError, asyncio.TimeoutError)


class OllamaError(Exception):
    """Exception raised when Ollama operations fail."""

    pass


class OllamaClient:
    """Client for the Ollama API with retry logic and timeouts."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        embedding_model: str = "nomic-embed-text",
        chat_model: str = "llama3.2:3b",
        timeout: float = 300.0,
        max_retries: int = 3,
        temperature: float = 0.3,
        backoff_base: float = 2.0,
    ):
        """
        Initialize Ollama client.

        Args:
            base_url: Base URL for Ollama API
            embedding_model: Model used by embed()
            chat_model: Model used by generate()
            timeout: Timeout in seconds for each API call
            max_retries: Maximum number of attempts per call
            temperature: Sampling temperature for generate()
            backoff_base: Wait ``backoff_base ** attempt`` seconds between attempts
        """
        self.base_url = base_url
        self.embedding_model = embedding_model
        self.chat_model = chat_model
        self.timeout = timeout
        self.max_retries = max_retries
        self.temperature = temperature
        self.backoff_base = backoff_base
        self.client = ollama.AsyncClient(host=base_url)

        logger.info(
            f"Initialized OllamaClient with base_url={base_url}, "
            f"embedding_model={embedding_model}, chat_model={chat_model}, timeout={timeout}s"
        )

    async def _with_retries(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``call`` with a timeout and exponential backoff between attempts.

        Raises:
            OllamaError: If every attempt failed
        """
        last_exception: BaseException | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                logger.debug(f"{operation}: attempt {attempt}/{self.max_retries}")
                return await asyncio.wait_for(call(), timeout=self.timeout)

            except RETRYABLE_ERRORS as e:
                last_exception = e

                if attempt < self.max_retries:
                    wait_time = self.backoff_base**attempt
                    logger.warning(
                        f"{operation} failed (attempt {attempt}/{self.max_retries}): {e}. "
                        f"Retrying in {wait_time}s..."
                    )
                    await asyncio.sleep(wait_time)
                else:
                    logger.error(f"{operation} failed after {self.max_retries} attempts: {e}")

        raise OllamaError(
            f"{operation} failed after {self.max_retries} attempts: {last_exception}"
        ) from last_exception

    async def embed(self, texts: Sequence[str]) -> list[IndexedEmbedding]:
        """
        Embed a batch of texts in one request.

        Args:
            texts: Texts to embed

        Returns:
            (index, vector) pairs in request order

        Raises:
            OllamaError: If the request fails or the response size is wrong
        """
        batch = list(texts)
        if not batch:
            return []

        response = await self._with_retries(
            "Embedding",
            lambda: self.client.embed(model=self.embedding_model, input=batch),
        )

        embeddings = response["embeddings"]
        if len(embeddings) != len(batch):
            raise OllamaError(
                f"Embedding response has {len(embeddings)} vectors for {len(batch)} inputs"
            )

        logger.debug(f"Embedded {len(batch)} texts with {self.embedding_model}")
        return [(i, list(vector)) for i, vector in enumerate(embeddings)]

    async def generate(self, system_context: str, user_query: str) -> str:
        """
        Generate an answer to ``user_query`` grounded on ``system_context``.

        Raises:
            OllamaError: If generation fails after all retries
        """
        messages = [
            {"role": "system", "content": system_context},
            {"role": "user", "content": user_query},
        ]

        response = await self._with_retries(
            "Generation",
            lambda: self.client.chat(
                model=self.chat_model,
                messages=messages,
                options={"temperature": self.temperature},
            ),
        )

        generated_text = response["message"]["content"]
        logger.debug(f"Successfully generated response ({len(generated_text)} chars)")
        return generated_text

    async def model_exists(self, model: str) -> bool:
        """
        Check if a model is available on the Ollama server.

        Args:
            model: Model name to check

        Returns:
            True if model exists, False otherwise
        """
        try:
            listing = await self.client.list()
        except RETRYABLE_ERRORS as e:
            logger.error(f"Failed to list Ollama models: {e}")
            return False

        names = set()
        for entry in listing["models"]:
            name = entry.get("model") or entry.get("name")
            if name:
                names.add(name)
        return model in names
