"""Capability interfaces for the embedding and chat services."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

# (position in the request batch, vector)
IndexedEmbedding = tuple[int, Sequence[float]]


@runtime_checkable
class EmbeddingClient(Protocol):
    """Maps a batch of texts to vectors."""

    async def embed(self, texts: Sequence[str]) -> Sequence[IndexedEmbedding]:
        """
        Embed every text of the batch.

        Args:
            texts: Texts to embed

        Returns:
            One (index, vector) pair per text, where index is the 0-based
            position of the text in ``texts``
        """
        ...


@runtime_checkable
class ChatClient(Protocol):
    """Produces an answer from a system context and a user query."""

    async def generate(self, system_context: str, user_query: str) -> str: ...
