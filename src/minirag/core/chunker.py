"""Token-bounded text chunking with natural-boundary preference."""

import re
from collections.abc import Iterator
from enum import IntEnum
from typing import Protocol

import tiktoken

from ..models.schemas import Chunk
from ..utils.logger import setup_logger

logger = setup_logger(__name__)

SENTENCE_TERMINATORS = frozenset(".!?。！？")
CLOSING_MARKS = frozenset("\"')]}»”’")


class Tokenizer(Protocol):
    """Deterministic tokenizer exposing where each token starts in the text."""

    def token_starts(self, text: str) -> list[int]:
        """Return the character offset at which each token begins."""
        ...


class TiktokenTokenizer:
    """Tokenizer backed by a tiktoken BPE encoding."""

    def __init__(self, encoding_name: str = "cl100k_base"):
        self.encoding_name = encoding_name
        try:
            self.encoding = tiktoken.get_encoding(encoding_name)
        except Exception as e:
            logger.error(f"Failed to load tiktoken encoding '{encoding_name}': {e}")
            raise

    def encode(self, text: str) -> list[int]:
        # Special-token text such as "<|endoftext|>" is tokenized as plain text
        return self.encoding.encode(text, disallowed_special=())

    def token_starts(self, text: str) -> list[int]:
        tokens = self.encode(text)
        if not tokens:
            return []
        # A token starting inside a multi-byte character maps to that character
        _, offsets = self.encoding.decode_with_offsets(tokens)
        return offsets


class WordTokenizer:
    """Treats every word and every punctuation mark as one token."""

    TOKEN_PATTERN = re.compile(r"\w+|[^\w\s]")

    def token_starts(self, text: str) -> list[int]:
        return [m.start() for m in self.TOKEN_PATTERN.finditer(text)]


class BoundaryTier(IntEnum):
    """Cut preference, highest value wins."""

    HARD = 0
    WORD = 1
    LINE = 2
    SENTENCE = 3
    PARAGRAPH = 4


class TextChunker:
    """
    Splits text into token-bounded chunks.

    Walks the token stream greedily: each run takes as many tokens as
    ``max_tokens`` allows and is then cut at the best natural boundary inside
    it, following the separator hierarchy paragraph > sentence > line > word.
    A run without any boundary is cut at the token limit. Source text between
    cuts is kept verbatim, so the untrimmed chunks concatenate back into the
    input.
    """

    def __init__(
        self,
        max_tokens: int = 400,
        tokenizer: Tokenizer | None = None,
        encoding_name: str = "cl100k_base",
    ):
        """
        Initialize the text chunker.

        Args:
            max_tokens: Default token budget per chunk
            tokenizer: Tokenizer to use (default: tiktoken with ``encoding_name``)
            encoding_name: tiktoken encoding used when no tokenizer is given

        Example:
            >>> chunker = TextChunker(max_tokens=200)
            >>> chunks = list(chunker.chunk("Long document text..."))
        """
        if max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {max_tokens}")

        self.max_tokens = max_tokens
        self.tokenizer = tokenizer or TiktokenTokenizer(encoding_name)

        logger.info(
            f"Initialized TextChunker (max_tokens={max_tokens}, "
            f"tokenizer={type(self.tokenizer).__name__})"
        )

    def count_tokens(self, text: str) -> int:
        """
        Count the number of tokens in text.

        Args:
            text: Text to count tokens for

        Returns:
            Number of tokens
        """
        return len(self.tokenizer.token_starts(text))

    def chunk(self, text: str, max_tokens: int | None = None) -> Iterator[Chunk]:
        """
        Lazily split text into chunks.

        Args:
            text: Text to chunk
            max_tokens: Token budget per chunk (default: the chunker's own)

        Yields:
            Chunk objects with consecutive indexes starting at 0

        Raises:
            ValueError: If max_tokens is not positive
        """
        limit = self.max_tokens if max_tokens is None else max_tokens
        if limit <= 0:
            raise ValueError(f"max_tokens must be positive, got {limit}")

        return self._generate(text, limit)

    def _generate(self, text: str, limit: int) -> Iterator[Chunk]:
        if not text:
            return

        starts = self.tokenizer.token_starts(text)
        total = len(starts)
        index = 0
        run_start = 0

        while run_start < total:
            if run_start + limit >= total:
                cut = total
            else:
                cut = self._select_cut(text, starts, run_start, run_start + limit)

            begin = 0 if run_start == 0 else starts[run_start]
            end = len(text) if cut == total else starts[cut]
            piece = text[begin:end].strip()

            if piece:
                yield Chunk(index=index, text=piece, token_count=cut - run_start)
                index += 1

            run_start = cut

        logger.debug(f"Created {index} chunks from {len(text)} characters ({total} tokens)")

    def _select_cut(self, text: str, starts: list[int], run_start: int, run_end: int) -> int:
        """
        Pick the token index ending the current run.

        Candidates are scanned from the latest one backwards, so the first hit
        of each tier is the latest cut of that tier.
        """
        floor = starts[run_start]
        best: dict[BoundaryTier, int] = {}

        for k in range(run_end, run_start, -1):
            pos = starts[k]
            if pos <= floor:
                # Tokens sharing one character; cutting here yields nothing
                continue
            tier = self._boundary_tier(text, pos)
            best.setdefault(tier, k)
            if tier is BoundaryTier.PARAGRAPH:
                break

        if best:
            return best[max(best)]

        # No usable cut inside the run: extend to the next one
        k = run_end + 1
        while k < len(starts) and starts[k] <= floor:
            k += 1
        return k

    @staticmethod
    def _boundary_tier(text: str, pos: int) -> BoundaryTier:
        """Classify a cut at character ``pos`` by the whitespace gap around it."""
        left = pos
        while left > 0 and text[left - 1].isspace():
            left -= 1
        right = pos
        while right < len(text) and text[right].isspace():
            right += 1

        gap = text[left:right]
        if not gap:
            return BoundaryTier.HARD
        if "\n\n" in gap:
            return BoundaryTier.PARAGRAPH

        i = left - 1
        while i >= 0 and text[i] in CLOSING_MARKS:
            i -= 1
        if i >= 0 and text[i] in SENTENCE_TERMINATORS:
            return BoundaryTier.SENTENCE

        if "\n" in gap:
            return BoundaryTier.LINE
        return BoundaryTier.WORD


def chunk_text(
    text: str,
    max_tokens: int,
    tokenizer: Tokenizer | None = None,
) -> list[Chunk]:
    """Chunk text eagerly with a throwaway TextChunker."""
    return list(TextChunker(max_tokens=max_tokens, tokenizer=tokenizer).chunk(text))
