"""Tests for text chunking functionality."""

import re
from collections.abc import Iterator

import pytest

from minirag.core.chunker import TextChunker, WordTokenizer, chunk_text

WORD_PATTERN = re.compile(r"\w+|[^\w\s]")


class FixedTokenizer:
    """Returns canned token offsets, to model tokens that share one character."""

    def __init__(self, starts: list[int]):
        self.starts = starts

    def token_starts(self, text: str) -> list[int]:
        return list(self.starts)


@pytest.fixture
def word_chunker() -> TextChunker:
    return TextChunker(max_tokens=10, tokenizer=WordTokenizer())


def test_hello_world_splits_at_sentence(word_chunker: TextChunker):
    """Each word/punctuation mark is one token; the run breaks after the full stop."""
    chunks = list(word_chunker.chunk("Hello world. Bye now.", max_tokens=3))

    assert [c.text for c in chunks] == ["Hello world.", "Bye now."]
    assert [c.index for c in chunks] == [0, 1]
    assert all(c.token_count <= 3 for c in chunks)


def test_chunk_empty_text(word_chunker: TextChunker):
    assert list(word_chunker.chunk("")) == []
    assert list(word_chunker.chunk("   \n\t ")) == []


def test_chunk_is_lazy_and_restartable(word_chunker: TextChunker, sample_text: str):
    first = word_chunker.chunk(sample_text, max_tokens=7)
    assert isinstance(first, Iterator)

    assert list(first) == list(word_chunker.chunk(sample_text, max_tokens=7))


def test_invalid_max_tokens(word_chunker: TextChunker):
    with pytest.raises(ValueError, match="positive"):
        word_chunker.chunk("hello", max_tokens=0)

    with pytest.raises(ValueError):
        TextChunker(max_tokens=-1, tokenizer=WordTokenizer())


@pytest.mark.parametrize("limit", [1, 2, 3, 5, 8, 13, 50])
def test_chunks_respect_token_limit(word_chunker: TextChunker, sample_text: str, limit: int):
    chunks = list(word_chunker.chunk(sample_text, max_tokens=limit))

    assert chunks
    for chunk in chunks:
        assert 1 <= chunk.token_count <= limit
        assert len(WORD_PATTERN.findall(chunk.text)) == chunk.token_count


@pytest.mark.parametrize("limit", [1, 4, 9, 30])
def test_chunks_preserve_every_token(word_chunker: TextChunker, sample_text: str, limit: int):
    chunks = list(word_chunker.chunk(sample_text, max_tokens=limit))

    rebuilt = [tok for chunk in chunks for tok in WORD_PATTERN.findall(chunk.text)]
    assert rebuilt == WORD_PATTERN.findall(sample_text)
    assert [c.index for c in chunks] == list(range(len(chunks)))


def test_chunk_text_is_trimmed_but_counted_before_trim(word_chunker: TextChunker):
    chunks = list(word_chunker.chunk("   Hello world.   \n", max_tokens=10))

    assert len(chunks) == 1
    assert chunks[0].text == "Hello world."
    assert chunks[0].token_count == 3


def test_paragraph_boundary_preferred(word_chunker: TextChunker):
    text = "Alpha beta.\n\nGamma delta epsilon. Zeta eta."
    chunks = list(word_chunker.chunk(text, max_tokens=8))

    assert [c.text for c in chunks] == ["Alpha beta.", "Gamma delta epsilon. Zeta eta."]


def test_sentence_boundary_preferred_over_word(word_chunker: TextChunker):
    text = "One two three. Four five six seven."
    chunks = list(word_chunker.chunk(text, max_tokens=6))

    assert [c.text for c in chunks] == ["One two three.", "Four five six seven."]


def test_sentence_boundary_after_closing_quote(word_chunker: TextChunker):
    text = 'He said "stop." Then he left the room quietly.'
    chunks = list(word_chunker.chunk(text, max_tokens=7))

    assert chunks[0].text == 'He said "stop."'


def test_line_boundary_preferred_over_word(word_chunker: TextChunker):
    text = "first line\nsecond line here"
    chunks = list(word_chunker.chunk(text, max_tokens=3))

    assert [c.text for c in chunks] == ["first line", "second line here"]


def test_hard_cut_without_boundaries(word_chunker: TextChunker):
    chunks = list(word_chunker.chunk("a,b,c,d,e", max_tokens=4))

    assert [c.text for c in chunks] == ["a,b,", "c,d,", "e"]
    assert [c.token_count for c in chunks] == [4, 4, 1]


def test_single_token_per_chunk(word_chunker: TextChunker):
    chunks = list(word_chunker.chunk("Supercalifragilistic words", max_tokens=1))

    assert [c.text for c in chunks] == ["Supercalifragilistic", "words"]


def test_tokens_sharing_a_character_are_never_split():
    # Three tokens start at offset 0 (one multi-byte character), one at offset 4
    chunker = TextChunker(max_tokens=1, tokenizer=FixedTokenizer([0, 0, 0, 4]))
    chunks = list(chunker.chunk("abcd efg"))

    assert [c.text for c in chunks] == ["abcd", "efg"]
    assert [c.token_count for c in chunks] == [3, 1]


def test_count_tokens_with_word_tokenizer(word_chunker: TextChunker):
    assert word_chunker.count_tokens("Hello, world!") == 4
    assert word_chunker.count_tokens("") == 0


def test_chunk_text_helper():
    chunks = chunk_text("One. Two. Three.", max_tokens=2, tokenizer=WordTokenizer())
    assert [c.text for c in chunks] == ["One.", "Two.", "Three."]


def test_default_max_tokens_used(sample_text: str):
    chunker = TextChunker(max_tokens=5, tokenizer=WordTokenizer())
    assert all(c.token_count <= 5 for c in chunker.chunk(sample_text))


def test_chunks_are_immutable(word_chunker: TextChunker):
    chunk = next(word_chunker.chunk("Hello world."))
    with pytest.raises(Exception):
        chunk.text = "changed"  # type: ignore[misc]


def test_tiktoken_count_tokens():
    """Test token counting with the default tiktoken tokenizer."""
    chunker = TextChunker()
    token_count = chunker.count_tokens("Hello world")
    assert isinstance(token_count, int)
    assert token_count > 0


def test_tiktoken_chunking_keeps_content(sample_text: str):
    chunker = TextChunker(max_tokens=25)
    chunks = list(chunker.chunk(sample_text))

    assert len(chunks) > 1
    assert all(c.token_count <= 25 for c in chunks)
    assert "".join("".join(c.text.split()) for c in chunks) == "".join(sample_text.split())


def test_tiktoken_handles_special_token_text():
    chunker = TextChunker(max_tokens=50)
    chunks = list(chunker.chunk("before <|endoftext|> after"))

    assert len(chunks) == 1
    assert chunks[0].text == "before <|endoftext|> after"


def test_tiktoken_multibyte_text_round_trips():
    text = "Unicode: 你好世界 🌍 ∑∫∂∇ é ñ ü ö 😀 🚀 💡 " * 5
    chunker = TextChunker(max_tokens=4)
    chunks = list(chunker.chunk(text))

    assert "".join("".join(c.text.split()) for c in chunks) == "".join(text.split())
