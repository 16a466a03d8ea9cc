"""Tests for the ChromaDB-backed vector store."""

import uuid
from pathlib import Path

import pytest

from minirag.core.chroma_store import (
    ChromaVectorStore,
    decode_point_id,
    encode_point_id,
)
from minirag.core.errors import DimensionMismatchError, UnknownCollectionError, VectorStoreError
from minirag.core.vector_store import VectorStore
from minirag.models import NumericId, Point, StringId


def unique_name() -> str:
    # Ephemeral clients share one in-process system, so names must not collide
    return f"test_{uuid.uuid4().hex[:12]}"


@pytest.fixture
def chroma_store() -> ChromaVectorStore:
    return ChromaVectorStore()


@pytest.fixture
def docs(chroma_store: ChromaVectorStore) -> str:
    name = unique_name()
    chroma_store.create_collection(name, 3)
    chroma_store.upsert(
        name,
        [
            Point(id=1, vector=[1, 0, 0], payload={"source": "one"}),
            Point(id=2, vector=[0, 1, 0], payload={"source": "two"}),
            Point(id=3, vector=[0.9, 0.1, 0], payload={"source": "three"}),
        ],
    )
    return name


def test_point_id_encoding():
    assert encode_point_id(NumericId(value=5)) == "n:5"
    assert encode_point_id(StringId(value="a:b")) == "s:a:b"
    assert decode_point_id("n:5") == NumericId(value=5)
    assert decode_point_id("s:a:b") == StringId(value="a:b")

    with pytest.raises(VectorStoreError):
        decode_point_id("x:5")


def test_search_ranks_by_similarity(chroma_store: ChromaVectorStore, docs: str):
    results = chroma_store.search(docs, [1, 0, 0], 2)

    assert [r.id.value for r in results] == [1, 3]
    assert results[0].score == pytest.approx(1.0, abs=1e-5)
    assert results[1].score == pytest.approx(0.9939, abs=1e-3)
    assert results[0].payload == {"source": "one"}


def test_create_collection_idempotent_and_conflict(chroma_store: ChromaVectorStore, docs: str):
    chroma_store.create_collection(docs, 3)
    assert chroma_store.collection_size(docs) == 3

    with pytest.raises(DimensionMismatchError):
        chroma_store.create_collection(docs, 4)


def test_get_point(chroma_store: ChromaVectorStore, docs: str):
    point = chroma_store.get(docs, 2)

    assert point.id == NumericId(value=2)
    assert point.vector == pytest.approx([0.0, 1.0, 0.0])
    assert point.payload == {"source": "two"}
    assert chroma_store.get(docs, 99) is None


def test_upsert_replaces_payload(chroma_store: ChromaVectorStore, docs: str):
    chroma_store.upsert(docs, [Point(id=1, vector=[0, 0, 1], payload={"other": 7})])

    point = chroma_store.get(docs, 1)
    assert point.vector == pytest.approx([0.0, 0.0, 1.0])
    assert point.payload == {"other": 7}
    assert chroma_store.collection_size(docs) == 3


def test_upsert_dimension_mismatch_leaves_collection_unchanged(
    chroma_store: ChromaVectorStore, docs: str
):
    with pytest.raises(DimensionMismatchError):
        chroma_store.upsert(docs, [Point(id=4, vector=[0, 0, 1]), Point(id=1, vector=[1, 2, 3, 4])])

    assert chroma_store.collection_size(docs) == 3
    assert chroma_store.get(docs, 4) is None


def test_string_ids_and_missing_payload(chroma_store: ChromaVectorStore):
    name = unique_name()
    chroma_store.create_collection(name, 2)
    chroma_store.upsert(name, [Point(id="doc-a", vector=[1, 0]), Point(id=0, vector=[1, 0])])

    assert chroma_store.get(name, "doc-a").payload is None
    results = chroma_store.search(name, [1, 0], 2)
    assert [r.id.value for r in results] == [0, "doc-a"]


def test_delete_points(chroma_store: ChromaVectorStore, docs: str):
    assert chroma_store.delete(docs, [99]) == 0
    assert chroma_store.delete(docs, [1, 99]) == 1
    assert chroma_store.collection_size(docs) == 2


def test_unknown_collection(chroma_store: ChromaVectorStore):
    name = unique_name()

    assert chroma_store.collection_size(name) == 0
    assert not chroma_store.has_collection(name)
    with pytest.raises(UnknownCollectionError):
        chroma_store.search(name, [1.0], 1)
    with pytest.raises(UnknownCollectionError):
        chroma_store.upsert(name, [Point(id=1, vector=[1.0])])


def test_search_errors(chroma_store: ChromaVectorStore, docs: str):
    with pytest.raises(ValueError):
        chroma_store.search(docs, [1, 0, 0], 0)
    with pytest.raises(DimensionMismatchError):
        chroma_store.search(docs, [1, 0], 1)


def test_search_rejects_non_finite_query(chroma_store: ChromaVectorStore, docs: str):
    with pytest.raises(ValueError, match="finite"):
        chroma_store.search(docs, [float("nan"), 0, 0], 1)


def test_search_ties_broken_by_ascending_id(chroma_store: ChromaVectorStore):
    """Identical vectors must rank by id, not by index traversal order."""
    name = unique_name()
    chroma_store.create_collection(name, 2)
    chroma_store.upsert(name, [Point(id=i, vector=[1, 1]) for i in range(50, 0, -1)])

    results = chroma_store.search(name, [1, 1], 3)

    assert [r.id.value for r in results] == [1, 2, 3]
    assert all(r.score == pytest.approx(1.0) for r in results)


def test_search_numeric_ids_before_string_ids(chroma_store: ChromaVectorStore):
    name = unique_name()
    chroma_store.create_collection(name, 2)
    chroma_store.upsert(name, [Point(id=pid, vector=[0, 1]) for pid in ["b", 2, "a", 1]])

    results = chroma_store.search(name, [0, 1], 4)

    assert [r.id.value for r in results] == [1, 2, "a", "b"]


def test_search_zero_norm_query(chroma_store: ChromaVectorStore, docs: str):
    results = chroma_store.search(docs, [0, 0, 0], 3)

    assert [r.id.value for r in results] == [1, 2, 3]
    assert all(r.score == 0.0 for r in results)


def test_search_limit_larger_than_collection(chroma_store: ChromaVectorStore, docs: str):
    results = chroma_store.search(docs, [0.2, 0.8, 0], 10)

    assert len(results) == 3
    scores = [r.score for r in results]
    assert scores == sorted(scores, reverse=True)
    assert results[0].id.value == 2


def test_search_empty_collection(chroma_store: ChromaVectorStore):
    name = unique_name()
    chroma_store.create_collection(name, 3)

    assert chroma_store.search(name, [1, 0, 0], 5) == []


def test_search_matches_memory_store(chroma_store: ChromaVectorStore):
    """Both backends rank the same data identically."""
    name = unique_name()
    points = [
        Point(id=i, vector=[float(i % 7), float(i % 3), 1.0 + i % 2]) for i in range(1, 41)
    ]
    chroma_store.create_collection(name, 3)
    chroma_store.upsert(name, points)
    memory = VectorStore()
    memory.create_collection(name, 3)
    memory.upsert(name, points)

    query = [2.0, 1.0, 1.0]
    expected = [(r.id.value, r.score) for r in memory.search(name, query, 10)]
    actual = [(r.id.value, r.score) for r in chroma_store.search(name, query, 10)]

    assert [pid for pid, _ in actual] == [pid for pid, _ in expected]
    assert [s for _, s in actual] == pytest.approx([s for _, s in expected])


def test_collection_info(chroma_store: ChromaVectorStore, docs: str):
    info = chroma_store.get_collection_info(docs)
    assert (info.name, info.dimension, info.points_count) == (docs, 3, 3)


def test_persistent_store(temp_dir: Path):
    path = temp_dir / "chroma"
    store = ChromaVectorStore(persist_directory=path)
    store.create_collection("persisted", 2)
    store.upsert("persisted", [Point(id=1, vector=[1, 0], payload={"source": "kept"})])

    assert path.exists()
    assert store.get("persisted", 1).payload == {"source": "kept"}
