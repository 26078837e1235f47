"""Tests for the in-memory vector store and the vector-backed semantic oracle."""

import asyncio

import numpy as np
import pytest

from hybrid_rag.infrastructure.vector_stores.memory_store import InMemoryVectorStore
from hybrid_rag.infrastructure.vector_stores.semantic_oracle import VectorSemanticOracle


def meta(source_id, chunk_index):
    return {"source_id": source_id, "chunk_index": chunk_index}


@pytest.fixture
def store():
    store = InMemoryVectorStore()
    store.add(
        ids=["a_0", "a_1", "b_0"],
        embeddings=[[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]],
        documents=["east", "north", "north-east"],
        metadatas=[meta("a", 0), meta("a", 1), meta("b", 0)],
    )
    return store


class TestInMemoryVectorStore:

    def test_query_orders_by_cosine_similarity(self, store):
        hits = store.query([1.0, 0.1], n_results=3)

        assert [(h.source_id, h.chunk_index) for h in hits] == [("a", 0), ("b", 0), ("a", 1)]
        assert hits[0].content == "east"
        assert hits[0].score > hits[1].score > hits[2].score

    def test_query_truncates(self, store):
        assert len(store.query([1.0, 0.0], n_results=1)) == 1

    def test_upsert_replaces_existing_id(self, store):
        store.add(ids=["a_0"], embeddings=[[0.0, 1.0]], documents=["moved"], metadatas=[meta("a", 0)])

        hits = store.query([0.0, 1.0], n_results=2)

        assert store.count() == 3
        assert {h.content for h in hits} == {"moved", "north"}

    def test_zero_query_vector_scores_zero(self, store):
        hits = store.query([0.0, 0.0], n_results=3)

        assert [h.score for h in hits] == [0.0, 0.0, 0.0]
        assert [h.content for h in hits] == ["east", "north", "north-east"]

    def test_empty_store(self):
        store = InMemoryVectorStore()

        assert store.count() == 0
        assert store.query([1.0, 0.0], n_results=5) == []

    def test_delete_source(self, store):
        store.delete_source("a")

        hits = store.query([1.0, 0.0], n_results=5)

        assert store.count() == 1
        assert [(h.source_id, h.chunk_index) for h in hits] == [("b", 0)]

    def test_delete_last_source_empties_store(self, store):
        store.delete_source("a")
        store.delete_source("b")
        store.delete_source("missing")

        assert store.count() == 0
        assert store.query([1.0, 0.0], n_results=5) == []

    def test_empty_add_is_noop(self, store):
        store.add(ids=[], embeddings=[], documents=[], metadatas=[])

        assert store.count() == 3


class StubEmbedder:
    def __init__(self, vector):
        self.vector = np.asarray(vector, dtype=np.float32)
        self.queries = []

    def embed_query(self, query):
        self.queries.append(query)
        return self.vector


class TestVectorSemanticOracle:

    def test_search_embeds_query_and_returns_hits(self, store):
        embedder = StubEmbedder([0.0, 1.0])
        oracle = VectorSemanticOracle(embedder, store)

        hits = asyncio.run(oracle.search("which way is north", 2))

        assert embedder.queries == ["which way is north"]
        assert [(h.source_id, h.chunk_index) for h in hits] == [("a", 1), ("b", 0)]

    def test_store_errors_propagate(self):
        class BrokenStore:
            def query(self, query_embedding, n_results=5):
                raise ConnectionError("vector store unreachable")

        oracle = VectorSemanticOracle(StubEmbedder([1.0]), BrokenStore())

        with pytest.raises(ConnectionError):
            asyncio.run(oracle.search("anything", 3))
