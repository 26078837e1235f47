"""Tests for chunking, corpus normalization and storage."""

from datetime import datetime, timezone

import numpy as np
import pytest

from hybrid_rag.core.models.document import Chunk
from hybrid_rag.core.services.ingest_service import (
    IngestService,
    normalize_chunk,
    normalize_corpus,
)
from hybrid_rag.infrastructure.vector_stores.memory_store import InMemoryVectorStore

from .helpers import make_chunk


class FakeEmbedder:
    """Bag-of-letters embedder, deterministic and dependency free."""

    def _vector(self, text: str) -> np.ndarray:
        vec = np.zeros(26, dtype=np.float32)
        for ch in text.lower():
            if "a" <= ch <= "z":
                vec[ord(ch) - ord("a")] += 1
        return vec

    def embed_query(self, query: str) -> np.ndarray:
        return self._vector(query)

    def embed_passages(self, passages: list[str]) -> np.ndarray:
        return np.vstack([self._vector(p) for p in passages])


@pytest.fixture
def make_ingest(tmp_path):
    def factory(chunk_size=1000, batch_size=50, store=None):
        return IngestService(
            embedder=FakeEmbedder(),
            vector_store=store or InMemoryVectorStore(),
            docs_path=str(tmp_path),
            chunk_size=chunk_size,
            batch_size=batch_size,
        )

    return factory


class TestNormalizeChunk:

    def test_chunk_passes_through(self):
        chunk = make_chunk("docA", 0)
        assert normalize_chunk(chunk) is chunk

    def test_nested_metadata_record(self):
        chunk = normalize_chunk({
            "pageContent": "hello world",
            "metadata": {
                "sourceId": "guide.md",
                "chunkIndex": 2,
                "totalChunks": 5,
                "fileType": ".md",
                "processedAt": "2024-05-01T10:00:00Z",
            },
        })

        assert chunk == Chunk(
            content="hello world",
            source_id="guide.md",
            chunk_index=2,
            total_chunks=5,
            file_type=".md",
            indexed_at=datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc),
        )

    def test_flat_record_defaults(self):
        chunk = normalize_chunk({"content": "text", "source": "notes.txt"})

        assert chunk.key == ("notes.txt", 0)
        assert chunk.total_chunks == 1
        assert chunk.file_type == "unknown"
        assert chunk.indexed_at is None

    def test_non_string_content_becomes_empty(self):
        chunk = normalize_chunk({"content": 123, "source_id": "a", "chunk_index": 1})

        assert chunk.content == ""

    @pytest.mark.parametrize(
        "record",
        [
            None,
            "just text",
            {"content": "no source"},
            {"content": "x", "source_id": ""},
            {"content": "x", "source_id": "a", "chunk_index": "1"},
            {"content": "x", "source_id": "a", "chunk_index": True},
        ],
    )
    def test_unusable_records(self, record):
        assert normalize_chunk(record) is None

    def test_normalize_corpus_drops_bad_records(self):
        chunks = normalize_corpus([
            {"content": "a", "source_id": "doc", "chunk_index": 0},
            {"content": "b"},
            make_chunk("doc", 1),
        ])

        assert [c.key for c in chunks] == [("doc", 0), ("doc", 1)]


class TestChunking:

    def test_short_paragraphs_are_merged(self, make_ingest):
        service = make_ingest(chunk_size=100)

        assert service.chunk_text("First para.\n\nSecond para.") == ["First para.\n\nSecond para."]

    def test_paragraphs_split_when_over_size(self, make_ingest):
        service = make_ingest(chunk_size=20)

        chunks = service.chunk_text("Alpha paragraph.\n\nBeta paragraph.")

        assert chunks == ["Alpha paragraph.", "Beta paragraph."]

    def test_long_paragraph_splits_on_sentences(self, make_ingest):
        service = make_ingest(chunk_size=30)
        text = "One short sentence. Another short sentence. A third one here."

        chunks = service.chunk_text(text)

        assert chunks == ["One short sentence.", "Another short sentence.", "A third one here."]
        assert all(len(c) <= 30 for c in chunks)

    def test_blank_text(self, make_ingest):
        assert make_ingest().chunk_text("  \n\n  ") == []

    def test_chunk_document_numbers_chunks(self, make_ingest):
        service = make_ingest(chunk_size=20)

        chunks = service.chunk_document("doc.md", "Alpha paragraph.\n\nBeta paragraph.", ".md")

        assert [c.key for c in chunks] == [("doc.md", 0), ("doc.md", 1)]
        assert {c.total_chunks for c in chunks} == {2}
        assert {c.file_type for c in chunks} == {".md"}
        assert chunks[0].indexed_at is not None


class TestLoadAndStore:

    def test_load_directory_reads_text_files_in_name_order(self, make_ingest, tmp_path):
        (tmp_path / "b.md").write_text("# Beta\n\nBeta body.", encoding="utf-8")
        (tmp_path / "a.txt").write_text("Alpha body.", encoding="utf-8")
        (tmp_path / "empty.txt").write_text("   ", encoding="utf-8")
        (tmp_path / "image.png").write_bytes(b"\x89PNG")

        chunks = make_ingest().load_directory()

        assert [c.source_id for c in chunks] == ["a.txt", "b.md"]
        assert chunks[1].file_type == ".md"

    def test_missing_directory(self, tmp_path):
        service = IngestService(FakeEmbedder(), InMemoryVectorStore(), docs_path=str(tmp_path / "nope"))

        assert service.load_directory() == []

    def test_store_embeds_in_batches(self, make_ingest):
        store = InMemoryVectorStore()
        service = make_ingest(batch_size=2, store=store)
        chunks = [make_chunk("doc", i, f"text {i}") for i in range(5)]

        stored = service.store(chunks)

        assert stored == 5
        assert store.count() == 5

    def test_store_is_idempotent_per_chunk(self, make_ingest):
        store = InMemoryVectorStore()
        service = make_ingest(store=store)
        chunks = [make_chunk("doc", 0, "apples"), make_chunk("doc", 1, "bananas")]

        service.store(chunks)
        service.store(chunks)

        assert store.count() == 2

    def test_run_returns_corpus(self, make_ingest, tmp_path):
        (tmp_path / "fruit.txt").write_text("Apples are red.\n\nBananas are yellow.", encoding="utf-8")
        store = InMemoryVectorStore()

        chunks = make_ingest(store=store).run()

        assert [c.key for c in chunks] == [("fruit.txt", 0)]
        assert store.count() == 1

    def test_remove_source_deletes_vectors(self, make_ingest):
        store = InMemoryVectorStore()
        service = make_ingest(store=store)
        service.store([make_chunk("a.txt", 0, "apples"), make_chunk("b.txt", 0, "bananas")])

        service.remove_source("a.txt")

        assert store.count() == 1
        assert [h.source_id for h in store.query([1.0] * 26, n_results=5)] == ["b.txt"]

    def test_run_with_no_documents(self, make_ingest):
        assert make_ingest().run() == []
