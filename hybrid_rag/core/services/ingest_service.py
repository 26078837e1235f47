"""Ingest service - document chunking and corpus normalization."""

import hashlib
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from ..models.document import Chunk
from ..protocols.embedder import EmbedderProtocol
from ..protocols.vector_store import VectorStoreProtocol

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = {".txt", ".md", ".markdown"}


def _first(mapping: Mapping, *names: str) -> Any:
    for name in names:
        if name in mapping and mapping[name] is not None:
            return mapping[name]
    return None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def normalize_chunk(raw: Any) -> Optional[Chunk]:
    """Convert a loosely shaped chunk record into a ``Chunk``.

    Accepts a ``Chunk`` or a mapping carrying ``pageContent``/``content`` and
    either flat or ``metadata``-nested fields. Returns None when the record has
    no usable source or position.
    """
    if isinstance(raw, Chunk):
        return raw
    if not isinstance(raw, Mapping):
        return None

    metadata = raw.get("metadata")
    if not isinstance(metadata, Mapping):
        metadata = {}
    fields = {**metadata, **{k: v for k, v in raw.items() if k != "metadata"}}

    content = _first(fields, "content", "pageContent", "page_content")
    source_id = _first(fields, "source_id", "sourceId", "source")
    chunk_index = _first(fields, "chunk_index", "chunkIndex")
    if chunk_index is None:
        chunk_index = 0

    if not isinstance(source_id, str) or not source_id:
        return None
    if not isinstance(chunk_index, int) or isinstance(chunk_index, bool):
        return None

    total_chunks = _first(fields, "total_chunks", "totalChunks")
    file_type = _first(fields, "file_type", "fileType")

    return Chunk(
        content=content if isinstance(content, str) else "",
        source_id=source_id,
        chunk_index=chunk_index,
        total_chunks=total_chunks if isinstance(total_chunks, int) else chunk_index + 1,
        file_type=file_type if isinstance(file_type, str) else "unknown",
        indexed_at=_parse_timestamp(
            _first(fields, "indexed_at", "indexedAt", "processedAt")
        ),
    )


def normalize_corpus(records: Iterable[Any]) -> list[Chunk]:
    """Normalize records, dropping the unusable ones."""
    chunks = []
    skipped = 0
    for raw in records:
        chunk = normalize_chunk(raw)
        if chunk is None:
            skipped += 1
            continue
        chunks.append(chunk)

    if skipped:
        logger.warning(f"Skipped {skipped} malformed chunk record(s)")
    return chunks


class IngestService:
    """Service for turning documents into indexed chunks."""

    def __init__(
        self,
        embedder: EmbedderProtocol,
        vector_store: VectorStoreProtocol,
        docs_path: str = "./docs",
        chunk_size: int = 1000,
        batch_size: int = 50,
    ):
        """Initialize ingest service.

        Args:
            embedder: Embedding service.
            vector_store: Vector store.
            docs_path: Path to documents folder.
            chunk_size: Target chunk size in characters.
            batch_size: Batch size for embedding.
        """
        self._embedder = embedder
        self._vector_store = vector_store
        self._docs_path = Path(docs_path)
        self._chunk_size = chunk_size
        self._batch_size = batch_size

    def _compute_hash(self, content: str) -> str:
        """Compute content hash."""
        return hashlib.md5(content.encode()).hexdigest()[:12]

    def chunk_text(self, text: str) -> list[str]:
        """Split text into chunks preserving paragraphs and sentences.

        Args:
            text: Text to chunk.

        Returns:
            List of chunks.
        """
        paragraphs = re.split(r"\n\s*\n", text)
        chunks = []
        current_chunk = ""

        for para in paragraphs:
            para = para.strip()
            if not para:
                continue

            if len(current_chunk) + len(para) + 2 <= self._chunk_size:
                if current_chunk:
                    current_chunk += "\n\n" + para
                else:
                    current_chunk = para
            else:
                if current_chunk:
                    chunks.append(current_chunk)

                if len(para) > self._chunk_size:
                    sentences = re.split(r"(?<=[.!?])\s+", para)
                    current_chunk = ""
                    for sent in sentences:
                        if len(current_chunk) + len(sent) + 1 <= self._chunk_size:
                            current_chunk = (current_chunk + " " + sent).strip()
                        else:
                            if current_chunk:
                                chunks.append(current_chunk)
                            current_chunk = sent
                else:
                    current_chunk = para

        if current_chunk:
            chunks.append(current_chunk)

        return chunks

    def chunk_document(
        self, source_id: str, text: str, file_type: str = "unknown"
    ) -> list[Chunk]:
        """Chunk one document's text into ``Chunk`` records."""
        pieces = self.chunk_text(text)
        indexed_at = datetime.now(timezone.utc)
        return [
            Chunk(
                content=piece,
                source_id=source_id,
                chunk_index=i,
                total_chunks=len(pieces),
                file_type=file_type,
                indexed_at=indexed_at,
            )
            for i, piece in enumerate(pieces)
        ]

    def load_directory(self) -> list[Chunk]:
        """Chunk every text document under the docs path."""
        if not self._docs_path.exists():
            logger.error(f"Docs path not found: {self._docs_path}")
            return []

        chunks: list[Chunk] = []
        for file_path in sorted(self._docs_path.iterdir()):
            if file_path.suffix.lower() not in TEXT_EXTENSIONS:
                continue

            content = file_path.read_text(encoding="utf-8")
            if not content.strip():
                logger.warning(f"No readable text in {file_path.name}")
                continue

            doc_chunks = self.chunk_document(
                file_path.name, content, file_type=file_path.suffix.lower()
            )
            logger.info(f"Processed {file_path.name}: {len(doc_chunks)} chunks")
            chunks.extend(doc_chunks)

        return chunks

    def store(self, chunks: list[Chunk]) -> int:
        """Embed chunks into the vector store.

        Returns:
            Number of chunks stored.
        """
        total_indexed = 0
        for i in range(0, len(chunks), self._batch_size):
            batch = chunks[i : i + self._batch_size]

            ids = [
                f"{self._compute_hash(c.source_id)}_{c.chunk_index}" for c in batch
            ]
            documents = [c.content for c in batch]
            metadatas = [
                {
                    "source_id": c.source_id,
                    "chunk_index": c.chunk_index,
                    "total_chunks": c.total_chunks,
                    "file_type": c.file_type,
                }
                for c in batch
            ]

            embeddings = self._embedder.embed_passages(documents).tolist()

            self._vector_store.add(
                ids=ids, embeddings=embeddings, documents=documents, metadatas=metadatas
            )

            total_indexed += len(batch)
            logger.info(f"Stored batch: {total_indexed}/{len(chunks)}")

        return total_indexed

    def remove_source(self, source_id: str) -> None:
        """Delete a document's embeddings from the vector store."""
        self._vector_store.delete_source(source_id)
        logger.info(f"Removed '{source_id}' from the vector store")

    def run(self) -> list[Chunk]:
        """Load, chunk and embed the docs folder.

        Returns:
            The chunk corpus, ready for the keyword index.
        """
        chunks = self.load_directory()
        if not chunks:
            logger.info("No documents to index")
            return []

        self.store(chunks)
        logger.info(
            f"Ingest complete: {len(chunks)} chunks from "
            f"{len(set(c.source_id for c in chunks))} files"
        )
        return chunks
