import logging
import threading

import numpy as np

from hybrid_rag.core.models.document import SemanticHit

logger = logging.getLogger(__name__)


class InMemoryVectorStore:
    """Process-local vector store with brute-force cosine search."""

    def __init__(self):
        self._lock = threading.Lock()
        self._ids: list[str] = []
        self._documents: list[str] = []
        self._metadatas: list[dict] = []
        self._matrix: np.ndarray | None = None

    def add(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict],
    ) -> None:
        """Add chunks, replacing entries with the same ID."""
        if not ids:
            return

        with self._lock:
            rows = {id_: i for i, id_ in enumerate(self._ids)}
            vectors = [] if self._matrix is None else list(self._matrix)

            for id_, emb, doc, meta in zip(ids, embeddings, documents, metadatas):
                vector = np.asarray(emb, dtype=np.float32)
                if id_ in rows:
                    row = rows[id_]
                    vectors[row] = vector
                    self._documents[row] = doc
                    self._metadatas[row] = meta
                else:
                    rows[id_] = len(self._ids)
                    self._ids.append(id_)
                    self._documents.append(doc)
                    self._metadatas.append(meta)
                    vectors.append(vector)

            self._matrix = np.vstack(vectors)

        logger.debug(f"In-memory store: {len(self._ids)} vectors")

    def query(
        self, query_embedding: list[float], n_results: int = 5
    ) -> list[SemanticHit]:
        """Search by embedding."""
        with self._lock:
            matrix = self._matrix
            documents = list(self._documents)
            metadatas = list(self._metadatas)

        if matrix is None or n_results <= 0:
            return []

        query = np.asarray(query_embedding, dtype=np.float32)
        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        with np.errstate(divide="ignore", invalid="ignore"):
            scores = np.where(norms > 0, matrix @ query / norms, 0.0)

        # stable so equal similarities keep insertion order
        order = np.argsort(-scores, kind="stable")[:n_results]

        return [
            SemanticHit(
                content=documents[i],
                source_id=metadatas[i].get("source_id", "Unknown"),
                chunk_index=int(metadatas[i].get("chunk_index", 0)),
                score=float(scores[i]),
            )
            for i in order
        ]

    def delete_source(self, source_id: str) -> None:
        """Drop every vector whose metadata names this document."""
        with self._lock:
            keep = [
                i for i, meta in enumerate(self._metadatas)
                if meta.get("source_id") != source_id
            ]
            if len(keep) == len(self._ids):
                return

            self._ids = [self._ids[i] for i in keep]
            self._documents = [self._documents[i] for i in keep]
            self._metadatas = [self._metadatas[i] for i in keep]
            self._matrix = self._matrix[keep] if keep else None

        logger.debug(f"In-memory store: removed '{source_id}', {len(self._ids)} vectors left")

    def count(self) -> int:
        return len(self._ids)
