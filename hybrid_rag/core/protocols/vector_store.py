"""Vector store protocol for dependency injection."""
from typing import Protocol, runtime_checkable

from ..models.document import SemanticHit


@runtime_checkable
class VectorStoreProtocol(Protocol):
    """Protocol for vector storage."""

    def add(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict]
    ) -> None:
        """Add chunks to the store.

        Args:
            ids: Chunk IDs.
            embeddings: Chunk embeddings.
            documents: Chunk texts.
            metadatas: Chunk metadata, must carry source_id and chunk_index.
        """
        ...

    def query(
        self,
        query_embedding: list[float],
        n_results: int = 5
    ) -> list[SemanticHit]:
        """Search by embedding.

        Args:
            query_embedding: Query vector.
            n_results: Number of results to return.

        Returns:
            Hits ordered by decreasing similarity.
        """
        ...

    def count(self) -> int:
        """Get stored chunk count."""
        ...

    def delete_source(self, source_id: str) -> None:
        """Delete every stored chunk of one document."""
        ...
