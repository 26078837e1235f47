import asyncio
import logging

from hybrid_rag.core.models.document import SemanticHit
from hybrid_rag.core.protocols.embedder import EmbedderProtocol
from hybrid_rag.core.protocols.vector_store import VectorStoreProtocol

logger = logging.getLogger(__name__)


class VectorSemanticOracle:
    """Semantic oracle backed by an embedder and a vector store."""

    def __init__(self, embedder: EmbedderProtocol, vector_store: VectorStoreProtocol):
        """Initialize oracle.

        Args:
            embedder: Embedding service for queries.
            vector_store: Store holding chunk embeddings.
        """
        self._embedder = embedder
        self._vector_store = vector_store

    def _search_sync(self, query: str, k: int) -> list[SemanticHit]:
        query_embedding = self._embedder.embed_query(query).tolist()
        return self._vector_store.query(query_embedding=query_embedding, n_results=k)

    async def search(self, query: str, k: int) -> list[SemanticHit]:
        """Embed the query and fetch nearest chunks off the event loop."""
        hits = await asyncio.to_thread(self._search_sync, query, k)
        logger.debug(f"Semantic oracle: {len(hits)} hits for '{query[:50]}'")
        return hits
