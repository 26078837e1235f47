"""Semantic search oracle protocol."""
from typing import Protocol, runtime_checkable

from ..models.document import SemanticHit


@runtime_checkable
class SemanticOracleProtocol(Protocol):
    """Nearest-neighbour lookup over the chunk corpus."""

    async def search(self, query: str, k: int) -> list[SemanticHit]:
        """Return the top-k chunks by embedding similarity.

        Args:
            query: Query text.
            k: Number of hits.

        Returns:
            Hits ordered by decreasing similarity.
        """
        ...
