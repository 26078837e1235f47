"""Embedder protocol for dependency injection."""
from typing import Protocol, runtime_checkable
import numpy as np


@runtime_checkable
class EmbedderProtocol(Protocol):
    """Protocol for embedding service."""

    def embed_query(self, text: str) -> np.ndarray:
        """Encode a search query.

        Args:
            text: Query text.

        Returns:
            1-D embedding vector.
        """
        ...

    def embed_passages(self, texts: list[str]) -> np.ndarray:
        """Encode chunk texts for storage.

        Args:
            texts: Chunk contents.

        Returns:
            Matrix with one embedding per text.
        """
        ...
