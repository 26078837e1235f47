"""Vector store implementations."""
from .chroma_store import ChromaVectorStore
from .memory_store import InMemoryVectorStore
from .semantic_oracle import VectorSemanticOracle

__all__ = ["ChromaVectorStore", "InMemoryVectorStore", "VectorSemanticOracle"]
