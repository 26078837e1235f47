"""Protocol interfaces for dependency injection."""
from .embedder import EmbedderProtocol
from .vector_store import VectorStoreProtocol
from .semantic_oracle import SemanticOracleProtocol
from .llm import AnswerGeneratorProtocol, ClassifierProtocol

__all__ = [
    "EmbedderProtocol",
    "VectorStoreProtocol",
    "SemanticOracleProtocol",
    "ClassifierProtocol",
    "AnswerGeneratorProtocol",
]
