"""Domain models."""
from .document import (
    Chunk,
    IndexStats,
    ScoredResult,
    SearchStats,
    SearchType,
    SemanticHit,
    SourceChunk,
    SourceGroup,
)
from .chat import ChatMessage, ChatHistory
from .query import QueryRequest, QueryResponse
from .routing import QueryRoute

__all__ = [
    "Chunk",
    "IndexStats",
    "ScoredResult",
    "SearchStats",
    "SearchType",
    "SemanticHit",
    "SourceChunk",
    "SourceGroup",
    "ChatMessage",
    "ChatHistory",
    "QueryRequest",
    "QueryResponse",
    "QueryRoute",
]
