"""Document domain models."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class SearchType(str, Enum):
    """Retrieval strategy that produced a result."""
    KEYWORD = "keyword"
    SEMANTIC = "semantic"
    HYBRID = "hybrid"


@dataclass(frozen=True)
class Chunk:
    """Indexed slice of a source document."""
    content: str
    source_id: str
    chunk_index: int
    total_chunks: int = 1
    file_type: str = "unknown"
    indexed_at: Optional[datetime] = None

    @property
    def key(self) -> tuple[str, int]:
        """Identity used to merge results from different search paths."""
        return (self.source_id, self.chunk_index)


@dataclass
class SemanticHit:
    """Row returned by a semantic oracle."""
    content: str
    source_id: str
    chunk_index: int
    score: float


@dataclass
class ScoredResult:
    """Chunk ranked by one of the search strategies."""
    chunk: Chunk
    score: float
    search_type: SearchType
    keyword_rank: Optional[int] = None
    semantic_rank: Optional[int] = None
    keyword_score: Optional[float] = None
    semantic_score: Optional[float] = None

    @property
    def key(self) -> tuple[str, int]:
        return self.chunk.key

    @property
    def content(self) -> str:
        return self.chunk.content

    @property
    def source_id(self) -> str:
        return self.chunk.source_id

    @property
    def chunk_index(self) -> int:
        return self.chunk.chunk_index

    def to_dict(self) -> dict:
        return {
            "content": self.chunk.content,
            "sourceId": self.chunk.source_id,
            "chunkIndex": self.chunk.chunk_index,
            "score": self.score,
            "searchType": self.search_type.value,
            "keywordRank": self.keyword_rank,
            "semanticRank": self.semantic_rank,
            "keywordScore": self.keyword_score,
            "semanticScore": self.semantic_score,
        }


@dataclass
class SourceChunk:
    """Chunk entry inside a source group."""
    chunk_index: int
    score: float
    content: str


@dataclass
class SourceGroup:
    """Results of a single source document, ordered by chunk index."""
    filename: str
    file_type: str
    indexed_at: Optional[datetime] = None
    chunks: list[SourceChunk] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "fileType": self.file_type,
            "indexedAt": self.indexed_at.isoformat() if self.indexed_at else None,
            "chunks": [
                {"chunkIndex": c.chunk_index, "score": c.score, "content": c.content}
                for c in self.chunks
            ],
        }


@dataclass
class SearchStats:
    """Result counts at each stage of a query."""
    total_results: int = 0
    filtered_results: int = 0
    final_results: int = 0

    def to_dict(self) -> dict:
        return {
            "totalResults": self.total_results,
            "filteredResults": self.filtered_results,
            "finalResults": self.final_results,
        }


@dataclass
class IndexStats:
    """Keyword index state."""
    indexed: bool
    document_count: int

    def to_dict(self) -> dict:
        return {"indexed": self.indexed, "documentCount": self.document_count}
