"""Query request/response models."""
from dataclasses import dataclass, field
from typing import Optional

from .document import ScoredResult, SearchStats, SearchType, SourceGroup
from .routing import QueryRoute


@dataclass
class QueryRequest:
    """Options for a single question."""
    question: str
    max_results: int = 4
    min_score: Optional[float] = None  # None: per-mode default
    keyword_weight: float = 0.3
    semantic_weight: float = 0.7
    search_type: SearchType = SearchType.HYBRID
    force_search_mode: bool = False


@dataclass
class QueryResponse:
    """Retrieval outcome handed to the presentation layer."""
    search_type: SearchType
    route: QueryRoute = QueryRoute.SEARCH
    answer_context: str = ""
    sources: list[SourceGroup] = field(default_factory=list)
    search_results: list[ScoredResult] = field(default_factory=list)
    search_stats: SearchStats = field(default_factory=SearchStats)
    answer: Optional[str] = None

    @property
    def has_context(self) -> bool:
        return bool(self.answer_context.strip())

    def to_dict(self) -> dict:
        return {
            "answer": self.answer,
            "answerContext": self.answer_context,
            "sources": [s.to_dict() for s in self.sources],
            "searchResults": [r.to_dict() for r in self.search_results],
            "searchStats": self.search_stats.to_dict(),
            "searchType": self.search_type.value,
            "route": self.route.value,
        }
