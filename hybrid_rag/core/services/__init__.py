"""Core business services."""
from .answer_service import AnswerAssembler
from .ingest_service import IngestService, normalize_chunk, normalize_corpus
from .query_service import QueryService
from .router_service import RouterService
from .search_service import HybridSearchService, IndexBuildError

__all__ = [
    "AnswerAssembler",
    "HybridSearchService",
    "IndexBuildError",
    "IngestService",
    "QueryService",
    "RouterService",
    "normalize_chunk",
    "normalize_corpus",
]
