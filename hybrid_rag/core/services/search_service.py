"""Search service - hybrid keyword/semantic retrieval."""

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..index.tfidf import TfIdfIndex
from ..models.document import (
    Chunk,
    IndexStats,
    ScoredResult,
    SearchType,
    SemanticHit,
)
from ..protocols.semantic_oracle import SemanticOracleProtocol
from ..strategies.fusion import FusionStrategy, ReciprocalRankFusion

logger = logging.getLogger(__name__)


class IndexBuildError(RuntimeError):
    """Raised when a keyword index cannot be built."""


@dataclass(frozen=True)
class _IndexState:
    """Published index snapshot, never mutated after construction."""
    index: TfIdfIndex
    oracle: Optional[SemanticOracleProtocol]
    lookup: dict[tuple[str, int], Chunk] = field(default_factory=dict)

    @property
    def chunks(self) -> tuple[Chunk, ...]:
        return self.index.chunks


class HybridSearchService:
    """Keyword, semantic and hybrid search over one chunk corpus.

    Owns the keyword index lifecycle. A build produces a new ``_IndexState``
    that replaces the old one with a single assignment, and every search reads
    that reference once, so queries never observe a partially built index.
    """

    def __init__(
        self,
        default_oracle: Optional[SemanticOracleProtocol] = None,
        fusion: FusionStrategy | None = None,
        candidate_floor: int = 10,
        keyword_weight: float = 0.3,
        semantic_weight: float = 0.7,
    ):
        """Initialize search service.

        Args:
            default_oracle: Semantic oracle used when a build passes none.
            fusion: Fusion strategy for hybrid search.
            candidate_floor: Minimum candidates requested from each sub-search.
            keyword_weight: Default keyword weight for hybrid search.
            semantic_weight: Default semantic weight for hybrid search.
        """
        self._default_oracle = default_oracle
        self._fusion = fusion or ReciprocalRankFusion()
        self._candidate_floor = candidate_floor
        self._keyword_weight = keyword_weight
        self._semantic_weight = semantic_weight

        self._state: Optional[_IndexState] = None
        self._build_lock = threading.Lock()

    @property
    def is_indexed(self) -> bool:
        return self._state is not None

    def build_index(
        self,
        chunks: Sequence[Chunk],
        semantic_oracle: Optional[SemanticOracleProtocol] = None,
    ) -> IndexStats:
        """Build the keyword index and publish it.

        Args:
            chunks: Corpus snapshot.
            semantic_oracle: Oracle for semantic search, defaults to the
                service-level one.

        Returns:
            Index statistics after publishing.

        Raises:
            IndexBuildError: If the corpus cannot be indexed. The previously
                published index stays in place.
        """
        oracle = semantic_oracle or self._default_oracle

        with self._build_lock:
            try:
                corpus = list(chunks)
                logger.info(f"Building hybrid search index for {len(corpus)} chunks...")
                index = TfIdfIndex().build(corpus)
                lookup = {}
                for chunk in index.chunks:
                    lookup.setdefault(chunk.key, chunk)
            except Exception as e:
                logger.error(f"Index build failed: {e}")
                raise IndexBuildError(f"Index build failed: {e}") from e

            self._state = _IndexState(index=index, oracle=oracle, lookup=lookup)

        logger.info(
            f"Hybrid search index built: {len(index)} chunks, "
            f"{index.vocabulary_size} terms"
        )
        return self.get_stats()

    def rebuild_index(self, chunks: Optional[Sequence[Chunk]] = None) -> IndexStats:
        """Rebuild the index from scratch.

        Args:
            chunks: New corpus. None reuses the published corpus.

        Returns:
            Index statistics.
        """
        state = self._state
        if chunks is None:
            if state is None:
                logger.info("Rebuild skipped: nothing indexed yet")
                return self.get_stats()
            chunks = state.chunks

        oracle = state.oracle if state is not None else None
        return self.build_index(chunks, oracle)

    def remove_source(self, source_id: str) -> IndexStats:
        """Drop every chunk of one document and rebuild."""
        state = self._state
        if state is None:
            return self.get_stats()

        remaining = [c for c in state.chunks if c.source_id != source_id]
        removed = len(state.chunks) - len(remaining)
        logger.info(f"Removing {removed} chunks of '{source_id}'")
        return self.build_index(remaining, state.oracle)

    def get_stats(self) -> IndexStats:
        state = self._state
        if state is None:
            return IndexStats(indexed=False, document_count=0)
        return IndexStats(indexed=True, document_count=len(state.chunks))

    def keyword_search(self, query: str, k: int = 10) -> list[ScoredResult]:
        """Keyword search against the published index."""
        state = self._state
        if state is None:
            logger.warning("Index not built yet, returning empty keyword results")
            return []
        return self._keyword(state, query, k)

    async def semantic_search(self, query: str, k: int = 10) -> list[ScoredResult]:
        """Semantic search through the oracle, empty on oracle failure."""
        state = self._state
        if state is None:
            logger.warning("Index not built yet, returning empty semantic results")
            return []
        return await self._semantic(state, query, k)

    async def hybrid_search(
        self,
        query: str,
        max_results: int = 4,
        keyword_weight: Optional[float] = None,
        semantic_weight: Optional[float] = None,
    ) -> list[ScoredResult]:
        """Run keyword and semantic search concurrently and fuse them.

        Args:
            query: Search query.
            max_results: Number of fused results to return.
            keyword_weight: Keyword list weight.
            semantic_weight: Semantic list weight.

        Returns:
            Fused hybrid results, at most ``max_results``.
        """
        state = self._state
        if state is None:
            logger.warning("Index not built yet, returning empty hybrid results")
            return []
        if max_results <= 0:
            return []

        if keyword_weight is None:
            keyword_weight = self._keyword_weight
        if semantic_weight is None:
            semantic_weight = self._semantic_weight

        pool = max(max_results * 2, self._candidate_floor)

        keyword_results, semantic_results = await asyncio.gather(
            self._keyword_async(state, query, pool),
            self._semantic(state, query, pool),
        )

        if not keyword_results and not semantic_results:
            logger.info(f"Hybrid search: no candidates for '{query[:50]}'")
            return []

        fused = self._fusion.fuse(
            [keyword_results, semantic_results],
            [keyword_weight, semantic_weight],
        )
        results = fused[:max_results]

        logger.info(
            f"Hybrid search: keyword={len(keyword_results)} "
            f"semantic={len(semantic_results)} -> {len(results)}/{max_results} "
            f"for '{query[:50]}'"
        )
        return results

    async def search(
        self,
        query: str,
        search_type: SearchType = SearchType.HYBRID,
        k: int = 4,
        keyword_weight: Optional[float] = None,
        semantic_weight: Optional[float] = None,
    ) -> list[ScoredResult]:
        """Dispatch to one of the three search modes."""
        if search_type == SearchType.KEYWORD:
            return self.keyword_search(query, k)
        if search_type == SearchType.SEMANTIC:
            return await self.semantic_search(query, k)
        return await self.hybrid_search(
            query,
            max_results=k,
            keyword_weight=keyword_weight,
            semantic_weight=semantic_weight,
        )

    def _keyword(self, state: _IndexState, query: str, k: int) -> list[ScoredResult]:
        results = state.index.search(query, k)
        logger.debug(f"Keyword search: {len(results)} results for '{query[:50]}'")
        return results

    async def _keyword_async(
        self, state: _IndexState, query: str, k: int
    ) -> list[ScoredResult]:
        return self._keyword(state, query, k)

    async def _semantic(
        self, state: _IndexState, query: str, k: int
    ) -> list[ScoredResult]:
        if state.oracle is None or k <= 0:
            return []

        try:
            hits = await state.oracle.search(query, k)
        except Exception as e:
            logger.warning(f"Semantic search failed, continuing without it: {e}")
            return []

        results = []
        for hit in hits or []:
            result = self._hit_to_result(state, hit)
            if result is not None:
                results.append(result)

        logger.debug(f"Semantic search: {len(results)} results for '{query[:50]}'")
        return results

    def _hit_to_result(
        self, state: _IndexState, hit: SemanticHit
    ) -> Optional[ScoredResult]:
        """Resolve an oracle hit against the indexed corpus."""
        source_id = getattr(hit, "source_id", None)
        chunk_index = getattr(hit, "chunk_index", None)
        score = getattr(hit, "score", None)
        if not isinstance(source_id, str) or not isinstance(chunk_index, int):
            logger.debug(f"Skipping malformed semantic hit: {hit!r}")
            return None
        if not isinstance(score, (int, float)):
            score = 0.0

        # hits outside the published corpus are stale vectors
        chunk = state.lookup.get((source_id, chunk_index))
        if chunk is None:
            logger.debug(f"Skipping semantic hit outside the index: {source_id}#{chunk_index}")
            return None

        return ScoredResult(
            chunk=chunk,
            score=max(float(score), 0.0),
            search_type=SearchType.SEMANTIC,
        )
