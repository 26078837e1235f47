"""Answer assembly - turns ranked results into response structures."""

import logging
from typing import Iterable

from ..models.document import (
    ScoredResult,
    SearchStats,
    SearchType,
    SourceChunk,
    SourceGroup,
)
from ..strategies.scoring import MinScoreStrategy

logger = logging.getLogger(__name__)

CONTEXT_SEPARATOR = "\n---\n\n"


class AnswerAssembler:
    """Formats results for the answer prompt and the response payload.

    Makes no ranking decisions: every method keeps the order it is given.
    """

    def filter_by_min_score(
        self, results: list[ScoredResult], min_score: float
    ) -> list[ScoredResult]:
        return MinScoreStrategy(min_score).apply(results)

    def format_context(self, results: Iterable[ScoredResult]) -> str:
        """Render results as labeled blocks for the language model.

        Args:
            results: Results in the order they should appear.

        Returns:
            Context string, empty when there are no results.
        """
        blocks = []
        for i, r in enumerate(results, 1):
            chunk = getattr(r, "chunk", None)
            source = getattr(chunk, "source_id", None) or "Unknown"
            chunk_index = getattr(chunk, "chunk_index", None)
            position = chunk_index + 1 if isinstance(chunk_index, int) else 1
            content = getattr(chunk, "content", None)
            if not isinstance(content, str):
                content = ""

            blocks.append(
                f"Document {i} (Source: {source}, Chunk: {position}"
                f"{self._search_info(r)}):\n{content}\n"
            )

        return CONTEXT_SEPARATOR.join(blocks)

    def _search_info(self, result: ScoredResult) -> str:
        """Provenance suffix for hybrid results."""
        if getattr(result, "search_type", None) != SearchType.HYBRID:
            return ""

        info = [f"Type: {result.search_type.value}"]
        if result.keyword_rank:
            info.append(f"Keyword Rank: {result.keyword_rank}")
        if result.semantic_rank:
            info.append(f"Semantic Rank: {result.semantic_rank}")
        return ", " + ", ".join(info)

    def group_sources(self, results: Iterable[ScoredResult]) -> list[SourceGroup]:
        """Group results by source document.

        Groups keep first-seen order; chunks inside a group are sorted by
        chunk index.
        """
        groups: dict[str, SourceGroup] = {}

        for r in results:
            chunk = getattr(r, "chunk", None)
            if chunk is None:
                continue

            source = chunk.source_id or "Unknown"
            group = groups.get(source)
            if group is None:
                group = groups[source] = SourceGroup(
                    filename=source,
                    file_type=chunk.file_type or "unknown",
                    indexed_at=chunk.indexed_at,
                )

            group.chunks.append(
                SourceChunk(
                    chunk_index=chunk.chunk_index if isinstance(chunk.chunk_index, int) else 0,
                    score=r.score,
                    content=chunk.content if isinstance(chunk.content, str) else "",
                )
            )

        for group in groups.values():
            group.chunks.sort(key=lambda c: c.chunk_index)

        return list(groups.values())

    def build_stats(
        self, raw_count: int, filtered_count: int, final_count: int
    ) -> SearchStats:
        return SearchStats(
            total_results=raw_count,
            filtered_results=filtered_count,
            final_results=final_count,
        )
