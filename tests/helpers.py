"""Test helpers."""

from hybrid_rag.core.models.document import Chunk, ScoredResult, SearchType, SemanticHit


def make_chunk(source_id: str, chunk_index: int, content: str = "", **kwargs) -> Chunk:
    """Create a test Chunk."""
    return Chunk(
        content=content or f"Content of {source_id} #{chunk_index}",
        source_id=source_id,
        chunk_index=chunk_index,
        **kwargs,
    )


def make_result(
    source_id: str,
    chunk_index: int,
    score: float = 1.0,
    search_type: SearchType = SearchType.KEYWORD,
    content: str = "",
) -> ScoredResult:
    """Create a test ScoredResult."""
    return ScoredResult(
        chunk=make_chunk(source_id, chunk_index, content),
        score=score,
        search_type=search_type,
    )


class FakeOracle:
    """Semantic oracle returning canned hits."""

    def __init__(self, hits: list[SemanticHit] | None = None, error: Exception | None = None):
        self.hits = hits or []
        self.error = error
        self.calls: list[tuple[str, int]] = []

    async def search(self, query: str, k: int) -> list[SemanticHit]:
        self.calls.append((query, k))
        if self.error is not None:
            raise self.error
        return self.hits[:k]
