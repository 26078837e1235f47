"""Rank fusion strategies."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..models.document import ScoredResult, SearchType

logger = logging.getLogger(__name__)

DEFAULT_RRF_K = 60


class FusionStrategy(ABC):
    """Base class for merging several ranked lists into one."""

    @abstractmethod
    def fuse(
        self,
        lists: Sequence[Sequence[ScoredResult]],
        weights: Sequence[float],
    ) -> list[ScoredResult]:
        """Merge ranked lists, best first."""
        ...


@dataclass
class _Accumulator:
    first: ScoredResult
    score: float = 0.0
    provenance: dict = field(default_factory=dict)


class ReciprocalRankFusion(FusionStrategy):
    """Weighted Reciprocal Rank Fusion.

    A chunk at 1-based rank ``r`` of list ``i`` earns ``weights[i] / (k + r)``.
    Contributions are summed per ``(source_id, chunk_index)``. Weights are
    used as given, callers choose their magnitudes.
    """

    def __init__(self, k: int = DEFAULT_RRF_K):
        """Initialize strategy.

        Args:
            k: Damping constant added to every rank.
        """
        self._k = k

    @property
    def k(self) -> int:
        return self._k

    def contribution(self, weight: float, rank: int) -> float:
        """Score earned at 1-based ``rank`` in a list with ``weight``."""
        return weight / (self._k + rank)

    def fuse(
        self,
        lists: Sequence[Sequence[ScoredResult]],
        weights: Sequence[float],
    ) -> list[ScoredResult]:
        """Fuse ranked lists.

        Args:
            lists: Ranked lists, best first.
            weights: One weight per list. Lists without a weight are ignored.

        Returns:
            Hybrid results sorted by fused score, ties in first-seen order.
        """
        merged: dict[tuple[str, int], _Accumulator] = {}

        for list_idx, results in enumerate(lists):
            if list_idx >= len(weights):
                logger.warning(f"RRF: list {list_idx} has no weight, skipped")
                continue

            weight = weights[list_idx]
            seen: set[tuple[str, int]] = set()

            for rank, result in enumerate(results or (), 1):
                key = _result_key(result)
                if key is None or key in seen:
                    continue
                seen.add(key)

                entry = merged.get(key)
                if entry is None:
                    entry = merged[key] = _Accumulator(first=result)

                entry.score += self.contribution(weight, rank)
                _record_provenance(entry.provenance, result, rank)

        fused = [
            ScoredResult(
                chunk=entry.first.chunk,
                score=entry.score,
                search_type=SearchType.HYBRID,
                keyword_rank=entry.provenance.get("keyword_rank"),
                semantic_rank=entry.provenance.get("semantic_rank"),
                keyword_score=entry.provenance.get("keyword_score"),
                semantic_score=entry.provenance.get("semantic_score"),
            )
            for entry in merged.values()
        ]
        # dicts keep insertion order and sort is stable
        fused.sort(key=lambda r: r.score, reverse=True)

        if logger.isEnabledFor(logging.DEBUG):
            top = ", ".join(f"{r.source_id}#{r.chunk_index}={r.score:.4f}" for r in fused[:3])
            logger.debug(f"RRF: {len(fused)} fused from {len(lists)} lists [{top}]")

        return fused


def _result_key(result: ScoredResult) -> Optional[tuple[str, int]]:
    chunk = getattr(result, "chunk", None)
    if chunk is None:
        return None
    return chunk.key


def _record_provenance(provenance: dict, result: ScoredResult, rank: int) -> None:
    if result.search_type == SearchType.KEYWORD:
        provenance.setdefault("keyword_rank", rank)
        provenance.setdefault("keyword_score", result.score)
    elif result.search_type == SearchType.SEMANTIC:
        provenance.setdefault("semantic_rank", rank)
        provenance.setdefault("semantic_score", result.score)
