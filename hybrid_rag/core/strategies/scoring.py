
import logging
from abc import ABC, abstractmethod

from ..models.document import ScoredResult

logger = logging.getLogger(__name__)


class ScoringStrategy(ABC):
    """Base class for post-retrieval filters."""

    @abstractmethod
    def apply(self, results: list[ScoredResult]) -> list[ScoredResult]:
        """Apply strategy to results."""
        ...


class MinScoreStrategy(ScoringStrategy):
    """Drop results scoring below a fixed threshold."""

    def __init__(self, min_score: float = 0.0):
        """Initialize strategy.

        Args:
            min_score: Lowest score kept.
        """
        self._min_score = min_score

    def apply(self, results: list[ScoredResult]) -> list[ScoredResult]:
        """Filter results below threshold, order preserved."""
        if not results:
            return []

        filtered = [r for r in results if _score(r) >= self._min_score]

        if len(filtered) < len(results):
            logger.info(
                f"Min score: {len(results)} → {len(filtered)} "
                f"(min_allowed={self._min_score:.3f})"
            )

        return filtered


def _score(result: ScoredResult) -> float:
    score = getattr(result, "score", None)
    if isinstance(score, (int, float)):
        return float(score)
    return float("-inf")
