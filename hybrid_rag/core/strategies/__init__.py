"""Fusion and filtering strategies."""
from .fusion import DEFAULT_RRF_K, FusionStrategy, ReciprocalRankFusion
from .scoring import MinScoreStrategy, ScoringStrategy

__all__ = [
    "DEFAULT_RRF_K",
    "FusionStrategy",
    "ReciprocalRankFusion",
    "MinScoreStrategy",
    "ScoringStrategy",
]
