"""Routing domain models."""
from enum import Enum


class QueryRoute(str, Enum):
    """Whether a question needs retrieval."""
    DIRECT = "DIRECT"  # answer from model knowledge only
    SEARCH = "SEARCH"  # retrieve grounding context first
