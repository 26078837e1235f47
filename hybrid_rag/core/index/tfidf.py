"""TF-IDF keyword index over a chunk corpus."""

import logging
import math
import re
from collections import Counter
from typing import Any, Sequence

from ..models.document import Chunk, ScoredResult, SearchType

logger = logging.getLogger(__name__)

# Anything outside ASCII word characters, whitespace and CJK ideographs
_STRIP_RE = re.compile(r"[^a-z0-9_\s\u4e00-\u9fff]")
_SPACE_RE = re.compile(r"\s+")


def tokenize(text: Any) -> list[str]:
    """Lowercase, drop punctuation, split on whitespace.

    Non-string input yields no tokens.
    """
    if not isinstance(text, str) or not text:
        return []

    cleaned = _STRIP_RE.sub(" ", text.lower())
    cleaned = _SPACE_RE.sub(" ", cleaned).strip()
    if not cleaned:
        return []
    return cleaned.split(" ")


class TfIdfIndex:
    """Inverted term statistics for keyword ranking.

    Scores a chunk as the sum over query terms of ``tf * idf`` where ``tf`` is
    the raw term count in the chunk and ``idf = 1 + ln(N / (1 + df))``.
    """

    def __init__(self):
        self._chunks: tuple[Chunk, ...] = ()
        self._term_freqs: list[Counter] = []
        self._doc_freqs: Counter = Counter()

    def __len__(self) -> int:
        return len(self._chunks)

    @property
    def chunks(self) -> tuple[Chunk, ...]:
        return self._chunks

    @property
    def vocabulary_size(self) -> int:
        return len(self._doc_freqs)

    def build(self, chunks: Sequence[Chunk]) -> "TfIdfIndex":
        """Index chunks, replacing any previous state.

        Args:
            chunks: Corpus snapshot.

        Returns:
            The index itself.
        """
        term_freqs: list[Counter] = []
        doc_freqs: Counter = Counter()

        for chunk in chunks:
            counts = Counter(tokenize(getattr(chunk, "content", None)))
            term_freqs.append(counts)
            doc_freqs.update(counts.keys())

        self._chunks = tuple(chunks)
        self._term_freqs = term_freqs
        self._doc_freqs = doc_freqs

        logger.debug(
            f"TF-IDF index: {len(self._chunks)} chunks, {len(doc_freqs)} terms"
        )
        return self

    def idf(self, term: str) -> float:
        """Inverse document frequency of a term."""
        n_docs = len(self._chunks)
        if n_docs == 0:
            return 0.0
        return 1.0 + math.log(n_docs / (1 + self._doc_freqs.get(term, 0)))

    def score(self, terms: list[str], position: int) -> float:
        """TF-IDF score of the chunk at ``position`` for the given terms."""
        counts = self._term_freqs[position]
        total = 0.0
        for term in terms:
            tf = counts.get(term, 0)
            if tf:
                total += tf * self.idf(term)
        return total

    def search(self, query: str, k: int) -> list[ScoredResult]:
        """Rank chunks against a keyword query.

        Args:
            query: Free-text query.
            k: Maximum number of results.

        Returns:
            Results with positive score, best first, ties in corpus order.
        """
        terms = tokenize(query)
        if not terms or not self._chunks or k <= 0:
            return []

        scored = []
        for position in range(len(self._chunks)):
            value = self.score(terms, position)
            if value > 0:
                scored.append((position, value))

        # sort is stable, equal scores keep corpus order
        scored.sort(key=lambda item: item[1], reverse=True)

        return [
            ScoredResult(
                chunk=self._chunks[position],
                score=value,
                search_type=SearchType.KEYWORD,
            )
            for position, value in scored[:k]
        ]
