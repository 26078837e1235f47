"""Query service - coordinates routing, retrieval, assembly and answering."""

import logging
from typing import AsyncIterator, Optional, Sequence

from ..models.chat import ChatHistory
from ..models.document import Chunk, IndexStats, SearchType
from ..models.query import QueryRequest, QueryResponse
from ..models.routing import QueryRoute
from ..protocols.llm import AnswerGeneratorProtocol
from .answer_service import AnswerAssembler
from .router_service import RouterService
from .search_service import HybridSearchService

logger = logging.getLogger(__name__)


class QueryService:
    """Entry point used by the presentation layer."""

    def __init__(
        self,
        search_service: HybridSearchService,
        router: RouterService,
        assembler: AnswerAssembler | None = None,
        llm: Optional[AnswerGeneratorProtocol] = None,
        min_score: float = 0.1,
        hybrid_min_score: float = 0.0,
    ):
        """Initialize query service.

        Args:
            search_service: Hybrid search coordinator.
            router: Query router.
            assembler: Answer assembler.
            llm: Answer generator, optional.
            min_score: Default threshold for keyword and semantic queries.
            hybrid_min_score: Default threshold for hybrid queries.
        """
        self._search = search_service
        self._router = router
        self._assembler = assembler or AnswerAssembler()
        self._llm = llm
        self._min_score = min_score
        self._hybrid_min_score = hybrid_min_score

    def index(self, chunks: Sequence[Chunk]) -> IndexStats:
        """Replace the searchable corpus."""
        return self._search.build_index(chunks)

    def stats(self) -> IndexStats:
        return self._search.get_stats()

    def remove_source(self, source_id: str) -> IndexStats:
        """Drop one document from the searchable corpus."""
        return self._search.remove_source(source_id)

    async def classify(self, question: str) -> QueryRoute:
        return await self._router.route(question)

    def _default_min_score(self, search_type: SearchType) -> float:
        if search_type == SearchType.HYBRID:
            return self._hybrid_min_score
        return self._min_score

    async def query(self, request: QueryRequest) -> QueryResponse:
        """Route and retrieve for one question.

        Args:
            request: Question and search options.

        Returns:
            Response with grounding context, grouped sources and stats.
            Empty but well-formed when nothing was retrieved.
        """
        search_type = _coerce_search_type(request.search_type)

        if not request.force_search_mode:
            route = await self._router.route(request.question)
            if route == QueryRoute.DIRECT:
                logger.info(f"DIRECT route, skipping retrieval for '{request.question[:50]}'")
                return QueryResponse(search_type=search_type, route=QueryRoute.DIRECT)
        else:
            logger.info("Using search mode (forced)")

        pool = max(request.max_results, 0) * 2
        try:
            raw = await self._search.search(
                request.question,
                search_type=search_type,
                k=pool,
                keyword_weight=request.keyword_weight,
                semantic_weight=request.semantic_weight,
            )
        except Exception as e:
            logger.error(f"Search error: {e}")
            raw = []

        min_score = request.min_score
        if min_score is None:
            min_score = self._default_min_score(search_type)

        filtered = self._assembler.filter_by_min_score(raw, min_score)
        final = filtered[: max(request.max_results, 0)]

        logger.info(
            f"Query ({search_type.value}): {len(raw)} raw, {len(filtered)} filtered, "
            f"{len(final)} final for '{request.question[:50]}'"
        )

        return QueryResponse(
            search_type=search_type,
            route=QueryRoute.SEARCH,
            answer_context=self._assembler.format_context(final),
            sources=self._assembler.group_sources(final),
            search_results=final,
            search_stats=self._assembler.build_stats(len(raw), len(filtered), len(final)),
        )

    async def answer(
        self, request: QueryRequest, history: ChatHistory | None = None
    ) -> QueryResponse:
        """Retrieve and phrase a natural-language answer.

        Without grounding context the answer comes from model knowledge.
        """
        response = await self.query(request)
        if self._llm is None:
            return response

        context = response.answer_context if response.has_context else None
        history_text = history.format() if history else None

        try:
            response.answer = await self._llm.generate(
                request.question, context=context, history=history_text
            )
        except Exception as e:
            logger.error(f"Answer generation failed: {e}")

        return response

    async def answer_stream(
        self, request: QueryRequest, history: ChatHistory | None = None
    ) -> AsyncIterator[tuple[str, Optional[QueryResponse]]]:
        """Stream an answer.

        Yields:
            Tuples of (token, response). response is only set on first yield.
        """
        response = await self.query(request)
        yield ("", response)

        if self._llm is None:
            return

        context = response.answer_context if response.has_context else None
        history_text = history.format() if history else None

        try:
            async for token in self._llm.generate_stream(
                request.question, context=context, history=history_text
            ):
                yield (token, None)
        except Exception as e:
            logger.error(f"Answer streaming failed: {e}")


def _coerce_search_type(value: object) -> SearchType:
    try:
        return SearchType(value)
    except ValueError:
        logger.warning(f"Unknown search type {value!r}, using hybrid")
        return SearchType.HYBRID
