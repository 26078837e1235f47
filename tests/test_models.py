"""Tests for domain models and dependency wiring."""

import pytest

from hybrid_rag.config.settings import Settings
from hybrid_rag.container import configure_container, container
from hybrid_rag.core.models.chat import ChatHistory, ChatMessage
from hybrid_rag.core.models.document import ScoredResult, SearchType
from hybrid_rag.core.protocols.vector_store import VectorStoreProtocol
from hybrid_rag.core.services.query_service import QueryService
from hybrid_rag.core.services.search_service import HybridSearchService
from hybrid_rag.infrastructure.vector_stores import InMemoryVectorStore

from .helpers import make_chunk


class TestChatHistory:

    def test_empty_history_text(self):
        assert ChatHistory().format() == "No previous conversation."

    def test_keeps_only_most_recent_messages(self):
        history = ChatHistory(max_messages=4)
        for i in range(3):
            history.add_pair(f"q{i}", f"a{i}")

        assert [m.content for m in history.messages] == ["q1", "a1", "q2", "a2"]
        assert history.format() == "User: q1\nAssistant: a1\nUser: q2\nAssistant: a2"

    def test_to_list(self):
        history = ChatHistory()
        history.add(ChatMessage(role="user", content="hi"))

        assert history.to_list() == [{"role": "user", "content": "hi"}]


class TestScoredResult:

    def test_to_dict_uses_wire_names(self):
        result = ScoredResult(
            chunk=make_chunk("docA", 2, "text"),
            score=0.5,
            search_type=SearchType.HYBRID,
            keyword_rank=1,
            keyword_score=1.2,
        )

        assert result.to_dict() == {
            "content": "text",
            "sourceId": "docA",
            "chunkIndex": 2,
            "score": 0.5,
            "searchType": "hybrid",
            "keywordRank": 1,
            "semanticRank": None,
            "keywordScore": 1.2,
            "semanticScore": None,
        }


class TestContainer:

    @pytest.fixture(autouse=True)
    def clean_container(self):
        container.reset()
        yield
        container.reset()

    def test_memory_backend_wiring(self, tmp_path):
        settings = Settings(
            vector_store_backend="memory",
            router_config_path=str(tmp_path / "router.json"),
            rag_candidate_floor=12,
        )

        configure_container(settings)

        assert isinstance(container.resolve(VectorStoreProtocol), InMemoryVectorStore)
        assert isinstance(container.resolve(QueryService), QueryService)
        search = container.resolve(HybridSearchService)
        assert search is container.resolve(HybridSearchService)
        assert search._candidate_floor == 12

    def test_unknown_interface(self):
        with pytest.raises(KeyError):
            container.resolve(int)
