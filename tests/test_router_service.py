"""Tests for the two-stage query router."""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from hybrid_rag.core.models.routing import QueryRoute
from hybrid_rag.core.services.router_service import RouterService


@pytest.fixture
def make_router(tmp_path):
    """Router factory that never picks up a config file from the cwd."""

    def factory(classifier=None, config=None):
        config_path = tmp_path / "router_config.json"
        if config is not None:
            config_path.write_text(json.dumps(config), encoding="utf-8")
        return RouterService(classifier=classifier, config_path=str(config_path))

    return factory


def classifier_returning(value):
    classifier = AsyncMock()
    classifier.classify.return_value = value
    return classifier


class TestPatternStage:
    """Greetings and assistant-identity questions skip the model."""

    @pytest.mark.parametrize(
        "question",
        ["Hello", "hi!", "  hey  ", "Good Morning.", "thank you", "你好", "谢谢！", "How are you?"],
    )
    def test_greetings_route_direct_without_classifier_call(self, make_router, question):
        classifier = classifier_returning("SEARCH")
        router = make_router(classifier)

        assert asyncio.run(router.route(question)) == QueryRoute.DIRECT
        assert classifier.classify.await_count == 0

    @pytest.mark.parametrize(
        "question",
        ["What is your name?", "who are you", "Tell me about yourself", "你是谁", "what can you do for me"],
    )
    def test_personal_questions_route_direct(self, make_router, question):
        classifier = classifier_returning("SEARCH")
        router = make_router(classifier)

        assert asyncio.run(router.route(question)) == QueryRoute.DIRECT
        classifier.classify.assert_not_awaited()

    def test_greeting_must_be_whole_message(self, make_router):
        router = make_router()

        assert router.is_greeting("hello")
        assert not router.is_greeting("hello, what does the refund policy say?")


class TestModelStage:
    """Classifier-backed decisions."""

    def test_search_answer(self, make_router):
        classifier = classifier_returning("SEARCH")
        router = make_router(classifier)

        route = asyncio.run(router.route("What does section 3 of the policy say about refunds?"))

        assert route == QueryRoute.SEARCH
        classifier.classify.assert_awaited_once_with(
            "What does section 3 of the policy say about refunds?"
        )

    def test_direct_answer_is_case_insensitive(self, make_router):
        router = make_router(classifier_returning("direct."))

        assert asyncio.run(router.route("What is 2 + 2?")) == QueryRoute.DIRECT

    def test_unclear_answer_defaults_to_search(self, make_router):
        router = make_router(classifier_returning("I am not sure"))

        assert asyncio.run(router.route("What is the capital of France?")) == QueryRoute.SEARCH

    def test_classifier_failure_defaults_to_search(self, make_router):
        classifier = AsyncMock()
        classifier.classify.side_effect = TimeoutError("model timed out")
        router = make_router(classifier)

        assert asyncio.run(router.route("Summarize the onboarding doc")) == QueryRoute.SEARCH

    def test_no_classifier_defaults_to_search(self, make_router):
        router = make_router()

        assert asyncio.run(router.route("Summarize the onboarding doc")) == QueryRoute.SEARCH

    @pytest.mark.parametrize("question", ["", "   ", None])
    def test_empty_question_routes_search(self, make_router, question):
        classifier = classifier_returning("DIRECT")
        router = make_router(classifier)

        assert asyncio.run(router.route(question)) == QueryRoute.SEARCH
        classifier.classify.assert_not_awaited()


class TestParseDecision:
    """Raw response parsing."""

    @pytest.mark.parametrize(
        "response, expected",
        [
            ("DIRECT", QueryRoute.DIRECT),
            ("  direct\n", QueryRoute.DIRECT),
            ("SEARCH", QueryRoute.SEARCH),
            ("Search.", QueryRoute.SEARCH),
            ("maybe", QueryRoute.SEARCH),
            ("", QueryRoute.SEARCH),
            (None, QueryRoute.SEARCH),
            (42, QueryRoute.SEARCH),
        ],
    )
    def test_parse(self, response, expected):
        assert RouterService.parse_decision(response) == expected


class TestConfig:
    """Pattern overrides from JSON."""

    def test_custom_patterns_replace_defaults(self, make_router):
        classifier = classifier_returning("SEARCH")
        router = make_router(
            classifier,
            config={"greeting_patterns": [r"^(yo|sup)$"], "personal_patterns": [], "debug": True},
        )

        assert asyncio.run(router.route("yo!")) == QueryRoute.DIRECT
        assert asyncio.run(router.route("hello")) == QueryRoute.SEARCH
        assert asyncio.run(router.route("who are you")) == QueryRoute.SEARCH
        assert classifier.classify.await_count == 2

    def test_missing_config_uses_defaults(self, make_router):
        router = make_router()

        assert router.is_greeting("good evening")
        assert router.is_personal("what's your name")
