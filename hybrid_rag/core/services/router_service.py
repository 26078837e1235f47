"""Router service - determines if retrieval is needed."""

import json
import logging
import re
from pathlib import Path
from typing import Optional

from ..models.routing import QueryRoute
from ..protocols.llm import ClassifierProtocol

logger = logging.getLogger(__name__)

DEFAULT_GREETING_PATTERNS = [
    r"^(hi|hello|hey|你好|再见)$",
    r"^(good morning|good afternoon|good evening)$",
    r"^(how are you|how do you do)$",
    r"^(thanks|thank you|谢谢)$",
]

DEFAULT_PERSONAL_PATTERNS = [
    r"what.*your.*name",
    r"who.*are.*you",
    r"你叫什么名字",
    r"你是谁",
    r"what.*can.*you.*do",
    r"tell.*about.*yourself",
]

# Greetings are matched on the whole message, minus trailing punctuation
_TRAILING_PUNCT_RE = re.compile(r"[\s!?.,~。！？，…]+$")


class RouterService:
    """Two-stage router: fixed patterns, then a model classification call.

    Any doubt resolves to SEARCH. Searching a conversational message only
    costs latency, answering a factual one without grounding does not.
    """

    def __init__(
        self,
        classifier: Optional[ClassifierProtocol] = None,
        config_path: str = "router_config.json",
    ):
        """Initialize router.

        Args:
            classifier: Classification oracle for the model stage.
            config_path: Path to router config JSON.
        """
        self._classifier = classifier
        self._debug = False
        self._config = self._load_config(config_path)
        self._debug = self._config.get("debug", False)

        self._greeting_patterns = self._compile(
            self._config.get("greeting_patterns", DEFAULT_GREETING_PATTERNS)
        )
        self._personal_patterns = self._compile(
            self._config.get("personal_patterns", DEFAULT_PERSONAL_PATTERNS)
        )

    def _load_config(self, path: str) -> dict:
        """Load config from JSON."""
        config_file = Path(path)
        if not config_file.exists():
            logger.debug(f"Router config {path} not found, using defaults")
            return {}

        with open(config_file, "r", encoding="utf-8") as f:
            config = json.load(f)
            self._log(f"Config loaded from {path}")
            return config

    @staticmethod
    def _compile(patterns: list[str]) -> list[re.Pattern]:
        return [re.compile(p, re.IGNORECASE) for p in patterns]

    def _log(self, message: str) -> None:
        """Log debug message."""
        if self._debug:
            logger.info(f"[router] {message}")

    def is_greeting(self, question: str) -> bool:
        """Check if the whole message is a greeting or thanks."""
        text = _TRAILING_PUNCT_RE.sub("", question.strip())
        return any(p.search(text) for p in self._greeting_patterns)

    def is_personal(self, question: str) -> bool:
        """Check if the message asks about the assistant itself."""
        return any(p.search(question) for p in self._personal_patterns)

    def matches_pattern(self, question: str) -> bool:
        """Pattern stage: True means answer directly."""
        return self.is_greeting(question) or self.is_personal(question)

    @staticmethod
    def parse_decision(response: object) -> QueryRoute:
        """Map a raw model response to a route, SEARCH when unrecognized."""
        if not isinstance(response, str):
            return QueryRoute.SEARCH

        cleaned = response.strip().upper()
        if "DIRECT" in cleaned:
            return QueryRoute.DIRECT
        if "SEARCH" in cleaned:
            return QueryRoute.SEARCH

        logger.info(f"Classification unclear: '{response[:50]}', defaulting to SEARCH")
        return QueryRoute.SEARCH

    async def route(self, question: str) -> QueryRoute:
        """Decide whether retrieval is needed.

        Args:
            question: User question.

        Returns:
            DIRECT to answer from model knowledge, SEARCH to retrieve first.
        """
        if not isinstance(question, str) or not question.strip():
            return QueryRoute.SEARCH

        if self.matches_pattern(question):
            self._log(f"Pattern match -> DIRECT for '{question[:60]}'")
            logger.info("Classification result: DIRECT (pattern-based)")
            return QueryRoute.DIRECT

        if self._classifier is None:
            logger.warning("No classifier configured, defaulting to SEARCH")
            return QueryRoute.SEARCH

        try:
            response = await self._classifier.classify(question.strip())
        except Exception as e:
            logger.warning(f"Question classification failed, defaulting to SEARCH: {e}")
            return QueryRoute.SEARCH

        self._log(f"Raw classification response: '{response}'")
        decision = self.parse_decision(response)
        logger.info(f"Classification result: {decision.value}")
        return decision
