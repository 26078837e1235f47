"""LLM protocols for dependency injection."""
from typing import Protocol, AsyncIterator, runtime_checkable


@runtime_checkable
class ClassifierProtocol(Protocol):
    """Protocol for the question classification call."""

    async def classify(self, question: str) -> str:
        """Classify a question.

        Args:
            question: User question.

        Returns:
            Raw model output, expected to contain DIRECT or SEARCH.
        """
        ...


@runtime_checkable
class AnswerGeneratorProtocol(Protocol):
    """Protocol for phrasing the final answer."""

    async def generate(
        self,
        question: str,
        context: str | None = None,
        history: str | None = None,
    ) -> str:
        """Generate an answer.

        Args:
            question: User question.
            context: Grounding context. None means knowledge-only answer.
            history: Formatted conversation history.

        Returns:
            Answer text.
        """
        ...

    def generate_stream(
        self,
        question: str,
        context: str | None = None,
        history: str | None = None,
    ) -> AsyncIterator[str]:
        """Stream answer tokens."""
        ...
