
import logging
from typing import AsyncIterator

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

CLASSIFY_PROMPT = """You are a question classifier. Classify the following question as either "DIRECT" or "SEARCH".

DIRECT: Questions that should be answered using the AI's general knowledge without searching documents:
- Personal questions about the AI ("What is your name?", "Who are you?", "你叫什么名字?")
- Greetings and casual conversation ("Hello", "How are you?", "你好")
- General knowledge questions ("What is gravity?", "Explain photosynthesis", "什么是重力?")
- Math calculations ("What is 2+2?", "Calculate 15*3")
- Conversational responses

SEARCH: Questions that need to search the uploaded documents:
- Questions about uploaded documents ("What does the document say about X?")
- Questions referring to specific files or content
- Questions that explicitly mention documents, files, or sources
- Questions about specific companies, people, or events

Question: "{question}"

Classification (respond with only "DIRECT" or "SEARCH"): """

DIRECT_PROMPT = """You are a friendly AI assistant. Answer the user's question directly using your general knowledge.
Respond in the same language as the user's question.
For greetings and casual conversations, respond warmly and briefly.
Do not reference any documents, sources, or search results.

Conversation History:
{history}

Question: {question}

Answer: """

SEARCH_PROMPT = """You are a helpful AI assistant. Answer the user's question using the provided context.
Respond in the same language as the user's question.

Use the context provided to answer the question. Do not include source references or citations in your answer.
If the context is not relevant to the question, say so and answer based on your general knowledge.
If you don't know the answer based on the provided context, say that you don't know. Do not make up an answer.

Conversation History:
{history}

Context:
{context}

Question: {question}

Answer: """


class OpenAIChatClient:
    """LLM client for any OpenAI-compatible API (Ollama by default)."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434/v1",
        api_key: str = "ollama",
        model: str = "qwen2.5:7b",
        classifier_model: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.1,
    ):
        """Initialize client.

        Args:
            base_url: API URL.
            api_key: API key.
            model: Model for answers.
            classifier_model: Model for classification, defaults to ``model``.
            max_tokens: Max response tokens.
            temperature: Sampling temperature for answers.
        """
        self._client = AsyncOpenAI(base_url=base_url, api_key=api_key)
        self._model = model
        self._classifier_model = classifier_model or model
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def classify(self, question: str) -> str:
        """Ask the model for a DIRECT/SEARCH label.

        Args:
            question: User question.

        Returns:
            Raw model output.
        """
        response = await self._client.chat.completions.create(
            model=self._classifier_model,
            messages=[
                {"role": "user", "content": CLASSIFY_PROMPT.format(question=question)}
            ],
            max_tokens=10,
            temperature=0,
        )
        content = response.choices[0].message.content or ""
        logger.debug(f"[classify] raw response '{content}' for '{question[:60]}'")
        return content

    def _build_messages(
        self, question: str, context: str | None, history: str | None
    ) -> list[dict]:
        history_text = history or "No previous conversation."
        if context is not None:
            prompt = SEARCH_PROMPT.format(
                history=history_text, context=context, question=question
            )
        else:
            prompt = DIRECT_PROMPT.format(history=history_text, question=question)
        return [{"role": "user", "content": prompt}]

    async def generate(
        self,
        question: str,
        context: str | None = None,
        history: str | None = None,
    ) -> str:
        """Generate a complete answer.

        Args:
            question: User question.
            context: Grounding context. None means knowledge-only answer.
            history: Formatted conversation history.

        Returns:
            Answer text.
        """
        response = await self._client.chat.completions.create(
            model=self._model,
            messages=self._build_messages(question, context, history),
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )
        return response.choices[0].message.content or ""

    async def generate_stream(
        self,
        question: str,
        context: str | None = None,
        history: str | None = None,
    ) -> AsyncIterator[str]:
        """Stream answer tokens.

        Yields:
            Response tokens.
        """
        response = await self._client.chat.completions.create(
            model=self._model,
            messages=self._build_messages(question, context, history),
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            stream=True,
        )

        async for chunk in response:
            if chunk.choices and chunk.choices[0].delta.content:
                yield chunk.choices[0].delta.content
