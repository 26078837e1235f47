import asyncio
import json
import logging
import sys
import time

import httpx

from hybrid_rag.config.settings import settings
from hybrid_rag.container import configure_container, container
from hybrid_rag.core.models.chat import ChatHistory
from hybrid_rag.core.models.query import QueryRequest
from hybrid_rag.core.services.ingest_service import IngestService
from hybrid_rag.core.services.query_service import QueryService

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def ensure_llm_model(attempts: int = 5) -> bool:
    """Check that the configured model is served by Ollama.

    Returns:
        True if model ready, False otherwise.
    """
    model = settings.llm_model
    base_url = settings.llm_base_url.replace("/v1", "")

    logger.info(f"Checking LLM model: {model}")

    for attempt in range(attempts):
        try:
            resp = httpx.get(f"{base_url}/api/tags", timeout=5)
            if resp.status_code == 200:
                models = [m["name"] for m in resp.json().get("models", [])]
                if any(model in m for m in models):
                    logger.info(f"Model {model} is ready")
                    return True
                logger.error(f"Model {model} not found, pull it with Ollama first")
                return False
        except httpx.HTTPError:
            logger.info(f"Waiting for LLM server... ({attempt + 1}/{attempts})")
            time.sleep(2)

    logger.error("LLM server not available")
    return False


def load_corpus(store: bool) -> QueryService:
    """Chunk the docs folder and build the search index."""
    configure_container(settings)
    ingest_service = container.resolve(IngestService)
    query_service = container.resolve(QueryService)

    if store:
        chunks = ingest_service.run()
    else:
        chunks = ingest_service.load_directory()
        if settings.vector_store_backend == "memory":
            ingest_service.store(chunks)

    query_service.index(chunks)
    return query_service


def cmd_ingest():
    """Ingest command - embed documents and report index stats."""
    query_service = load_corpus(store=True)
    stats = query_service.stats()
    logger.info(f"Indexed {stats.document_count} chunks")


def cmd_stats():
    query_service = load_corpus(store=False)
    print(json.dumps(query_service.stats().to_dict(), ensure_ascii=False))


def cmd_remove(source_id: str):
    """Remove command - delete a document's vectors and reindex without it."""
    query_service = load_corpus(store=False)
    container.resolve(IngestService).remove_source(source_id)
    stats = query_service.remove_source(source_id)
    print(json.dumps(stats.to_dict(), ensure_ascii=False))


def cmd_classify(question: str):
    configure_container(settings)
    query_service = container.resolve(QueryService)
    route = asyncio.run(query_service.classify(question))
    print(route.value)


def build_request(question: str) -> QueryRequest:
    return QueryRequest(
        question=question,
        max_results=settings.rag_max_results,
        keyword_weight=settings.rag_keyword_weight,
        semantic_weight=settings.rag_semantic_weight,
    )


def print_sources(sources):
    if not sources:
        return
    print("\nSources:")
    for group in sources:
        chunk_list = ", ".join(str(c.chunk_index + 1) for c in group.chunks)
        print(f"  {group.filename} (chunks {chunk_list})")


def cmd_ask(question: str):
    """Ask command - answer one question from the docs folder."""
    if not ensure_llm_model():
        sys.exit(1)

    query_service = load_corpus(store=False)
    response = asyncio.run(query_service.answer(build_request(question)))

    print(response.answer or "")
    print_sources(response.sources)


async def _chat_turn(
    query_service: QueryService, question: str, history: ChatHistory
) -> None:
    sources = []
    answer = ""
    async for token, response in query_service.answer_stream(
        build_request(question), history
    ):
        if response is not None:
            sources = response.sources
            continue
        answer += token
        print(token, end="", flush=True)

    print()
    print_sources(sources)
    history.add_pair(question, answer)


async def _chat_loop(query_service: QueryService) -> None:
    history = ChatHistory(max_messages=settings.history_max_messages)

    print("Type your question, empty line to quit.")
    while True:
        try:
            question = input("> ").strip()
        except EOFError:
            break
        if not question:
            break
        await _chat_turn(query_service, question, history)


def cmd_chat():
    """Chat command - streaming conversation over the docs folder."""
    if not ensure_llm_model():
        sys.exit(1)

    query_service = load_corpus(store=False)
    asyncio.run(_chat_loop(query_service))


def main():
    """CLI entry point."""
    if len(sys.argv) < 2:
        print("Usage: python -m hybrid_rag.presentation.cli <command> [question]")
        print("Commands: ingest, stats, chat, remove, classify, ask")
        sys.exit(1)

    command = sys.argv[1]
    question = " ".join(sys.argv[2:]).strip()

    if command == "ingest":
        cmd_ingest()
    elif command == "stats":
        cmd_stats()
    elif command == "chat":
        cmd_chat()
    elif command == "remove":
        if not question:
            print("Usage: python -m hybrid_rag.presentation.cli remove <filename>")
            sys.exit(1)
        cmd_remove(question)
    elif command in ("classify", "ask"):
        if not question:
            print(f"Usage: python -m hybrid_rag.presentation.cli {command} <question>")
            sys.exit(1)
        if command == "classify":
            cmd_classify(question)
        else:
            cmd_ask(question)
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()
