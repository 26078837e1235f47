import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from .config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Container:
    _factories: dict[type, Callable[[], Any]] = field(default_factory=dict)
    _singletons: dict[type, Any] = field(default_factory=dict)
    _singleton_flags: set[type] = field(default_factory=set)

    def register(
        self, interface: type[T], factory: Callable[[], T], singleton: bool = False
    ) -> None:
        """Register factory for interface.

        Args:
            interface: Interface type.
            factory: Factory function.
            singleton: Whether to cache instance.
        """
        self._factories[interface] = factory
        if singleton:
            self._singleton_flags.add(interface)

    def resolve(self, interface: type[T]) -> T:
        if interface in self._singletons:
            return self._singletons[interface]

        if interface not in self._factories:
            raise KeyError(f"No factory registered for {interface}")

        instance = self._factories[interface]()

        if interface in self._singleton_flags:
            self._singletons[interface] = instance

        return instance

    def reset(self) -> None:
        """Reset singletons (for testing)."""
        self._singletons.clear()


container = Container()


def configure_container(settings: Settings) -> Container:
    """Configure container with all dependencies.

    Args:
        settings: Application settings.

    Returns:
        Configured container.
    """
    from .core.protocols.embedder import EmbedderProtocol
    from .core.protocols.llm import AnswerGeneratorProtocol, ClassifierProtocol
    from .core.protocols.semantic_oracle import SemanticOracleProtocol
    from .core.protocols.vector_store import VectorStoreProtocol
    from .core.services.answer_service import AnswerAssembler
    from .core.services.ingest_service import IngestService
    from .core.services.query_service import QueryService
    from .core.services.router_service import RouterService
    from .core.services.search_service import HybridSearchService
    from .core.strategies.fusion import ReciprocalRankFusion
    from .infrastructure.embeddings.sentence_transformer import (
        SentenceTransformerEmbedder,
    )
    from .infrastructure.llm.openai_client import OpenAIChatClient
    from .infrastructure.vector_stores import (
        ChromaVectorStore,
        InMemoryVectorStore,
        VectorSemanticOracle,
    )

    container.register(
        EmbedderProtocol,
        lambda: SentenceTransformerEmbedder(settings.embedding_model),
        singleton=True,
    )

    def make_vector_store() -> VectorStoreProtocol:
        if settings.vector_store_backend == "memory":
            return InMemoryVectorStore()
        return ChromaVectorStore(
            host=settings.chroma_host,
            port=settings.chroma_port,
            collection_name=settings.chroma_collection,
        )

    container.register(VectorStoreProtocol, make_vector_store, singleton=True)

    container.register(
        SemanticOracleProtocol,
        lambda: VectorSemanticOracle(
            embedder=container.resolve(EmbedderProtocol),
            vector_store=container.resolve(VectorStoreProtocol),
        ),
        singleton=True,
    )

    container.register(
        OpenAIChatClient,
        lambda: OpenAIChatClient(
            base_url=settings.llm_base_url,
            api_key=settings.llm_api_key,
            model=settings.llm_model,
            classifier_model=settings.llm_classifier_model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        ),
        singleton=True,
    )
    container.register(
        ClassifierProtocol, lambda: container.resolve(OpenAIChatClient), singleton=True
    )
    container.register(
        AnswerGeneratorProtocol,
        lambda: container.resolve(OpenAIChatClient),
        singleton=True,
    )

    container.register(
        HybridSearchService,
        lambda: HybridSearchService(
            default_oracle=container.resolve(SemanticOracleProtocol),
            fusion=ReciprocalRankFusion(k=settings.rag_rrf_k),
            candidate_floor=settings.rag_candidate_floor,
            keyword_weight=settings.rag_keyword_weight,
            semantic_weight=settings.rag_semantic_weight,
        ),
        singleton=True,
    )

    container.register(
        RouterService,
        lambda: RouterService(
            classifier=container.resolve(ClassifierProtocol),
            config_path=settings.router_config_path,
        ),
        singleton=True,
    )

    container.register(AnswerAssembler, AnswerAssembler, singleton=True)

    container.register(
        QueryService,
        lambda: QueryService(
            search_service=container.resolve(HybridSearchService),
            router=container.resolve(RouterService),
            assembler=container.resolve(AnswerAssembler),
            llm=container.resolve(AnswerGeneratorProtocol),
            min_score=settings.rag_min_score,
            hybrid_min_score=settings.rag_hybrid_min_score,
        ),
        singleton=True,
    )

    container.register(
        IngestService,
        lambda: IngestService(
            embedder=container.resolve(EmbedderProtocol),
            vector_store=container.resolve(VectorStoreProtocol),
            docs_path=settings.docs_path,
            chunk_size=settings.chunk_size,
        ),
        singleton=True,
    )

    logger.info("Container configured")
    return container
