
from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    # "chroma" or "memory"
    vector_store_backend: str = "chroma"
    chroma_host: str = "localhost"
    chroma_port: int = 8001
    chroma_collection: str = "hybrid_rag_chunks"

    llm_base_url: str = "http://localhost:11434/v1"
    llm_api_key: str = "ollama"
    llm_model: str = "qwen2.5:7b"
    llm_classifier_model: str | None = None
    llm_max_tokens: int = 1024
    llm_temperature: float = 0.1

    embedding_model: str = "intfloat/multilingual-e5-base"

    docs_path: str = "./docs"
    chunk_size: int = 1000

    rag_max_results: int = 4
    rag_min_score: float = 0.1
    rag_hybrid_min_score: float = 0.0
    rag_keyword_weight: float = 0.3
    rag_semantic_weight: float = 0.7
    rag_rrf_k: int = 60
    rag_candidate_floor: int = 10

    router_config_path: str = "router_config.json"

    history_max_messages: int = 10

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
