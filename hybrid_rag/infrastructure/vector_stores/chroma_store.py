import logging
from typing import Any, Optional

import requests

from hybrid_rag.core.models.document import SemanticHit

logger = logging.getLogger(__name__)


class ChromaVectorStore:
    """Chunk embeddings in a ChromaDB collection, over the v2 HTTP API."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 8001,
        collection_name: str = "chunks",
        tenant: str = "default_tenant",
        database: str = "default_database",
        timeout: float = 10.0,
    ):
        """Initialize ChromaDB client.

        Args:
            host: ChromaDB host.
            port: ChromaDB port.
            collection_name: Collection holding chunk embeddings.
            tenant: Tenant name.
            database: Database name.
            timeout: Request timeout in seconds.
        """
        self._collections_url = (
            f"http://{host}:{port}/api/v2/tenants/{tenant}"
            f"/databases/{database}/collections"
        )
        self._collection_name = collection_name
        self._collection_id: Optional[str] = None
        self._timeout = timeout

    def _collection_id_or_create(self) -> str:
        if self._collection_id:
            return self._collection_id

        resp = requests.get(self._collections_url, timeout=self._timeout)
        if resp.status_code == 200:
            existing = {col["name"]: col["id"] for col in resp.json()}
            self._collection_id = existing.get(self._collection_name)

        if not self._collection_id:
            resp = requests.post(
                self._collections_url,
                json={"name": self._collection_name, "metadata": {"hnsw:space": "cosine"}},
                timeout=self._timeout,
            )
            resp.raise_for_status()
            self._collection_id = resp.json()["id"]
            logger.info(f"Created collection: {self._collection_name}")

        return self._collection_id

    def _post(self, action: str, payload: dict) -> Any:
        """POST to a collection endpoint, raising on HTTP errors."""
        url = f"{self._collections_url}/{self._collection_id_or_create()}/{action}"
        resp = requests.post(url, json=payload, timeout=self._timeout)
        resp.raise_for_status()
        return resp.json()

    def add(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict],
    ) -> None:
        """Upsert chunks, so re-ingesting a document replaces its vectors."""
        self._post(
            "upsert",
            {"ids": ids, "embeddings": embeddings, "documents": documents, "metadatas": metadatas},
        )

    def query(
        self, query_embedding: list[float], n_results: int = 5
    ) -> list[SemanticHit]:
        """Search by embedding.

        Raises:
            requests.HTTPError: If ChromaDB rejects the query.
        """
        data = self._post(
            "query",
            {
                "query_embeddings": [query_embedding],
                "n_results": n_results,
                "include": ["documents", "metadatas", "distances"],
            },
        )
        if not data.get("ids") or not data["ids"][0]:
            return []

        rows = zip(data["documents"][0], data["metadatas"][0], data["distances"][0])
        return [
            SemanticHit(
                content=document or "",
                source_id=(metadata or {}).get("source_id", "Unknown"),
                chunk_index=int((metadata or {}).get("chunk_index", 0)),
                # cosine space: distance = 1 - similarity
                score=1.0 - distance,
            )
            for document, metadata, distance in rows
        ]

    def delete_source(self, source_id: str) -> None:
        """Delete every chunk embedding of one document."""
        self._post("delete", {"where": {"source_id": source_id}})
        logger.info(f"Deleted vectors of '{source_id}'")

    def count(self) -> int:
        """Get chunk count."""
        col_id = self._collection_id_or_create()
        resp = requests.get(f"{self._collections_url}/{col_id}/count", timeout=self._timeout)
        return resp.json() if resp.status_code == 200 else 0
