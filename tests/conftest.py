import pytest

from hybrid_rag.core.models.document import Chunk

from .helpers import make_chunk


@pytest.fixture
def fruit_chunks() -> list[Chunk]:
    return [
        make_chunk("docA", 0, "apples are red", total_chunks=2, file_type=".txt"),
        make_chunk("docA", 1, "bananas are yellow", total_chunks=2, file_type=".txt"),
    ]
