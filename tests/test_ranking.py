import pytest

from server.core.ranking import cosine_similarity, rank_chunks, select_top_k
from shared.models.document import EmbeddingChunk


def make_chunk(chunk_id: str, embedding: list[float]) -> EmbeddingChunk:
    return EmbeddingChunk(
        id=chunk_id,
        user_id="u1",
        document_id=f"doc-{chunk_id}",
        chunk_index=0,
        file_name=f"{chunk_id}.txt",
        content=f"content {chunk_id}",
        embedding=embedding,
    )


def test_cosine_similarity_basics():
    assert cosine_similarity([1.0, 0.0], [1.0, 0.0]) == pytest.approx(1.0)
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
    assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)


def test_zero_vector_scores_zero():
    assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
    assert cosine_similarity([1.0, 2.0], [0.0, 0.0]) == 0.0


def test_length_mismatch_raises():
    with pytest.raises(ValueError):
        cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])


def test_top_k_orders_by_similarity():
    chunks = [make_chunk("a", [0.0, 1.0]), make_chunk("b", [1.0, 0.0]), make_chunk("c", [1.0, 1.0])]
    top = select_top_k([1.0, 0.0], chunks, k=2)
    assert [item.chunk.id for item in top] == ["b", "c"]


def test_ties_keep_input_order():
    chunks = [make_chunk("first", [2.0, 0.0]), make_chunk("second", [1.0, 0.0]), make_chunk("third", [3.0, 0.0])]
    for _ in range(3):
        ranked = rank_chunks([1.0, 0.0], chunks)
        assert [item.chunk.id for item in ranked] == ["first", "second", "third"]


def test_fewer_chunks_than_k():
    assert len(select_top_k([1.0], [make_chunk("only", [1.0])], k=3)) == 1


def test_invalid_k():
    with pytest.raises(ValueError):
        select_top_k([1.0], [], k=0)
