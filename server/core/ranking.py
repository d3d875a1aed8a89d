"""Full-scan similarity ranking over embedding chunks."""

import math

from shared.models.document import EmbeddingChunk, ScoredChunk


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine of the angle between two vectors.

    Args:
        a (list[float]): First vector.
        b (list[float]): Second vector, same length as a.

    Returns:
        float: Similarity in [-1, 1], 0.0 when either vector has zero norm.

    Raises:
        ValueError: If the vectors differ in length.
    """
    if len(a) != len(b):
        raise ValueError("Vector length mismatch: %d != %d." % (len(a), len(b)))
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (norm_a * norm_b)


def rank_chunks(query_vector: list[float], chunks: list[EmbeddingChunk]) -> list[ScoredChunk]:
    """Score every chunk against the query, best first.

    The sort is stable, chunks with equal similarity keep their input order.
    """
    scored = [
        ScoredChunk(chunk=chunk, similarity=cosine_similarity(query_vector, chunk.embedding))
        for chunk in chunks
    ]
    scored.sort(key=lambda item: item.similarity, reverse=True)
    return scored


def select_top_k(query_vector: list[float], chunks: list[EmbeddingChunk], k: int) -> list[ScoredChunk]:
    """Return at most k chunks with the highest similarity to the query.

    Raises:
        ValueError: If k is lower than 1 or a chunk vector has a different length.
    """
    if k < 1:
        raise ValueError("k must be at least 1.")
    return rank_chunks(query_vector, chunks)[:k]
