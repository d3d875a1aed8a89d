import pytest

from shared.chunking.ChunkerManager import ChunkerManager
from shared.chunking.SlidingWindowChunker import SlidingWindowChunker
from shared.chunking.WholeDocumentChunker import WholeDocumentChunker


def test_whole_document_is_one_chunk():
    assert WholeDocumentChunker().chunk("Refunds within 30 days.") == ["Refunds within 30 days."]
    assert WholeDocumentChunker().chunk("   \n") == []


def test_sliding_window_overlaps():
    chunker = SlidingWindowChunker(chunk_size=10, chunk_overlap=3)
    chunks = chunker.chunk("abcdefghijklmnopqrstuvwxyz")
    assert chunks[0] == "abcdefghij"
    assert chunks[1].startswith("hij")
    assert "".join(c[3:] if i else c for i, c in enumerate(chunks)) == "abcdefghijklmnopqrstuvwxyz"


def test_sliding_window_rejects_bad_overlap():
    with pytest.raises(ValueError):
        SlidingWindowChunker(chunk_size=10, chunk_overlap=10)


def test_manager_defaults_to_whole(helper_config):
    assert ChunkerManager(helper_config).get_chunker().get_name() == "whole"


def test_manager_window_strategy(helper_config, monkeypatch):
    monkeypatch.setenv("CHUNK_STRATEGY", "window")
    monkeypatch.setenv("CHUNK_SIZE", "200")
    monkeypatch.setenv("CHUNK_OVERLAP", "20")
    chunker = ChunkerManager(helper_config).get_chunker()
    assert isinstance(chunker, SlidingWindowChunker)
    assert (chunker.chunk_size, chunker.chunk_overlap) == (200, 20)
