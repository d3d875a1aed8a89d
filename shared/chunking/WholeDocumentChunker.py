from shared.chunking.ChunkerInterface import ChunkerInterface


class WholeDocumentChunker(ChunkerInterface):
    """One chunk per document: the whole extracted text."""

    def get_name(self) -> str:
        return "whole"

    def chunk(self, text: str) -> list[str]:
        if not text or not text.strip():
            return []
        return [text]
