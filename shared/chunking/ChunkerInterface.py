from abc import ABC, abstractmethod


class ChunkerInterface(ABC):
    """Splits extracted document text into the units that get embedded."""

    @abstractmethod
    def get_name(self) -> str:
        pass

    @abstractmethod
    def chunk(self, text: str) -> list[str]:
        """Split text into ordered chunks.

        Args:
            text (str): The full extracted document text.

        Returns:
            list[str]: Non-empty chunks in document order, empty for blank text.
        """
        pass
