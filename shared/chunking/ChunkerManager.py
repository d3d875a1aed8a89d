from shared.chunking.ChunkerInterface import ChunkerInterface
from shared.chunking.SlidingWindowChunker import SlidingWindowChunker
from shared.chunking.WholeDocumentChunker import WholeDocumentChunker
from shared.helper.HelperConfig import HelperConfig


class ChunkerManager:
    """Manager class to instantiate the configured chunking strategy (CHUNK_STRATEGY)."""

    STRATEGIES = ("whole", "window")

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.chunker = self._initialize_chunker()

    def _initialize_chunker(self) -> ChunkerInterface:
        strategy = self.helper_config.get_choice_val("CHUNK_STRATEGY", list(self.STRATEGIES), default="whole")
        if strategy == "window":
            chunker = SlidingWindowChunker(
                chunk_size=int(self.helper_config.get_number_val("CHUNK_SIZE", default=1000)),
                chunk_overlap=int(self.helper_config.get_number_val("CHUNK_OVERLAP", default=100)),
            )
        else:
            chunker = WholeDocumentChunker()
        self.logging.debug("Using chunking strategy: %s", chunker.get_name())
        return chunker

    def get_chunker(self) -> ChunkerInterface:
        return self.chunker
