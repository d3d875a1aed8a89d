import logging

import pytest
from sqlalchemy import func, select

from server.core.BotService import BotService
from server.core.RAGService import RAGService
from services.doc_indexing.IndexingService import IndexingService
from shared.chunking.WholeDocumentChunker import WholeDocumentChunker
from shared.clients.blob.models.StoredBlob import StoredBlob
from shared.clients.session.local.SessionManagerLocal import SessionManagerLocal
from shared.extract.ContentExtractor import ContentExtractor
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger
from shared.stores.AssociationStore import AssociationStore
from shared.stores.BotStore import BotStore
from shared.stores.Database import Database
from shared.stores.DocumentStore import DocumentStore
from shared.stores.EmbeddingStore import EmbeddingStore
from shared.stores.UserStore import UserStore

# one dimension per keyword, embeddings are keyword counts
KEYWORDS = ("refund", "shipping", "warranty", "hours")


def keyword_vector(text: str) -> list[float]:
    lowered = text.lower()
    return [float(lowered.count(keyword)) for keyword in KEYWORDS]


class FakeEmbedClient:
    """Deterministic embeddings without a backend. Counts calls."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.fail = False
        self.dimension_override: int | None = None

    async def do_embed(self, texts: list[str] | str) -> list[list[float]]:
        texts = [texts] if isinstance(texts, str) else texts
        self.calls.append(list(texts))
        if self.fail:
            raise Exception("embedding backend unavailable")
        if self.dimension_override is not None:
            return [[1.0] * self.dimension_override for _ in texts]
        return [keyword_vector(text) for text in texts]


class FakeLLMClient:
    """Answers with the context block of the user prompt. Counts calls."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.fail = False
        self.reply: str | None = None

    async def do_complete(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        if self.fail:
            raise Exception("model backend unavailable")
        if self.reply is not None:
            return self.reply
        context = user_prompt.split("\n\n")[0].split("\n", 1)[-1]
        return f"According to the documents: {context}"


class FakeBlobClient:
    """In-memory blob storage with switchable failures."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_put = False
        self.fail_delete = False
        self._counter = 0

    async def do_put(self, data: bytes, content_type: str, key_hint: str) -> StoredBlob:
        if self.fail_put:
            raise Exception("storage full")
        self._counter += 1
        key = f"{key_hint.rsplit('/', 1)[0]}/blob-{self._counter}"
        self.objects[key] = data
        return StoredBlob(url=f"memory://{key}", key=key, size=len(data))

    async def do_delete(self, key: str) -> None:
        self.deleted.append(key)
        if self.fail_delete:
            raise Exception("storage offline")
        self.objects.pop(key, None)


@pytest.fixture
def base_env(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'docbot.db'}")
    monkeypatch.setenv("API_SERVER_API_KEY", "test-key")
    monkeypatch.setenv("BLOB_LOCAL_ROOT_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("RESPONSE_LANGUAGE", "id")
    for key in ("RAG_TOP_K", "BOTS_DEFAULT_MAX", "UPLOAD_MAX_BYTES", "CHUNK_STRATEGY"):
        monkeypatch.delenv(key, raising=False)
    return tmp_path


@pytest.fixture
def helper_config(base_env) -> HelperConfig:
    return HelperConfig(logger=ColorLogger(logging.getLogger("docbot.tests")))


@pytest.fixture
async def database(helper_config):
    db = Database(helper_config=helper_config)
    await db.boot()
    yield db
    await db.close()


@pytest.fixture
def stores(helper_config) -> dict:
    return {
        "user": UserStore(helper_config=helper_config),
        "bot": BotStore(helper_config=helper_config),
        "document": DocumentStore(helper_config=helper_config),
        "embedding": EmbeddingStore(helper_config=helper_config),
        "association": AssociationStore(helper_config=helper_config),
    }


@pytest.fixture
def embed_client() -> FakeEmbedClient:
    return FakeEmbedClient()


@pytest.fixture
def llm_client() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def blob_client() -> FakeBlobClient:
    return FakeBlobClient()


@pytest.fixture
def session_manager(helper_config) -> SessionManagerLocal:
    return SessionManagerLocal(helper_config=helper_config)


@pytest.fixture
def bot_service(helper_config, database, stores, session_manager) -> BotService:
    return BotService(
        helper_config=helper_config,
        database=database,
        user_store=stores["user"],
        bot_store=stores["bot"],
        document_store=stores["document"],
        association_store=stores["association"],
        session_manager=session_manager,
    )


@pytest.fixture
def indexing_service(helper_config, database, stores, embed_client, blob_client) -> IndexingService:
    return IndexingService(
        helper_config=helper_config,
        database=database,
        extractor=ContentExtractor(helper_config=helper_config),
        chunker=WholeDocumentChunker(),
        embed_client=embed_client,
        blob_client=blob_client,
        bot_store=stores["bot"],
        document_store=stores["document"],
        embedding_store=stores["embedding"],
        association_store=stores["association"],
    )


@pytest.fixture
def rag_service(helper_config, database, stores, embed_client, llm_client) -> RAGService:
    return RAGService(
        helper_config=helper_config,
        database=database,
        bot_store=stores["bot"],
        association_store=stores["association"],
        embedding_store=stores["embedding"],
        embed_client=embed_client,
        llm_client=llm_client,
    )


@pytest.fixture
def row_count(database):
    """Number of rows in the table of a record class."""

    async def _count(record_class) -> int:
        async with database.session() as session:
            result = await session.execute(select(func.count()).select_from(record_class))
            return int(result.scalar_one())

    return _count
