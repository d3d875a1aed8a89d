"""FastAPI application entry point for docbot_rag_bridge."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.logging.logging_setup import setup_logging
from shared.helper.HelperConfig import HelperConfig
from shared.chunking.ChunkerManager import ChunkerManager
from shared.clients.ClientInterface import ClientInterface
from shared.clients.blob.BlobClientManager import BlobClientManager
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.clients.session.local.SessionManagerLocal import SessionManagerLocal
from shared.extract.ContentExtractor import ContentExtractor
from shared.models.errors import DocBotError
from shared.stores.AssociationStore import AssociationStore
from shared.stores.BotStore import BotStore
from shared.stores.Database import Database
from shared.stores.DocumentStore import DocumentStore
from shared.stores.EmbeddingStore import EmbeddingStore
from shared.stores.UserStore import UserStore
from services.doc_indexing.IndexingService import IndexingService
from server.core.BotService import BotService
from server.core.RAGService import RAGService
from server.models.responses import ErrorResponse
from server.routers.BotRouter import router as bot_router
from server.routers.ChatRouter import router as chat_router
from server.routers.DocumentRouter import router as document_router

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    helper_config = HelperConfig(logger=logging)
    app.state.logging = logging
    app.state.helper_config = helper_config

    database = Database(helper_config=helper_config)
    await database.boot()

    embed_client = EmbedClientManager(helper_config=helper_config).get_client()
    llm_client = LLMClientManager(helper_config=helper_config).get_client()
    blob_client = BlobClientManager(helper_config=helper_config).get_client()
    session_manager = SessionManagerLocal(helper_config=helper_config)

    clients: list[ClientInterface] = [embed_client, llm_client, blob_client]
    logging.info("Booting all clients...")
    for client in clients:
        await client.boot()
    await session_manager.boot()
    logging.info("All clients booted successfully.")

    user_store = UserStore(helper_config=helper_config)
    bot_store = BotStore(helper_config=helper_config)
    document_store = DocumentStore(helper_config=helper_config)
    embedding_store = EmbeddingStore(helper_config=helper_config)
    association_store = AssociationStore(helper_config=helper_config)

    app.state.database = database
    app.state.session_manager = session_manager
    app.state.bot_service = BotService(
        helper_config=helper_config,
        database=database,
        user_store=user_store,
        bot_store=bot_store,
        document_store=document_store,
        association_store=association_store,
        session_manager=session_manager,
    )
    app.state.indexing_service = IndexingService(
        helper_config=helper_config,
        database=database,
        extractor=ContentExtractor(helper_config=helper_config),
        chunker=ChunkerManager(helper_config=helper_config).get_chunker(),
        embed_client=embed_client,
        blob_client=blob_client,
        bot_store=bot_store,
        document_store=document_store,
        embedding_store=embedding_store,
        association_store=association_store,
    )
    app.state.rag_service = RAGService(
        helper_config=helper_config,
        database=database,
        bot_store=bot_store,
        association_store=association_store,
        embedding_store=embedding_store,
        embed_client=embed_client,
        llm_client=llm_client,
    )

    await check_connections(embed_client, llm_client, blob_client)

    # while the app is running...
    yield

    # when the app shuts down, close all client connections
    logging.info("Shutting down, closing all clients...")
    await session_manager.close()
    for client in clients:
        await client.close()
    await database.close()
    logging.info("All clients closed.")


app = FastAPI(
    title="docbot_rag_bridge",
    description=(
        "Document-grounded chat bots. Users upload .txt, .pdf and .docx files, attach them "
        "to a bot, and chat messages to that bot are answered only from the attached documents. "
        "Retrieval is scoped per user and per bot."
    ),
    version=app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(bot_router)
app.include_router(document_router)
app.include_router(chat_router)


@app.exception_handler(DocBotError)
async def handle_docbot_error(request: Request, exc: DocBotError) -> JSONResponse:
    """Map the error taxonomy onto HTTP responses with the error's fixed message."""
    if exc.status_code >= 500:
        logging.error("%s %s failed: %s", request.method, request.url.path, type(exc).__name__)
    body = ErrorResponse(error=type(exc).__name__, detail=exc.message)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.get("/health", tags=["health"])
async def health() -> dict:
    return {"status": "ok", "version": app_version}


async def check_connections(
    embed_client: ClientInterface,
    llm_client: ClientInterface,
    blob_client: ClientInterface,
) -> None:
    """Check connectivity to all configured backends on startup.

    The LLM is non-fatal: chat answers degrade to the fixed apology text.
    Embedding and blob storage are fatal, neither uploads nor answers work without them.

    Raises:
        Exception: If the embedding backend or the blob storage is not reachable.
    """
    try:
        result: httpx.Response = await llm_client.do_healthcheck()
        if not result.is_success:
            logging.warning(
                "LLM client '%s' is not reachable (status %d). Chat answers will fail.",
                llm_client.__class__.__name__,
                result.status_code,
            )
    except httpx.HTTPError as exc:
        logging.warning("LLM client '%s' is not reachable: %s", llm_client.__class__.__name__, exc)

    for client in (embed_client, blob_client):
        result = await client.do_healthcheck()
        if not result.is_success:
            raise Exception(
                f"{client.get_client_type().upper()} client '{client.__class__.__name__}' is not reachable "
                f"(status {result.status_code}). Cannot index or answer."
            )


if __name__ == "__main__":
    import uvicorn

    logging.info(
        "Starting docbot_rag_bridge API Server v%s from root dir: %s on port 8000...",
        app_version,
        os.environ.get("ROOT_DIR", "unknown"),
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
