"""Document indexing service.

Turns an upload into a searchable document: extracts the text, stores the
original file, embeds the chunks, persists document and chunks, and finally
attaches the document to the bot. Every step after the first side effect
has a compensating action, so a failed upload leaves nothing behind.
"""

import uuid
from datetime import datetime, timezone

from shared.chunking.ChunkerInterface import ChunkerInterface
from shared.clients.blob.BlobClientInterface import BlobClientInterface
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.extract.ContentExtractor import ContentExtractor
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import (
    SUPPORTED_MEDIA_TYPES,
    Document,
    EmbeddingChunk,
    ProcessingStatus,
    UploadPayload,
)
from shared.models.errors import (
    EmbeddingFailed,
    MissingFile,
    NotFound,
    PayloadTooLarge,
    PersistenceFailed,
    StorageWriteFailed,
    UnsupportedMediaType,
)
from shared.stores.AssociationStore import AssociationStore
from shared.stores.BotStore import BotStore
from shared.stores.Database import Database
from shared.stores.DocumentStore import DocumentStore
from shared.stores.EmbeddingStore import EmbeddingStore


def _make_chunk_id(document_id: str, chunk_index: int) -> str:
    """Build a deterministic UUID5 id for a document chunk.

    Args:
        document_id (str): Id of the owning document.
        chunk_index (int): Zero-based chunk index within the document.

    Returns:
        str: Hex UUID, identical for the same document and index.
    """
    return uuid.uuid5(uuid.NAMESPACE_OID, f"{document_id}:{chunk_index}").hex


class IndexingService:
    """Orchestrates upload -> extract -> blob -> embed -> persist -> associate."""

    def __init__(
        self,
        helper_config: HelperConfig,
        database: Database,
        extractor: ContentExtractor,
        chunker: ChunkerInterface,
        embed_client: EmbedClientInterface,
        blob_client: BlobClientInterface,
        bot_store: BotStore,
        document_store: DocumentStore,
        embedding_store: EmbeddingStore,
        association_store: AssociationStore,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._db = database
        self._extractor = extractor
        self._chunker = chunker
        self._embed_client = embed_client
        self._blob_client = blob_client
        self._bot_store = bot_store
        self._document_store = document_store
        self._embedding_store = embedding_store
        self._association_store = association_store
        self.max_upload_bytes = int(helper_config.get_number_val("UPLOAD_MAX_BYTES", default=5 * 1024 * 1024))

    ##########################################
    ############### VALIDATION ###############
    ##########################################

    async def _ensure_bot(self, user_id: str, bot_id: str) -> None:
        async with self._db.session() as session:
            bot = await self._bot_store.find_one(session, user_id, bot_id)
        if bot is None:
            raise NotFound("Bot not found.")

    def _validate_upload(self, upload: UploadPayload) -> None:
        """Reject an upload before anything is written.

        Raises:
            MissingFile: If the payload is empty.
            PayloadTooLarge: If the payload exceeds UPLOAD_MAX_BYTES.
            UnsupportedMediaType: If the media type is not txt, pdf or docx.
        """
        if not upload.data:
            raise MissingFile()
        if len(upload.data) > self.max_upload_bytes:
            self.logging.warning(
                "Rejected upload '%s': %d bytes exceeds limit of %d.",
                upload.file_name, len(upload.data), self.max_upload_bytes,
            )
            raise PayloadTooLarge()
        if upload.media_type not in SUPPORTED_MEDIA_TYPES:
            self.logging.warning("Rejected upload '%s': unsupported media type '%s'.", upload.file_name, upload.media_type)
            raise UnsupportedMediaType()

    ##########################################
    ################ INDEXING ################
    ##########################################

    async def do_index_document(self, user_id: str, bot_id: str, upload: UploadPayload) -> str:
        """Index an uploaded file and attach it to a bot.

        Args:
            user_id (str): Owning user.
            bot_id (str): Bot the document gets attached to, must belong to user_id.
            upload (UploadPayload): Raw bytes, file name and declared media type.

        Returns:
            str: The id of the new document, only once every step succeeded.

        Raises:
            NotFound: If the bot does not exist for this user.
            MissingFile, PayloadTooLarge, UnsupportedMediaType: On invalid input, nothing written.
            ExtractionFailed: If no text could be extracted, nothing written.
            StorageWriteFailed: If the original could not be stored, nothing written.
            EmbeddingFailed: If embedding failed, the stored original is removed again.
            PersistenceFailed: If document, chunks or association could not be saved,
                all rows and the stored original are removed again.
        """
        await self._ensure_bot(user_id, bot_id)
        self._validate_upload(upload)

        # step 1: text extraction, raises UnsupportedMediaType / ExtractionFailed
        text = await self._extractor.do_extract(upload.data, upload.media_type)
        self.logging.debug("Extracted %d characters from '%s'.", len(text), upload.file_name)

        # step 2: store the original
        try:
            blob = await self._blob_client.do_put(
                upload.data, upload.media_type, f"uploads/{user_id}/{upload.file_name}"
            )
        except Exception as exc:
            self.logging.error("Storing original of '%s' failed: %s", upload.file_name, exc)
            raise StorageWriteFailed()

        # step 3: chunk and embed in a single batch
        chunks = self._chunker.chunk(text)
        try:
            vectors = await self._embed_client.do_embed(texts=chunks)
        except Exception as exc:
            self.logging.error("Embedding failed for '%s' (%d chunks): %s", upload.file_name, len(chunks), type(exc).__name__)
            await self._delete_blob(blob.key)
            raise EmbeddingFailed()

        document = Document(
            id=uuid.uuid4().hex,
            user_id=user_id,
            file_name=upload.file_name,
            media_type=upload.media_type,
            content=text,
            file_url=blob.url,
            file_key=blob.key,
            file_size=len(upload.data),
            uploaded_at=datetime.now(timezone.utc),
            processing_status=ProcessingStatus.COMPLETED,
        )
        chunk_models = [
            EmbeddingChunk(
                id=_make_chunk_id(document.id, chunk_index),
                user_id=user_id,
                document_id=document.id,
                chunk_index=chunk_index,
                file_name=upload.file_name,
                content=chunk,
                embedding=vector,
            )
            for chunk_index, (chunk, vector) in enumerate(zip(chunks, vectors))
        ]

        # step 4: document and chunks in one transaction
        try:
            async with self._db.session() as session, session.begin():
                await self._document_store.create(session, document)
                await self._embedding_store.add_chunks(session, chunk_models)
        except Exception as exc:
            self.logging.error("Saving document '%s' failed: %s", upload.file_name, type(exc).__name__)
            await self._purge_document(user_id, document.id)
            await self._delete_blob(blob.key)
            raise PersistenceFailed()

        # step 5: make the document usable by the bot, which may have been deleted meanwhile
        try:
            async with self._db.session() as session, session.begin():
                if await self._bot_store.find_one(session, user_id, bot_id) is None:
                    raise NotFound("Bot not found.")
                await self._association_store.create_many(session, user_id, bot_id, [document.id])
        except NotFound:
            self.logging.warning("Bot %s was deleted while indexing '%s', discarding the upload.", bot_id, upload.file_name)
            await self._purge_document(user_id, document.id)
            await self._delete_blob(blob.key)
            raise
        except Exception as exc:
            self.logging.error(
                "Attaching document %s to bot %s failed: %s", document.id, bot_id, type(exc).__name__
            )
            await self._purge_document(user_id, document.id)
            await self._delete_blob(blob.key)
            raise PersistenceFailed()

        self.logging.info(
            "Indexed document %s ('%s', %d chunks) for bot %s.",
            document.id, upload.file_name, len(chunk_models), bot_id, color="green",
        )
        return document.id

    ##########################################
    ################ REMOVAL #################
    ##########################################

    async def do_remove_document(self, user_id: str, bot_id: str, document_id: str) -> None:
        """Delete a document with its blob, associations and chunks.

        Tolerates partially deleted state; calling it again for the same
        document does nothing.

        Args:
            user_id (str): Owning user.
            bot_id (str): Bot the request came through, must belong to user_id.
            document_id (str): The document to delete.

        Raises:
            NotFound: If the bot does not exist for this user.
            PersistenceFailed: If the rows could not be deleted.
        """
        await self._ensure_bot(user_id, bot_id)

        async with self._db.session() as session:
            document = await self._document_store.find_one(session, user_id, document_id)
        if document is not None and document.file_key:
            await self._delete_blob(document.file_key)

        try:
            async with self._db.session() as session, session.begin():
                links = await self._association_store.delete(session, user_id, document_id=document_id)
                rows = await self._document_store.delete(session, user_id, document_id)
                chunks = await self._embedding_store.delete_by_document(session, user_id, document_id)
        except Exception as exc:
            self.logging.error("Removing document %s failed: %s", document_id, type(exc).__name__)
            raise PersistenceFailed("The document could not be deleted.")

        if rows or links or chunks:
            self.logging.info(
                "Removed document %s (%d association(s), %d chunk(s)).", document_id, links, chunks
            )
        else:
            self.logging.debug("Document %s already removed.", document_id)

    ##########################################
    ############## COMPENSATION ##############
    ##########################################

    async def _delete_blob(self, key: str) -> None:
        try:
            await self._blob_client.do_delete(key)
        except Exception as exc:
            self.logging.error("Cleanup: could not delete stored file '%s': %s", key, exc)

    async def _purge_document(self, user_id: str, document_id: str) -> None:
        """Remove any rows a failed upload may have left. Errors are logged only."""
        try:
            async with self._db.session() as session, session.begin():
                await self._association_store.delete(session, user_id, document_id=document_id)
                await self._embedding_store.delete_by_document(session, user_id, document_id)
                await self._document_store.delete(session, user_id, document_id)
        except Exception as exc:
            self.logging.error("Cleanup: could not purge rows of document %s: %s", document_id, type(exc).__name__)
