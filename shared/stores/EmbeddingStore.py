from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.helper.HelperConfig import HelperConfig
from shared.models.document import EmbeddingChunk
from shared.stores.tables import EmbeddingChunkRecord, utcnow


class EmbeddingStore:
    """Per-user, per-document (text chunk, vector) pairs.

    There is no index over the vectors: retrieval loads every chunk of the
    requested documents and ranking happens in Python.
    """

    def __init__(self, helper_config: HelperConfig) -> None:
        self.logging = helper_config.get_logger()

    async def add_chunks(self, session: AsyncSession, chunks: list[EmbeddingChunk]) -> int:
        # one timestamp per batch, chunk order inside a document comes from chunk_index
        created_at = utcnow()
        session.add_all([
            EmbeddingChunkRecord(
                id=chunk.id,
                user_id=chunk.user_id,
                document_id=chunk.document_id,
                chunk_index=chunk.chunk_index,
                file_name=chunk.file_name,
                content=chunk.content,
                embedding=list(chunk.embedding),
                created_at=created_at,
            )
            for chunk in chunks
        ])
        await session.flush()
        return len(chunks)

    async def find_by_documents(self, session: AsyncSession, user_id: str, document_ids: list[str]) -> list[EmbeddingChunk]:
        """All chunks of the given documents that belong to user_id.

        Ordered by insertion time, then document and chunk index, so ties in
        ranking resolve the same way on every call.
        """
        if not document_ids:
            return []
        result = await session.execute(
            select(EmbeddingChunkRecord)
            .where(
                EmbeddingChunkRecord.user_id == user_id,
                EmbeddingChunkRecord.document_id.in_(document_ids),
            )
            .order_by(
                EmbeddingChunkRecord.created_at,
                EmbeddingChunkRecord.document_id,
                EmbeddingChunkRecord.chunk_index,
            )
        )
        return [EmbeddingChunk.model_validate(record) for record in result.scalars().all()]

    async def delete_by_document(self, session: AsyncSession, user_id: str, document_id: str) -> int:
        result = await session.execute(
            delete(EmbeddingChunkRecord).where(
                EmbeddingChunkRecord.user_id == user_id,
                EmbeddingChunkRecord.document_id == document_id,
            )
        )
        return result.rowcount or 0
