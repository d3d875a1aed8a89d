from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.helper.HelperConfig import HelperConfig
from shared.models.document import Document
from shared.stores.tables import DocumentRecord


class DocumentStore:
    """Document rows, always filtered by owning user."""

    def __init__(self, helper_config: HelperConfig) -> None:
        self.logging = helper_config.get_logger()

    async def create(self, session: AsyncSession, document: Document) -> DocumentRecord:
        record = DocumentRecord(
            id=document.id,
            user_id=document.user_id,
            file_name=document.file_name,
            media_type=document.media_type,
            content=document.content,
            file_url=document.file_url,
            file_key=document.file_key,
            file_size=document.file_size,
            uploaded_at=document.uploaded_at,
            processing_status=document.processing_status.value,
        )
        session.add(record)
        await session.flush()
        return record

    async def find_one(self, session: AsyncSession, user_id: str, document_id: str) -> DocumentRecord | None:
        result = await session.execute(
            select(DocumentRecord).where(DocumentRecord.id == document_id, DocumentRecord.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def find(self, session: AsyncSession, user_id: str, document_ids: list[str] | None = None) -> list[DocumentRecord]:
        """Documents of a user, optionally restricted to the given ids, oldest first."""
        query = select(DocumentRecord).where(DocumentRecord.user_id == user_id)
        if document_ids is not None:
            if not document_ids:
                return []
            query = query.where(DocumentRecord.id.in_(document_ids))
        result = await session.execute(query.order_by(DocumentRecord.uploaded_at, DocumentRecord.id))
        return list(result.scalars().all())

    async def delete(self, session: AsyncSession, user_id: str, document_id: str) -> int:
        result = await session.execute(
            delete(DocumentRecord).where(DocumentRecord.id == document_id, DocumentRecord.user_id == user_id)
        )
        return result.rowcount or 0
