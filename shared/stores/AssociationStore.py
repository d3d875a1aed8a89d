from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.helper.HelperConfig import HelperConfig
from shared.stores.tables import BotDocumentRecord


class AssociationStore:
    """Bot-document links. (bot_id, document_id) is unique at table level,
    a duplicate insert raises sqlalchemy.exc.IntegrityError."""

    def __init__(self, helper_config: HelperConfig) -> None:
        self.logging = helper_config.get_logger()

    async def create_many(self, session: AsyncSession, user_id: str, bot_id: str, document_ids: list[str]) -> int:
        session.add_all([
            BotDocumentRecord(bot_id=bot_id, document_id=document_id, user_id=user_id)
            for document_id in document_ids
        ])
        await session.flush()
        return len(document_ids)

    async def find_document_ids(self, session: AsyncSession, user_id: str, bot_id: str) -> list[str]:
        result = await session.execute(
            select(BotDocumentRecord.document_id)
            .where(BotDocumentRecord.bot_id == bot_id, BotDocumentRecord.user_id == user_id)
            .order_by(BotDocumentRecord.created_at, BotDocumentRecord.id)
        )
        return list(result.scalars().all())

    async def delete(
        self,
        session: AsyncSession,
        user_id: str,
        bot_id: str | None = None,
        document_id: str | None = None,
    ) -> int:
        """Delete links of a user matching the given bot and/or document.

        Raises:
            ValueError: If neither bot_id nor document_id is given.
        """
        if bot_id is None and document_id is None:
            raise ValueError("Refusing to delete all associations of a user without a bot or document filter.")
        query = delete(BotDocumentRecord).where(BotDocumentRecord.user_id == user_id)
        if bot_id is not None:
            query = query.where(BotDocumentRecord.bot_id == bot_id)
        if document_id is not None:
            query = query.where(BotDocumentRecord.document_id == document_id)
        result = await session.execute(query)
        return result.rowcount or 0
