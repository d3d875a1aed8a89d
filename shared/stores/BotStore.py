import uuid
from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shared.helper.HelperConfig import HelperConfig
from shared.stores.tables import BotRecord


class BotStore:
    """Bot rows, always filtered by owning user."""

    def __init__(self, helper_config: HelperConfig) -> None:
        self.logging = helper_config.get_logger()

    async def create(self, session: AsyncSession, user_id: str, name: str, description: str | None = None) -> BotRecord:
        bot = BotRecord(id=uuid.uuid4().hex, user_id=user_id, name=name, description=description, is_active=False)
        session.add(bot)
        await session.flush()
        return bot

    async def count(self, session: AsyncSession, user_id: str) -> int:
        result = await session.execute(select(func.count()).select_from(BotRecord).where(BotRecord.user_id == user_id))
        return int(result.scalar_one())

    async def find(self, session: AsyncSession, user_id: str) -> list[BotRecord]:
        result = await session.execute(
            select(BotRecord).where(BotRecord.user_id == user_id).order_by(BotRecord.created_at, BotRecord.id)
        )
        return list(result.scalars().all())

    async def find_one(self, session: AsyncSession, user_id: str, bot_id: str) -> BotRecord | None:
        result = await session.execute(
            select(BotRecord).where(BotRecord.id == bot_id, BotRecord.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def set_activity(
        self,
        session: AsyncSession,
        user_id: str,
        bot_id: str,
        is_active: bool,
        last_active: datetime | None = None,
    ) -> int:
        values: dict = {"is_active": is_active}
        if last_active is not None:
            values["last_active"] = last_active
        result = await session.execute(
            update(BotRecord).where(BotRecord.id == bot_id, BotRecord.user_id == user_id).values(**values)
        )
        return result.rowcount or 0

    async def touch(self, session: AsyncSession, user_id: str, bot_id: str, last_active: datetime) -> int:
        """Only moves last_active, the connection flag is owned by the session state."""
        result = await session.execute(
            update(BotRecord).where(BotRecord.id == bot_id, BotRecord.user_id == user_id).values(last_active=last_active)
        )
        return result.rowcount or 0

    async def delete(self, session: AsyncSession, user_id: str, bot_id: str) -> int:
        result = await session.execute(
            delete(BotRecord).where(BotRecord.id == bot_id, BotRecord.user_id == user_id)
        )
        return result.rowcount or 0
