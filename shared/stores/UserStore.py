from sqlalchemy.ext.asyncio import AsyncSession

from shared.helper.HelperConfig import HelperConfig
from shared.stores.tables import UserRecord


class UserStore:
    """Minimal user records, only what the bot quota needs.

    Accounts themselves live with the authentication service; a row is
    created on first use with the default quota.
    """

    def __init__(self, helper_config: HelperConfig) -> None:
        self.logging = helper_config.get_logger()
        self._default_max_bots = int(helper_config.get_number_val("BOTS_DEFAULT_MAX", default=2))

    async def find_one(self, session: AsyncSession, user_id: str) -> UserRecord | None:
        return await session.get(UserRecord, user_id)

    async def get_or_create(self, session: AsyncSession, user_id: str) -> UserRecord:
        user = await self.find_one(session, user_id)
        if user is None:
            user = UserRecord(id=user_id, max_bots=self._default_max_bots)
            session.add(user)
            await session.flush()
            self.logging.info("Created user record %s with max_bots=%d.", user_id, user.max_bots)
        return user

    async def set_max_bots(self, session: AsyncSession, user_id: str, max_bots: int) -> UserRecord:
        """Change the bot quota of a user.

        Raises:
            ValueError: If max_bots is lower than 1.
        """
        if max_bots < 1:
            raise ValueError("max_bots must be at least 1.")
        user = await self.get_or_create(session, user_id)
        user.max_bots = max_bots
        await session.flush()
        return user

