from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from shared.helper.HelperConfig import HelperConfig
from shared.stores.tables import Base


class Database:
    """Owns the async SQLAlchemy engine and hands out sessions.

    Stores never commit; callers open a session, wrap their unit of work in
    session.begin() and let the context manager commit or roll back.
    """

    def __init__(self, helper_config: HelperConfig) -> None:
        self.logging = helper_config.get_logger()
        self._url = helper_config.get_string_val("DATABASE_URL", default="sqlite+aiosqlite:///./docbot.db")
        self._timeout = helper_config.get_number_val("DATABASE_TIMEOUT", default=30)
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    async def boot(self) -> None:
        """Create the engine and all tables that do not exist yet."""
        if self._url.startswith("sqlite"):
            engine_kwargs = {"connect_args": {"timeout": self._timeout}}
        else:
            engine_kwargs = {"pool_timeout": self._timeout, "pool_pre_ping": True}
        self._engine = create_async_engine(self._url, echo=False, **engine_kwargs)
        self._sessionmaker = async_sessionmaker(
            self._engine,
            expire_on_commit=False,
            class_=AsyncSession,
            autoflush=False,
        )
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self.logging.info("Database ready (%s).", self._engine.url.render_as_string(hide_password=True))

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None

    ##########################################
    ################ SESSION #################
    ##########################################

    def session(self) -> AsyncSession:
        """Return a new session, to be used as async context manager.

        Raises:
            Exception: If boot() was not called.
        """
        if self._sessionmaker is None:
            raise Exception("Database not initialised. Call boot() before opening sessions.")
        return self._sessionmaker()
