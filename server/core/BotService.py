from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError

from shared.clients.session.SessionManagerInterface import SessionManagerInterface
from shared.clients.session.models.SessionState import PairingChallenge, SessionState
from shared.helper.HelperConfig import HelperConfig
from shared.models.bot import Bot
from shared.models.document import DocumentSummary
from shared.models.errors import DuplicateAssociation, NotFound, QuotaExceeded, ValidationError
from shared.stores.AssociationStore import AssociationStore
from shared.stores.BotStore import BotStore
from shared.stores.Database import Database
from shared.stores.DocumentStore import DocumentStore
from shared.stores.UserStore import UserStore


class BotService:
    """Bot lifecycle, bot quota and bot-document associations."""

    def __init__(
        self,
        helper_config: HelperConfig,
        database: Database,
        user_store: UserStore,
        bot_store: BotStore,
        document_store: DocumentStore,
        association_store: AssociationStore,
        session_manager: SessionManagerInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._db = database
        self._user_store = user_store
        self._bot_store = bot_store
        self._document_store = document_store
        self._association_store = association_store
        self._session_manager = session_manager

    async def _get_bot_record(self, session, user_id: str, bot_id: str):
        bot = await self._bot_store.find_one(session, user_id, bot_id)
        if bot is None:
            raise NotFound("Bot not found.")
        return bot

    ##########################################
    ################## BOTS ##################
    ##########################################

    async def do_create_bot(self, user_id: str, name: str, description: str | None = None) -> Bot:
        """Create a bot if the user is below their bot quota.

        Count and insert share one transaction. Two concurrent requests can
        still both pass the count; that overshoot is accepted.

        Raises:
            QuotaExceeded: If the user already owns max_bots bots.
        """
        async with self._db.session() as session, session.begin():
            user = await self._user_store.get_or_create(session, user_id)
            current = await self._bot_store.count(session, user_id)
            if current >= user.max_bots:
                self.logging.warning("User %s reached the bot limit (%d).", user_id, user.max_bots)
                raise QuotaExceeded(limit=user.max_bots)
            record = await self._bot_store.create(session, user_id, name, description)
            bot = Bot.model_validate(record)
        self.logging.info("Created bot %s ('%s') for user %s.", bot.id, bot.name, user_id)
        return bot

    async def do_list_bots(self, user_id: str) -> list[Bot]:
        async with self._db.session() as session:
            records = await self._bot_store.find(session, user_id)
            return [Bot.model_validate(record) for record in records]

    async def do_get_bot(self, user_id: str, bot_id: str) -> Bot:
        async with self._db.session() as session:
            return Bot.model_validate(await self._get_bot_record(session, user_id, bot_id))

    async def do_delete_bot(self, user_id: str, bot_id: str) -> None:
        """Disconnect the bot's session, then delete its associations and the bot.

        Attached documents are kept.

        Raises:
            NotFound: If the bot does not exist for this user.
        """
        async with self._db.session() as session:
            await self._get_bot_record(session, user_id, bot_id)

        try:
            await self._session_manager.do_disconnect(user_id, bot_id)
        except Exception as exc:
            self.logging.error("Disconnecting session of bot %s failed, deleting anyway: %s", bot_id, exc)

        async with self._db.session() as session, session.begin():
            links = await self._association_store.delete(session, user_id, bot_id=bot_id)
            await self._bot_store.delete(session, user_id, bot_id)
        self.logging.info("Deleted bot %s of user %s (%d association(s) removed).", bot_id, user_id, links)

    ##########################################
    ############## ASSOCIATIONS ##############
    ##########################################

    async def do_attach_documents(self, user_id: str, bot_id: str, document_ids: list[str]) -> list[str]:
        """Attach existing documents of the user to a bot, all or nothing.

        Args:
            user_id (str): Owning user of bot and documents.
            bot_id (str): The bot.
            document_ids (list[str]): Documents to attach.

        Returns:
            list[str]: The attached document ids.

        Raises:
            ValidationError: If no document id is given.
            NotFound: If the bot or any document does not belong to the user.
            DuplicateAssociation: If a document is already attached to the bot.
        """
        if not document_ids:
            raise ValidationError("At least one document id is required.")
        if len(set(document_ids)) != len(document_ids):
            raise DuplicateAssociation("The same document was given more than once.")

        try:
            async with self._db.session() as session, session.begin():
                await self._get_bot_record(session, user_id, bot_id)
                found = await self._document_store.find(session, user_id, document_ids)
                if len(found) != len(document_ids):
                    raise NotFound("Document not found.")
                attached = set(await self._association_store.find_document_ids(session, user_id, bot_id))
                if attached.intersection(document_ids):
                    raise DuplicateAssociation()
                await self._association_store.create_many(session, user_id, bot_id, document_ids)
        except IntegrityError:
            # lost a race against a concurrent attach of the same pair
            self.logging.warning("Concurrent attach to bot %s hit the unique constraint.", bot_id)
            raise DuplicateAssociation()

        self.logging.info("Attached %d document(s) to bot %s.", len(document_ids), bot_id)
        return list(document_ids)

    async def do_list_bot_documents(self, user_id: str, bot_id: str) -> list[DocumentSummary]:
        async with self._db.session() as session:
            await self._get_bot_record(session, user_id, bot_id)
            document_ids = await self._association_store.find_document_ids(session, user_id, bot_id)
            records = await self._document_store.find(session, user_id, document_ids)
            return [DocumentSummary.model_validate(record) for record in records]

    async def do_detach_document(self, user_id: str, bot_id: str, document_id: str) -> None:
        """Remove only the association, the document stays available to other bots.

        Raises:
            NotFound: If the bot does not exist or the document is not attached to it.
        """
        async with self._db.session() as session, session.begin():
            await self._get_bot_record(session, user_id, bot_id)
            removed = await self._association_store.delete(session, user_id, bot_id=bot_id, document_id=document_id)
        if not removed:
            raise NotFound("Document is not attached to this bot.")
        self.logging.info("Detached document %s from bot %s.", document_id, bot_id)

    ##########################################
    ################ SESSIONS ################
    ##########################################

    async def do_initialize_session(self, user_id: str, bot_id: str) -> PairingChallenge:
        async with self._db.session() as session:
            await self._get_bot_record(session, user_id, bot_id)
        return await self._session_manager.do_initialize(user_id, bot_id)

    async def do_disconnect_session(self, user_id: str, bot_id: str) -> None:
        """Disconnect the messaging session and mark the bot inactive."""
        async with self._db.session() as session:
            await self._get_bot_record(session, user_id, bot_id)

        await self._session_manager.do_disconnect(user_id, bot_id)

        async with self._db.session() as session, session.begin():
            await self._bot_store.set_activity(session, user_id, bot_id, is_active=False)
        self.logging.info("Bot %s disconnected.", bot_id)

    async def do_get_status(self, user_id: str, bot_id: str) -> SessionState:
        """Return the live session state and mirror it onto the bot record.

        last_active is the later of the session's own timestamp and the last
        answered message recorded on the bot.
        """
        async with self._db.session() as session:
            bot = await self._get_bot_record(session, user_id, bot_id)
            is_active, last_active = bot.is_active, bot.last_active

        state = await self._session_manager.do_status(user_id, bot_id)

        if is_active != state.is_active or _is_later(state.last_active, last_active):
            async with self._db.session() as session, session.begin():
                await self._bot_store.set_activity(
                    session, user_id, bot_id, is_active=state.is_active, last_active=state.last_active
                )
        if _is_later(last_active, state.last_active):
            state = state.model_copy(update={"last_active": last_active})
        return state


def _is_later(candidate: datetime | None, reference: datetime | None) -> bool:
    if candidate is None:
        return False
    if reference is None:
        return True
    return _as_utc(candidate) > _as_utc(reference)


def _as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
