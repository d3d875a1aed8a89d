import asyncio
from datetime import datetime, timezone

from server.core.prompts import MESSAGES, RESPONSE_LANGUAGES, SYSTEM_PROMPTS, build_user_prompt
from server.core.ranking import select_top_k
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import AnswerResult
from shared.models.errors import CompletionFailed, EmbeddingFailed
from shared.stores.AssociationStore import AssociationStore
from shared.stores.BotStore import BotStore
from shared.stores.Database import Database
from shared.stores.EmbeddingStore import EmbeddingStore


class RAGService:
    """Answers chat messages from the documents attached to a bot:
    resolve documents -> embed query -> rank chunks -> compose prompt -> complete."""

    def __init__(
        self,
        helper_config: HelperConfig,
        database: Database,
        bot_store: BotStore,
        association_store: AssociationStore,
        embedding_store: EmbeddingStore,
        embed_client: EmbedClientInterface,
        llm_client: LLMClientInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._db = database
        self._bot_store = bot_store
        self._association_store = association_store
        self._embedding_store = embedding_store
        self._embed_client = embed_client
        self._llm_client = llm_client

        self.top_k = int(helper_config.get_number_val("RAG_TOP_K", default=3))
        if self.top_k < 1:
            raise ValueError("RAG_TOP_K must be at least 1.")
        self.answer_timeout = float(helper_config.get_number_val("RAG_ANSWER_TIMEOUT", default=90))
        self.language = helper_config.get_choice_val("RESPONSE_LANGUAGE", list(RESPONSE_LANGUAGES), default="id")
        self.messages = MESSAGES[self.language]

    ##########################################
    ################# CORE ###################
    ##########################################

    async def do_answer(self, user_id: str, bot_id: str, query_text: str) -> AnswerResult:
        """Answer a chat message using only the bot's attached documents.

        Never raises: a bot without documents gets the fixed no_documents
        reply, any failure or timeout on the way gets the fixed apology.
        Every reply moves the bot's last_active.

        Args:
            user_id (str): Owning user of the bot.
            bot_id (str): The bot the message is addressed to.
            query_text (str): The inbound message.

        Returns:
            AnswerResult: The model reply, or one of the fixed replies.
        """
        try:
            answer = await asyncio.wait_for(self._answer(user_id, bot_id, query_text), timeout=self.answer_timeout)
        except Exception as exc:
            # type only, the exception text may carry prompt or vector data
            self.logging.error("Answering for bot %s failed: %s", bot_id, type(exc).__name__)
            answer = AnswerResult(text=self.messages["apology"])
        await self._record_activity(user_id, bot_id)
        return answer

    async def _record_activity(self, user_id: str, bot_id: str) -> None:
        try:
            async with self._db.session() as session, session.begin():
                await self._bot_store.touch(session, user_id, bot_id, last_active=datetime.now(timezone.utc))
        except Exception as exc:
            self.logging.error("Recording activity of bot %s failed: %s", bot_id, type(exc).__name__)

    async def _answer(self, user_id: str, bot_id: str, query_text: str) -> AnswerResult:
        async with self._db.session() as session:
            document_ids = await self._association_store.find_document_ids(session, user_id, bot_id)

        if not document_ids:
            self.logging.info("Bot %s has no documents attached, sending fallback reply.", bot_id)
            return AnswerResult(text=self.messages["no_documents"])

        try:
            vectors = await self._embed_client.do_embed(texts=[query_text])
        except Exception as exc:
            raise EmbeddingFailed() from exc
        query_vector = vectors[0]

        async with self._db.session() as session:
            chunks = await self._embedding_store.find_by_documents(session, user_id, document_ids)

        if not chunks:
            self.logging.warning("Bot %s has %d document(s) but no indexed chunks.", bot_id, len(document_ids))
            return AnswerResult(text=self.messages["no_documents"])

        top_chunks = select_top_k(query_vector, chunks, self.top_k)
        self.logging.debug(
            "Bot %s: selected %d of %d chunk(s), best similarity %.4f.",
            bot_id, len(top_chunks), len(chunks), top_chunks[0].similarity,
        )

        context = "\n\n".join(item.chunk.content for item in top_chunks)
        try:
            reply = await self._llm_client.do_complete(
                system_prompt=SYSTEM_PROMPTS[self.language],
                user_prompt=build_user_prompt(self.language, context, query_text),
            )
        except Exception as exc:
            raise CompletionFailed() from exc
        return AnswerResult(text=reply)
