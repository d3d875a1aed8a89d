from fastapi import APIRouter, Depends, Request

from server.dependencies.auth import verify_api_key
from server.models.requests import ChatRequest
from server.models.responses import ChatResponse

router = APIRouter(prefix="/users/{user_id}/bots/{bot_id}/chat", tags=["chat"])


@router.post("")
async def chat(
    request: Request,
    user_id: str,
    bot_id: str,
    body: ChatRequest,
    _: None = Depends(verify_api_key),
) -> ChatResponse:
    """Answer an inbound chat message from the bot's documents.

    Args:
        request (Request): FastAPI request (provides app.state.bot_service and rag_service).
        user_id (str): Owning user.
        bot_id (str): The bot addressed.
        body (ChatRequest): The message text.
        _ (None): Auth dependency result (unused).

    Returns:
        ChatResponse: The reply; failures while answering yield the fixed apology text.
    """
    # unknown bots are a 404, not a fallback reply
    await request.app.state.bot_service.do_get_bot(user_id, bot_id)
    answer = await request.app.state.rag_service.do_answer(user_id, bot_id, body.message)
    return ChatResponse(bot_id=bot_id, reply=answer.text)
