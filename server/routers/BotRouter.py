from fastapi import APIRouter, Depends, Request, status

from server.dependencies.auth import verify_api_key
from server.models.requests import CreateBotRequest
from server.models.responses import BotListResponse, MessageResponse, PairingResponse, StatusResponse
from shared.models.bot import Bot

router = APIRouter(prefix="/users/{user_id}/bots", tags=["bots"], dependencies=[Depends(verify_api_key)])


@router.get("")
async def list_bots(request: Request, user_id: str) -> BotListResponse:
    """List all bots of a user."""
    bots = await request.app.state.bot_service.do_list_bots(user_id)
    return BotListResponse(bots=bots, total=len(bots))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_bot(request: Request, user_id: str, body: CreateBotRequest) -> Bot:
    """Create a bot, 409 once the user's bot limit is reached.

    Args:
        request (Request): FastAPI request (provides app.state.bot_service).
        user_id (str): Owning user.
        body (CreateBotRequest): Name and optional description.

    Returns:
        Bot: The created bot, inactive until its session is paired.
    """
    return await request.app.state.bot_service.do_create_bot(user_id, body.name, body.description)


@router.get("/{bot_id}")
async def get_bot(request: Request, user_id: str, bot_id: str) -> Bot:
    return await request.app.state.bot_service.do_get_bot(user_id, bot_id)


@router.delete("/{bot_id}")
async def delete_bot(request: Request, user_id: str, bot_id: str) -> MessageResponse:
    """Disconnect and delete a bot. Its documents are kept."""
    await request.app.state.bot_service.do_delete_bot(user_id, bot_id)
    return MessageResponse(message="Bot deleted successfully")


@router.post("/{bot_id}/initialize")
async def initialize_bot(request: Request, user_id: str, bot_id: str) -> PairingResponse:
    """Start the bot's messaging session and return the pairing QR payload."""
    challenge = await request.app.state.bot_service.do_initialize_session(user_id, bot_id)
    return PairingResponse(bot_id=bot_id, qr_code=challenge.qr_code, expires_at=challenge.expires_at)


@router.post("/{bot_id}/disconnect")
async def disconnect_bot(request: Request, user_id: str, bot_id: str) -> MessageResponse:
    await request.app.state.bot_service.do_disconnect_session(user_id, bot_id)
    return MessageResponse(message="Bot disconnected successfully")


@router.get("/{bot_id}/status")
async def bot_status(request: Request, user_id: str, bot_id: str) -> StatusResponse:
    state = await request.app.state.bot_service.do_get_status(user_id, bot_id)
    return StatusResponse(bot_id=bot_id, state=state.state, is_active=state.is_active, last_active=state.last_active)
