from datetime import datetime

from pydantic import BaseModel

from shared.models.bot import Bot
from shared.models.document import DocumentSummary


class BotListResponse(BaseModel):
    bots: list[Bot]
    total: int


class DocumentListResponse(BaseModel):
    documents: list[DocumentSummary]
    total: int


class UploadResponse(BaseModel):
    document_id: str
    file_name: str


class AttachResponse(BaseModel):
    bot_id: str
    document_ids: list[str]


class PairingResponse(BaseModel):
    bot_id: str
    qr_code: str | None
    expires_at: datetime | None


class StatusResponse(BaseModel):
    bot_id: str
    state: str
    is_active: bool
    last_active: datetime | None


class ChatResponse(BaseModel):
    bot_id: str
    reply: str


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
    detail: str
