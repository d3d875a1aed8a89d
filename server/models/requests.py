from pydantic import BaseModel, Field


class CreateBotRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)


class AttachDocumentsRequest(BaseModel):
    document_ids: list[str] = Field(min_length=1)


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
